"""FastAPI application factory.

Run with ``uvicorn rigrent.main:app``. The sweep is reachable over HTTP at
``/api/v1/cron/check-device-rentals``; the arq worker in
``rigrent.workers.settings`` runs the same sweep on a schedule.
"""

from collections.abc import AsyncGenerator
from contextlib import asynccontextmanager

import structlog
from fastapi import FastAPI

from rigrent.config import get_settings
from rigrent.database import close_db, init_db
from rigrent.health.router import router as health_router
from rigrent.middleware import setup_middleware
from rigrent.redis_client import close_redis, init_redis
from rigrent.rentals.router import router as rentals_router

logger = structlog.get_logger()


@asynccontextmanager
async def lifespan(_app: FastAPI) -> AsyncGenerator[None, None]:
    settings = get_settings()
    await init_db(settings.database_url)
    await init_redis(settings.redis_url)
    if not settings.cron_secret:
        logger.warning("cron_secret_missing", hint="set RIGRENT_CRON_SECRET; every trigger is rejected")
    logger.info("api_started", environment=settings.environment, version=settings.app_version)

    yield

    await close_db()
    await close_redis()


def create_app() -> FastAPI:
    settings = get_settings()

    app = FastAPI(
        title="Rigrent API",
        description="Mining device rentals: reward accrual and scheduled expiry sweep",
        version=settings.app_version,
        docs_url="/docs" if settings.debug else None,
        redoc_url="/redoc" if settings.debug else None,
        lifespan=lifespan,
    )

    setup_middleware(app, settings)
    app.include_router(health_router, tags=["Health"])
    app.include_router(rentals_router)
    return app


app = create_app()

"""arq worker that runs the rental expiry sweep on a fixed schedule.

Import path for arq CLI: arq rigrent.workers.settings.WorkerSettings

Runs are allowed to overlap when one takes longer than the interval; the
sweep itself is safe to repeat.
"""

from __future__ import annotations

import logging

import redis.asyncio as aioredis
from arq import cron
from arq.connections import RedisSettings

from rigrent.config import get_settings
from rigrent.database import close_db, get_session_factory, init_db
from rigrent.middleware.logging import setup_logging
from rigrent.rentals.errors import StoreQueryError
from rigrent.rentals.schemas import SweepSummaryResponse
from rigrent.rentals.sweep import run_sweep

logger = logging.getLogger(__name__)


async def sweep_startup(ctx: dict) -> None:  # type: ignore[type-arg]
    """Initialize DB and the Redis client used for notification pushes."""
    settings = get_settings()
    setup_logging(settings)
    await init_db(settings.database_url)

    # Pushes go to the API's Redis, not the arq queue database.
    ctx["push_redis"] = (
        aioredis.from_url(settings.redis_url, encoding="utf-8", decode_responses=True, max_connections=10)
        if settings.redis_url
        else None
    )
    logger.info("Rental sweep worker started (every %d min)", settings.sweep_interval_minutes)


async def sweep_shutdown(ctx: dict) -> None:  # type: ignore[type-arg]
    """Clean up on worker shutdown."""
    redis_client: aioredis.Redis | None = ctx.get("push_redis")
    if redis_client:
        await redis_client.aclose()
    await close_db()
    logger.info("Rental sweep worker shut down")


async def expiry_sweep(ctx: dict) -> dict[str, object]:  # type: ignore[type-arg]
    """Scheduled arq task: one rental expiry sweep.

    A store failure is logged and swallowed; the next scheduled run retries.
    """
    settings = get_settings()
    try:
        result = await run_sweep(
            get_session_factory(),
            warning_days=settings.expiry_warning_days,
            dedup_hours=settings.notification_dedup_hours,
            concurrency=settings.sweep_concurrency,
            redis=ctx.get("push_redis"),
        )
    except StoreQueryError as exc:
        logger.exception("Rental sweep aborted")
        return {"success": False, "error": str(exc)}

    summary = SweepSummaryResponse.from_result(result).model_dump(by_alias=True)
    summary["failed"] = result.failed
    return summary


def _sweep_schedule(interval: int) -> dict[str, set[int]]:
    """arq cron fields for a validated interval, e.g. 15 -> minutes {0, 15, 30, 45}, 360 -> hours {0, 6, 12, 18}."""
    if interval <= 60:
        return {"minute": set(range(0, 60, interval))}
    return {"minute": {0}, "hour": set(range(0, 24, interval // 60))}


class WorkerSettings:
    """arq worker settings for the rental sweep scheduler."""

    functions = [expiry_sweep]
    cron_jobs = [
        cron(
            expiry_sweep,
            **_sweep_schedule(get_settings().sweep_interval_minutes),
            run_at_startup=True,
            unique=False,
            timeout=get_settings().sweep_job_timeout_seconds,
        ),
    ]
    on_startup = sweep_startup
    on_shutdown = sweep_shutdown
    redis_settings = RedisSettings.from_dsn(get_settings().arq_redis_url)
    max_jobs = 2
    job_timeout = get_settings().sweep_job_timeout_seconds
    allow_abort_jobs = True

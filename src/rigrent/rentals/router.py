"""Scheduler-facing endpoint that runs the rental expiry sweep.

Errors map to JSON in ``rigrent.middleware.error_handler``:
AuthorizationError -> 401, StoreQueryError -> 500, both as ``{"error": ...}``.
"""

from __future__ import annotations

from fastapi import APIRouter, Header

from rigrent.config import get_settings
from rigrent.database import get_session_factory
from rigrent.redis_client import get_redis_or_none
from rigrent.rentals.schemas import SweepErrorResponse, SweepSummaryResponse
from rigrent.rentals.sweep import run_sweep
from rigrent.rentals.trigger_auth import verify_cron_secret

router = APIRouter(prefix="/api/v1/cron", tags=["Cron"])


@router.api_route(
    "/check-device-rentals",
    methods=["GET", "POST"],
    response_model=SweepSummaryResponse,
    response_model_by_alias=True,
    responses={401: {"model": SweepErrorResponse}, 500: {"model": SweepErrorResponse}},
)
async def check_device_rentals(
    authorization: str | None = Header(default=None),
) -> SweepSummaryResponse:
    """Warn about rentals expiring in a week and remove expired ones."""
    settings = get_settings()
    verify_cron_secret(authorization, settings.cron_secret)

    result = await run_sweep(
        get_session_factory(),
        warning_days=settings.expiry_warning_days,
        dedup_hours=settings.notification_dedup_hours,
        concurrency=settings.sweep_concurrency,
        redis=get_redis_or_none(),
    )
    return SweepSummaryResponse.from_result(result)

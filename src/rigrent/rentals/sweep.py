"""Rental expiry sweep.

One invocation brings every rental to the state its expiry dictates:

1. Rentals whose expiry falls inside the calendar day exactly
   ``warning_days`` ahead get one "expiring soon" warning.
2. Rentals already past expiry are removed: the device's computing power is
   subtracted from the owner's total (floored at zero), the rental row is
   deleted and a removal notification is written, in one transaction.

The sweep runs on a fixed schedule and may overlap a previous run that has
not finished, so every unit is safe to repeat:

- a removal only counts once the DELETE actually removed the row; if another
  run got there first, the transaction (capacity included) is rolled back;
- a warning is skipped when a matching one exists in the dedup window, and
  the unique ``dedup_key`` turns a concurrent double insert into a no-op.

Both listings are read before anything is written, so a store failure
aborts the run with nothing mutated. A failure in one rental's unit is
logged and counted; the rental stays eligible for the next run.
"""

from __future__ import annotations

import asyncio
from collections.abc import Awaitable, Callable, Sequence
from dataclasses import dataclass
from datetime import datetime, timedelta
from typing import Any

import structlog
from sqlalchemy import select
from sqlalchemy.exc import IntegrityError, SQLAlchemyError
from sqlalchemy.ext.asyncio import AsyncSession, async_sessionmaker

from rigrent.clock import day_bucket, ensure_utc, utc_now
from rigrent.db.models import Notification
from rigrent.notifications import messages
from rigrent.notifications.service import (
    create_notification,
    has_recent_notification,
    push_notification,
)
from rigrent.rentals.capacity import adjust_capacity
from rigrent.rentals.errors import RentalUnitError, StoreQueryError
from rigrent.rentals.store import (
    RentalRecord,
    delete_rental,
    list_expired,
    list_expiring_between,
)

logger = structlog.get_logger()

DEFAULT_WARNING_DAYS = 7
DEFAULT_DEDUP_HOURS = 24
DEFAULT_CONCURRENCY = 8


@dataclass(frozen=True)
class SweepResult:
    expiring_notified: int
    expired_removed: int
    failed: int
    timestamp: datetime


class ExpirySweep:
    """Runs one sweep at a fixed instant ``now``."""

    def __init__(
        self,
        session_factory: async_sessionmaker[AsyncSession],
        now: datetime,
        *,
        warning_days: int = DEFAULT_WARNING_DAYS,
        dedup_hours: int = DEFAULT_DEDUP_HOURS,
        concurrency: int = DEFAULT_CONCURRENCY,
        redis: Any | None = None,  # noqa: ANN401
    ) -> None:
        self.session_factory = session_factory
        self.now = ensure_utc(now)
        self.warning_days = warning_days
        self.dedup_window = timedelta(hours=dedup_hours)
        self.redis = redis
        self._semaphore = asyncio.Semaphore(max(1, concurrency))

    async def run(self) -> SweepResult:
        bucket_start, bucket_end = day_bucket(self.now, self.warning_days)
        logger.info(
            "sweep_started",
            now=self.now.isoformat(),
            bucket_start=bucket_start.isoformat(),
            bucket_end=bucket_end.isoformat(),
        )

        expiring, expired = await self._list(bucket_start, bucket_end)
        logger.info("sweep_matched", expiring=len(expiring), expired=len(expired))

        warned, warn_failed = await self._run_units(expiring, self._warn)
        removed, remove_failed = await self._run_units(expired, self._remove)

        result = SweepResult(
            expiring_notified=warned,
            expired_removed=removed,
            failed=warn_failed + remove_failed,
            timestamp=self.now,
        )
        logger.info(
            "sweep_finished",
            expiring_notified=result.expiring_notified,
            expired_removed=result.expired_removed,
            failed=result.failed,
        )
        return result

    async def _list(self, bucket_start: datetime, bucket_end: datetime) -> tuple[list[RentalRecord], list[RentalRecord]]:
        try:
            async with self.session_factory() as db:
                expiring = await list_expiring_between(db, bucket_start, bucket_end)
                expired = await list_expired(db, self.now)
        except StoreQueryError:
            logger.error("sweep_aborted", exc_info=True)
            raise
        except (SQLAlchemyError, OSError) as exc:
            logger.error("sweep_aborted", exc_info=True)
            raise StoreQueryError("Rental store unavailable") from exc
        return expiring, expired

    async def _run_units(
        self,
        records: Sequence[RentalRecord],
        unit: Callable[[RentalRecord], Awaitable[bool]],
    ) -> tuple[int, int]:
        """Run ``unit`` for every record on the bounded pool. Returns (done, failed)."""

        async def bounded(record: RentalRecord) -> bool:
            async with self._semaphore:
                try:
                    return await unit(record)
                except Exception as exc:
                    raise RentalUnitError(record.rental_id, unit.__name__.lstrip("_"), exc) from exc

        outcomes = await asyncio.gather(*(bounded(r) for r in records), return_exceptions=True)

        done = failed = 0
        for outcome in outcomes:
            if isinstance(outcome, RentalUnitError):
                failed += 1
                logger.error(
                    "rental_unit_failed",
                    rental_id=outcome.rental_id,
                    phase=outcome.phase,
                    error=str(outcome.cause),
                    exc_info=outcome.cause,
                )
            elif isinstance(outcome, BaseException):
                raise outcome
            elif outcome:
                done += 1
        return done, failed

    async def _warn(self, record: RentalRecord) -> bool:
        """Send the expiring-soon warning unless one already went out."""
        bucket_start, _ = day_bucket(self.now, self.warning_days)
        dedup_key = messages.expiring_dedup_key(record.user_id, record.device_name, bucket_start)

        async with self.session_factory() as db:
            already_sent = await has_recent_notification(
                db,
                record.user_id,
                messages.EXPIRING_SUBTYPE,
                f'"{record.device_name}"',
                since=self.now - self.dedup_window,
            )
            if already_sent:
                logger.info("expiry_warning_skipped", rental_id=record.rental_id, reason="recent")
                return False

            try:
                notification = await create_notification(
                    db,
                    record.user_id,
                    messages.RENTAL_TYPE,
                    messages.EXPIRING_SUBTYPE,
                    title=messages.EXPIRING_TITLE,
                    description=messages.expiring_message(record.device_name, self.warning_days),
                    metadata={
                        "rental_id": record.rental_id,
                        "device_id": record.device_id,
                        "expires_at": record.expires_at.isoformat(),
                    },
                    dedup_key=dedup_key,
                    created_at=self.now,
                )
                await db.commit()
            except IntegrityError:
                await db.rollback()
                if not await self._dedup_key_exists(db, dedup_key):
                    raise
                logger.info("expiry_warning_skipped", rental_id=record.rental_id, reason="concurrent")
                return False

        logger.info("expiry_warning_sent", rental_id=record.rental_id, user_id=record.user_id)
        await push_notification(self.redis, notification)
        return True

    async def _remove(self, record: RentalRecord) -> bool:
        """Reclaim capacity, delete the rental and notify, as one transaction."""
        async with self.session_factory() as db:
            new_power = await adjust_capacity(db, record.user_id, -record.computing_power)
            if not await delete_rental(db, record.rental_id):
                # Another run already removed it and subtracted the capacity.
                await db.rollback()
                logger.info("rental_already_removed", rental_id=record.rental_id)
                return False

            notification = await create_notification(
                db,
                record.user_id,
                messages.RENTAL_TYPE,
                messages.EXPIRED_SUBTYPE,
                title=messages.EXPIRED_TITLE,
                description=messages.expired_message(record.device_name, record.computing_power),
                metadata={
                    "rental_id": record.rental_id,
                    "device_id": record.device_id,
                    "computing_power": record.computing_power,
                },
                created_at=self.now,
            )
            await db.commit()

        if new_power is None:
            logger.warning("rental_owner_missing", rental_id=record.rental_id, user_id=record.user_id)
        logger.info(
            "rental_removed",
            rental_id=record.rental_id,
            user_id=record.user_id,
            deducted=record.computing_power,
            new_power=new_power,
        )
        await push_notification(self.redis, notification)
        return True

    @staticmethod
    async def _dedup_key_exists(db: AsyncSession, dedup_key: str) -> bool:
        result = await db.execute(select(Notification.id).where(Notification.dedup_key == dedup_key))
        return result.first() is not None


async def run_sweep(
    session_factory: async_sessionmaker[AsyncSession],
    now: datetime | None = None,
    *,
    warning_days: int = DEFAULT_WARNING_DAYS,
    dedup_hours: int = DEFAULT_DEDUP_HOURS,
    concurrency: int = DEFAULT_CONCURRENCY,
    redis: Any | None = None,  # noqa: ANN401
) -> SweepResult:
    """Run one expiry sweep. Raises StoreQueryError if the rentals cannot be listed."""
    sweep = ExpirySweep(
        session_factory,
        now or utc_now(),
        warning_days=warning_days,
        dedup_hours=dedup_hours,
        concurrency=concurrency,
        redis=redis,
    )
    return await sweep.run()

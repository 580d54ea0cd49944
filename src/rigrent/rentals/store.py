"""Rental store queries used by the expiry sweep.

Listings return ``RentalRecord`` snapshots rather than ORM objects, so each
per-rental unit of work can run in its own session.
"""

from __future__ import annotations

from dataclasses import dataclass
from datetime import datetime

from sqlalchemy import delete, select
from sqlalchemy.exc import SQLAlchemyError
from sqlalchemy.ext.asyncio import AsyncSession

from rigrent.clock import ensure_utc
from rigrent.db.models import MiningDevice, UserDevice
from rigrent.rentals.errors import StoreQueryError

DEFAULT_DEVICE_NAME = "Device"


@dataclass(frozen=True)
class RentalRecord:
    rental_id: int
    user_id: int
    device_id: int
    device_name: str
    computing_power: float
    expires_at: datetime


def _rental_query():  # noqa: ANN202
    # Outer join: a rental whose catalog row vanished still has to be swept.
    return (
        select(
            UserDevice.id,
            UserDevice.user_id,
            UserDevice.device_id,
            UserDevice.rental_expires_at,
            MiningDevice.name,
            MiningDevice.computing_power,
        )
        .outerjoin(MiningDevice, MiningDevice.id == UserDevice.device_id)
        .where(
            UserDevice.is_rental_active.is_(True),
            UserDevice.rental_expires_at.is_not(None),
        )
        .order_by(UserDevice.rental_expires_at.asc(), UserDevice.id.asc())
    )


def _to_record(row) -> RentalRecord:  # noqa: ANN001
    return RentalRecord(
        rental_id=row.id,
        user_id=row.user_id,
        device_id=row.device_id,
        device_name=row.name or DEFAULT_DEVICE_NAME,
        computing_power=float(row.computing_power or 0.0),
        expires_at=ensure_utc(row.rental_expires_at),
    )


async def list_expiring_between(db: AsyncSession, start: datetime, end: datetime) -> list[RentalRecord]:
    """Active rentals with start <= expires_at <= end."""
    query = _rental_query().where(
        UserDevice.rental_expires_at >= start,
        UserDevice.rental_expires_at <= end,
    )
    try:
        result = await db.execute(query)
    except (SQLAlchemyError, OSError) as exc:
        raise StoreQueryError("Failed to list expiring rentals") from exc
    return [_to_record(row) for row in result]


async def list_expired(db: AsyncSession, now: datetime) -> list[RentalRecord]:
    """Active rentals with expires_at strictly before now."""
    query = _rental_query().where(UserDevice.rental_expires_at < now)
    try:
        result = await db.execute(query)
    except (SQLAlchemyError, OSError) as exc:
        raise StoreQueryError("Failed to list expired rentals") from exc
    return [_to_record(row) for row in result]


async def delete_rental(db: AsyncSession, rental_id: int) -> bool:
    """Delete a rental if it still exists. True only when this call removed the row."""
    result = await db.execute(
        delete(UserDevice)
        .where(UserDevice.id == rental_id)
        .execution_options(synchronize_session=False)
    )
    return result.rowcount > 0

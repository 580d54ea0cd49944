"""Rental creation and read-side accrual lookups."""

from __future__ import annotations

from datetime import datetime, timedelta

from sqlalchemy import select
from sqlalchemy.ext.asyncio import AsyncSession

from rigrent.clock import ensure_utc, utc_now
from rigrent.db.models import MiningDevice, UserDevice
from rigrent.rentals.accrual import Accrual, compute_accrual, total_promised
from rigrent.rentals.capacity import adjust_capacity


async def start_rental(
    db: AsyncSession,
    user_id: int,
    device_id: int,
    duration_days: int,
    bonus_percentage: float = 0.0,
    now: datetime | None = None,
) -> UserDevice:
    """Start an active rental and add the device's power to the user's total.

    Both writes happen in the caller's transaction; the caller commits.
    """
    if duration_days <= 0:
        raise ValueError("duration_days must be positive")
    if bonus_percentage < 0:
        raise ValueError("bonus_percentage must be non-negative")

    device = await db.get(MiningDevice, device_id)
    if device is None or not device.is_active:
        raise LookupError(f"Device {device_id} not found")

    started_at = ensure_utc(now) if now else utc_now()
    rental = UserDevice(
        user_id=user_id,
        device_id=device.id,
        duration_days=duration_days,
        bonus_percentage=bonus_percentage,
        rental_started_at=started_at,
        rental_expires_at=started_at + timedelta(days=duration_days),
        is_rental_active=True,
        created_at=started_at,
    )
    db.add(rental)
    await db.flush()

    if await adjust_capacity(db, user_id, device.computing_power) is None:
        raise LookupError(f"User {user_id} not found")
    return rental


async def get_rental_accrual(db: AsyncSession, rental_id: int, now: datetime | None = None) -> Accrual | None:
    """Accrued reward of one rental at ``now``; None if the rental does not exist."""
    result = await db.execute(
        select(UserDevice, MiningDevice)
        .join(MiningDevice, MiningDevice.id == UserDevice.device_id)
        .where(UserDevice.id == rental_id)
    )
    row = result.first()
    if row is None:
        return None

    rental, device = row
    total = total_promised(device.base_daily_reward, rental.duration_days, rental.bonus_percentage)
    return compute_accrual(now or utc_now(), rental.rental_started_at, rental.rental_expires_at, total)

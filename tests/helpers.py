"""Row builders shared by the store-backed tests."""

from __future__ import annotations

from datetime import datetime, timedelta, timezone

from sqlalchemy.ext.asyncio import AsyncSession

from rigrent.db.models import MiningDevice, User, UserDevice

CRON_SECRET = "test-cron-secret"

# Sunday afternoon; the warning bucket is Sunday 2026-03-08.
NOW = datetime(2026, 3, 1, 15, 0, 0, tzinfo=timezone.utc)

_counter = 0


async def create_user(db: AsyncSession, power: float = 0.0) -> User:
    global _counter  # noqa: PLW0603
    _counter += 1
    user = User(email=f"miner{_counter}@example.com", display_name=f"miner{_counter}", total_computing_power=power)
    db.add(user)
    await db.flush()
    return user


async def create_device(
    db: AsyncSession,
    name: str = "Antminer S19",
    computing_power: float = 5.0,
    base_daily_reward: float = 2.0,
) -> MiningDevice:
    device = MiningDevice(
        name=name,
        computing_power=computing_power,
        base_daily_reward=base_daily_reward,
        price=100.0,
        is_active=True,
    )
    db.add(device)
    await db.flush()
    return device


async def create_rental(
    db: AsyncSession,
    user: User,
    device: MiningDevice,
    expires_at: datetime | None,
    duration_days: int = 30,
    bonus_percentage: float = 0.0,
) -> UserDevice:
    """Insert a rental row directly, without touching the user's capacity."""
    started_at = expires_at - timedelta(days=duration_days) if expires_at else None
    rental = UserDevice(
        user_id=user.id,
        device_id=device.id,
        duration_days=duration_days,
        bonus_percentage=bonus_percentage,
        rental_started_at=started_at,
        rental_expires_at=expires_at,
        is_rental_active=True,
    )
    db.add(rental)
    await db.flush()
    return rental

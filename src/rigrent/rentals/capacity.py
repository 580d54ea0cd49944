"""User computing power (capacity) accounting.

``users.total_computing_power`` must equal the sum of the contributions of
the user's active rentals. Both the rental-creation path and the expiry
sweep change it, so every change goes through ``adjust_capacity``: one
UPDATE statement that applies a delta and floors the result at zero, with
no application-side read-modify-write.
"""

from __future__ import annotations

from sqlalchemy import case, func, select, update
from sqlalchemy.ext.asyncio import AsyncSession

from rigrent.db.models import MiningDevice, User, UserDevice


def reconcile_capacity(current: float | None, contribution: float) -> float:
    """New total after removing ``contribution``; never negative, even for a stale total."""
    return max(0.0, (current or 0.0) - contribution)


async def adjust_capacity(db: AsyncSession, user_id: int, delta: float) -> float | None:
    """Atomically add ``delta`` (negative to subtract) with a floor at zero.

    Same rule as ``reconcile_capacity``, evaluated by the database against
    the stored value. Returns the new total, or None when the user row does
    not exist.
    """
    new_total = User.total_computing_power + delta
    result = await db.execute(
        update(User)
        .where(User.id == user_id)
        .values(total_computing_power=case((new_total < 0, 0.0), else_=new_total))
        .returning(User.total_computing_power)
        .execution_options(synchronize_session=False)
    )
    return result.scalar_one_or_none()


async def get_capacity(db: AsyncSession, user_id: int) -> float | None:
    result = await db.execute(select(User.total_computing_power).where(User.id == user_id))
    return result.scalar_one_or_none()


async def recompute_capacity(db: AsyncSession, user_id: int) -> float:
    """Rebuild the counter from the user's active rentals and store it."""
    result = await db.execute(
        select(func.coalesce(func.sum(MiningDevice.computing_power), 0.0))
        .select_from(UserDevice)
        .join(MiningDevice, MiningDevice.id == UserDevice.device_id)
        .where(UserDevice.user_id == user_id, UserDevice.is_rental_active.is_(True))
    )
    total = float(result.scalar_one())
    await db.execute(
        update(User)
        .where(User.id == user_id)
        .values(total_computing_power=total)
        .execution_options(synchronize_session=False)
    )
    return total

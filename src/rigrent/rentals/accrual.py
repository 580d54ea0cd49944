"""Reward accrual and countdown projection for rentals.

Pure functions of (now, rental window, reward terms). No I/O, safe to call
every second for a live countdown.

A rental's promised reward accrues linearly over its active window:

    total   = base_daily_reward * duration_days * (1 + bonus_percentage / 100)
    progress = clamp((now - started_at) / (expires_at - started_at), 0, 1)
    amount  = progress * total

A rental with no window, or an empty/inverted one, counts as complete.
"""

from __future__ import annotations

from dataclasses import dataclass
from datetime import datetime

from rigrent.clock import ensure_utc


@dataclass(frozen=True)
class Accrual:
    """Accrued reward at one instant. ``progress`` is a percentage in [0, 100]."""

    progress: float
    amount: float
    total: float

    @property
    def is_complete(self) -> bool:
        return self.progress >= 100.0


@dataclass(frozen=True)
class TimeRemaining:
    days: int
    hours: int
    minutes: int
    seconds: int
    total_seconds: float


def total_promised(base_daily_reward: float, duration_days: float, bonus_percentage: float = 0.0) -> float:
    """Total reward promised for the whole rental term."""
    if base_daily_reward < 0 or duration_days < 0 or bonus_percentage < 0:
        raise ValueError("Reward terms must be non-negative")
    return base_daily_reward * duration_days * (1 + bonus_percentage / 100)


def compute_accrual(
    now: datetime,
    started_at: datetime | None,
    expires_at: datetime | None,
    total: float,
) -> Accrual:
    """Fraction of ``total`` earned at ``now``.

    Clock skew (now before started_at) clamps to 0%; anything past
    expires_at is frozen at 100%.
    """
    if started_at is None or expires_at is None:
        return Accrual(progress=100.0, amount=total, total=total)

    start = ensure_utc(started_at)
    end = ensure_utc(expires_at)
    window = (end - start).total_seconds()
    if window <= 0:
        return Accrual(progress=100.0, amount=total, total=total)

    elapsed = (ensure_utc(now) - start).total_seconds()
    fraction = min(1.0, max(0.0, elapsed / window))
    return Accrual(progress=fraction * 100, amount=fraction * total, total=total)


def time_remaining(now: datetime, expires_at: datetime | None) -> TimeRemaining:
    """Countdown to expiry, all zero once expired or when there is no expiry."""
    if expires_at is None:
        return TimeRemaining(0, 0, 0, 0, 0.0)

    total = (ensure_utc(expires_at) - ensure_utc(now)).total_seconds()
    if total <= 0:
        return TimeRemaining(0, 0, 0, 0, 0.0)

    whole = int(total)
    days, rest = divmod(whole, 86_400)
    hours, rest = divmod(rest, 3_600)
    minutes, seconds = divmod(rest, 60)
    return TimeRemaining(days, hours, minutes, seconds, total)


def format_time_remaining(remaining: TimeRemaining) -> str:
    """Compact countdown, e.g. '2d 3h 4m 5s'; hours are kept whenever days are shown."""
    if remaining.total_seconds <= 0:
        return "Completed"

    parts: list[str] = []
    if remaining.days > 0:
        parts.append(f"{remaining.days}d")
    if remaining.hours > 0 or remaining.days > 0:
        parts.append(f"{remaining.hours}h")
    parts.append(f"{remaining.minutes}m")
    parts.append(f"{remaining.seconds}s")
    return " ".join(parts)

"""Texts of the notifications sent by the expiry sweep."""

from __future__ import annotations

from datetime import datetime

RENTAL_TYPE = "rental"
EXPIRING_SUBTYPE = "rental_expiring"
EXPIRED_SUBTYPE = "rental_expired"

EXPIRING_TITLE = "⚠️ Device expiring soon"
EXPIRED_TITLE = "❌ Device expired"


def expiring_message(device_name: str, days: int) -> str:
    return (
        f'Your device "{device_name}" will expire in {days} days. '
        "Renew the rental to keep earning!"
    )


def expired_message(device_name: str, computing_power: float) -> str:
    return (
        f'Your device "{device_name}" was removed because its rental expired. '
        f"Its computing power ({computing_power:g} TH/s) was deducted from your total."
    )


def expiring_dedup_key(user_id: int, device_name: str, bucket_start: datetime) -> str:
    """One expiring-soon warning per (user, device name, bucket day)."""
    return f"{EXPIRING_SUBTYPE}:{user_id}:{device_name}:{bucket_start.date().isoformat()}"

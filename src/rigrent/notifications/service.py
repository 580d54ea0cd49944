"""Notification creation and delivery service.

Notifications are:
1. Persisted in the database (the durable log users read from)
2. Optionally pushed to the user via Redis pub/sub once the caller has committed

Types: rental, system
"""

from __future__ import annotations

import json
import logging
from datetime import datetime
from typing import Any

from sqlalchemy import func, select
from sqlalchemy.ext.asyncio import AsyncSession

from rigrent.clock import utc_now
from rigrent.db.models import Notification

logger = logging.getLogger(__name__)

VALID_TYPES = {"rental", "system"}


def build_notification(
    user_id: int,
    type_: str,
    subtype: str,
    title: str,
    description: str | None = None,
    metadata: dict[str, Any] | None = None,
    dedup_key: str | None = None,
    created_at: datetime | None = None,
) -> Notification:
    """Build (but do not add) a validated Notification row."""
    if type_ not in VALID_TYPES:
        raise ValueError(f"Invalid notification type: {type_}. Must be one of {VALID_TYPES}")

    return Notification(
        user_id=user_id,
        type=type_,
        subtype=subtype,
        title=title,
        description=description,
        read=False,
        notification_metadata=metadata or {},
        dedup_key=dedup_key,
        created_at=created_at or utc_now(),
    )


async def create_notification(
    db: AsyncSession,
    user_id: int,
    type_: str,
    subtype: str,
    title: str,
    description: str | None = None,
    metadata: dict[str, Any] | None = None,
    dedup_key: str | None = None,
    created_at: datetime | None = None,
) -> Notification:
    """Add a notification to the session and flush it. The caller commits."""
    notification = build_notification(
        user_id, type_, subtype, title, description,
        metadata=metadata, dedup_key=dedup_key, created_at=created_at,
    )
    db.add(notification)
    await db.flush()
    return notification


async def push_notification(redis: Any | None, notification: Notification) -> None:  # noqa: ANN401
    """Publish a committed notification on the user's channel. Never raises."""
    if redis is None:
        return

    ws_payload = {
        "event": "notification",
        "data": {
            "id": str(notification.id),
            "type": notification.type,
            "subtype": notification.subtype,
            "title": notification.title,
            "description": notification.description,
            "timestamp": notification.created_at.isoformat() if notification.created_at else None,
            "read": False,
        },
    }
    try:
        await redis.publish(f"ws:user:{notification.user_id}", json.dumps(ws_payload))
    except Exception:
        logger.warning("Failed to push notification via Redis", exc_info=True)


async def has_recent_notification(
    db: AsyncSession,
    user_id: int,
    subtype: str,
    needle: str,
    since: datetime,
) -> bool:
    """True if the user got a ``subtype`` notification mentioning ``needle`` at or after ``since``."""
    result = await db.execute(
        select(Notification.id)
        .where(
            Notification.user_id == user_id,
            Notification.subtype == subtype,
            Notification.description.contains(needle, autoescape=True),
            Notification.created_at >= since,
        )
        .limit(1)
    )
    return result.first() is not None


async def get_notifications(
    db: AsyncSession,
    user_id: int,
    page: int = 1,
    per_page: int = 20,
) -> tuple[list[Notification], int]:
    """Get user's notifications (paginated, most recent first)."""
    offset = (page - 1) * per_page

    total_result = await db.execute(
        select(func.count()).select_from(Notification).where(Notification.user_id == user_id)
    )
    total = total_result.scalar_one()

    result = await db.execute(
        select(Notification)
        .where(Notification.user_id == user_id)
        .order_by(Notification.created_at.desc(), Notification.id.desc())
        .offset(offset)
        .limit(per_page)
    )
    notifications = list(result.scalars().all())
    return notifications, total


async def get_unread_count(db: AsyncSession, user_id: int) -> int:
    """Get count of unread notifications."""
    result = await db.execute(
        select(func.count())
        .select_from(Notification)
        .where(Notification.user_id == user_id, Notification.read.is_(False))
    )
    return result.scalar_one()

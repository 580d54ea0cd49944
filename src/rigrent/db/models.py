"""ORM models for users, the device catalog, rentals and notifications.

Column types stay portable (no PostgreSQL-only types) so the same mapping
runs against PostgreSQL in production and SQLite in the test suite.
"""

from __future__ import annotations

from datetime import datetime
from typing import Any

from sqlalchemy import (
    JSON,
    BigInteger,
    Boolean,
    DateTime,
    Float,
    ForeignKey,
    Index,
    Integer,
    String,
    Text,
    false,
    func,
    true,
)
from sqlalchemy.orm import Mapped, mapped_column, relationship

from rigrent.db.base import Base

# SQLite only autoincrements INTEGER PRIMARY KEY columns.
_BigId = BigInteger().with_variant(Integer(), "sqlite")


# ---------------------------------------------------------------------------
# Users
# ---------------------------------------------------------------------------


class User(Base):
    """User profile; carries the aggregate computing power counter."""

    __tablename__ = "users"

    id: Mapped[int] = mapped_column(_BigId, primary_key=True, autoincrement=True)
    email: Mapped[str] = mapped_column(String(320), unique=True, nullable=False)
    display_name: Mapped[str | None] = mapped_column(String(64), nullable=True)
    total_computing_power: Mapped[float] = mapped_column(Float, nullable=False, default=0.0, server_default="0")
    created_at: Mapped[datetime | None] = mapped_column(DateTime(timezone=True), server_default=func.now())

    rentals: Mapped[list[UserDevice]] = relationship("UserDevice", back_populates="user")


# ---------------------------------------------------------------------------
# Device catalog
# ---------------------------------------------------------------------------


class MiningDevice(Base):
    """A rentable device type: name, TH/s contribution and reward terms."""

    __tablename__ = "mining_devices"

    id: Mapped[int] = mapped_column(_BigId, primary_key=True, autoincrement=True)
    name: Mapped[str] = mapped_column(String(128), nullable=False)
    computing_power: Mapped[float] = mapped_column(Float, nullable=False, default=0.0)
    base_daily_reward: Mapped[float] = mapped_column(Float, nullable=False, default=0.0)
    price: Mapped[float] = mapped_column(Float, nullable=False, default=0.0)
    is_active: Mapped[bool] = mapped_column(Boolean, nullable=False, default=True, server_default=true())


# ---------------------------------------------------------------------------
# Rentals
# ---------------------------------------------------------------------------


class UserDevice(Base):
    """One user's lease of one device.

    Rows are only ever removed by the expiry sweep; a null
    ``rental_expires_at`` marks an indefinite rental that is never swept.
    """

    __tablename__ = "user_devices"
    __table_args__ = (
        Index("idx_user_devices_active_expiry", "is_rental_active", "rental_expires_at"),
        Index("idx_user_devices_user", "user_id"),
    )

    id: Mapped[int] = mapped_column(_BigId, primary_key=True, autoincrement=True)
    user_id: Mapped[int] = mapped_column(_BigId, ForeignKey("users.id", ondelete="CASCADE"), nullable=False)
    device_id: Mapped[int] = mapped_column(_BigId, ForeignKey("mining_devices.id"), nullable=False)
    duration_days: Mapped[int] = mapped_column(Integer, nullable=False, default=0)
    bonus_percentage: Mapped[float] = mapped_column(Float, nullable=False, default=0.0)
    rental_started_at: Mapped[datetime | None] = mapped_column(DateTime(timezone=True), nullable=True)
    rental_expires_at: Mapped[datetime | None] = mapped_column(DateTime(timezone=True), nullable=True)
    is_rental_active: Mapped[bool] = mapped_column(Boolean, nullable=False, default=True, server_default=true())
    created_at: Mapped[datetime | None] = mapped_column(DateTime(timezone=True), server_default=func.now())

    user: Mapped[User] = relationship("User", back_populates="rentals")
    device: Mapped[MiningDevice] = relationship("MiningDevice")


# ---------------------------------------------------------------------------
# Notifications
# ---------------------------------------------------------------------------


class Notification(Base):
    """Persisted user notifications."""

    __tablename__ = "notifications"
    __table_args__ = (Index("idx_notifications_user_created", "user_id", "created_at"),)

    id: Mapped[int] = mapped_column(_BigId, primary_key=True, autoincrement=True)
    user_id: Mapped[int] = mapped_column(_BigId, ForeignKey("users.id", ondelete="CASCADE"), nullable=False)
    type: Mapped[str] = mapped_column(String(32), nullable=False)
    subtype: Mapped[str] = mapped_column(String(64), nullable=False)
    title: Mapped[str] = mapped_column(String(256), nullable=False)
    description: Mapped[str | None] = mapped_column(Text, nullable=True)
    read: Mapped[bool] = mapped_column(Boolean, nullable=False, default=False, server_default=false())
    notification_metadata: Mapped[dict[str, Any]] = mapped_column("metadata", JSON, default=dict)
    # Set for notifications that must exist at most once per key.
    dedup_key: Mapped[str | None] = mapped_column(String(256), nullable=True, unique=True)
    created_at: Mapped[datetime | None] = mapped_column(DateTime(timezone=True), nullable=True)

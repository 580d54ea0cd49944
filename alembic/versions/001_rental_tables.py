"""Baseline: users, device catalog, rentals, notifications.

Revision ID: 001_rental_tables
Revises:
Create Date: 2026-10-19
"""

from collections.abc import Sequence

from alembic import op

revision: str = "001_rental_tables"
down_revision: str | None = None
branch_labels: str | Sequence[str] | None = None
depends_on: str | Sequence[str] | None = None


def upgrade() -> None:
    # --- Users ---
    op.execute("""
        CREATE TABLE IF NOT EXISTS users (
            id BIGSERIAL PRIMARY KEY,
            email VARCHAR(320) UNIQUE NOT NULL,
            display_name VARCHAR(64),
            total_computing_power DOUBLE PRECISION NOT NULL DEFAULT 0,
            created_at TIMESTAMPTZ DEFAULT NOW()
        )
    """)

    # --- Device catalog ---
    op.execute("""
        CREATE TABLE IF NOT EXISTS mining_devices (
            id BIGSERIAL PRIMARY KEY,
            name VARCHAR(128) NOT NULL,
            computing_power DOUBLE PRECISION NOT NULL DEFAULT 0,
            base_daily_reward DOUBLE PRECISION NOT NULL DEFAULT 0,
            price DOUBLE PRECISION NOT NULL DEFAULT 0,
            is_active BOOLEAN NOT NULL DEFAULT true
        )
    """)

    # --- Rentals ---
    op.execute("""
        CREATE TABLE IF NOT EXISTS user_devices (
            id BIGSERIAL PRIMARY KEY,
            user_id BIGINT NOT NULL REFERENCES users(id) ON DELETE CASCADE,
            device_id BIGINT NOT NULL REFERENCES mining_devices(id),
            duration_days INTEGER NOT NULL DEFAULT 0,
            bonus_percentage DOUBLE PRECISION NOT NULL DEFAULT 0,
            rental_started_at TIMESTAMPTZ,
            rental_expires_at TIMESTAMPTZ,
            is_rental_active BOOLEAN NOT NULL DEFAULT true,
            created_at TIMESTAMPTZ DEFAULT NOW()
        )
    """)
    op.execute("""
        CREATE INDEX IF NOT EXISTS idx_user_devices_active_expiry
        ON user_devices(is_rental_active, rental_expires_at)
    """)
    op.execute("""
        CREATE INDEX IF NOT EXISTS idx_user_devices_user
        ON user_devices(user_id)
    """)

    # --- Notifications ---
    op.execute("""
        CREATE TABLE IF NOT EXISTS notifications (
            id BIGSERIAL PRIMARY KEY,
            user_id BIGINT NOT NULL REFERENCES users(id) ON DELETE CASCADE,
            type VARCHAR(32) NOT NULL,
            subtype VARCHAR(64) NOT NULL,
            title VARCHAR(256) NOT NULL,
            description TEXT,
            read BOOLEAN NOT NULL DEFAULT false,
            metadata JSON,
            dedup_key VARCHAR(256) UNIQUE,
            created_at TIMESTAMPTZ
        )
    """)
    op.execute("""
        CREATE INDEX IF NOT EXISTS idx_notifications_user_created
        ON notifications(user_id, created_at)
    """)


def downgrade() -> None:
    op.execute("DROP TABLE IF EXISTS notifications")
    op.execute("DROP TABLE IF EXISTS user_devices")
    op.execute("DROP TABLE IF EXISTS mining_devices")
    op.execute("DROP TABLE IF EXISTS users")

"""Pydantic schemas for the sweep trigger endpoint."""

from __future__ import annotations

from typing import TYPE_CHECKING

from pydantic import BaseModel, ConfigDict, Field

if TYPE_CHECKING:
    from rigrent.rentals.sweep import SweepResult


class SweepSummaryResponse(BaseModel):
    model_config = ConfigDict(populate_by_name=True)

    success: bool = True
    expiring_notified: int = Field(..., alias="expiringNotified")
    expired_removed: int = Field(..., alias="expiredRemoved")
    timestamp: str

    @classmethod
    def from_result(cls, result: SweepResult) -> SweepSummaryResponse:
        return cls(
            success=True,
            expiring_notified=result.expiring_notified,
            expired_removed=result.expired_removed,
            timestamp=result.timestamp.isoformat(timespec="milliseconds").replace("+00:00", "Z"),
        )


class SweepErrorResponse(BaseModel):
    error: str

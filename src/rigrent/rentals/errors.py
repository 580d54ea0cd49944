"""Errors raised by the rental expiry sweep."""

from __future__ import annotations


class SweepError(Exception):
    """Base class for sweep failures."""


class AuthorizationError(SweepError):
    """Trigger credential missing or wrong. Nothing has been touched."""


class StoreQueryError(SweepError):
    """Listing rentals failed. The whole sweep is aborted before any mutation."""


class RentalUnitError(SweepError):
    """Processing one rental failed. That rental is skipped and stays eligible."""

    def __init__(self, rental_id: int, phase: str, cause: BaseException | None = None) -> None:
        self.rental_id = rental_id
        self.phase = phase
        self.cause = cause
        super().__init__(f"{phase} failed for rental {rental_id}: {cause}")

"""Shared-secret check for scheduler invocations."""

from __future__ import annotations

import hmac

from rigrent.rentals.errors import AuthorizationError


def verify_cron_secret(authorization: str | None, secret: str) -> None:
    """Accept only the exact header ``Authorization: Bearer <secret>``.

    An unset secret rejects every call, so a misconfigured deploy fails closed.
    """
    if not secret:
        raise AuthorizationError("Cron secret is not configured")
    if not authorization:
        raise AuthorizationError("Missing Authorization header")
    if not hmac.compare_digest(authorization.encode(), f"Bearer {secret}".encode()):
        raise AuthorizationError("Invalid cron credential")

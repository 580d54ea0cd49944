"""Unit tests for the cron trigger credential check."""

import pytest

from rigrent.rentals.errors import AuthorizationError
from rigrent.rentals.trigger_auth import verify_cron_secret


class TestVerifyCronSecret:
    """Only 'Bearer <secret>' passes."""

    def test_valid_bearer(self):
        verify_cron_secret("Bearer s3cret", "s3cret")

    @pytest.mark.parametrize(
        "header",
        ["bearer s3cret", "BEARER s3cret", "Bearer  s3cret", "Bearer s3cret ", " Bearer s3cret", "Bearer\ts3cret"],
    )
    def test_header_must_match_exactly(self, header):
        with pytest.raises(AuthorizationError):
            verify_cron_secret(header, "s3cret")

    def test_wrong_secret(self):
        with pytest.raises(AuthorizationError):
            verify_cron_secret("Bearer nope", "s3cret")

    def test_missing_header(self):
        with pytest.raises(AuthorizationError):
            verify_cron_secret(None, "s3cret")

    def test_wrong_scheme(self):
        with pytest.raises(AuthorizationError):
            verify_cron_secret("Basic s3cret", "s3cret")

    def test_bare_secret_without_scheme(self):
        with pytest.raises(AuthorizationError):
            verify_cron_secret("s3cret", "s3cret")

    def test_unset_secret_rejects_everything(self):
        with pytest.raises(AuthorizationError):
            verify_cron_secret("Bearer ", "")

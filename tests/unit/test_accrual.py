"""Unit tests for reward accrual and the countdown projection."""

from datetime import datetime, timedelta, timezone

import pytest

from rigrent.rentals.accrual import (
    TimeRemaining,
    compute_accrual,
    format_time_remaining,
    time_remaining,
    total_promised,
)

T = datetime(2026, 3, 1, 0, 0, 0, tzinfo=timezone.utc)
END = T + timedelta(days=10)


class TestTotalPromised:
    """Test the promised reward formula."""

    def test_no_bonus(self):
        assert total_promised(2.0, 7) == pytest.approx(14.0)

    def test_bonus_is_a_percentage(self):
        assert total_promised(10.0, 7, 0.3) == pytest.approx(70.21)

    def test_zero_duration(self):
        assert total_promised(10.0, 0, 5) == 0.0

    def test_negative_terms_rejected(self):
        with pytest.raises(ValueError):
            total_promised(-1.0, 7)
        with pytest.raises(ValueError):
            total_promised(1.0, 7, -5)


class TestComputeAccrual:
    """Test the accrued amount over the rental window."""

    def test_halfway_is_half(self):
        accrual = compute_accrual(T + timedelta(days=5), T, END, 100.0)
        assert accrual.amount == 50.0
        assert accrual.progress == 50.0
        assert accrual.total == 100.0

    def test_at_start_is_zero(self):
        accrual = compute_accrual(T, T, END, 100.0)
        assert accrual.amount == 0.0
        assert accrual.is_complete is False

    def test_clock_skew_clamps_to_zero(self):
        accrual = compute_accrual(T - timedelta(hours=3), T, END, 100.0)
        assert accrual.amount == 0.0
        assert accrual.progress == 0.0

    def test_at_expiry_is_full(self):
        accrual = compute_accrual(END, T, END, 100.0)
        assert accrual.amount == 100.0
        assert accrual.is_complete is True

    def test_after_expiry_is_frozen(self):
        accrual = compute_accrual(END + timedelta(days=30), T, END, 100.0)
        assert accrual.amount == 100.0
        assert accrual.progress == 100.0

    def test_missing_start_counts_as_complete(self):
        accrual = compute_accrual(T, None, END, 42.0)
        assert accrual.amount == 42.0
        assert accrual.progress == 100.0

    def test_missing_expiry_counts_as_complete(self):
        assert compute_accrual(T, T, None, 42.0).amount == 42.0

    def test_empty_window_counts_as_complete(self):
        assert compute_accrual(T, T, T, 42.0).amount == 42.0

    def test_inverted_window_counts_as_complete(self):
        assert compute_accrual(T, END, T, 42.0).amount == 42.0

    def test_strictly_increasing_inside_window(self):
        amounts = [
            compute_accrual(T + timedelta(hours=h), T, END, 100.0).amount
            for h in range(1, 240)
        ]
        assert all(a < b for a, b in zip(amounts, amounts[1:]))
        assert all(0.0 < a < 100.0 for a in amounts)

    def test_naive_datetimes_are_utc(self):
        naive_start = T.replace(tzinfo=None)
        naive_end = END.replace(tzinfo=None)
        accrual = compute_accrual(T + timedelta(days=5), naive_start, naive_end, 100.0)
        assert accrual.amount == 50.0


class TestTimeRemaining:
    """Test the countdown projection."""

    def test_breakdown(self):
        now = T
        expires = T + timedelta(days=2, hours=3, minutes=4, seconds=5)
        remaining = time_remaining(now, expires)
        assert (remaining.days, remaining.hours, remaining.minutes, remaining.seconds) == (2, 3, 4, 5)
        assert remaining.total_seconds == 2 * 86_400 + 3 * 3_600 + 4 * 60 + 5

    def test_expired_is_zero(self):
        assert time_remaining(END + timedelta(seconds=1), END) == TimeRemaining(0, 0, 0, 0, 0.0)

    def test_no_expiry_is_zero(self):
        assert time_remaining(T, None).total_seconds == 0.0

    def test_format_full(self):
        assert format_time_remaining(TimeRemaining(2, 3, 4, 5, 1.0)) == "2d 3h 4m 5s"

    def test_format_keeps_hours_with_days(self):
        assert format_time_remaining(TimeRemaining(1, 0, 0, 9, 1.0)) == "1d 0h 0m 9s"

    def test_format_without_days(self):
        assert format_time_remaining(TimeRemaining(0, 0, 7, 1, 1.0)) == "7m 1s"

    def test_format_completed(self):
        assert format_time_remaining(TimeRemaining(0, 0, 0, 0, 0.0)) == "Completed"

from datetime import UTC, datetime, timedelta

from payment_lifecycle.application.ports import TimeProvider


class SystemTimeProvider(TimeProvider):
    """Production time provider using system clock."""

    def now(self) -> datetime:
        return datetime.now(UTC)


class FixedTimeProvider(TimeProvider):
    """Test time provider with controllable fixed timestamp.

    Note: set_time()/advance() are NOT thread-safe. Change the time
    before starting worker threads, not while they run.
    """

    def __init__(self, fixed_time: datetime) -> None:
        self._validate_utc(fixed_time)
        self._fixed_time = fixed_time

    def now(self) -> datetime:
        return self._fixed_time

    def set_time(self, new_time: datetime) -> None:
        """Explicitly change the fixed time for testing scenarios."""
        self._validate_utc(new_time)
        self._fixed_time = new_time

    def advance(self, delta: timedelta) -> None:
        """Move the fixed time forward (or backward, for negative deltas)."""
        self._fixed_time = self._fixed_time + delta

    def _validate_utc(self, dt: datetime) -> None:
        if dt.tzinfo is not UTC:
            raise ValueError(f"datetime must have tzinfo=UTC, got tzinfo={dt.tzinfo}")

"""Fake Time for testing."""

from datetime import UTC, datetime, timedelta

from cslaunch.gateway.time.abc import Time

DEFAULT_START = datetime(2025, 1, 1, 12, 0, tzinfo=UTC)


class FakeTime(Time):
    """Clock that only moves when sleep() is called.

    sleep() returns immediately and advances the clock by the requested
    amount, so deadlines behave as they would in real time.
    """

    def __init__(self, *, current_time: datetime = DEFAULT_START) -> None:
        self._current_time = current_time
        self._sleep_calls: list[float] = []

    def sleep(self, seconds: float) -> None:
        self._sleep_calls.append(seconds)
        self._current_time += timedelta(seconds=seconds)

    def now(self) -> datetime:
        return self._current_time

    @property
    def sleep_calls(self) -> list[float]:
        """Durations passed to sleep(), for test assertions."""
        return self._sleep_calls.copy()

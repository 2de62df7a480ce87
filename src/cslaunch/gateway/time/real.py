"""Real time implementation."""

import time
from datetime import UTC, datetime

from cslaunch.gateway.time.abc import Time


class RealTime(Time):
    """Production implementation using time.sleep and the system clock."""

    def sleep(self, seconds: float) -> None:
        time.sleep(seconds)

    def now(self) -> datetime:
        return datetime.now(UTC)

"""Time operations abstraction.

Polling code sleeps and reads the clock through this interface so tests can
run instantly and deterministically.
"""

from abc import ABC, abstractmethod
from datetime import datetime


class Time(ABC):
    """Abstract clock and sleep."""

    @abstractmethod
    def sleep(self, seconds: float) -> None:
        """Block for the given number of seconds."""
        ...

    @abstractmethod
    def now(self) -> datetime:
        """Current time (timezone-aware UTC)."""
        ...

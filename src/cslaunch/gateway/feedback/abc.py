"""Abstract user feedback sink.

Messages go to the user-facing stream (stderr). Progress labels describe
long-running waits such as codespace setup steps.
"""

from abc import ABC, abstractmethod


class UserFeedback(ABC):
    """Abstract sink for user-facing messages and progress."""

    @abstractmethod
    def info(self, message: str) -> None:
        """Show an informational message."""
        ...

    @abstractmethod
    def success(self, message: str) -> None:
        """Show a success message."""
        ...

    @abstractmethod
    def warning(self, message: str) -> None:
        """Show a warning."""
        ...

    @abstractmethod
    def error(self, message: str) -> None:
        """Show an error or a required user action."""
        ...

    @abstractmethod
    def start_progress(self, label: str) -> None:
        """Show (or relabel) a progress indicator."""
        ...

    @abstractmethod
    def stop_progress(self) -> None:
        """Remove the progress indicator, if one is shown."""
        ...

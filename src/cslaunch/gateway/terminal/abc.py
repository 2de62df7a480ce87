"""Terminal capability detection.

The user-facing stream is stderr; stdout is reserved for machine-readable
output such as the created codespace name.
"""

from abc import ABC, abstractmethod


class Terminal(ABC):
    """Abstract TTY detection for dependency injection."""

    @abstractmethod
    def is_stdin_interactive(self) -> bool:
        """Check if stdin is connected to a TTY."""
        ...

    @abstractmethod
    def is_stdout_tty(self) -> bool:
        """Check if stdout is connected to a TTY."""
        ...

    @abstractmethod
    def is_stderr_tty(self) -> bool:
        """Check if the user-facing stream (stderr) is connected to a TTY."""
        ...

    def can_prompt(self) -> bool:
        """Whether the user can answer an interactive question.

        Requires both a TTY to read from and a TTY to show the question on.
        """
        return self.is_stdin_interactive() and self.is_stderr_tty()

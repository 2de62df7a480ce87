"""Real UserFeedback implementations writing to stderr."""

import click
from rich.console import Console
from rich.status import Status
from rich.text import Text

from cslaunch.gateway.feedback.abc import UserFeedback


class InteractiveFeedback(UserFeedback):
    """Feedback for interactive use: styled messages and a spinner."""

    def __init__(self) -> None:
        self._status: Status | None = None

    def info(self, message: str) -> None:
        self._echo(message)

    def success(self, message: str) -> None:
        self._echo(click.style(message, fg="green"))

    def warning(self, message: str) -> None:
        self._echo(click.style(message, fg="yellow"))

    def error(self, message: str) -> None:
        self._echo(message)

    def start_progress(self, label: str) -> None:
        if self._status is None:
            console = Console(stderr=True)
            self._status = console.status(label)
            self._status.start()
        else:
            self._status.update(label)

    def stop_progress(self) -> None:
        if self._status is not None:
            self._status.stop()
            self._status = None

    def _echo(self, message: str) -> None:
        # Messages must not interleave with the spinner line
        if self._status is not None:
            self._status.console.print(Text.from_ansi(message), highlight=False)
        else:
            click.echo(message, err=True)


class SuppressedFeedback(UserFeedback):
    """Feedback for scripted use: only warnings and errors are shown."""

    def info(self, message: str) -> None:
        pass

    def success(self, message: str) -> None:
        pass

    def warning(self, message: str) -> None:
        click.echo(click.style(message, fg="yellow"), err=True)

    def error(self, message: str) -> None:
        click.echo(message, err=True)

    def start_progress(self, label: str) -> None:
        pass

    def stop_progress(self) -> None:
        pass

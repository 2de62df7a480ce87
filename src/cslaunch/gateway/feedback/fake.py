"""Fake UserFeedback for testing."""

from cslaunch.gateway.feedback.abc import UserFeedback


class FakeUserFeedback(UserFeedback):
    """Records messages and progress labels for test assertions."""

    def __init__(self) -> None:
        self._messages: list[tuple[str, str]] = []
        self._progress_labels: list[str] = []
        self._progress_active = False

    def info(self, message: str) -> None:
        self._messages.append(("info", message))

    def success(self, message: str) -> None:
        self._messages.append(("success", message))

    def warning(self, message: str) -> None:
        self._messages.append(("warning", message))

    def error(self, message: str) -> None:
        self._messages.append(("error", message))

    def start_progress(self, label: str) -> None:
        self._progress_labels.append(label)
        self._progress_active = True

    def stop_progress(self) -> None:
        self._progress_active = False

    @property
    def messages(self) -> list[tuple[str, str]]:
        """(level, message) pairs in the order they were emitted."""
        return self._messages.copy()

    @property
    def text(self) -> str:
        """All messages joined by newlines, as they would appear on stderr."""
        return "\n".join(message for _, message in self._messages)

    @property
    def progress_labels(self) -> list[str]:
        """Labels passed to start_progress, in order."""
        return self._progress_labels.copy()

    @property
    def progress_active(self) -> bool:
        return self._progress_active

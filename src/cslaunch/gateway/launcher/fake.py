"""Fake Launcher for testing."""

from cslaunch.gateway.launcher.abc import Launcher


class FakeLauncher(Launcher):
    """Records launches instead of starting processes.

    This class has NO public setup methods. All state is provided via constructor.
    """

    def __init__(
        self, *, ssh_exit_code: int = 0, open_url_raises: BaseException | None = None
    ) -> None:
        """Create FakeLauncher.

        Args:
            ssh_exit_code: Exit code returned by run_ssh
            open_url_raises: Raised by open_url after recording the URL, e.g.
                KeyboardInterrupt to simulate the user stopping a held session
        """
        self._ssh_exit_code = ssh_exit_code
        self._open_url_raises = open_url_raises
        self._ssh_calls: list[tuple[int, str]] = []
        self._opened_urls: list[str] = []

    def run_ssh(self, *, port: int, user: str) -> int:
        self._ssh_calls.append((port, user))
        return self._ssh_exit_code

    def open_url(self, url: str) -> None:
        self._opened_urls.append(url)
        if self._open_url_raises is not None:
            raise self._open_url_raises

    @property
    def ssh_calls(self) -> list[tuple[int, str]]:
        """(port, user) for each run_ssh call."""
        return self._ssh_calls.copy()

    @property
    def opened_urls(self) -> list[str]:
        return self._opened_urls.copy()

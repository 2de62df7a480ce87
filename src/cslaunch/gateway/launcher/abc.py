"""Abstract launcher for local programs that attach to a codespace."""

from abc import ABC, abstractmethod


class Launcher(ABC):
    """Starts local programs on behalf of the user."""

    @abstractmethod
    def run_ssh(self, *, port: int, user: str) -> int:
        """Run an interactive ssh client against a forwarded local port.

        Args:
            port: Local port the codespace SSH server is forwarded to
            user: Remote user to log in as

        Returns:
            Exit code of the ssh client
        """
        ...

    @abstractmethod
    def open_url(self, url: str) -> None:
        """Open a URL in the user's browser."""
        ...

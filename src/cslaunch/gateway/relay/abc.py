"""Abstract relay client.

A relay session is the authenticated channel to a running codespace. Channels
(SSH server, notebook server, remote commands) are negotiated over it and
released when the session closes.
"""

from abc import ABC, abstractmethod
from dataclasses import dataclass

from cslaunch.gateway.codespaces.types import Codespace


@dataclass(frozen=True)
class CommandResult:
    """Outcome of a command run inside the codespace."""

    exit_code: int
    stdout: str
    stderr: str


class RelaySession(ABC):
    """An open relay session. close() must be safe to call more than once."""

    @abstractmethod
    def start_ssh_server(self) -> tuple[int, str]:
        """Start the SSH server channel.

        Returns:
            (local_port, remote_user) for a local ssh client
        """
        ...

    @abstractmethod
    def start_notebook_server(self) -> tuple[int, str]:
        """Start the notebook server channel.

        Returns:
            (local_port, access_token)
        """
        ...

    @abstractmethod
    def run_command(self, args: list[str]) -> CommandResult:
        """Run a non-interactive command inside the codespace."""
        ...

    @abstractmethod
    def close(self) -> None:
        """Release the session and every forwarded port."""
        ...


class RelayClient(ABC):
    """Opens relay sessions to connectable codespaces."""

    @abstractmethod
    def open_session(self, codespace: Codespace) -> RelaySession:
        """Open a session using the codespace's connection info.

        Raises:
            TransportError: If the relay cannot be reached
        """
        ...

"""Fake relay client for testing."""

from collections.abc import Callable

from cslaunch.gateway.codespaces.types import Codespace
from cslaunch.gateway.relay.abc import CommandResult, RelayClient, RelaySession

MISSING_FILE_RESULT = CommandResult(
    exit_code=1,
    stdout="",
    stderr="cat: /workspaces/.codespaces/shared/postCreateOutput.json: No such file or directory",
)


class FakeRelaySession(RelaySession):
    """Session with the channel answers it was opened with.

    This class has NO public setup methods. All state is provided via constructor.
    Command results come from next_command_result, which FakeRelayClient shares
    across its sessions.
    """

    def __init__(
        self,
        codespace_name: str,
        *,
        next_command_result: Callable[[], CommandResult],
        ssh_port: int,
        remote_user: str,
        notebook_port: int,
        notebook_token: str,
        ssh_raises: Exception | None,
        during_negotiation: Callable[[], None] | None,
    ) -> None:
        self.codespace_name = codespace_name
        self._next_command_result = next_command_result
        self._ssh_port = ssh_port
        self._remote_user = remote_user
        self._notebook_port = notebook_port
        self._notebook_token = notebook_token
        self._ssh_raises = ssh_raises
        self._during_negotiation = during_negotiation
        self._closed = False
        self._close_calls = 0
        self._commands: list[list[str]] = []
        self._channels: list[str] = []

    def start_ssh_server(self) -> tuple[int, str]:
        self._channels.append("ssh")
        self._negotiate()
        if self._ssh_raises is not None:
            raise self._ssh_raises
        return self._ssh_port, self._remote_user

    def start_notebook_server(self) -> tuple[int, str]:
        self._channels.append("notebook")
        self._negotiate()
        return self._notebook_port, self._notebook_token

    def run_command(self, args: list[str]) -> CommandResult:
        self._commands.append(list(args))
        return self._next_command_result()

    def close(self) -> None:
        self._close_calls += 1
        self._closed = True

    def _negotiate(self) -> None:
        if self._during_negotiation is not None:
            self._during_negotiation()

    @property
    def closed(self) -> bool:
        return self._closed

    @property
    def close_calls(self) -> int:
        return self._close_calls

    @property
    def commands(self) -> list[list[str]]:
        return [list(c) for c in self._commands]

    @property
    def channels(self) -> list[str]:
        """Channels started on this session, in order ("ssh", "notebook")."""
        return self._channels.copy()


class FakeRelayClient(RelayClient):
    """In-memory relay client.

    This class has NO public setup methods. All state is provided via constructor.

    Example:
        >>> relay = FakeRelayClient(
        ...     command_results=['{"steps": [{"name": "setup", "status": "succeeded"}]}'],
        ... )
    """

    def __init__(
        self,
        *,
        command_results: list[CommandResult | str | Exception] | None = None,
        ssh_port: int = 2222,
        remote_user: str = "codespace",
        notebook_port: int = 18888,
        notebook_token: str = "notebook-token",
        open_raises: Exception | None = None,
        ssh_raises: Exception | None = None,
        during_negotiation: Callable[[], None] | None = None,
    ) -> None:
        """Create FakeRelayClient.

        Args:
            command_results: Successive results of run_command across all
                sessions. Strings are successful stdout. The last entry
                repeats; with none, the command fails as if the file is missing.
            ssh_port: Local port returned by start_ssh_server
            remote_user: Remote user returned by start_ssh_server
            notebook_port: Local port returned by start_notebook_server
            notebook_token: Token returned by start_notebook_server
            open_raises: Exception raised by open_session
            ssh_raises: Exception raised by start_ssh_server
            during_negotiation: Called while a channel is being started, e.g.
                to cancel mid-negotiation
        """
        self._command_results = list(command_results or [])
        self._ssh_port = ssh_port
        self._remote_user = remote_user
        self._notebook_port = notebook_port
        self._notebook_token = notebook_token
        self._open_raises = open_raises
        self._ssh_raises = ssh_raises
        self._during_negotiation = during_negotiation
        self._sessions: list[FakeRelaySession] = []

    def open_session(self, codespace: Codespace) -> RelaySession:
        if self._open_raises is not None:
            raise self._open_raises
        session = FakeRelaySession(
            codespace.name,
            next_command_result=self._next_command_result,
            ssh_port=self._ssh_port,
            remote_user=self._remote_user,
            notebook_port=self._notebook_port,
            notebook_token=self._notebook_token,
            ssh_raises=self._ssh_raises,
            during_negotiation=self._during_negotiation,
        )
        self._sessions.append(session)
        return session

    def _next_command_result(self) -> CommandResult:
        if not self._command_results:
            return MISSING_FILE_RESULT
        if len(self._command_results) > 1:
            result = self._command_results.pop(0)
        else:
            result = self._command_results[0]
        if isinstance(result, Exception):
            raise result
        if isinstance(result, str):
            return CommandResult(exit_code=0, stdout=result, stderr="")
        return result

    @property
    def sessions(self) -> list[FakeRelaySession]:
        """Sessions opened so far, in order."""
        return self._sessions.copy()

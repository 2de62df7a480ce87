"""Live sessions with a running codespace.

A Session wraps one relay session. Every successful connect() must be paired
with close(); use the session as a context manager. Cancelling the token the
session was opened with closes it as well, including while a channel is
being negotiated.
"""

import json
import logging
from collections.abc import Callable
from dataclasses import dataclass
from types import TracebackType
from typing import Self

from cslaunch.core.cancellation import Cancellation
from cslaunch.core.errors import NotConnectableError, TransportError
from cslaunch.gateway.codespaces.abc import CodespacesApi
from cslaunch.gateway.codespaces.types import Codespace, PostCreateState
from cslaunch.gateway.feedback.abc import UserFeedback
from cslaunch.gateway.relay.abc import RelayClient, RelaySession

logger = logging.getLogger(__name__)

POST_CREATE_OUTPUT_PATH = "/workspaces/.codespaces/shared/postCreateOutput.json"


@dataclass(frozen=True)
class ShellEndpoint:
    local_port: int
    remote_user: str


@dataclass(frozen=True)
class NotebookEndpoint:
    local_port: int
    token: str

    @property
    def url(self) -> str:
        return f"http://localhost:{self.local_port}/?token={self.token}"


class Session:
    """An open relay session with a codespace."""

    def __init__(
        self,
        codespace: Codespace,
        relay_session: RelaySession,
        *,
        api: CodespacesApi,
        feedback: UserFeedback,
        cancellation: Cancellation,
    ) -> None:
        self.codespace = codespace
        self._relay = relay_session
        self._api = api
        self._feedback = feedback
        self._cancellation = cancellation
        self._closed = False
        self._unregister_cancel: Callable[[], None] = lambda: None
        self._unregister_cancel = cancellation.on_cancel(self.close)

    @property
    def closed(self) -> bool:
        return self._closed

    def start_interactive_shell(self) -> ShellEndpoint:
        """Start the SSH server channel for a local ssh client.

        Warns when the account has no SSH public keys, since the ssh client
        will then be unable to authenticate.
        """
        self._cancellation.raise_if_cancelled()
        user = self._api.get_user()
        keys = self._api.get_authorized_keys(user.login)
        if not keys:
            self._feedback.warning(
                f"Warning: no SSH public keys are registered for {user.login}; "
                "add one at https://github.com/settings/keys to connect."
            )
        self._cancellation.raise_if_cancelled()

        port, remote_user = self._relay.start_ssh_server()
        self._cancellation.raise_if_cancelled()
        logger.debug("SSH server for %s on local port %d", self.codespace.name, port)
        return ShellEndpoint(local_port=port, remote_user=remote_user)

    def start_notebook_server(self) -> NotebookEndpoint:
        self._cancellation.raise_if_cancelled()
        port, token = self._relay.start_notebook_server()
        self._cancellation.raise_if_cancelled()
        logger.debug("Notebook server for %s on local port %d", self.codespace.name, port)
        return NotebookEndpoint(local_port=port, token=token)

    def read_post_create_states(self) -> list[PostCreateState]:
        """Read the setup-step states written by the codespace agent.

        Returns an empty list while the agent has not written any yet.

        Raises:
            TransportError: If the remote read fails or its output is malformed
        """
        self._cancellation.raise_if_cancelled()
        result = self._relay.run_command(["cat", POST_CREATE_OUTPUT_PATH])
        if result.exit_code != 0:
            if "No such file" in result.stderr:
                return []
            raise TransportError(
                f"failed to read post-create states: {result.stderr.strip() or result.exit_code}"
            )
        return parse_post_create_states(result.stdout)

    def close(self) -> None:
        if self._closed:
            return
        self._closed = True
        self._unregister_cancel()
        self._relay.close()
        logger.debug("Session for %s closed", self.codespace.name)

    def __enter__(self) -> Self:
        return self

    def __exit__(
        self,
        exc_type: type[BaseException] | None,
        exc_value: BaseException | None,
        traceback: TracebackType | None,
    ) -> None:
        self.close()


def parse_post_create_states(text: str) -> list[PostCreateState]:
    """Parse {"steps": [{"name": ..., "status": ...}, ...]}; empty text means no steps."""
    if not text.strip():
        return []
    try:
        data = json.loads(text)
    except json.JSONDecodeError as e:
        raise TransportError(f"malformed post-create output: {e}") from e
    steps = data.get("steps", []) if isinstance(data, dict) else []
    return [
        PostCreateState(name=str(step["name"]), status=str(step.get("status", "")))
        for step in steps
        if isinstance(step, dict) and "name" in step
    ]


class SessionConnector:
    """Opens Sessions against connectable codespaces."""

    def __init__(
        self, api: CodespacesApi, relay: RelayClient, *, feedback: UserFeedback
    ) -> None:
        self._api = api
        self._relay = relay
        self._feedback = feedback

    def connect(self, codespace: Codespace, *, cancellation: Cancellation) -> Session:
        """Open a session.

        Raises:
            NotConnectableError: If the codespace is not in a connectable state
                or carries no connection info. The relay is not contacted.
            CanceledError: If the token is cancelled before or during the handshake
        """
        if not codespace.is_connectable:
            raise NotConnectableError(codespace.name, state=codespace.state)
        cancellation.raise_if_cancelled()

        relay_session = self._relay.open_session(codespace)
        session = Session(
            codespace,
            relay_session,
            api=self._api,
            feedback=self._feedback,
            cancellation=cancellation,
        )
        if cancellation.is_cancelled:
            session.close()
            cancellation.raise_if_cancelled()
        return session

"""Tests for the gh-backed relay client."""

from subprocess import CompletedProcess
from unittest.mock import patch

import pytest

from cslaunch.core.errors import TransportError
from cslaunch.gateway.codespaces.types import Codespace, CodespaceState, ConnectionInfo
from cslaunch.gateway.relay.real import GhRelayClient, GhRelaySession
from cslaunch.gateway.time.fake import FakeTime

CONNECTION = ConnectionInfo(
    session_id="session-id",
    session_token="session-token",
    relay_endpoint="sb://relay.example.com",
    relay_sas="sas",
)

SSH_CONFIG = """\
Host cs.monalisa-dotfiles-abcd1234.main
\tUser vscode
\tProxyCommand gh cs ssh -c monalisa-dotfiles-abcd1234 --stdio
"""


def _session() -> GhRelaySession:
    return GhRelaySession("monalisa-dotfiles-abcd1234", time=FakeTime(), gh_executable="gh")


def test_open_session_requires_connection_info() -> None:
    """A codespace without relay credentials cannot be opened."""
    client = GhRelayClient(FakeTime())
    codespace = Codespace(name="cs", state=CodespaceState.AVAILABLE)

    with pytest.raises(TransportError, match="no connection info"):
        client.open_session(codespace)


def test_open_session_returns_gh_session() -> None:
    """Opening a session does not spawn anything until a channel starts."""
    client = GhRelayClient(FakeTime())
    codespace = Codespace(name="cs", state=CodespaceState.AVAILABLE, connection=CONNECTION)

    with patch("cslaunch.gateway.relay.real.subprocess.Popen") as popen:
        session = client.open_session(codespace)

    assert isinstance(session, GhRelaySession)
    popen.assert_not_called()


def test_run_command_runs_over_gh_ssh() -> None:
    """Remote commands are passed after -- and their result is returned as-is."""
    completed = CompletedProcess(args=[], returncode=1, stdout="", stderr="No such file")
    with patch("cslaunch.gateway.relay.real.subprocess.run", return_value=completed) as run:
        result = _session().run_command(["cat", "/tmp/out.json"])

    assert run.call_args.args[0] == [
        "gh",
        "codespace",
        "ssh",
        "-c",
        "monalisa-dotfiles-abcd1234",
        "--",
        "cat",
        "/tmp/out.json",
    ]
    assert result.exit_code == 1
    assert result.stderr == "No such file"


def test_remote_user_read_from_ssh_config() -> None:
    """The remote user is the User entry of the generated SSH config."""
    completed = CompletedProcess(args=[], returncode=0, stdout=SSH_CONFIG, stderr="")
    with patch("cslaunch.gateway.relay.real.subprocess.run", return_value=completed):
        assert _session()._remote_user() == "vscode"


def test_remote_user_missing_from_ssh_config() -> None:
    """An SSH config without a User entry is a transport failure."""
    completed = CompletedProcess(args=[], returncode=0, stdout="Host x\n", stderr="")
    with patch("cslaunch.gateway.relay.real.subprocess.run", return_value=completed):
        with pytest.raises(TransportError, match="could not determine remote user"):
            _session()._remote_user()


def test_missing_gh_is_a_transport_error() -> None:
    """A missing gh executable surfaces as TransportError."""
    with patch("cslaunch.gateway.relay.real.subprocess.run", side_effect=FileNotFoundError()):
        with pytest.raises(TransportError, match="'gh' executable not found"):
            _session().run_command(["true"])


def test_closed_session_rejects_channels() -> None:
    """Closing is idempotent and later channel requests fail."""
    session = _session()
    session.close()
    session.close()

    with pytest.raises(TransportError, match="closed"):
        session.start_ssh_server()
    with pytest.raises(TransportError, match="closed"):
        session.run_command(["true"])

"""Production relay client that delegates the relay protocol to the gh CLI."""

import logging
import secrets
import socket
import subprocess

from cslaunch.core.errors import TransportError
from cslaunch.gateway.codespaces.types import Codespace
from cslaunch.gateway.relay.abc import CommandResult, RelayClient, RelaySession
from cslaunch.gateway.time.abc import Time

logger = logging.getLogger(__name__)

REMOTE_NOTEBOOK_PORT = 8888
PORT_READY_ATTEMPTS = 50
PORT_READY_INTERVAL_SECONDS = 0.2


class GhRelayClient(RelayClient):
    """Opens sessions backed by `gh codespace` subprocesses."""

    def __init__(self, time: Time, *, gh_executable: str = "gh") -> None:
        self._time = time
        self._gh = gh_executable

    def open_session(self, codespace: Codespace) -> RelaySession:
        if codespace.connection is None:
            raise TransportError(f"codespace '{codespace.name}' has no connection info")
        logger.debug("Opening relay session %s", codespace.connection.session_id)
        return GhRelaySession(codespace.name, time=self._time, gh_executable=self._gh)


class GhRelaySession(RelaySession):
    """Relay session whose channels are long-running gh processes."""

    def __init__(self, codespace_name: str, *, time: Time, gh_executable: str) -> None:
        self._name = codespace_name
        self._time = time
        self._gh = gh_executable
        self._processes: list[subprocess.Popen[bytes]] = []
        self._closed = False

    def start_ssh_server(self) -> tuple[int, str]:
        self._check_open()
        remote_user = self._remote_user()
        port = _free_local_port()
        self._spawn([self._gh, "codespace", "ssh", "-c", self._name, "--server-port", str(port)])
        self._wait_for_port(port)
        return port, remote_user

    def start_notebook_server(self) -> tuple[int, str]:
        self._check_open()
        token = secrets.token_urlsafe(24)
        self._spawn(
            [
                self._gh,
                "codespace",
                "ssh",
                "-c",
                self._name,
                "--",
                "jupyter",
                "notebook",
                "--no-browser",
                "--port",
                str(REMOTE_NOTEBOOK_PORT),
                f"--NotebookApp.token={token}",
            ]
        )
        port = _free_local_port()
        self._spawn(
            [
                self._gh,
                "codespace",
                "ports",
                "forward",
                f"{REMOTE_NOTEBOOK_PORT}:{port}",
                "-c",
                self._name,
            ]
        )
        self._wait_for_port(port)
        return port, token

    def run_command(self, args: list[str]) -> CommandResult:
        self._check_open()
        cmd = [self._gh, "codespace", "ssh", "-c", self._name, "--", *args]
        try:
            result = subprocess.run(cmd, capture_output=True, text=True, check=False)
        except FileNotFoundError as e:
            raise TransportError(f"'{self._gh}' executable not found") from e
        return CommandResult(
            exit_code=result.returncode, stdout=result.stdout, stderr=result.stderr
        )

    def close(self) -> None:
        if self._closed:
            return
        self._closed = True
        for process in self._processes:
            if process.poll() is None:
                process.terminate()
                try:
                    process.wait(timeout=5)
                except subprocess.TimeoutExpired:
                    process.kill()
        logger.debug("Closed relay session for %s", self._name)

    def _remote_user(self) -> str:
        config = self._ssh_config()
        for line in config.splitlines():
            key, _, value = line.strip().partition(" ")
            if key == "User" and value:
                return value.strip()
        raise TransportError(f"could not determine remote user for '{self._name}'")

    def _ssh_config(self) -> str:
        cmd = [self._gh, "codespace", "ssh", "-c", self._name, "--config"]
        try:
            result = subprocess.run(cmd, capture_output=True, text=True, check=False)
        except FileNotFoundError as e:
            raise TransportError(f"'{self._gh}' executable not found") from e
        if result.returncode != 0:
            raise TransportError(f"failed to read SSH config: {result.stderr.strip()}")
        return result.stdout

    def _spawn(self, cmd: list[str]) -> None:
        logger.debug("Starting %s", " ".join(cmd[:6]))
        try:
            process = subprocess.Popen(
                cmd, stdout=subprocess.DEVNULL, stderr=subprocess.DEVNULL
            )
        except FileNotFoundError as e:
            raise TransportError(f"'{self._gh}' executable not found") from e
        self._processes.append(process)

    def _wait_for_port(self, port: int) -> None:
        for _ in range(PORT_READY_ATTEMPTS):
            if self._closed:
                return
            for process in self._processes:
                if process.poll() not in (None, 0):
                    raise TransportError(
                        f"relay channel exited with code {process.returncode}"
                    )
            with socket.socket(socket.AF_INET, socket.SOCK_STREAM) as sock:
                if sock.connect_ex(("127.0.0.1", port)) == 0:
                    return
            self._time.sleep(PORT_READY_INTERVAL_SECONDS)
        raise TransportError(f"relay channel did not listen on port {port}")

    def _check_open(self) -> None:
        if self._closed:
            raise TransportError("relay session is closed")


def _free_local_port() -> int:
    with socket.socket(socket.AF_INET, socket.SOCK_STREAM) as sock:
        sock.bind(("127.0.0.1", 0))
        return sock.getsockname()[1]

"""Production launcher using the local ssh client and the default browser."""

import logging
import subprocess

import click

from cslaunch.core.errors import TransportError
from cslaunch.gateway.launcher.abc import Launcher

logger = logging.getLogger(__name__)


class RealLauncher(Launcher):
    """Launches ssh via subprocess and URLs via click.launch."""

    def run_ssh(self, *, port: int, user: str) -> int:
        cmd = [
            "ssh",
            "-p",
            str(port),
            "-o",
            "NoHostAuthenticationForLocalhost=yes",
            "-o",
            "PasswordAuthentication=no",
            f"{user}@localhost",
        ]
        logger.debug("Running %s", " ".join(cmd))
        try:
            result = subprocess.run(cmd, check=False)
        except FileNotFoundError as e:
            raise TransportError("ssh client not found; install OpenSSH to use --ssh") from e
        return result.returncode

    def open_url(self, url: str) -> None:
        logger.debug("Opening %s", url)
        click.launch(url)

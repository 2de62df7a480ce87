"""Real terminal detection using isatty()."""

import os
import sys

from cslaunch.gateway.terminal.abc import Terminal


class RealTerminal(Terminal):
    """Production implementation backed by the process's standard streams."""

    def is_stdin_interactive(self) -> bool:
        return sys.stdin.isatty()

    def is_stdout_tty(self) -> bool:
        return os.isatty(1)

    def is_stderr_tty(self) -> bool:
        return os.isatty(2)

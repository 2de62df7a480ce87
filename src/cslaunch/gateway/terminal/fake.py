"""Fake Terminal for testing."""

from cslaunch.gateway.terminal.abc import Terminal


class FakeTerminal(Terminal):
    """Terminal that reports configured TTY state.

    This class has NO public setup methods. All state is provided via constructor.
    """

    def __init__(
        self,
        *,
        interactive: bool,
        stdout_tty: bool | None = None,
        stderr_tty: bool | None = None,
    ) -> None:
        """Create FakeTerminal.

        Args:
            interactive: TTY state of stdin, and the default for the other streams
            stdout_tty: Override for stdout
            stderr_tty: Override for stderr
        """
        self._interactive = interactive
        self._stdout_tty = stdout_tty if stdout_tty is not None else interactive
        self._stderr_tty = stderr_tty if stderr_tty is not None else interactive

    def is_stdin_interactive(self) -> bool:
        return self._interactive

    def is_stdout_tty(self) -> bool:
        return self._stdout_tty

    def is_stderr_tty(self) -> bool:
        return self._stderr_tty

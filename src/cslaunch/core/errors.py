"""Error taxonomy for codespace provisioning and session setup.

Every failure raised by this package derives from CodespaceError so callers
can catch the family, while the subclasses let them tell apart bad input,
discovery failures, handled permission requests, transport problems,
provisioning failures and user cancellation.
"""


class CodespaceError(Exception):
    """Base class for all codespace provisioning errors."""


class ValidationError(CodespaceError):
    """Raised when user input is malformed or refers to something that does not exist."""


class RepositoryNotFoundError(ValidationError):
    """Raised when the requested repository cannot be found."""

    def __init__(self, repo: str, *, suggestions: list[str]) -> None:
        message = f"repository '{repo}' not found"
        if suggestions:
            message += "\n\nDid you mean one of these?\n" + "\n".join(
                f"  {suggestion}" for suggestion in suggestions
            )
        super().__init__(message)
        self.repo = repo
        self.suggestions = suggestions


class UnknownMachineError(ValidationError):
    """Raised when a machine type is not offered for the repository."""

    def __init__(self, machine: str, *, available: list[str]) -> None:
        super().__init__(
            f"there is no such machine for the repository: {machine}\n"
            f"Available machines: {', '.join(available) if available else '(none)'}"
        )
        self.machine = machine
        self.available = available


class DiscoveryError(CodespaceError):
    """Raised when listing devcontainers or machines fails."""


class DevContainerDiscoveryError(DiscoveryError):
    """Raised when devcontainer.json paths cannot be listed."""


class MachineDiscoveryError(DiscoveryError):
    """Raised when the machine catalog cannot be listed."""


class SilentError(CodespaceError):
    """Marker for errors that have already been reported to the user.

    Outer layers should exit non-zero without printing another message.
    """


class PermissionsRequiredError(SilentError):
    """Raised when creation is blocked until the user grants additional permissions."""

    def __init__(self, allow_permissions_url: str) -> None:
        super().__init__(f"additional permissions must be authorized: {allow_permissions_url}")
        self.allow_permissions_url = allow_permissions_url


class TransportError(CodespaceError):
    """Raised when the remote service cannot be reached or answers with a server error."""

    def __init__(self, message: str, *, status_code: int | None = None) -> None:
        super().__init__(message)
        self.status_code = status_code


class ProvisionFailedError(CodespaceError):
    """Raised when the codespace reaches a terminal failure state."""

    def __init__(self, name: str, *, state: str, diagnostic: str | None) -> None:
        message = f"codespace '{name}' failed to provision (state: {state})"
        if diagnostic:
            message += f": {diagnostic}"
        super().__init__(message)
        self.name = name
        self.state = state
        self.diagnostic = diagnostic


class ReadinessTimeoutError(ProvisionFailedError):
    """Raised when the codespace does not become available before the deadline."""

    def __init__(self, name: str, *, state: str, timeout_seconds: float) -> None:
        super().__init__(
            name,
            state=state,
            diagnostic=f"not available after {timeout_seconds:g} seconds",
        )
        self.timeout_seconds = timeout_seconds


class CanceledError(CodespaceError):
    """Raised when the caller cancelled the operation.

    This is not a failure; the CLI exits without an error message.
    """

    def __init__(self, message: str = "operation cancelled") -> None:
        super().__init__(message)


class NotConnectableError(CodespaceError):
    """Raised when a session is requested for a codespace that cannot accept one."""

    def __init__(self, name: str, *, state: str) -> None:
        super().__init__(f"codespace '{name}' is not ready for connections (state: {state})")
        self.name = name
        self.state = state


class AuthenticationError(CodespaceError):
    """Raised when no GitHub token is available."""

"""Data types for the codespaces service."""

from dataclasses import dataclass, field


class CodespaceState:
    """State names reported by the codespaces service."""

    CREATED = "Created"
    QUEUED = "Queued"
    PROVISIONING = "Provisioning"
    AWAITING = "Awaiting"
    STARTING = "Starting"
    AVAILABLE = "Available"
    SHUTTING_DOWN = "ShuttingDown"
    SHUTDOWN = "Shutdown"
    ARCHIVED = "Archived"
    UNAVAILABLE = "Unavailable"
    FAILED = "Failed"
    ERROR = "Error"
    DELETED = "Deleted"
    REBUILDING = "Rebuilding"
    UPDATING = "Updating"
    EXPORTING = "Exporting"
    MOVED = "Moved"
    UNKNOWN = "Unknown"


CONNECTABLE_STATES = frozenset({CodespaceState.AVAILABLE})
FAILED_STATES = frozenset(
    {
        CodespaceState.FAILED,
        CodespaceState.ERROR,
        CodespaceState.UNAVAILABLE,
        CodespaceState.DELETED,
    }
)
STARTABLE_STATES = frozenset({CodespaceState.SHUTDOWN, CodespaceState.ARCHIVED})


@dataclass(frozen=True)
class Repository:
    """A repository as seen by the codespaces service."""

    id: int
    full_name: str
    default_branch: str


@dataclass(frozen=True)
class DevContainerEntry:
    """A devcontainer.json discovered in a repository."""

    path: str
    name: str | None = None


@dataclass(frozen=True)
class Machine:
    """A machine type offered for a repository and branch.

    `display_name` is the server-provided description; use `label` for
    anything shown to the user.
    """

    name: str
    display_name: str
    prebuild_availability: str = ""
    cpus: int = 0
    memory_in_bytes: int = 0
    storage_in_bytes: int = 0

    @property
    def label(self) -> str:
        return build_display_name(self.display_name, self.prebuild_availability)


def build_display_name(display_name: str, prebuild_availability: str) -> str:
    """Decorate a machine description with its prebuild availability.

    Args:
        display_name: Machine description, e.g. "4 cores, 8 GB RAM, 32 GB storage"
        prebuild_availability: "pool", "blob", "none" or ""

    Returns:
        The description, suffixed with "(Prebuild ready)" when a prebuild exists
    """
    if prebuild_availability in ("pool", "blob"):
        return f"{display_name} (Prebuild ready)"
    return display_name


@dataclass(frozen=True)
class ConnectionInfo:
    """Relay credentials for a running codespace.

    The token and SAS are bearer capabilities; they are kept out of repr.
    """

    session_id: str
    session_token: str = field(repr=False)
    relay_endpoint: str
    relay_sas: str = field(repr=False)


@dataclass(frozen=True)
class Codespace:
    """Read-only snapshot of a codespace."""

    name: str
    state: str
    repository: str = ""
    branch: str = ""
    machine_name: str = ""
    idle_timeout_notice: str | None = None
    last_known_stop_notice: str | None = None
    connection: ConnectionInfo | None = None

    @property
    def is_connectable(self) -> bool:
        return self.state in CONNECTABLE_STATES and self.connection is not None


@dataclass(frozen=True)
class CreateParams:
    """Parameters for one codespace creation request.

    retention_period_minutes is None when the server default should apply;
    0 is a legal explicit value.
    """

    repository_id: int
    branch: str
    machine: str
    location: str
    devcontainer_path: str
    idle_timeout_minutes: int
    retention_period_minutes: int | None
    display_name: str
    permissions_opt_out: bool


@dataclass(frozen=True)
class AcceptPermissionsRequired:
    """Creation was rejected until the user reviews additional permissions.

    Implements NonIdealState.
    """

    allow_permissions_url: str

    @property
    def error_type(self) -> str:
        return "accept-permissions-required"


class PostCreateStatus:
    """Status values written by the codespace agent for setup steps."""

    RUNNING = "running"
    SUCCEEDED = "succeeded"
    FAILED = "failed"


FINISHED_POST_CREATE_STATUSES = frozenset({PostCreateStatus.SUCCEEDED, PostCreateStatus.FAILED})


@dataclass(frozen=True)
class PostCreateState:
    """Progress of one first-boot setup step."""

    name: str
    status: str

    @property
    def is_finished(self) -> bool:
        return self.status in FINISHED_POST_CREATE_STATUSES


@dataclass(frozen=True)
class User:
    """The authenticated account."""

    login: str

"""In-memory fake implementation of CodespacesApi for testing."""

from dataclasses import dataclass

from cslaunch.gateway.codespaces.abc import CodespacesApi
from cslaunch.gateway.codespaces.types import (
    AcceptPermissionsRequired,
    Codespace,
    CodespaceState,
    CreateParams,
    DevContainerEntry,
    Machine,
    Repository,
    User,
)


@dataclass(frozen=True)
class MachineListCall:
    """Record of a list_machines call for test assertions."""

    repository_id: int
    branch: str
    location: str


class FakeCodespacesApi(CodespacesApi):
    """Test implementation that simulates the codespaces service.

    This class has NO public setup methods. All state is provided via constructor.
    Any configured value may instead be an exception instance, which is raised
    when the corresponding operation is called.

    Example:
        >>> api = FakeCodespacesApi(
        ...     repositories=[Repository(id=1234, full_name="monalisa/dotfiles",
        ...                              default_branch="main")],
        ...     machines=[Machine(name="GIGA", display_name="Gigabits of a machine")],
        ...     create_result=Codespace(name="monalisa-dotfiles-abcd1234",
        ...                             state="Available"),
        ... )
    """

    def __init__(
        self,
        *,
        repositories: list[Repository] | None = None,
        repo_suggestions: list[str] | Exception | None = None,
        devcontainers: list[DevContainerEntry] | Exception | None = None,
        machines: list[Machine] | Exception | None = None,
        region: str | Exception = "WestUs2",
        create_result: Codespace | AcceptPermissionsRequired | Exception | None = None,
        codespace_snapshots: list[Codespace | Exception] | None = None,
        start_errors: list[Exception] | None = None,
        user: User | None = None,
        authorized_keys: list[str] | None = None,
    ) -> None:
        """Create FakeCodespacesApi with pre-configured state.

        Args:
            repositories: Repositories that exist, looked up by full name
            repo_suggestions: Suggestions returned for any partial search
            devcontainers: Entries returned for any repository/branch
            machines: Machine catalog returned for any repository/branch/location
            region: Region code returned by get_region_location
            create_result: Result of create_codespace; defaults to an
                Available codespace named after the repository
            codespace_snapshots: Successive results of get_codespace; the last
                entry repeats once the list is exhausted. Defaults to the
                created codespace.
            start_errors: Raised by successive start_codespace calls; once
                exhausted, start succeeds
            user: Authenticated user
            authorized_keys: SSH public keys returned for the user
        """
        self._repositories = {repo.full_name: repo for repo in (repositories or [])}
        self._repo_suggestions = repo_suggestions if repo_suggestions is not None else []
        self._devcontainers = devcontainers if devcontainers is not None else []
        self._machines = machines if machines is not None else []
        self._region = region
        self._create_result = create_result
        self._codespace_snapshots = list(codespace_snapshots or [])
        self._start_errors = list(start_errors or [])
        self._user = user if user is not None else User(login="monalisa")
        self._authorized_keys = authorized_keys if authorized_keys is not None else []

        self._created_params: list[CreateParams] = []
        self._created_codespaces: list[Codespace] = []
        self._get_codespace_calls: list[tuple[str, bool]] = []
        self._started_codespaces: list[str] = []
        self._machine_list_calls: list[MachineListCall] = []
        self._devcontainer_calls: list[tuple[int, str, int]] = []
        self._region_lookups = 0

    def get_repository(self, nwo: str) -> Repository | None:
        return self._repositories.get(nwo)

    def get_repo_suggestions(self, partial: str, *, max_repos: int) -> list[str]:
        if isinstance(self._repo_suggestions, Exception):
            raise self._repo_suggestions
        return self._repo_suggestions[:max_repos]

    def list_devcontainers(
        self, repository_id: int, branch: str, *, limit: int
    ) -> list[DevContainerEntry]:
        self._devcontainer_calls.append((repository_id, branch, limit))
        if isinstance(self._devcontainers, Exception):
            raise self._devcontainers
        return list(self._devcontainers[:limit])

    def list_machines(self, repository_id: int, branch: str, location: str) -> list[Machine]:
        self._machine_list_calls.append(
            MachineListCall(repository_id=repository_id, branch=branch, location=location)
        )
        if isinstance(self._machines, Exception):
            raise self._machines
        return list(self._machines)

    def get_region_location(self) -> str:
        self._region_lookups += 1
        if isinstance(self._region, Exception):
            raise self._region
        return self._region

    def create_codespace(self, params: CreateParams) -> Codespace | AcceptPermissionsRequired:
        self._created_params.append(params)
        result = self._create_result
        if isinstance(result, Exception):
            raise result
        if result is None:
            owner_repo = self._repo_name_for_id(params.repository_id).replace("/", "-")
            result = Codespace(
                name=f"{owner_repo}-abcd1234",
                state=CodespaceState.AVAILABLE,
                branch=params.branch,
                machine_name=params.machine,
            )
        if isinstance(result, Codespace):
            self._created_codespaces.append(result)
        return result

    def get_codespace(self, name: str, *, include_connection: bool) -> Codespace:
        self._get_codespace_calls.append((name, include_connection))
        if not self._codespace_snapshots:
            for created in self._created_codespaces:
                if created.name == name:
                    return created
            return Codespace(name=name, state=CodespaceState.UNKNOWN)

        if len(self._codespace_snapshots) > 1:
            snapshot = self._codespace_snapshots.pop(0)
        else:
            snapshot = self._codespace_snapshots[0]
        if isinstance(snapshot, Exception):
            raise snapshot
        return snapshot

    def start_codespace(self, name: str) -> None:
        self._started_codespaces.append(name)
        if self._start_errors:
            raise self._start_errors.pop(0)

    def get_user(self) -> User:
        return self._user

    def get_authorized_keys(self, login: str) -> list[str]:
        return list(self._authorized_keys)

    def _repo_name_for_id(self, repository_id: int) -> str:
        for repo in self._repositories.values():
            if repo.id == repository_id:
                return repo.full_name
        return "unknown/unknown"

    # Read-only properties for test assertions

    @property
    def created_params(self) -> list[CreateParams]:
        """Read-only access to create requests for test assertions."""
        return self._created_params.copy()

    @property
    def get_codespace_calls(self) -> list[tuple[str, bool]]:
        """(name, include_connection) for each get_codespace call."""
        return self._get_codespace_calls.copy()

    @property
    def started_codespaces(self) -> list[str]:
        """Names passed to start_codespace."""
        return self._started_codespaces.copy()

    @property
    def machine_list_calls(self) -> list[MachineListCall]:
        """Read-only access to list_machines calls for test assertions."""
        return self._machine_list_calls.copy()

    @property
    def devcontainer_calls(self) -> list[tuple[int, str, int]]:
        """(repository_id, branch, limit) for each list_devcontainers call."""
        return self._devcontainer_calls.copy()

    @property
    def region_lookups(self) -> int:
        """Number of get_region_location calls."""
        return self._region_lookups

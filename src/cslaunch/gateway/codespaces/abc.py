"""Abstract interface for the codespaces service."""

from abc import ABC, abstractmethod

from cslaunch.gateway.codespaces.types import (
    AcceptPermissionsRequired,
    Codespace,
    CreateParams,
    DevContainerEntry,
    Machine,
    Repository,
    User,
)


class CodespacesApi(ABC):
    """Typed operations against the codespaces backend.

    Implementations raise cslaunch.core.errors.TransportError for network and
    server failures. Provides dependency injection for testing without
    actual API calls.
    """

    @abstractmethod
    def get_repository(self, nwo: str) -> Repository | None:
        """Look up a repository by name-with-owner.

        Args:
            nwo: Repository in owner/repo format

        Returns:
            The repository, or None if it does not exist
        """
        ...

    @abstractmethod
    def get_repo_suggestions(self, partial: str, *, max_repos: int) -> list[str]:
        """Search repositories whose name resembles the partial input.

        Args:
            partial: Partial repository name, optionally with owner prefix
            max_repos: Maximum number of suggestions

        Returns:
            Repository full names, best match first
        """
        ...

    @abstractmethod
    def list_devcontainers(
        self, repository_id: int, branch: str, *, limit: int
    ) -> list[DevContainerEntry]:
        """List devcontainer.json files for a repository and branch, in discovery order."""
        ...

    @abstractmethod
    def list_machines(self, repository_id: int, branch: str, location: str) -> list[Machine]:
        """List machine types available for a repository and branch.

        Args:
            repository_id: Repository database ID
            branch: Branch the codespace would be created from
            location: Region code, or "" to let the server decide
        """
        ...

    @abstractmethod
    def get_region_location(self) -> str:
        """Return the region code closest to the caller."""
        ...

    @abstractmethod
    def create_codespace(self, params: CreateParams) -> Codespace | AcceptPermissionsRequired:
        """Issue one creation request.

        Returns:
            The new codespace snapshot, or AcceptPermissionsRequired when the
            server needs the user to review additional permissions first
        """
        ...

    @abstractmethod
    def get_codespace(self, name: str, *, include_connection: bool) -> Codespace:
        """Fetch the current snapshot of a codespace.

        Args:
            name: Codespace name
            include_connection: Whether to request relay connection info
        """
        ...

    @abstractmethod
    def start_codespace(self, name: str) -> None:
        """Start a stopped or archived codespace."""
        ...

    @abstractmethod
    def get_user(self) -> User:
        """Return the authenticated user."""
        ...

    @abstractmethod
    def get_authorized_keys(self, login: str) -> list[str]:
        """Return the SSH public keys registered for a user."""
        ...

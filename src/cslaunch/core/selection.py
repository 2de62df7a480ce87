"""Resolution of repository, branch, devcontainer, region and machine."""

import logging
import re
from dataclasses import dataclass

from cslaunch.core.config import CreateDefaults, MachinePolicy
from cslaunch.core.errors import (
    DevContainerDiscoveryError,
    MachineDiscoveryError,
    RepositoryNotFoundError,
    TransportError,
    UnknownMachineError,
    ValidationError,
)
from cslaunch.gateway.chooser.abc import Chooser
from cslaunch.gateway.codespaces.abc import CodespacesApi
from cslaunch.gateway.codespaces.types import DevContainerEntry, Machine, Repository

logger = logging.getLogger(__name__)

DEVCONTAINER_LIST_LIMIT = 100
MAX_REPO_SUGGESTIONS = 5
DEFAULT_DEVCONTAINER_PATHS = frozenset({".devcontainer.json", ".devcontainer/devcontainer.json"})
DEFAULT_CONFIGURATION_OPTION = "Default Codespaces configuration"

_REPO_PATTERN = re.compile(r"^[A-Za-z0-9_.-]+/[A-Za-z0-9_.-]+$")


@dataclass(frozen=True)
class SelectionRequest:
    """User input for a creation; empty strings mean "not given"."""

    repository: str
    branch: str = ""
    devcontainer_path: str = ""
    machine: str = ""
    location: str = ""


@dataclass(frozen=True)
class ResolvedSelection:
    """Concrete values for a creation request.

    devcontainer_path, machine and location may still be empty, in which case
    the server applies its own default.
    """

    repository: Repository
    branch: str
    devcontainer_path: str
    machine: str
    location: str


class SelectionResolver:
    """Turns optional user input into a ResolvedSelection."""

    def __init__(self, api: CodespacesApi, chooser: Chooser, defaults: CreateDefaults) -> None:
        self._api = api
        self._chooser = chooser
        self._defaults = defaults

    def resolve(self, request: SelectionRequest) -> ResolvedSelection:
        repository = self.resolve_repository(request.repository)
        branch = request.branch or repository.default_branch
        devcontainer_path = request.devcontainer_path or self._select_devcontainer(
            repository, branch
        )
        location = self.resolve_location(request.location)
        machine = self._select_machine(repository, branch, location, request.machine)
        logger.debug(
            "Resolved %s@%s devcontainer=%r machine=%r location=%r",
            repository.full_name,
            branch,
            devcontainer_path,
            machine,
            location,
        )
        return ResolvedSelection(
            repository=repository,
            branch=branch,
            devcontainer_path=devcontainer_path,
            machine=machine,
            location=location,
        )

    def resolve_repository(self, nwo: str) -> Repository:
        """Look up the repository, prompting for it when none was given.

        Raises:
            ValidationError: If no repository can be determined or the name is malformed
            RepositoryNotFoundError: If the repository does not exist
        """
        if not nwo:
            if not self._chooser.can_prompt():
                raise ValidationError("a repository is required; pass --repo OWNER/REPO")
            nwo = self._chooser.prompt_text("Repository (OWNER/REPO)")

        if not _REPO_PATTERN.match(nwo):
            raise ValidationError(f"invalid repository {nwo!r}: expected OWNER/REPO")

        repository = self._api.get_repository(nwo)
        if repository is None:
            raise RepositoryNotFoundError(nwo, suggestions=self._suggestions(nwo))
        return repository

    def resolve_location(self, explicit: str) -> str:
        """Pick the region: explicit flag, then configured default, then a lookup.

        The lookup is best-effort. When it fails the empty location is used
        and the server chooses.
        """
        if explicit:
            return explicit
        if self._defaults.location:
            return self._defaults.location
        try:
            return self._api.get_region_location()
        except TransportError as e:
            logger.debug("Region lookup failed, continuing without location: %s", e)
            return ""

    def _suggestions(self, nwo: str) -> list[str]:
        try:
            return self._api.get_repo_suggestions(nwo, max_repos=MAX_REPO_SUGGESTIONS)
        except TransportError as e:
            logger.debug("Repository suggestions unavailable: %s", e)
            return []

    def _select_devcontainer(self, repository: Repository, branch: str) -> str:
        try:
            entries = self._api.list_devcontainers(
                repository.id, branch, limit=DEVCONTAINER_LIST_LIMIT
            )
        except TransportError as e:
            raise DevContainerDiscoveryError(f"error getting devcontainer.json paths: {e}") from e

        if not entries:
            return ""

        default_entries = [e for e in entries if e.path in DEFAULT_DEVCONTAINER_PATHS]
        if len(entries) == 1 and default_entries:
            return entries[0].path

        if not self._chooser.can_prompt():
            return entries[0].path

        return self._prompt_devcontainer(entries, has_default=bool(default_entries))

    def _prompt_devcontainer(self, entries: list[DevContainerEntry], *, has_default: bool) -> str:
        options = [entry.path for entry in entries]
        if not has_default:
            options.insert(0, DEFAULT_CONFIGURATION_OPTION)
        default = next(
            (path for path in options if path in DEFAULT_DEVCONTAINER_PATHS), options[0]
        )
        choice = self._chooser.choose("Devcontainer definition", options, default=default)
        if choice == DEFAULT_CONFIGURATION_OPTION:
            return ""
        return choice

    def _select_machine(
        self, repository: Repository, branch: str, location: str, requested: str
    ) -> str:
        try:
            machines = self._api.list_machines(repository.id, branch, location)
        except TransportError as e:
            raise MachineDiscoveryError(f"error getting machine types: {e}") from e

        names = [m.name for m in machines]
        if requested:
            if requested not in names:
                raise UnknownMachineError(requested, available=names)
            return requested

        if not machines:
            return ""
        if len(machines) == 1:
            return machines[0].name

        match self._defaults.machine_policy:
            case MachinePolicy.DEFAULT:
                default_machine = self._defaults.default_machine or ""
                if default_machine not in names:
                    raise UnknownMachineError(default_machine, available=names)
                return default_machine
            case MachinePolicy.CHEAPEST:
                return cheapest_machine(machines).name
            case _:
                return self._prompt_machine(machines)

    def _prompt_machine(self, machines: list[Machine]) -> str:
        if not self._chooser.can_prompt():
            raise ValidationError(
                "multiple machine types are available; pass --machine to choose one "
                f"({', '.join(m.name for m in machines)})"
            )
        labels = [m.label for m in machines]
        if len(set(labels)) < len(labels):
            labels = [f"{m.label} ({m.name})" for m in machines]
        choice = self._chooser.choose("Choose Machine Type", labels, default=labels[0])
        return machines[labels.index(choice)].name


def cheapest_machine(machines: list[Machine]) -> Machine:
    """Fewest cpus, then least memory, then least storage; catalog order breaks ties."""
    return min(machines, key=lambda m: (m.cpus, m.memory_in_bytes, m.storage_in_bytes))

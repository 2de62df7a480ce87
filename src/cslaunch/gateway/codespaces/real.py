"""Production implementation of CodespacesApi over the GitHub REST API."""

import json
import logging
import urllib.parse
from collections.abc import Iterator
from contextlib import contextmanager
from typing import Any

from cslaunch.core.errors import TransportError
from cslaunch.gateway.codespaces.abc import CodespacesApi
from cslaunch.gateway.codespaces.types import (
    AcceptPermissionsRequired,
    Codespace,
    CodespaceState,
    ConnectionInfo,
    CreateParams,
    DevContainerEntry,
    Machine,
    Repository,
    User,
)
from cslaunch.gateway.http.abc import HttpClient, HttpError

logger = logging.getLogger(__name__)

DEFAULT_REGIONS_URL = "https://online.visualstudio.com/api/v1/locations"
DEFAULT_WEB_URL = "https://github.com"


class RealCodespacesApi(CodespacesApi):
    """Production implementation using the GitHub REST API."""

    def __init__(
        self,
        http_client: HttpClient,
        *,
        regions_url: str = DEFAULT_REGIONS_URL,
        web_url: str = DEFAULT_WEB_URL,
    ) -> None:
        """Initialize with an authenticated HTTP client.

        Args:
            http_client: Client whose base URL is the REST API root
            regions_url: Endpoint answering {"current": "<region>"}
            web_url: Web host serving https://<host>/<login>.keys
        """
        self._http = http_client
        self._regions_url = regions_url
        self._web_url = web_url.rstrip("/")

    def get_repository(self, nwo: str) -> Repository | None:
        try:
            response = self._http.request("GET", f"repos/{nwo}")
        except HttpError as e:
            if e.status_code == 404:
                return None
            raise _transport_error("get repository", e) from e
        with _decoding("get repository"):
            data = response.json()
            return Repository(
                id=int(data["id"]),
                full_name=data["full_name"],
                default_branch=data.get("default_branch") or "",
            )

    def get_repo_suggestions(self, partial: str, *, max_repos: int) -> list[str]:
        owner, sep, name = partial.partition("/")
        if sep:
            query = f"{name} user:{owner} in:name" if name else f"user:{owner}"
        else:
            query = f"{partial} in:name"
        params = urllib.parse.urlencode({"q": query, "per_page": max_repos})
        data = self._get_json("search repositories", f"search/repositories?{params}")
        with _decoding("search repositories"):
            return [item["full_name"] for item in data.get("items", [])][:max_repos]

    def list_devcontainers(
        self, repository_id: int, branch: str, *, limit: int
    ) -> list[DevContainerEntry]:
        params: dict[str, Any] = {"per_page": limit}
        if branch:
            params["ref"] = branch
        query = urllib.parse.urlencode(params)
        data = self._get_json(
            "list devcontainers", f"repositories/{repository_id}/codespaces/devcontainers?{query}"
        )
        with _decoding("list devcontainers"):
            return [
                DevContainerEntry(path=entry["path"], name=entry.get("name"))
                for entry in data.get("devcontainers", [])
            ]

    def list_machines(self, repository_id: int, branch: str, location: str) -> list[Machine]:
        params: dict[str, str] = {}
        if location:
            params["location"] = location
        if branch:
            params["ref"] = branch
        endpoint = f"repositories/{repository_id}/codespaces/machines"
        if params:
            endpoint += f"?{urllib.parse.urlencode(params)}"
        data = self._get_json("list machines", endpoint)
        with _decoding("list machines"):
            return [
                Machine(
                    name=m["name"],
                    display_name=m.get("display_name") or m["name"],
                    prebuild_availability=m.get("prebuild_availability") or "",
                    cpus=int(m.get("cpus") or 0),
                    memory_in_bytes=int(m.get("memory_in_bytes") or 0),
                    storage_in_bytes=int(m.get("storage_in_bytes") or 0),
                )
                for m in data.get("machines", [])
            ]

    def get_region_location(self) -> str:
        try:
            response = self._http.request("GET", self._regions_url, authenticated=False)
        except HttpError as e:
            raise _transport_error("get region location", e) from e
        with _decoding("get region location"):
            data = response.json() or {}
            return str(data.get("current", ""))

    def create_codespace(self, params: CreateParams) -> Codespace | AcceptPermissionsRequired:
        body = build_create_request_body(params)
        try:
            response = self._http.request("POST", "user/codespaces", data=body)
        except HttpError as e:
            if e.status_code in (401, 403):
                url = _allow_permissions_url(e.body)
                if url:
                    return AcceptPermissionsRequired(allow_permissions_url=url)
            raise _transport_error("create codespace", e) from e

        if response.status_code == 202:
            # Provisioning continues asynchronously; the readiness poller takes over.
            logger.debug("Codespace creation accepted, provisioning in progress")
        with _decoding("create codespace"):
            return parse_codespace(response.json())

    def get_codespace(self, name: str, *, include_connection: bool) -> Codespace:
        endpoint = f"user/codespaces/{name}"
        if include_connection:
            endpoint += "?internal=true&refresh=true"
        data = self._get_json("get codespace", endpoint)
        with _decoding("get codespace"):
            return parse_codespace(data)

    def start_codespace(self, name: str) -> None:
        try:
            self._http.request("POST", f"user/codespaces/{name}/start")
        except HttpError as e:
            # 409 means the codespace is already starting or running
            if e.status_code == 409:
                logger.debug("Codespace %s already starting", name)
                return
            raise _transport_error("start codespace", e) from e

    def get_user(self) -> User:
        data = self._get_json("get user", "user")
        with _decoding("get user"):
            return User(login=data["login"])

    def get_authorized_keys(self, login: str) -> list[str]:
        url = f"{self._web_url}/{login}.keys"
        try:
            response = self._http.request("GET", url, authenticated=False)
        except HttpError as e:
            raise _transport_error("get authorized keys", e) from e
        return [line.strip() for line in response.body.splitlines() if line.strip()]

    def _get_json(self, operation: str, endpoint: str) -> Any:
        try:
            response = self._http.request("GET", endpoint)
        except HttpError as e:
            raise _transport_error(operation, e) from e
        with _decoding(operation):
            return response.json()


def build_create_request_body(params: CreateParams) -> dict[str, Any]:
    """Build the JSON body for POST /user/codespaces.

    Optional fields are omitted rather than sent empty, so the server applies
    its defaults. retention_period_minutes is sent whenever it is not None,
    including 0.
    """
    body: dict[str, Any] = {"repository_id": params.repository_id}
    if params.branch:
        body["ref"] = params.branch
    if params.machine:
        body["machine"] = params.machine
    if params.location:
        body["location"] = params.location
    if params.devcontainer_path:
        body["devcontainer_path"] = params.devcontainer_path
    if params.idle_timeout_minutes > 0:
        body["idle_timeout_minutes"] = params.idle_timeout_minutes
    if params.retention_period_minutes is not None:
        body["retention_period_minutes"] = params.retention_period_minutes
    if params.display_name:
        body["display_name"] = params.display_name
    if params.permissions_opt_out:
        body["multi_repo_permissions_opt_out"] = True
    return body


def parse_codespace(data: dict[str, Any]) -> Codespace:
    """Convert a REST codespace payload into a Codespace snapshot."""
    repository = data.get("repository") or {}
    git_status = data.get("git_status") or {}
    machine = data.get("machine") or {}
    return Codespace(
        name=data["name"],
        state=data.get("state") or CodespaceState.UNKNOWN,
        repository=repository.get("full_name", ""),
        branch=git_status.get("ref", ""),
        machine_name=machine.get("name", ""),
        idle_timeout_notice=data.get("idle_timeout_notice") or None,
        last_known_stop_notice=data.get("last_known_stop_notice") or None,
        connection=_parse_connection(data.get("connection")),
    )


def _parse_connection(data: dict[str, Any] | None) -> ConnectionInfo | None:
    if not data:
        return None
    session_id = data.get("sessionId") or ""
    session_token = data.get("sessionToken") or ""
    relay_endpoint = data.get("relayEndpoint") or ""
    relay_sas = data.get("relaySas") or ""
    if not (session_id and session_token and relay_endpoint):
        return None
    return ConnectionInfo(
        session_id=session_id,
        session_token=session_token,
        relay_endpoint=relay_endpoint,
        relay_sas=relay_sas,
    )


def _allow_permissions_url(body: str) -> str | None:
    if not body:
        return None
    try:
        data = json.loads(body)
    except json.JSONDecodeError:
        return None
    if not isinstance(data, dict):
        return None
    url = data.get("allow_permissions_url")
    return url if isinstance(url, str) and url else None


def _transport_error(operation: str, error: HttpError) -> TransportError:
    return TransportError(
        f"failed to {operation}: {error.message}", status_code=error.status_code
    )


@contextmanager
def _decoding(operation: str) -> Iterator[None]:
    """Report malformed response bodies as TransportError."""
    try:
        yield
    except (ValueError, KeyError, TypeError, AttributeError) as e:
        raise TransportError(f"failed to {operation}: unexpected response ({e!r})") from e

"""Issues the creation request and handles the permission-escalation branch."""

import logging

from cslaunch.core.errors import PermissionsRequiredError, ValidationError
from cslaunch.core.retention import surface_idle_timeout_notice
from cslaunch.gateway.codespaces.abc import CodespacesApi
from cslaunch.gateway.codespaces.types import AcceptPermissionsRequired, Codespace, CreateParams
from cslaunch.gateway.feedback.abc import UserFeedback
from cslaunch.gateway.terminal.abc import Terminal

logger = logging.getLogger(__name__)

MAX_DISPLAY_NAME_LENGTH = 48


def validate_display_name(display_name: str) -> None:
    if len(display_name) > MAX_DISPLAY_NAME_LENGTH:
        raise ValidationError(
            f"display name must be at most {MAX_DISPLAY_NAME_LENGTH} characters "
            f"(got {len(display_name)})"
        )


def permissions_instructions(allow_permissions_url: str) -> str:
    """The three-line message shown when additional permissions need review."""
    display_url = allow_permissions_url.removeprefix("https://").removeprefix("http://")
    return (
        "You must authorize or deny additional permissions requested by this codespace "
        "before continuing.\n"
        f"Open this URL in your browser to review and authorize additional permissions: "
        f"{display_url}\n"
        'Alternatively, you can run "create" with the "--default-permissions" option to '
        "continue without authorizing additional permissions."
    )


class CodespaceProvisioner:
    """Creates a codespace with exactly one create call. Never polls or retries."""

    def __init__(self, api: CodespacesApi, *, feedback: UserFeedback, terminal: Terminal) -> None:
        self._api = api
        self._feedback = feedback
        self._terminal = terminal

    def create(self, params: CreateParams) -> Codespace:
        """Create the codespace.

        Callers validate the display name first; see validate_display_name.

        Raises:
            PermissionsRequiredError: After the user has been told how to grant
                the requested permissions
            TransportError: If the request fails
        """
        result = self._api.create_codespace(params)
        match result:
            case AcceptPermissionsRequired(allow_permissions_url=url):
                self._feedback.error(permissions_instructions(url))
                raise PermissionsRequiredError(url)
            case Codespace():
                logger.debug("Created codespace %s (state %s)", result.name, result.state)
                surface_idle_timeout_notice(
                    result, feedback=self._feedback, terminal=self._terminal
                )
                return result

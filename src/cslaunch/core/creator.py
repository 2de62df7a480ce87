"""High-level create flow: resolve, create, wait, and optionally connect."""

import urllib.parse
from dataclasses import dataclass, field
from datetime import timedelta

from cslaunch.core.cancellation import Cancellation
from cslaunch.core.context import CsContext
from cslaunch.core.durations import DurationUnset, NullableDuration
from cslaunch.core.poller import OnEvent, PollStates, ReadinessPoller
from cslaunch.core.provisioner import CodespaceProvisioner, validate_display_name
from cslaunch.core.retention import build_retention_spec
from cslaunch.core.selection import SelectionRequest, SelectionResolver
from cslaunch.core.session import NotebookEndpoint, Session, SessionConnector, ShellEndpoint
from cslaunch.gateway.codespaces.types import (
    Codespace,
    CreateParams,
    PostCreateState,
    PostCreateStatus,
)
from cslaunch.gateway.feedback.abc import UserFeedback


class ConnectMode:
    """What to open once the codespace is ready."""

    NONE = "none"
    SHELL = "shell"
    NOTEBOOK = "notebook"


@dataclass(frozen=True)
class CreateOptions:
    """Everything the caller may specify for a new codespace.

    Empty strings and None mean "not given"; defaults and server-side
    defaults then apply.
    """

    repository: str
    branch: str = ""
    location: str = ""
    machine: str = ""
    devcontainer_path: str = ""
    display_name: str = ""
    idle_timeout: timedelta | None = None
    retention_period: NullableDuration = field(default_factory=DurationUnset)
    permissions_opt_out: bool = False
    show_status: bool = False
    connect: str = ConnectMode.NONE


@dataclass(frozen=True)
class CodespaceCreated:
    """Print-only result."""

    codespace: Codespace


@dataclass(frozen=True)
class SessionOpened:
    """Interactive result. The caller owns the session and must close it."""

    codespace: Codespace
    session: Session
    shell: ShellEndpoint | None = None
    notebook: NotebookEndpoint | None = None


def default_poll_states(ctx: CsContext) -> PollStates:
    """Build the standard PollStates strategy for a context."""
    connector = SessionConnector(ctx.api, ctx.relay, feedback=ctx.feedback)
    poller = ReadinessPoller(
        ctx.api,
        connector,
        time=ctx.time,
        feedback=ctx.feedback,
        config=ctx.config.poll,
    )
    return poller.await_ready


def create_and_optionally_connect(
    ctx: CsContext,
    options: CreateOptions,
    *,
    cancellation: Cancellation,
    poll_states: PollStates | None = None,
) -> CodespaceCreated | SessionOpened:
    """Create a codespace and, if requested, wait for it and open a session.

    Creation is attempted exactly once. Waiting happens when setup status is
    requested or a session is to be opened; poll_states replaces the default
    waiting strategy.

    Raises:
        CodespaceError: Any subclass, from whichever stage failed
    """
    validate_display_name(options.display_name)

    resolver = SelectionResolver(ctx.api, ctx.chooser, ctx.config.create)
    selection = resolver.resolve(
        SelectionRequest(
            repository=options.repository,
            branch=options.branch,
            devcontainer_path=options.devcontainer_path,
            machine=options.machine,
            location=options.location,
        )
    )
    retention = build_retention_spec(
        idle_timeout=options.idle_timeout,
        retention_period=options.retention_period,
        defaults=ctx.config.create,
    )
    params = CreateParams(
        repository_id=selection.repository.id,
        branch=selection.branch,
        machine=selection.machine,
        location=selection.location,
        devcontainer_path=selection.devcontainer_path,
        idle_timeout_minutes=retention.idle_timeout_minutes,
        retention_period_minutes=retention.retention_period_minutes,
        display_name=options.display_name,
        permissions_opt_out=options.permissions_opt_out,
    )

    cancellation.raise_if_cancelled()
    provisioner = CodespaceProvisioner(ctx.api, feedback=ctx.feedback, terminal=ctx.terminal)
    ctx.feedback.start_progress("Creating your codespace...")
    try:
        codespace = provisioner.create(params)
    finally:
        ctx.feedback.stop_progress()

    if options.show_status or options.connect != ConnectMode.NONE:
        strategy = poll_states if poll_states is not None else default_poll_states(ctx)
        on_event = _post_create_reporter(ctx.feedback) if options.show_status else None
        codespace = strategy(codespace, on_event, cancellation)

    if options.connect == ConnectMode.NONE:
        return CodespaceCreated(codespace=codespace)

    connector = SessionConnector(ctx.api, ctx.relay, feedback=ctx.feedback)
    session = connector.connect(codespace, cancellation=cancellation)
    try:
        if options.connect == ConnectMode.NOTEBOOK:
            notebook = session.start_notebook_server()
            return SessionOpened(codespace=codespace, session=session, notebook=notebook)
        shell = session.start_interactive_shell()
        return SessionOpened(codespace=codespace, session=session, shell=shell)
    except BaseException:
        session.close()
        raise


def _post_create_reporter(feedback: UserFeedback) -> OnEvent:
    def report(state: PostCreateState) -> None:
        if state.status == PostCreateStatus.SUCCEEDED:
            feedback.success(f"✓ {state.name}")
        else:
            feedback.warning(f"✗ {state.name} failed")

    return report


def build_web_create_url(ctx: CsContext, options: CreateOptions) -> str:
    """URL of the browser form for creating a codespace with the given options.

    Only the repository is looked up; the remaining choices are left to the form.
    """
    resolver = SelectionResolver(ctx.api, ctx.chooser, ctx.config.create)
    repository = resolver.resolve_repository(options.repository)
    query: dict[str, str] = {"repo": str(repository.id)}
    if options.branch:
        query["ref"] = options.branch
    if options.machine:
        query["machine"] = options.machine
    location = options.location or ctx.config.create.location
    if location:
        query["location"] = location
    if options.devcontainer_path:
        query["devcontainer_path"] = options.devcontainer_path
    return f"{ctx.config.api.web_url}/codespaces/new?{urllib.parse.urlencode(query)}"

"""Create a codespace and optionally connect to it."""

from datetime import timedelta

import click

from cslaunch.core.cancellation import Cancellation
from cslaunch.core.context import CsContext
from cslaunch.core.creator import (
    CodespaceCreated,
    ConnectMode,
    CreateOptions,
    SessionOpened,
    build_web_create_url,
    create_and_optionally_connect,
)
from cslaunch.core.durations import (
    DurationCleared,
    DurationSet,
    DurationUnset,
    NullableDuration,
    parse_duration,
)
from cslaunch.core.errors import CanceledError, CodespaceError, SilentError, ValidationError
from cslaunch.output.output import machine_output, user_output

LOCATIONS = ["EastUs", "SouthEastAsia", "WestEurope", "WestUs2"]
NOTEBOOK_HOLD_INTERVAL_SECONDS = 1.0
EXIT_CANCELLED = 130


@click.command("create")
@click.option("-R", "--repo", default="", help="Repository name with owner: user/repo.")
@click.option("-b", "--branch", default="", help="Repository branch (default: repository default).")
@click.option(
    "-l",
    "--location",
    type=click.Choice(LOCATIONS),
    default=None,
    help="Location (determined automatically if not provided).",
)
@click.option("-m", "--machine", default="", help="Hardware specifications for the VM.")
@click.option("--devcontainer-path", default="", help="Path to the devcontainer.json file.")
@click.option(
    "-d",
    "--display-name",
    default="",
    help="Display name for the codespace (48 characters or less).",
)
@click.option(
    "--idle-timeout",
    default=None,
    help='Allowed inactivity before the codespace is stopped, e.g. "10m", "1h".',
)
@click.option(
    "--retention-period",
    default=None,
    help='Time before a stopped codespace is deleted, e.g. "1h", "72h". '
    'Pass "" to use the server default even when one is configured.',
)
@click.option(
    "--default-permissions",
    is_flag=True,
    help="Do not prompt to accept additional permissions requested by the codespace.",
)
@click.option(
    "-s", "--status", "show_status", is_flag=True, help="Show status of post-create commands."
)
@click.option("--ssh", is_flag=True, help="Connect over SSH once the codespace is ready.")
@click.option(
    "--jupyter", is_flag=True, help="Open a Jupyter notebook once the codespace is ready."
)
@click.option("-w", "--web", is_flag=True, help="Create codespace from browser.")
@click.pass_obj
def create_cmd(
    ctx: CsContext,
    repo: str,
    branch: str,
    location: str | None,
    machine: str,
    devcontainer_path: str,
    display_name: str,
    idle_timeout: str | None,
    retention_period: str | None,
    default_permissions: bool,
    show_status: bool,
    ssh: bool,
    jupyter: bool,
    web: bool,
) -> None:
    """Create a codespace.

    Prints the codespace name on stdout unless --ssh or --jupyter is given.

    Examples:

        cslaunch create -R monalisa/dotfiles -m standardLinux32gb

        cslaunch create -R monalisa/dotfiles --idle-timeout 30m --retention-period 48h

        cslaunch create -R monalisa/dotfiles --status --ssh
    """
    if ssh and jupyter:
        raise click.UsageError("--ssh and --jupyter cannot be used together")
    if web:
        conflicting = [
            flag
            for flag, given in (
                ("--display-name", bool(display_name)),
                ("--idle-timeout", idle_timeout is not None),
                ("--retention-period", retention_period is not None),
                ("--ssh", ssh),
                ("--jupyter", jupyter),
            )
            if given
        ]
        if conflicting:
            raise click.UsageError(f"--web cannot be combined with {', '.join(conflicting)}")

    connect = ConnectMode.NONE
    if ssh:
        connect = ConnectMode.SHELL
    elif jupyter:
        connect = ConnectMode.NOTEBOOK

    options = CreateOptions(
        repository=repo,
        branch=branch,
        location=location or "",
        machine=machine,
        devcontainer_path=devcontainer_path,
        display_name=display_name,
        idle_timeout=_parse_idle_timeout(idle_timeout),
        retention_period=_parse_retention_period(retention_period),
        permissions_opt_out=default_permissions,
        show_status=show_status,
        connect=connect,
    )

    cancellation = Cancellation()
    try:
        if web:
            ctx.launcher.open_url(build_web_create_url(ctx, options))
            return
        result = create_and_optionally_connect(ctx, options, cancellation=cancellation)
        _finish(ctx, result)
    except KeyboardInterrupt:
        cancellation.cancel()
        raise SystemExit(EXIT_CANCELLED) from None
    except CanceledError:
        raise SystemExit(EXIT_CANCELLED) from None
    except SilentError:
        raise SystemExit(1) from None
    except CodespaceError as e:
        user_output(click.style("Error: ", fg="red") + str(e))
        raise SystemExit(1) from None


def _finish(ctx: CsContext, result: CodespaceCreated | SessionOpened) -> None:
    match result:
        case CodespaceCreated(codespace=codespace):
            machine_output(codespace.name)
        case SessionOpened(session=session, shell=shell) if shell is not None:
            with session:
                exit_code = ctx.launcher.run_ssh(port=shell.local_port, user=shell.remote_user)
            if exit_code != 0:
                raise SystemExit(exit_code)
        case SessionOpened(session=session, notebook=notebook) if notebook is not None:
            with session:
                user_output(f"Jupyter notebook available at {notebook.url}")
                user_output("Press Ctrl+C to stop.")
                ctx.launcher.open_url(notebook.url)
                while not session.closed:
                    ctx.time.sleep(NOTEBOOK_HOLD_INTERVAL_SECONDS)


def _parse_idle_timeout(value: str | None) -> timedelta | None:
    if value is None:
        return None
    try:
        return parse_duration(value)
    except ValidationError as e:
        raise click.BadParameter(str(e), param_hint="--idle-timeout") from e


def _parse_retention_period(value: str | None) -> NullableDuration:
    if value is None:
        return DurationUnset()
    if value == "":
        return DurationCleared()
    try:
        return DurationSet(parse_duration(value))
    except ValidationError as e:
        raise click.BadParameter(str(e), param_hint="--retention-period") from e

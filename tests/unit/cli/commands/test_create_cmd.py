"""Unit tests for the create command."""

from dataclasses import replace
from datetime import timedelta

from click.testing import CliRunner

from cslaunch.cli.cli import cli
from cslaunch.core.config import default_config
from cslaunch.core.context import context_for_test
from cslaunch.core.errors import TransportError
from cslaunch.gateway.codespaces.fake import FakeCodespacesApi
from cslaunch.gateway.codespaces.types import (
    AcceptPermissionsRequired,
    Codespace,
    CodespaceState,
    ConnectionInfo,
    DevContainerEntry,
    Machine,
    Repository,
)
from cslaunch.gateway.feedback.fake import FakeUserFeedback
from cslaunch.gateway.launcher.fake import FakeLauncher
from cslaunch.gateway.relay.fake import FakeRelayClient
from cslaunch.gateway.terminal.fake import FakeTerminal

DOTFILES = Repository(id=1234, full_name="monalisa/dotfiles", default_branch="main")
GIGA = Machine(name="GIGA", display_name="Gigabits of a machine")
NOTICE = (
    "Idle timeout for this codespace is set to 10 minutes in compliance "
    "with your organization's policy"
)
CONNECTION = ConnectionInfo(
    session_id="session-id",
    session_token="session-token",
    relay_endpoint="sb://relay.example.com",
    relay_sas="sas",
)
READY = Codespace(
    name="monalisa-dotfiles-abcd1234", state=CodespaceState.AVAILABLE, connection=CONNECTION
)


def _api(
    *,
    devcontainers: list[DevContainerEntry] | Exception | None = None,
    create_result: Codespace | AcceptPermissionsRequired | None = None,
) -> FakeCodespacesApi:
    return FakeCodespacesApi(
        repositories=[DOTFILES],
        devcontainers=devcontainers,
        machines=[GIGA],
        create_result=create_result,
    )


def test_create_with_default_branch_and_30m_idle_timeout() -> None:
    """create prints the codespace name and sends the resolved request."""
    runner = CliRunner()
    api = _api()
    ctx = context_for_test(api=api)

    result = runner.invoke(
        cli,
        ["create", "-R", "monalisa/dotfiles", "-m", "GIGA", "--idle-timeout", "30m"],
        obj=ctx,
        catch_exceptions=False,
    )

    assert result.exit_code == 0
    assert result.stdout == "monalisa-dotfiles-abcd1234\n"
    params = api.created_params[0]
    assert params.branch == "main"
    assert params.idle_timeout_minutes == 30
    assert params.retention_period_minutes is None


def test_create_with_retention_period() -> None:
    """--retention-period 48h is sent as 2880 minutes."""
    runner = CliRunner()
    api = _api()
    ctx = context_for_test(api=api)

    result = runner.invoke(
        cli,
        [
            "create",
            "-R",
            "monalisa/dotfiles",
            "-m",
            "GIGA",
            "--idle-timeout",
            "30m",
            "--retention-period",
            "48h",
        ],
        obj=ctx,
        catch_exceptions=False,
    )

    assert result.exit_code == 0
    assert api.created_params[0].retention_period_minutes == 2880


def test_empty_retention_period_clears_configured_default() -> None:
    """--retention-period "" omits the field even when config sets a default."""
    runner = CliRunner()
    api = _api()
    config = default_config()
    config = replace(config, create=replace(config.create, retention_period=timedelta(hours=72)))
    ctx = context_for_test(api=api, config=config)

    result = runner.invoke(
        cli,
        ["create", "-R", "monalisa/dotfiles", "--retention-period", ""],
        obj=ctx,
        catch_exceptions=False,
    )

    assert result.exit_code == 0
    assert api.created_params[0].retention_period_minutes is None


def test_idle_timeout_notice_shown_on_tty() -> None:
    """The server's idle-timeout notice is shown when stderr is a terminal."""
    runner = CliRunner()
    api = _api(
        create_result=Codespace(name=READY.name, state="Available", idle_timeout_notice=NOTICE)
    )
    feedback = FakeUserFeedback()
    ctx = context_for_test(api=api, feedback=feedback, terminal=FakeTerminal(interactive=True))

    result = runner.invoke(
        cli, ["create", "-R", "monalisa/dotfiles", "-m", "GIGA"], obj=ctx, catch_exceptions=False
    )

    assert result.exit_code == 0
    assert result.stdout == "monalisa-dotfiles-abcd1234\n"
    assert feedback.text == f"Notice: {NOTICE}"


def test_idle_timeout_notice_hidden_without_tty() -> None:
    """Non-interactive output never carries the idle-timeout notice."""
    runner = CliRunner()
    api = _api(
        create_result=Codespace(name=READY.name, state="Available", idle_timeout_notice=NOTICE)
    )
    feedback = FakeUserFeedback()
    ctx = context_for_test(api=api, feedback=feedback, terminal=FakeTerminal(interactive=False))

    result = runner.invoke(
        cli, ["create", "-R", "monalisa/dotfiles", "-m", "GIGA"], obj=ctx, catch_exceptions=False
    )

    assert result.exit_code == 0
    assert result.stdout == "monalisa-dotfiles-abcd1234\n"
    assert result.stderr == ""
    assert feedback.messages == []


def test_no_devcontainers_requests_server_default() -> None:
    """Zero devcontainer.json files is not an error; the path is left empty."""
    runner = CliRunner()
    api = _api(devcontainers=[])
    ctx = context_for_test(api=api)

    result = runner.invoke(
        cli, ["create", "-R", "monalisa/dotfiles"], obj=ctx, catch_exceptions=False
    )

    assert result.exit_code == 0
    assert api.created_params[0].devcontainer_path == ""


def test_devcontainer_discovery_error_is_reported() -> None:
    """A discovery failure aborts before creation with the wrapped cause."""
    runner = CliRunner()
    api = _api(devcontainers=TransportError("some error"))
    ctx = context_for_test(api=api)

    result = runner.invoke(
        cli, ["create", "-R", "monalisa/dotfiles"], obj=ctx, catch_exceptions=False
    )

    assert result.exit_code == 1
    assert "Error: error getting devcontainer.json paths: some error" in result.stderr
    assert result.stdout == ""
    assert api.created_params == []


def test_permissions_required_prints_instructions_once() -> None:
    """The permissions branch prints its instructions and no generic error."""
    runner = CliRunner()
    api = _api(
        create_result=AcceptPermissionsRequired(
            allow_permissions_url="https://example.com/permissions"
        )
    )
    feedback = FakeUserFeedback()
    ctx = context_for_test(api=api, feedback=feedback)

    result = runner.invoke(
        cli, ["create", "-R", "monalisa/dotfiles"], obj=ctx, catch_exceptions=False
    )

    assert result.exit_code == 1
    assert result.stdout == ""
    assert result.stderr == ""
    assert feedback.text == (
        "You must authorize or deny additional permissions requested by this codespace "
        "before continuing.\n"
        "Open this URL in your browser to review and authorize additional permissions: "
        "example.com/permissions\n"
        'Alternatively, you can run "create" with the "--default-permissions" option to '
        "continue without authorizing additional permissions."
    )


def test_default_permissions_flag_opts_out() -> None:
    """--default-permissions is forwarded to the create request."""
    runner = CliRunner()
    api = _api()
    ctx = context_for_test(api=api)

    result = runner.invoke(
        cli,
        ["create", "-R", "monalisa/dotfiles", "--default-permissions"],
        obj=ctx,
        catch_exceptions=False,
    )

    assert result.exit_code == 0
    assert api.created_params[0].permissions_opt_out is True


def test_create_and_ssh() -> None:
    """--ssh waits for the codespace, runs ssh against the session and closes it."""
    runner = CliRunner()
    api = _api(create_result=READY)
    relay = FakeRelayClient(ssh_port=2222, remote_user="codespace")
    launcher = FakeLauncher()
    ctx = context_for_test(api=api, relay=relay, launcher=launcher)

    result = runner.invoke(
        cli, ["create", "-R", "monalisa/dotfiles", "--ssh"], obj=ctx, catch_exceptions=False
    )

    assert result.exit_code == 0
    assert result.stdout == ""
    assert launcher.ssh_calls == [(2222, "codespace")]
    assert api.get_codespace_calls == [("monalisa-dotfiles-abcd1234", True)]
    assert relay.sessions[0].closed


def test_ssh_exit_code_is_propagated() -> None:
    """A failing ssh client exits with its own code after closing the session."""
    runner = CliRunner()
    relay = FakeRelayClient()
    ctx = context_for_test(
        api=_api(create_result=READY), relay=relay, launcher=FakeLauncher(ssh_exit_code=255)
    )

    result = runner.invoke(cli, ["create", "-R", "monalisa/dotfiles", "--ssh"], obj=ctx)

    assert result.exit_code == 255
    assert relay.sessions[0].closed


def test_jupyter_interrupt_closes_session() -> None:
    """Interrupting a held notebook session exits 130 and releases the relay."""
    runner = CliRunner()
    relay = FakeRelayClient(notebook_port=18888, notebook_token="tok")
    launcher = FakeLauncher(open_url_raises=KeyboardInterrupt())
    ctx = context_for_test(api=_api(create_result=READY), relay=relay, launcher=launcher)

    result = runner.invoke(cli, ["create", "-R", "monalisa/dotfiles", "--jupyter"], obj=ctx)

    assert result.exit_code == 130
    assert launcher.opened_urls == ["http://localhost:18888/?token=tok"]
    assert relay.sessions[0].closed
    assert "Error" not in result.stderr


def test_web_opens_browser_without_creating() -> None:
    """--web opens the creation form instead of calling the API."""
    runner = CliRunner()
    api = _api()
    launcher = FakeLauncher()
    ctx = context_for_test(api=api, launcher=launcher)

    result = runner.invoke(
        cli,
        ["create", "-R", "monalisa/dotfiles", "-m", "GIGA", "--web"],
        obj=ctx,
        catch_exceptions=False,
    )

    assert result.exit_code == 0
    assert launcher.opened_urls == ["https://github.com/codespaces/new?repo=1234&machine=GIGA"]
    assert api.created_params == []


def test_web_rejects_creation_only_flags() -> None:
    """--web cannot be combined with flags the browser form does not support."""
    runner = CliRunner()
    ctx = context_for_test(api=_api())

    result = runner.invoke(
        cli, ["create", "-R", "monalisa/dotfiles", "--web", "--idle-timeout", "30m"], obj=ctx
    )

    assert result.exit_code == 2
    assert "--web cannot be combined with --idle-timeout" in result.output


def test_ssh_and_jupyter_are_exclusive() -> None:
    """--ssh and --jupyter cannot both be given."""
    runner = CliRunner()
    ctx = context_for_test(api=_api())

    result = runner.invoke(
        cli, ["create", "-R", "monalisa/dotfiles", "--ssh", "--jupyter"], obj=ctx
    )

    assert result.exit_code == 2


def test_invalid_idle_timeout_is_a_usage_error() -> None:
    """Malformed durations are rejected before any API call."""
    runner = CliRunner()
    api = _api()
    ctx = context_for_test(api=api)

    result = runner.invoke(
        cli, ["create", "-R", "monalisa/dotfiles", "--idle-timeout", "soon"], obj=ctx
    )

    assert result.exit_code == 2
    assert "--idle-timeout" in result.output
    assert api.created_params == []


def test_unknown_machine_is_reported() -> None:
    """An unknown --machine lists what is available."""
    runner = CliRunner()
    ctx = context_for_test(api=_api())

    result = runner.invoke(
        cli, ["create", "-R", "monalisa/dotfiles", "-m", "MEGA"], obj=ctx, catch_exceptions=False
    )

    assert result.exit_code == 1
    assert "there is no such machine for the repository: MEGA" in result.stderr
    assert "Available machines: GIGA" in result.stderr

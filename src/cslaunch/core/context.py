"""Application context holding every gateway the create flow depends on."""

import logging
import urllib.parse
from dataclasses import dataclass
from pathlib import Path

from cslaunch.core.config import DEFAULT_CONFIG_DIR, LoadedConfig, default_config, load_config
from cslaunch.core.errors import AuthenticationError
from cslaunch.gateway.chooser.abc import Chooser
from cslaunch.gateway.chooser.real import ClickChooser
from cslaunch.gateway.codespaces.abc import CodespacesApi
from cslaunch.gateway.codespaces.real import RealCodespacesApi
from cslaunch.gateway.feedback.abc import UserFeedback
from cslaunch.gateway.feedback.real import InteractiveFeedback, SuppressedFeedback
from cslaunch.gateway.http.auth import resolve_github_token
from cslaunch.gateway.http.real import RealHttpClient
from cslaunch.gateway.launcher.abc import Launcher
from cslaunch.gateway.launcher.real import RealLauncher
from cslaunch.gateway.relay.abc import RelayClient
from cslaunch.gateway.relay.real import GhRelayClient
from cslaunch.gateway.terminal.abc import Terminal
from cslaunch.gateway.terminal.real import RealTerminal
from cslaunch.gateway.time.abc import Time
from cslaunch.gateway.time.real import RealTime

logger = logging.getLogger(__name__)


@dataclass(frozen=True)
class CsContext:
    """Immutable context holding all dependencies for cslaunch operations.

    Created at CLI entry point and threaded through the application.
    """

    api: CodespacesApi
    relay: RelayClient
    chooser: Chooser
    terminal: Terminal
    time: Time
    feedback: UserFeedback
    launcher: Launcher
    config: LoadedConfig


def create_context(*, config_dir: Path | None = None) -> CsContext:
    """Create production context with real implementations.

    Raises:
        ValidationError: If the config file is invalid
        AuthenticationError: If no GitHub token can be obtained
    """
    resolved_dir = config_dir if config_dir is not None else DEFAULT_CONFIG_DIR
    config = load_config(resolved_dir)
    logger.debug("Loaded config from %s", resolved_dir)
    terminal: Terminal = RealTerminal()
    time: Time = RealTime()

    token = _resolve_token(config.api.web_url)
    http_client = RealHttpClient(token=token, base_url=config.api.url)
    api = RealCodespacesApi(
        http_client, regions_url=config.api.regions_url, web_url=config.api.web_url
    )

    # Spinners and informational messages only make sense on a terminal
    feedback: UserFeedback
    if terminal.is_stderr_tty():
        feedback = InteractiveFeedback()
    else:
        feedback = SuppressedFeedback()

    return CsContext(
        api=api,
        relay=GhRelayClient(time),
        chooser=ClickChooser(terminal),
        terminal=terminal,
        time=time,
        feedback=feedback,
        launcher=RealLauncher(),
        config=config,
    )


def _resolve_token(web_url: str) -> str:
    hostname = urllib.parse.urlparse(web_url).hostname or "github.com"
    try:
        return resolve_github_token(hostname)
    except (RuntimeError, ValueError) as e:
        raise AuthenticationError(
            f"{e}\nRun 'gh auth login' or set GH_TOKEN to authenticate."
        ) from e


def context_for_test(
    *,
    api: CodespacesApi | None = None,
    relay: RelayClient | None = None,
    chooser: Chooser | None = None,
    terminal: Terminal | None = None,
    time: Time | None = None,
    feedback: UserFeedback | None = None,
    launcher: Launcher | None = None,
    config: LoadedConfig | None = None,
) -> CsContext:
    """Create test context with fakes for every unspecified dependency.

    Example:
        >>> api = FakeCodespacesApi(repositories=[...], machines=[...])
        >>> ctx = context_for_test(api=api, terminal=FakeTerminal(interactive=True))
    """
    from cslaunch.gateway.chooser.fake import FakeChooser
    from cslaunch.gateway.codespaces.fake import FakeCodespacesApi
    from cslaunch.gateway.feedback.fake import FakeUserFeedback
    from cslaunch.gateway.launcher.fake import FakeLauncher
    from cslaunch.gateway.relay.fake import FakeRelayClient
    from cslaunch.gateway.terminal.fake import FakeTerminal
    from cslaunch.gateway.time.fake import FakeTime

    return CsContext(
        api=api if api is not None else FakeCodespacesApi(),
        relay=relay if relay is not None else FakeRelayClient(),
        chooser=chooser if chooser is not None else FakeChooser(interactive=False),
        terminal=terminal if terminal is not None else FakeTerminal(interactive=False),
        time=time if time is not None else FakeTime(),
        feedback=feedback if feedback is not None else FakeUserFeedback(),
        launcher=launcher if launcher is not None else FakeLauncher(),
        config=config if config is not None else default_config(),
    )

"""Tests for the readiness poller."""

import pytest

from cslaunch.core.cancellation import Cancellation
from cslaunch.core.config import PollConfig
from cslaunch.core.errors import (
    CanceledError,
    ProvisionFailedError,
    ReadinessTimeoutError,
    TransportError,
)
from cslaunch.core.poller import ReadinessPoller
from cslaunch.core.session import SessionConnector
from cslaunch.gateway.codespaces.fake import FakeCodespacesApi
from cslaunch.gateway.codespaces.types import (
    Codespace,
    CodespaceState,
    ConnectionInfo,
    PostCreateState,
)
from cslaunch.gateway.feedback.fake import FakeUserFeedback
from cslaunch.gateway.relay.fake import FakeRelayClient
from cslaunch.gateway.time.fake import FakeTime

NAME = "monalisa-dotfiles-abcd1234"
CONNECTION = ConnectionInfo(
    session_id="session-id",
    session_token="session-token",
    relay_endpoint="sb://relay.example.com",
    relay_sas="sas",
)
CREATED = Codespace(name=NAME, state=CodespaceState.QUEUED)
PROVISIONING = Codespace(name=NAME, state=CodespaceState.PROVISIONING)
READY = Codespace(name=NAME, state=CodespaceState.AVAILABLE, connection=CONNECTION)
POLL_CONFIG = PollConfig(interval_seconds=1.0, max_retries=3, timeout_seconds=600.0)


class CancellingTime(FakeTime):
    """FakeTime that cancels a token during the Nth sleep."""

    def __init__(self, cancellation: Cancellation, *, cancel_on_sleep: int) -> None:
        super().__init__()
        self._cancellation = cancellation
        self._cancel_on_sleep = cancel_on_sleep

    def sleep(self, seconds: float) -> None:
        super().sleep(seconds)
        if len(self.sleep_calls) == self._cancel_on_sleep:
            self._cancellation.cancel()


def _poller(
    api: FakeCodespacesApi,
    *,
    relay: FakeRelayClient | None = None,
    time: FakeTime | None = None,
    feedback: FakeUserFeedback | None = None,
    config: PollConfig = POLL_CONFIG,
) -> ReadinessPoller:
    feedback = feedback if feedback is not None else FakeUserFeedback()
    connector = SessionConnector(
        api, relay if relay is not None else FakeRelayClient(), feedback=feedback
    )
    return ReadinessPoller(
        api,
        connector,
        time=time if time is not None else FakeTime(),
        feedback=feedback,
        config=config,
    )


def test_polls_at_fixed_interval_until_available() -> None:
    api = FakeCodespacesApi(codespace_snapshots=[PROVISIONING, PROVISIONING, READY])
    time = FakeTime()

    result = _poller(api, time=time).await_ready(CREATED, None, Cancellation())

    assert result == READY
    assert api.get_codespace_calls == [(NAME, True)] * 3
    assert time.sleep_calls == [1.0, 1.0]


def test_failure_state_raises_with_server_diagnostic_and_never_connects() -> None:
    failed = Codespace(
        name=NAME, state=CodespaceState.FAILED, last_known_stop_notice="image pull failed"
    )
    api = FakeCodespacesApi(codespace_snapshots=[PROVISIONING, failed])
    relay = FakeRelayClient()
    events: list[PostCreateState] = []

    with pytest.raises(ProvisionFailedError) as exc_info:
        _poller(api, relay=relay).await_ready(CREATED, events.append, Cancellation())

    assert exc_info.value.state == CodespaceState.FAILED
    assert "image pull failed" in str(exc_info.value)
    assert relay.sessions == []
    assert events == []


def test_cancel_mid_poll_stops_without_further_calls() -> None:
    cancellation = Cancellation()
    api = FakeCodespacesApi(codespace_snapshots=[PROVISIONING])
    time = CancellingTime(cancellation, cancel_on_sleep=2)

    with pytest.raises(CanceledError):
        _poller(api, time=time).await_ready(CREATED, None, cancellation)

    assert len(api.get_codespace_calls) == 2
    assert time.sleep_calls == [1.0, 1.0]


def test_already_cancelled_token_makes_no_calls() -> None:
    cancellation = Cancellation()
    cancellation.cancel()
    api = FakeCodespacesApi(codespace_snapshots=[READY])

    with pytest.raises(CanceledError):
        _poller(api).await_ready(CREATED, None, cancellation)

    assert api.get_codespace_calls == []


def test_transient_transport_errors_are_retried() -> None:
    api = FakeCodespacesApi(
        codespace_snapshots=[TransportError("502"), TransportError("502"), READY]
    )

    result = _poller(api).await_ready(CREATED, None, Cancellation())

    assert result == READY


def test_transport_errors_beyond_retry_budget_surface() -> None:
    error = TransportError("connection refused")
    api = FakeCodespacesApi(codespace_snapshots=[error])

    with pytest.raises(TransportError) as exc_info:
        _poller(api).await_ready(CREATED, None, Cancellation())

    assert exc_info.value is error
    assert len(api.get_codespace_calls) == POLL_CONFIG.max_retries + 1


def test_stopped_codespace_is_started_once() -> None:
    shutdown = Codespace(name=NAME, state=CodespaceState.SHUTDOWN)
    api = FakeCodespacesApi(codespace_snapshots=[shutdown, shutdown, READY])

    _poller(api).await_ready(CREATED, None, Cancellation())

    assert api.started_codespaces == [NAME]


def test_failed_start_request_is_retried_next_round() -> None:
    shutdown = Codespace(name=NAME, state=CodespaceState.SHUTDOWN)
    api = FakeCodespacesApi(
        codespace_snapshots=[shutdown, shutdown, READY],
        start_errors=[TransportError("503")],
    )

    result = _poller(api).await_ready(CREATED, None, Cancellation())

    assert result == READY
    assert api.started_codespaces == [NAME, NAME]


def test_start_failures_beyond_retry_budget_surface() -> None:
    shutdown = Codespace(name=NAME, state=CodespaceState.SHUTDOWN)
    error = TransportError("503")
    api = FakeCodespacesApi(
        codespace_snapshots=[shutdown],
        start_errors=[error] * (POLL_CONFIG.max_retries + 1),
    )

    with pytest.raises(TransportError) as exc_info:
        _poller(api).await_ready(CREATED, None, Cancellation())

    assert exc_info.value is error
    assert len(api.started_codespaces) == POLL_CONFIG.max_retries + 1


def test_deadline_raises_readiness_timeout() -> None:
    api = FakeCodespacesApi(codespace_snapshots=[PROVISIONING])
    config = PollConfig(interval_seconds=1.0, max_retries=3, timeout_seconds=5.0)

    with pytest.raises(ReadinessTimeoutError) as exc_info:
        _poller(api, config=config).await_ready(CREATED, None, Cancellation())

    assert isinstance(exc_info.value, ProvisionFailedError)
    assert exc_info.value.state == CodespaceState.PROVISIONING
    assert len(api.get_codespace_calls) == 6


def test_post_create_steps_are_dispatched_once_in_order() -> None:
    relay = FakeRelayClient(
        command_results=[
            '{"steps": [{"name": "onCreateCommand", "status": "running"}]}',
            '{"steps": [{"name": "onCreateCommand", "status": "succeeded"},'
            ' {"name": "postCreateCommand", "status": "running"}]}',
            '{"steps": [{"name": "onCreateCommand", "status": "succeeded"},'
            ' {"name": "postCreateCommand", "status": "failed"}]}',
        ]
    )
    api = FakeCodespacesApi(codespace_snapshots=[READY])
    feedback = FakeUserFeedback()
    events: list[PostCreateState] = []

    _poller(api, relay=relay, feedback=feedback).await_ready(
        CREATED, events.append, Cancellation()
    )

    assert events == [
        PostCreateState(name="onCreateCommand", status="succeeded"),
        PostCreateState(name="postCreateCommand", status="failed"),
    ]
    assert "Running onCreateCommand" in feedback.progress_labels
    assert "Running postCreateCommand" in feedback.progress_labels
    assert not feedback.progress_active
    assert len(relay.sessions) == 1
    assert relay.sessions[0].closed
    # Two running rounds, then two consecutive idle rounds
    assert len(relay.sessions[0].commands) == 4


def test_no_post_create_session_without_event_callback() -> None:
    relay = FakeRelayClient()
    api = FakeCodespacesApi(codespace_snapshots=[READY])

    _poller(api, relay=relay).await_ready(CREATED, None, Cancellation())

    assert relay.sessions == []


def test_post_create_session_is_closed_on_cancel() -> None:
    cancellation = Cancellation()
    relay = FakeRelayClient(
        command_results=['{"steps": [{"name": "postCreateCommand", "status": "running"}]}']
    )
    api = FakeCodespacesApi(codespace_snapshots=[READY])
    time = CancellingTime(cancellation, cancel_on_sleep=1)

    with pytest.raises(CanceledError):
        _poller(api, relay=relay, time=time).await_ready(CREATED, lambda _: None, cancellation)

    assert relay.sessions[0].closed
    assert len(relay.sessions[0].commands) == 1

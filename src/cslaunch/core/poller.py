"""Polling a new codespace until it can accept sessions.

Polling uses a fixed interval. Only one request is in flight at a time, and
the cancellation token is checked before every round and after every sleep,
so a cancelled poll stops within one interval without issuing another call.
"""

import logging
from collections.abc import Callable
from datetime import datetime, timedelta

from cslaunch.core.cancellation import Cancellation
from cslaunch.core.config import PollConfig
from cslaunch.core.errors import ProvisionFailedError, ReadinessTimeoutError, TransportError
from cslaunch.core.session import SessionConnector
from cslaunch.gateway.codespaces.abc import CodespacesApi
from cslaunch.gateway.codespaces.types import (
    FAILED_STATES,
    STARTABLE_STATES,
    Codespace,
    PostCreateState,
    PostCreateStatus,
)
from cslaunch.gateway.feedback.abc import UserFeedback
from cslaunch.gateway.time.abc import Time

logger = logging.getLogger(__name__)

OnEvent = Callable[[PostCreateState], None]

# Replaceable polling strategy: (codespace, on_event, cancellation) -> ready codespace
PollStates = Callable[[Codespace, OnEvent | None, Cancellation], Codespace]

IDLE_ROUNDS_BEFORE_DONE = 2


class ReadinessPoller:
    """Waits for a codespace to become available and follows its setup steps."""

    def __init__(
        self,
        api: CodespacesApi,
        connector: SessionConnector,
        *,
        time: Time,
        feedback: UserFeedback,
        config: PollConfig,
    ) -> None:
        self._api = api
        self._connector = connector
        self._time = time
        self._feedback = feedback
        self._config = config

    def await_ready(
        self,
        codespace: Codespace,
        on_event: OnEvent | None,
        cancellation: Cancellation,
    ) -> Codespace:
        """Default PollStates strategy.

        Waits until the codespace is connectable, then, when on_event is
        given, reports each finished post-create step to it exactly once.

        Raises:
            ProvisionFailedError: If the codespace reaches a failure state
            ReadinessTimeoutError: If it is not available before the deadline
            TransportError: If polling fails more often than the retry budget allows
            CanceledError: If the token is cancelled
        """
        deadline = self._time.now() + timedelta(seconds=self._config.timeout_seconds)
        try:
            available = self.await_available(
                codespace, cancellation=cancellation, deadline=deadline
            )
            if on_event is not None:
                self._follow_post_create(available, on_event, cancellation, deadline)
        finally:
            self._feedback.stop_progress()
        return available

    def await_available(
        self,
        codespace: Codespace,
        *,
        cancellation: Cancellation,
        deadline: datetime | None = None,
    ) -> Codespace:
        """Poll until the codespace is connectable.

        A stopped or archived codespace is started once; a failed start
        request counts against the retry budget and is retried next round.
        """
        if deadline is None:
            deadline = self._time.now() + timedelta(seconds=self._config.timeout_seconds)
        name = codespace.name
        current = codespace
        start_requested = False
        failures = 0

        while True:
            cancellation.raise_if_cancelled()
            try:
                current = self._api.get_codespace(name, include_connection=True)
                if current.is_connectable:
                    logger.debug("Codespace %s is available", name)
                    return current
                if current.state in FAILED_STATES:
                    raise ProvisionFailedError(
                        name, state=current.state, diagnostic=current.last_known_stop_notice
                    )
                if current.state in STARTABLE_STATES and not start_requested:
                    logger.debug("Starting codespace %s from state %s", name, current.state)
                    self._api.start_codespace(name)
                    start_requested = True
            except TransportError as e:
                failures = self._count_failure(failures, e, "poll codespace state")
            else:
                failures = 0
                self._feedback.start_progress(
                    f"Waiting for codespace to become available ({current.state})"
                )

            if self._time.now() >= deadline:
                raise ReadinessTimeoutError(
                    name, state=current.state, timeout_seconds=self._config.timeout_seconds
                )
            self._sleep(cancellation)

    def _follow_post_create(
        self,
        codespace: Codespace,
        on_event: OnEvent,
        cancellation: Cancellation,
        deadline: datetime,
    ) -> None:
        dispatched: set[str] = set()
        idle_rounds = 0
        failures = 0

        with self._connector.connect(codespace, cancellation=cancellation) as session:
            while True:
                cancellation.raise_if_cancelled()
                try:
                    states = session.read_post_create_states()
                except TransportError as e:
                    failures = self._count_failure(failures, e, "read post-create states")
                else:
                    failures = 0
                    running = None
                    for state in states:
                        if state.is_finished:
                            if state.name not in dispatched:
                                dispatched.add(state.name)
                                on_event(state)
                        elif state.status == PostCreateStatus.RUNNING and running is None:
                            running = state
                    if running is not None:
                        idle_rounds = 0
                        self._feedback.start_progress(f"Running {running.name}")
                    else:
                        idle_rounds += 1
                        if idle_rounds >= IDLE_ROUNDS_BEFORE_DONE:
                            return

                if self._time.now() >= deadline:
                    logger.debug("Stopped following setup steps of %s at deadline", codespace.name)
                    return
                self._sleep(cancellation)

    def _count_failure(self, failures: int, error: TransportError, operation: str) -> int:
        failures += 1
        if failures > self._config.max_retries:
            raise error
        logger.debug(
            "Failed to %s (attempt %d of %d): %s",
            operation,
            failures,
            self._config.max_retries + 1,
            error,
        )
        return failures

    def _sleep(self, cancellation: Cancellation) -> None:
        self._time.sleep(self._config.interval_seconds)
        cancellation.raise_if_cancelled()

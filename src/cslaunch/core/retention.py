"""Idle-timeout and retention-period policy for new codespaces."""

from dataclasses import dataclass
from datetime import timedelta

from cslaunch.core.config import CreateDefaults
from cslaunch.core.durations import (
    DurationCleared,
    DurationSet,
    DurationUnset,
    NullableDuration,
    whole_minutes,
)
from cslaunch.core.errors import ValidationError
from cslaunch.gateway.codespaces.types import Codespace
from cslaunch.gateway.feedback.abc import UserFeedback
from cslaunch.gateway.terminal.abc import Terminal


@dataclass(frozen=True)
class RetentionSpec:
    """Timeouts to send with a creation request.

    idle_timeout_minutes of 0 asks the server for its default.
    retention_period_minutes of None omits the field so the server default
    applies; 0 is an explicit value.
    """

    idle_timeout_minutes: int
    retention_period_minutes: int | None


def build_retention_spec(
    *,
    idle_timeout: timedelta | None,
    retention_period: NullableDuration,
    defaults: CreateDefaults,
) -> RetentionSpec:
    """Merge user overrides with configured defaults.

    Durations are truncated to whole minutes.

    Raises:
        ValidationError: If a duration is negative
    """
    if idle_timeout is None:
        idle_timeout = defaults.idle_timeout
    idle_minutes = 0
    if idle_timeout is not None:
        if idle_timeout < timedelta(0):
            raise ValidationError("idle timeout must not be negative")
        idle_minutes = whole_minutes(idle_timeout)

    match retention_period:
        case DurationSet(value=value):
            retention: timedelta | None = value
        case DurationCleared():
            retention = None
        case DurationUnset():
            retention = defaults.retention_period

    retention_minutes = None
    if retention is not None:
        if retention < timedelta(0):
            raise ValidationError("retention period must not be negative")
        retention_minutes = whole_minutes(retention)

    return RetentionSpec(
        idle_timeout_minutes=idle_minutes, retention_period_minutes=retention_minutes
    )


def surface_idle_timeout_notice(
    codespace: Codespace, *, feedback: UserFeedback, terminal: Terminal
) -> None:
    """Show the server's idle-timeout notice on an interactive stderr only."""
    if not codespace.idle_timeout_notice:
        return
    if not terminal.is_stderr_tty():
        return
    feedback.info(f"Notice: {codespace.idle_timeout_notice}")

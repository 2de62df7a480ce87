"""Duration parsing and the tri-state duration used for retention periods."""

import re
from dataclasses import dataclass
from datetime import timedelta

from cslaunch.core.errors import ValidationError

_UNIT_SECONDS = {
    "ms": 0.001,
    "s": 1.0,
    "m": 60.0,
    "h": 3600.0,
}
_COMPONENT = re.compile(r"(\d+(?:\.\d*)?|\.\d+)(ms|h|m|s)")


def parse_duration(text: str) -> timedelta:
    """Parse a duration such as "30m", "1h30m", "1.5h" or "0".

    Raises:
        ValidationError: If the text is not a valid, non-negative duration
    """
    value = text.strip()
    if value == "0":
        return timedelta(0)
    if not value:
        raise ValidationError("invalid duration: empty value")
    if value.startswith("-"):
        raise ValidationError(f"invalid duration {text!r}: must not be negative")

    total = 0.0
    position = 0
    for match in _COMPONENT.finditer(value):
        if match.start() != position:
            break
        total += float(match.group(1)) * _UNIT_SECONDS[match.group(2)]
        position = match.end()
    if position != len(value) or position == 0:
        raise ValidationError(
            f"invalid duration {text!r}: expected a value like 30m, 1h30m or 48h"
        )
    return timedelta(seconds=total)


def whole_minutes(value: timedelta) -> int:
    """Truncate a duration to whole minutes."""
    return int(value.total_seconds() // 60)


@dataclass(frozen=True)
class DurationUnset:
    """No value was given; defaults apply."""


@dataclass(frozen=True)
class DurationCleared:
    """The value was explicitly cleared; no default applies."""


@dataclass(frozen=True)
class DurationSet:
    """An explicit duration. Zero is a legal value."""

    value: timedelta


NullableDuration = DurationUnset | DurationCleared | DurationSet

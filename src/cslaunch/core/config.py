"""Loading of ~/.cslaunch/config.toml."""

import tomllib
from dataclasses import dataclass
from datetime import timedelta
from pathlib import Path
from typing import Any

from cslaunch.core.durations import parse_duration
from cslaunch.core.errors import ValidationError

DEFAULT_CONFIG_DIR = Path.home() / ".cslaunch"
DEFAULT_API_URL = "https://api.github.com"
DEFAULT_REGIONS_URL = "https://online.visualstudio.com/api/v1/locations"
DEFAULT_WEB_URL = "https://github.com"


class MachinePolicy:
    """How to pick a machine when several are offered and none was requested."""

    PROMPT = "prompt"
    DEFAULT = "default"
    CHEAPEST = "cheapest"


MACHINE_POLICIES = (MachinePolicy.PROMPT, MachinePolicy.DEFAULT, MachinePolicy.CHEAPEST)


@dataclass(frozen=True)
class ApiConfig:
    url: str
    regions_url: str
    web_url: str


@dataclass(frozen=True)
class CreateDefaults:
    """Defaults applied to `create` when the corresponding flag is omitted."""

    machine_policy: str
    default_machine: str | None
    location: str | None
    idle_timeout: timedelta | None
    retention_period: timedelta | None


@dataclass(frozen=True)
class PollConfig:
    interval_seconds: float
    max_retries: int
    timeout_seconds: float


@dataclass(frozen=True)
class LoadedConfig:
    """In-memory representation of config.toml."""

    api: ApiConfig
    create: CreateDefaults
    poll: PollConfig


def default_config() -> LoadedConfig:
    return LoadedConfig(
        api=ApiConfig(
            url=DEFAULT_API_URL, regions_url=DEFAULT_REGIONS_URL, web_url=DEFAULT_WEB_URL
        ),
        create=CreateDefaults(
            machine_policy=MachinePolicy.PROMPT,
            default_machine=None,
            location=None,
            idle_timeout=None,
            retention_period=None,
        ),
        poll=PollConfig(interval_seconds=1.0, max_retries=3, timeout_seconds=600.0),
    )


def load_config(config_dir: Path) -> LoadedConfig:
    """Load config.toml from the given directory if present; otherwise return defaults.

    Example config:
      [api]
      url = "https://api.github.com"

      [create]
      machine_policy = "cheapest"
      location = "WestEurope"
      idle_timeout = "30m"
      retention_period = "72h"

      [poll]
      interval_seconds = 2.0
      timeout_seconds = 900

    Raises:
        ValidationError: If the file is not valid TOML or a value is invalid
    """
    cfg_path = config_dir / "config.toml"
    if not cfg_path.exists():
        return default_config()

    try:
        data = tomllib.loads(cfg_path.read_text(encoding="utf-8"))
    except tomllib.TOMLDecodeError as e:
        raise ValidationError(f"invalid config file {cfg_path}: {e}") from e
    return parse_config(data)


def parse_config(data: dict[str, Any]) -> LoadedConfig:
    defaults = default_config()

    api = data.get("api", {})
    api_config = ApiConfig(
        url=_str(api, "api.url", defaults.api.url).rstrip("/"),
        regions_url=_str(api, "api.regions_url", defaults.api.regions_url),
        web_url=_str(api, "api.web_url", defaults.api.web_url).rstrip("/"),
    )

    create = data.get("create", {})
    machine_policy = _str(create, "create.machine_policy", defaults.create.machine_policy)
    if machine_policy not in MACHINE_POLICIES:
        raise ValidationError(
            f"invalid value for create.machine_policy: {machine_policy!r} "
            f"(expected one of {', '.join(MACHINE_POLICIES)})"
        )
    default_machine = _optional_str(create, "create.default_machine")
    if machine_policy == MachinePolicy.DEFAULT and default_machine is None:
        raise ValidationError(
            'create.default_machine is required when create.machine_policy is "default"'
        )
    create_defaults = CreateDefaults(
        machine_policy=machine_policy,
        default_machine=default_machine,
        location=_optional_str(create, "create.location"),
        idle_timeout=_optional_duration(create, "create.idle_timeout"),
        retention_period=_optional_duration(create, "create.retention_period"),
    )

    poll = data.get("poll", {})
    poll_config = PollConfig(
        interval_seconds=_positive_number(
            poll, "poll.interval_seconds", defaults.poll.interval_seconds
        ),
        max_retries=_non_negative_int(poll, "poll.max_retries", defaults.poll.max_retries),
        timeout_seconds=_positive_number(
            poll, "poll.timeout_seconds", defaults.poll.timeout_seconds
        ),
    )

    return LoadedConfig(api=api_config, create=create_defaults, poll=poll_config)


def _key(dotted: str) -> str:
    return dotted.rsplit(".", 1)[-1]


def _str(section: dict[str, Any], dotted: str, default: str) -> str:
    value = section.get(_key(dotted), default)
    if not isinstance(value, str) or not value:
        raise ValidationError(f"invalid value for {dotted}: expected a non-empty string")
    return value


def _optional_str(section: dict[str, Any], dotted: str) -> str | None:
    value = section.get(_key(dotted))
    if value is None:
        return None
    if not isinstance(value, str):
        raise ValidationError(f"invalid value for {dotted}: expected a string")
    return value or None


def _optional_duration(section: dict[str, Any], dotted: str) -> timedelta | None:
    value = section.get(_key(dotted))
    if value is None:
        return None
    if not isinstance(value, str):
        raise ValidationError(f'invalid value for {dotted}: expected a duration such as "30m"')
    try:
        return parse_duration(value)
    except ValidationError as e:
        raise ValidationError(f"invalid value for {dotted}: {e}") from e


def _positive_number(section: dict[str, Any], dotted: str, default: float) -> float:
    value = section.get(_key(dotted), default)
    if isinstance(value, bool) or not isinstance(value, (int, float)) or value <= 0:
        raise ValidationError(f"invalid value for {dotted}: expected a positive number")
    return float(value)


def _non_negative_int(section: dict[str, Any], dotted: str, default: int) -> int:
    value = section.get(_key(dotted), default)
    if isinstance(value, bool) or not isinstance(value, int) or value < 0:
        raise ValidationError(f"invalid value for {dotted}: expected a non-negative integer")
    return value

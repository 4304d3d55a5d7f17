import math
import os
import re
import tomllib
from collections.abc import Mapping
from pathlib import Path
from typing import Any
from typing import Final

from pydantic import Field
from pydantic import ValidationError

from imbue.one_testing.errors import ConfigParseError
from imbue.one_testing.frozen_model import FrozenModel
from imbue.one_testing.primitives import LogLevel
from imbue.one_testing.primitives import NonNegativeFloat
from imbue.one_testing.primitives import NonNegativeInt
from imbue.one_testing.primitives import UserName
from imbue.one_testing.pure import pure

DEFAULT_MAX_ATTEMPTS: Final[int] = 20
DEFAULT_INTERVAL_SECONDS: Final[float] = 2.0
DEFAULT_CALLER_USER_NAME: Final[str] = "oneadmin"

# Environment overrides. They win over the TOML file, which wins over the defaults.
ENV_CONFIG_PATH: Final[str] = "ONE_TESTING_CONFIG"
ENV_POLL_MAX_ATTEMPTS: Final[str] = "ONE_TESTING_POLL_MAX_ATTEMPTS"
ENV_POLL_INTERVAL: Final[str] = "ONE_TESTING_POLL_INTERVAL"
ENV_USER: Final[str] = "ONE_TESTING_USER"
ENV_LOG_LEVEL: Final[str] = "ONE_TESTING_LOG_LEVEL"

_DURATION_PATTERN = re.compile(
    r"(?:(\d+(?:\.\d+)?)\s*m(?!s))?\s*(?:(\d+(?:\.\d+)?)\s*s)?\s*(?:(\d+(?:\.\d+)?)\s*ms)?$",
    re.IGNORECASE,
)


class PollSettings(FrozenModel):
    """Attempt budget and spacing used when waiting on a resource."""

    max_attempts: NonNegativeInt = Field(
        default=NonNegativeInt(DEFAULT_MAX_ATTEMPTS),
        description="Maximum number of predicate evaluations",
    )
    interval_seconds: NonNegativeFloat = Field(
        default=NonNegativeFloat(DEFAULT_INTERVAL_SECONDS),
        description="Delay between two failed evaluations",
    )


class OneTestingSettings(FrozenModel):
    """Top-level settings for the test helpers."""

    poll: PollSettings = Field(default_factory=PollSettings)
    caller_user_name: UserName = Field(
        default=UserName(DEFAULT_CALLER_USER_NAME),
        description="User whose primary group get_caller_group resolves",
    )
    log_level: LogLevel = Field(default=LogLevel.INFO)


@pure
def parse_duration_to_seconds(duration_str: str) -> float:
    """Parse a delay such as '2', '0.5', '2s', '500ms' or '1m30s' into seconds.

    Plain numbers are treated as seconds. Zero is allowed.
    """
    stripped = duration_str.strip()
    if not stripped:
        raise ConfigParseError(f"Invalid duration: '{duration_str}' (empty string)")

    try:
        plain_seconds = float(stripped)
    except ValueError:
        pass
    else:
        if not math.isfinite(plain_seconds):
            raise ConfigParseError(f"Invalid duration: '{duration_str}'. Duration must be a finite number.")
        if plain_seconds < 0:
            raise ConfigParseError(f"Invalid duration: '{duration_str}'. Duration must not be negative.")
        return plain_seconds

    match = _DURATION_PATTERN.match(stripped)
    if match is None or match.group(0) == "":
        raise ConfigParseError(f"Invalid duration: '{duration_str}'. Expected format like '2', '2s', '500ms', '1m30s'.")

    minutes = float(match.group(1)) if match.group(1) else 0.0
    seconds = float(match.group(2)) if match.group(2) else 0.0
    milliseconds = float(match.group(3)) if match.group(3) else 0.0
    return minutes * 60 + seconds + milliseconds / 1000


def _load_toml(path: Path) -> dict[str, Any]:
    try:
        with path.open("rb") as f:
            return tomllib.load(f)
    except tomllib.TOMLDecodeError as e:
        raise ConfigParseError(f"Failed to parse config file {path}: {e}") from e


def _apply_env_overrides(raw: dict[str, Any], environ: Mapping[str, str]) -> dict[str, Any]:
    merged = dict(raw)
    poll = dict(merged.get("poll", {}))

    max_attempts = environ.get(ENV_POLL_MAX_ATTEMPTS)
    if max_attempts is not None:
        try:
            poll["max_attempts"] = int(max_attempts)
        except ValueError as e:
            raise ConfigParseError(f"{ENV_POLL_MAX_ATTEMPTS} must be an integer, got '{max_attempts}'") from e

    interval = environ.get(ENV_POLL_INTERVAL)
    if interval is not None:
        poll["interval_seconds"] = parse_duration_to_seconds(interval)

    if poll:
        merged["poll"] = poll

    user = environ.get(ENV_USER)
    if user is not None:
        merged["caller_user_name"] = user

    log_level = environ.get(ENV_LOG_LEVEL)
    if log_level is not None:
        merged["log_level"] = log_level.upper()

    return merged


def load_settings(
    config_path: Path | None = None,
    environ: Mapping[str, str] | None = None,
) -> OneTestingSettings:
    """Load settings from defaults, an optional TOML file and the environment.

    Precedence (lowest to highest):
    1. Built-in defaults
    2. TOML file (config_path, or the path in ONE_TESTING_CONFIG); a missing file is ignored
    3. ONE_TESTING_* environment variables

    The TOML file may set poll.interval_seconds either as a number or as a duration string.
    """
    env = os.environ if environ is None else environ

    if config_path is None and env.get(ENV_CONFIG_PATH):
        config_path = Path(env[ENV_CONFIG_PATH]).expanduser()

    raw: dict[str, Any] = {}
    if config_path is not None and config_path.exists():
        raw = _load_toml(config_path)

    poll_section = raw.get("poll")
    if isinstance(poll_section, dict) and isinstance(poll_section.get("interval_seconds"), str):
        raw = {**raw, "poll": {**poll_section, "interval_seconds": parse_duration_to_seconds(poll_section["interval_seconds"])}}

    raw = _apply_env_overrides(raw, env)

    try:
        return OneTestingSettings.model_validate(raw)
    except ValidationError as e:
        raise ConfigParseError(f"Invalid one-testing settings: {e}") from e

# --- Settings from the environment -------------------------------------------
import os
from dataclasses import dataclass
from typing import Mapping, Optional

_TRUTHY = {"1", "true", "yes", "on"}


@dataclass(frozen=True)
class Settings:
    log_level: str = "WARNING"
    log_json: bool = False
    name_assignments: bool = False  # name `f = function() end` after its target


def _flag(value: Optional[str]) -> bool:
    return value is not None and value.strip().lower() in _TRUTHY


def load_settings(environ: Optional[Mapping[str, str]] = None) -> Settings:
    """
    Reads LUA_LINES_LOG_LEVEL, LUA_LINES_LOG_JSON and LUA_LINES_NAME_ASSIGNMENTS.
    Unset variables fall back to the Settings defaults.
    """
    env = os.environ if environ is None else environ
    return Settings(
        log_level=env.get("LUA_LINES_LOG_LEVEL", Settings.log_level).strip().upper(),
        log_json=_flag(env.get("LUA_LINES_LOG_JSON")),
        name_assignments=_flag(env.get("LUA_LINES_NAME_ASSIGNMENTS")),
    )

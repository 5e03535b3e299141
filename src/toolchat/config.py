"""Configuration models and enums for toolchat.

Single source of truth for settings and defaults. Values are resolved from CLI
overrides, then environment variables, then ``config.toml``, then defaults.
"""

from __future__ import annotations

import os
import stat
import tomllib
from collections.abc import Mapping
from enum import Enum
from pathlib import Path
from typing import Any

from pydantic import BaseModel, ConfigDict, Field, field_validator

from toolchat.paths import get_toolchat_home


class TransportKind(str, Enum):
    SDK = "sdk"
    HTTP = "http"


class LogLevel(str, Enum):
    DEBUG = "debug"
    INFO = "info"
    WARNING = "warning"
    ERROR = "error"


DEFAULT_MODEL = "gpt-4o"
DEFAULT_MAX_ITERATIONS = 3
EXPECTED_FILE_MODE = stat.S_IRUSR | stat.S_IWUSR  # 0o600


class Settings(BaseModel):
    """Resolved toolchat settings."""

    model_config = ConfigDict(frozen=True, validate_default=True, extra="forbid")

    api_key: str | None = None
    model: str = DEFAULT_MODEL
    max_iterations: int = Field(default=DEFAULT_MAX_ITERATIONS, ge=0)
    transport: TransportKind = TransportKind.SDK
    base_url: str | None = None
    timeout: float | None = Field(default=None, gt=0)
    log_level: LogLevel = LogLevel.INFO

    @field_validator("api_key", "base_url")
    @classmethod
    def _strip_optional(cls, value: str | None) -> str | None:
        if value is None:
            return None
        stripped = value.strip()
        return stripped if stripped else None

    @field_validator("model")
    @classmethod
    def _validate_model(cls, value: str) -> str:
        if not value.strip():
            raise ValueError("model cannot be empty")
        return value.strip()


def default_config_path() -> Path:
    return get_toolchat_home() / "config.toml"


# Settings field -> (environment variable, (TOML section, key)). Order is file order.
_SOURCES: dict[str, tuple[str | None, tuple[str, str]]] = {
    "api_key": ("OPENAI_API_KEY", ("auth", "api_key")),
    "model": ("TOOLCHAT_MODEL", ("model", "id")),
    "max_iterations": ("TOOLCHAT_MAX_ITERATIONS", ("agent", "max_iterations")),
    "transport": (None, ("transport", "kind")),
    "base_url": ("OPENAI_BASE_URL", ("transport", "base_url")),
    "timeout": (None, ("transport", "timeout")),
    "log_level": (None, ("logging", "log_level")),
}


def load_settings(
    cli_overrides: Mapping[str, Any] | None = None,
    env: Mapping[str, str] | None = None,
    config_path: Path | str | None = None,
    *,
    create_if_missing: bool = False,
) -> Settings:
    """Resolve settings; each field takes the first value set among CLI, env and file."""

    env = os.environ if env is None else env
    cli_overrides = cli_overrides or {}
    path = Path(config_path) if config_path else default_config_path()

    if not path.exists() and create_if_missing:
        write_config(Settings(), path)

    config_data: dict[str, Any] = {}
    if path.exists():
        _ensure_permissions(path)
        config_data = _read_toml(path)

    resolved: dict[str, Any] = {}
    for field_name, (env_var, (section, key)) in _SOURCES.items():
        value = _first_value(
            _clean_str(cli_overrides.get(field_name)),
            _clean_str(env.get(env_var)) if env_var else None,
            _clean_str(_get_config_value(config_data, section, key)),
        )
        if value is not None:
            resolved[field_name] = value

    resolved["transport"] = _coerce_enum(resolved.get("transport"), TransportKind, TransportKind.SDK)
    resolved["log_level"] = _coerce_enum(resolved.get("log_level"), LogLevel, LogLevel.INFO)
    return Settings(**resolved)


def write_config(settings: Settings, config_path: Path | str | None = None) -> Path:
    """Write ``settings`` as TOML readable by ``load_settings``; unset values are omitted."""

    path = Path(config_path) if config_path else default_config_path()
    path.parent.mkdir(parents=True, exist_ok=True)

    values = settings.model_dump(mode="json")
    sections: dict[str, dict[str, Any]] = {}
    for field_name, (_, (section, key)) in _SOURCES.items():
        sections.setdefault(section, {})[key] = values[field_name]

    blocks = [_render_section(name, entries) for name, entries in sections.items()]
    path.write_text("\n\n".join(block for block in blocks if block) + "\n", encoding="utf-8")
    path.chmod(EXPECTED_FILE_MODE)
    return path


def _ensure_permissions(path: Path) -> None:
    current_mode = stat.S_IMODE(path.stat().st_mode)
    if current_mode != EXPECTED_FILE_MODE:
        path.chmod(EXPECTED_FILE_MODE)


def _read_toml(path: Path) -> dict[str, Any]:
    with path.open("rb") as handle:
        return tomllib.load(handle)


def _get_config_value(config: Mapping[str, Any], section: str, key: str) -> Any:
    section_data = config.get(section)
    if not isinstance(section_data, dict):
        return None
    return section_data.get(key)


def _clean_str(value: Any) -> Any:
    if isinstance(value, str):
        stripped = value.strip()
        return stripped if stripped else None
    return value


def _first_value(*candidates: Any) -> Any:
    for candidate in candidates:
        if candidate is not None:
            return candidate
    return None


def _coerce_enum(value: Any, enum_cls: type[Enum], default: Enum) -> Any:
    if isinstance(value, enum_cls):
        return value
    if isinstance(value, str):
        try:
            return enum_cls(value.lower())
        except ValueError:
            return default
    return default


def _render_section(name: str, values: Mapping[str, Any]) -> str:
    lines = [f"{key} = {_toml_value(value)}" for key, value in values.items() if value is not None]
    if not lines:
        return ""
    return "\n".join([f"[{name}]", *lines])


def _toml_value(value: Any) -> str:
    if isinstance(value, bool):
        return "true" if value else "false"
    if isinstance(value, str):
        escaped = value.replace("\\", "\\\\").replace('"', '\\"')
        return f'"{escaped}"'
    return str(value)


__all__ = [
    "DEFAULT_MAX_ITERATIONS",
    "DEFAULT_MODEL",
    "LogLevel",
    "Settings",
    "TransportKind",
    "default_config_path",
    "load_settings",
    "write_config",
]

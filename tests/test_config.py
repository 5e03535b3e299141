import stat
from pathlib import Path

import pytest
from pydantic import ValidationError

from toolchat.config import (
    DEFAULT_MAX_ITERATIONS,
    DEFAULT_MODEL,
    LogLevel,
    Settings,
    TransportKind,
    default_config_path,
    load_settings,
    write_config,
)


def test_defaults() -> None:
    settings = Settings()

    assert settings.api_key is None
    assert settings.model == DEFAULT_MODEL == "gpt-4o"
    assert settings.max_iterations == DEFAULT_MAX_ITERATIONS == 3
    assert settings.transport is TransportKind.SDK
    assert settings.timeout is None
    assert settings.log_level is LogLevel.INFO


def test_settings_validation() -> None:
    with pytest.raises(ValidationError):
        Settings(max_iterations=-1)
    with pytest.raises(ValidationError):
        Settings(model="  ")
    with pytest.raises(ValidationError):
        Settings(timeout=0)
    with pytest.raises(ValidationError):
        Settings(unknown="x")  # type: ignore[call-arg]

    assert Settings(api_key="  ").api_key is None
    assert Settings(api_key=" sk-1 ").api_key == "sk-1"


def test_settings_are_frozen() -> None:
    with pytest.raises(ValidationError):
        Settings().model = "other"  # type: ignore[misc]


def test_default_config_path_uses_home(_isolate_toolchat_home: Path) -> None:
    assert default_config_path() == _isolate_toolchat_home / "config.toml"


def test_load_without_file_uses_defaults(tmp_path: Path) -> None:
    path = tmp_path / "config.toml"

    settings = load_settings(env={}, config_path=path)

    assert settings == Settings()
    assert not path.exists()


def test_create_if_missing_writes_private_seed_file(tmp_path: Path) -> None:
    path = tmp_path / "nested" / "config.toml"

    load_settings(env={}, config_path=path, create_if_missing=True)

    assert path.exists()
    assert stat.S_IMODE(path.stat().st_mode) == 0o600
    content = path.read_text()
    assert '[model]\nid = "gpt-4o"' in content
    assert "max_iterations = 3" in content
    assert "[auth]" not in content


def test_precedence_cli_over_env_over_file(tmp_path: Path) -> None:
    path = tmp_path / "config.toml"
    path.write_text(
        '[auth]\napi_key = "file-key"\n\n'
        '[model]\nid = "file-model"\n\n'
        "[agent]\nmax_iterations = 7\n\n"
        '[transport]\nkind = "http"\nbase_url = "http://file/v1"\ntimeout = 20.0\n\n'
        '[logging]\nlog_level = "debug"\n'
    )
    env = {"OPENAI_API_KEY": "env-key", "TOOLCHAT_MODEL": "env-model", "TOOLCHAT_MAX_ITERATIONS": "5"}

    from_file = load_settings(env={}, config_path=path)
    from_env = load_settings(env=env, config_path=path)
    from_cli = load_settings(cli_overrides={"model": "cli-model", "max_iterations": 1}, env=env, config_path=path)

    assert from_file.api_key == "file-key"
    assert from_file.model == "file-model"
    assert from_file.max_iterations == 7
    assert from_file.transport is TransportKind.HTTP
    assert from_file.base_url == "http://file/v1"
    assert from_file.timeout == 20.0
    assert from_file.log_level is LogLevel.DEBUG

    assert from_env.api_key == "env-key"
    assert from_env.model == "env-model"
    assert from_env.max_iterations == 5

    assert from_cli.model == "cli-model"
    assert from_cli.max_iterations == 1
    assert from_cli.api_key == "env-key"


def test_blank_values_fall_through(tmp_path: Path) -> None:
    path = tmp_path / "config.toml"
    path.write_text('[model]\nid = "file-model"\n')

    settings = load_settings(cli_overrides={"model": "  "}, env={"TOOLCHAT_MODEL": ""}, config_path=path)

    assert settings.model == "file-model"


def test_unknown_enum_values_fall_back_to_defaults(tmp_path: Path) -> None:
    path = tmp_path / "config.toml"
    path.write_text('[transport]\nkind = "carrier-pigeon"\n\n[logging]\nlog_level = "LOUD"\n')

    settings = load_settings(env={}, config_path=path)

    assert settings.transport is TransportKind.SDK
    assert settings.log_level is LogLevel.INFO


def test_enum_values_are_case_insensitive() -> None:
    settings = load_settings(cli_overrides={"transport": "HTTP", "log_level": "Error"}, env={}, config_path=None)

    assert settings.transport is TransportKind.HTTP
    assert settings.log_level is LogLevel.ERROR


def test_invalid_budget_is_a_validation_error(tmp_path: Path) -> None:
    with pytest.raises(ValidationError):
        load_settings(env={"TOOLCHAT_MAX_ITERATIONS": "-2"}, config_path=tmp_path / "config.toml")


def test_permissions_are_tightened(tmp_path: Path) -> None:
    path = tmp_path / "config.toml"
    path.write_text('[model]\nid = "m"\n')
    path.chmod(0o644)

    load_settings(env={}, config_path=path)

    assert stat.S_IMODE(path.stat().st_mode) == 0o600


def test_write_config_round_trip(tmp_path: Path) -> None:
    original = Settings(
        api_key='sk-"quoted"',
        model="gpt-4o-mini",
        max_iterations=0,
        transport=TransportKind.HTTP,
        base_url="http://localhost:1234/v1",
        timeout=12.5,
        log_level=LogLevel.WARNING,
    )
    path = write_config(original, tmp_path / "config.toml")

    assert load_settings(env={}, config_path=path) == original

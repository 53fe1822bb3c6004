"""
safesave — unit tests for config loader

File: tests/unit/config/test_loader.py

Purpose
- Validate deterministic config loading from defaults, TOML, env overrides, and CLI overrides.

What this test file should cover
- Precedence: CLI > env > file > defaults.
- Deterministic env var path mapping and type coercion.
- Path normalization relative to the config file.
"""

from __future__ import annotations

import json
from pathlib import Path

import pytest

from safesave.config.loader import (
    ConfigLoadError,
    dump_effective_config,
    env_name_for_path,
    load_config,
)
from safesave.config.schema import ConfigValidationError

pytestmark = pytest.mark.unit


def _write_config(path: Path, text: str) -> None:
    path.parent.mkdir(parents=True, exist_ok=True)
    path.write_text(text, encoding="utf-8")


def test_loader_precedence_default_file_env_cli(tmp_path: Path) -> None:
    config_path = tmp_path / "safesave.toml"
    _write_config(
        config_path,
        """
[status]
dirty_check_interval_seconds = 2.0
git_check_interval_seconds = 8

[scm]
auto_fetch_interval_seconds = 300.0
""".strip(),
    )
    env = {
        "SAFESAVE_STATUS_GIT_CHECK_INTERVAL_SECONDS": "9.5",
        "SAFESAVE_SCM_AUTO_FETCH_INTERVAL_SECONDS": "400",
    }

    loaded = load_config(
        config_path,
        environ=env,
        cli_overrides={"scm.auto_fetch_interval_seconds": 500.0},
    )

    assert loaded["status"]["dirty_check_interval_seconds"] == 2.0
    assert loaded["status"]["git_check_interval_seconds"] == 9.5
    assert loaded["scm"]["auto_fetch_interval_seconds"] == 500.0
    assert loaded["scm"]["git_executable"]
    assert loaded["notifications"]["toast_on_status_change"] is True


def test_missing_default_file_uses_builtin_defaults(
    tmp_path: Path, monkeypatch: pytest.MonkeyPatch
) -> None:
    monkeypatch.chdir(tmp_path)

    loaded = load_config(environ={})

    assert loaded["status"]["git_check_interval_seconds"] == 5.0
    assert loaded["scm"]["auto_fetch_enabled"] is False
    assert loaded["observability"]["log_dir"] == (tmp_path.resolve() / "logs").as_posix()


def test_explicit_missing_file_is_an_error(tmp_path: Path) -> None:
    with pytest.raises(ConfigLoadError, match="config file not found"):
        load_config(tmp_path / "absent.toml", environ={})


def test_invalid_toml_is_a_load_error(tmp_path: Path) -> None:
    config_path = tmp_path / "safesave.toml"
    _write_config(config_path, "[status\n")

    with pytest.raises(ConfigLoadError, match="invalid TOML"):
        load_config(config_path, environ={})


@pytest.mark.parametrize(
    ("name", "raw", "path", "expected"),
    [
        ("SAFESAVE_SCM_AUTO_FETCH_ENABLED", "yes", ("scm", "auto_fetch_enabled"), True),
        ("SAFESAVE_SCM_AUTO_FETCH_ENABLED", "off", ("scm", "auto_fetch_enabled"), False),
        ("SAFESAVE_SCM_PREFERRED_PROVIDER", " plastic ", ("scm", "preferred_provider"), "plastic"),
        ("SAFESAVE_OBSERVABILITY_LOG_LEVEL", "debug", ("observability", "log_level"), "DEBUG"),
        (
            "SAFESAVE_NOTIFICATIONS_STATUS_TOAST_MIN_INTERVAL_SECONDS",
            "1.5",
            ("notifications", "status_toast_min_interval_seconds"),
            1.5,
        ),
    ],
)
def test_env_overrides_are_coerced(
    tmp_path: Path,
    monkeypatch: pytest.MonkeyPatch,
    name: str,
    raw: str,
    path: tuple[str, str],
    expected: object,
) -> None:
    monkeypatch.chdir(tmp_path)
    loaded = load_config(environ={name: raw})

    section, key = path
    assert loaded[section][key] == expected


def test_uncoercible_env_value_is_a_load_error(
    tmp_path: Path, monkeypatch: pytest.MonkeyPatch
) -> None:
    monkeypatch.chdir(tmp_path)
    with pytest.raises(ConfigLoadError, match="must be a boolean"):
        load_config(environ={"SAFESAVE_SCM_AUTO_FETCH_ENABLED": "maybe"})

    with pytest.raises(ConfigLoadError, match="must be a number"):
        load_config(environ={"SAFESAVE_STATUS_DIRTY_CHECK_INTERVAL_SECONDS": "fast"})


def test_invalid_file_values_fail_validation(tmp_path: Path) -> None:
    config_path = tmp_path / "safesave.toml"
    _write_config(config_path, "[status]\ndirty_check_interval_seconds = -1.0\n")

    with pytest.raises(ConfigValidationError) as excinfo:
        load_config(config_path, environ={})

    assert [issue.path for issue in excinfo.value.issues] == [
        "status.dirty_check_interval_seconds"
    ]


def test_log_dir_is_normalized_relative_to_config_file(tmp_path: Path) -> None:
    config_path = tmp_path / "project" / "safesave.toml"
    _write_config(config_path, '[observability]\nlog_dir = "state/logs"\n')

    loaded = load_config(config_path, environ={})

    assert loaded["observability"]["log_dir"] == (
        tmp_path.resolve() / "project" / "state" / "logs"
    ).as_posix()


def test_env_name_mapping() -> None:
    assert (
        env_name_for_path(("status", "dirty_check_interval_seconds"))
        == "SAFESAVE_STATUS_DIRTY_CHECK_INTERVAL_SECONDS"
    )


def test_dump_effective_config_is_deterministic(tmp_path: Path) -> None:
    config_path = tmp_path / "safesave.toml"
    _write_config(config_path, "")

    first = dump_effective_config(load_config(config_path, environ={}))
    second = dump_effective_config(load_config(config_path, environ={}))

    assert first == second
    assert json.loads(first)["meta"]["schema_version"] == 1


def test_invalid_cli_override_key(tmp_path: Path, monkeypatch: pytest.MonkeyPatch) -> None:
    monkeypatch.chdir(tmp_path)
    with pytest.raises(ConfigLoadError, match="invalid CLI override key"):
        load_config(environ={}, cli_overrides={"..": 1})

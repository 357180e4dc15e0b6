"""CLI tests for configuration commands."""

import os
from pathlib import Path
from typing import Any

from click.testing import CliRunner

from outfitpicker.cli import cli
from outfitpicker.config import ConfigManager


def _env_with_home(tmp_path: Path) -> dict[str, Any]:
    env = {key: value for key, value in os.environ.items() if not key.startswith("OUTFITPICKER__")}
    env["HOME"] = str(tmp_path)
    return env


def _config_path(tmp_path: Path) -> Path:
    return tmp_path / ".outfitpicker" / "config.yaml"


def test_config_view_creates_and_displays_config(tmp_path: Path) -> None:
    runner = CliRunner()
    env = _env_with_home(tmp_path)

    result = runner.invoke(cli, ["config", "view"], env=env)

    assert result.exit_code == 0
    assert "language:" in result.output
    assert _config_path(tmp_path).exists()


def test_config_view_applies_environment(tmp_path: Path) -> None:
    runner = CliRunner()
    env = _env_with_home(tmp_path)
    env["OUTFITPICKER__LANGUAGE"] = "de"

    result = runner.invoke(cli, ["config", "view"], env=env)
    assert "language: de" in result.output

    result = runner.invoke(cli, ["config", "view", "--no-env"], env=env)
    assert "language: en" in result.output


def test_config_set_updates_value_and_writes_diff(tmp_path: Path) -> None:
    runner = CliRunner()
    env = _env_with_home(tmp_path)

    result = runner.invoke(cli, ["config", "set", "logging.level", "--value", "DEBUG"], env=env)

    assert result.exit_code == 0
    assert "DEBUG" in result.output
    assert "Updated logging.level." in result.output

    manager = ConfigManager(config_path=_config_path(tmp_path), env={})
    config = manager.load(include_env=False)
    assert config.logging.level == "DEBUG"

    result = runner.invoke(cli, ["config", "set", "logging.level", "--value", "DEBUG"], env=env)
    assert "No changes applied" in result.output


def test_config_set_rejects_invalid_value(tmp_path: Path) -> None:
    runner = CliRunner()
    env = _env_with_home(tmp_path)

    result = runner.invoke(cli, ["config", "set", "language", "--value", "klingon"], env=env)

    assert result.exit_code == 1
    assert "Invalid configuration values" in result.output


def test_config_edit_applies_changes(tmp_path: Path, monkeypatch) -> None:
    runner = CliRunner()
    env = _env_with_home(tmp_path)

    manager = ConfigManager(config_path=_config_path(tmp_path), env={})
    manager.ensure_exists()

    def _mock_edit(text: str, **_: Any) -> str:
        return text.replace("backup_count: 3", "backup_count: 7")

    monkeypatch.setattr("outfitpicker.cli.click.edit", _mock_edit)

    result = runner.invoke(cli, ["config", "edit"], env=env)

    assert result.exit_code == 0
    assert "updated" in result.output.lower()

    config = manager.load(include_env=False)
    assert config.logging.backup_count == 7


def test_config_edit_cancelled(tmp_path: Path, monkeypatch) -> None:
    runner = CliRunner()
    monkeypatch.setattr("outfitpicker.cli.click.edit", lambda text, **_: None)

    result = runner.invoke(cli, ["config", "edit"], env=_env_with_home(tmp_path))

    assert result.exit_code == 0
    assert "Edit cancelled" in result.output


def test_config_view_env_prints_variable_assignments(tmp_path: Path) -> None:
    runner = CliRunner()
    env = _env_with_home(tmp_path)
    env["OUTFITPICKER__LOGGING__LEVEL"] = "DEBUG"

    result = runner.invoke(cli, ["config", "view", "--env"], env=env)

    assert result.exit_code == 0
    lines = result.output.splitlines()
    assert "OUTFITPICKER__LOGGING__LEVEL=DEBUG" in lines
    assert "OUTFITPICKER__ROOT=null" in lines
    assert "OUTFITPICKER__EXCLUDED_CATEGORIES=[]" in lines

"""Configuration management for the outfit picker."""

from __future__ import annotations

import logging
import os
import tempfile
import textwrap
from datetime import datetime, timezone
from pathlib import Path
from typing import Any, Mapping

import yaml

from .exceptions import ConfigError, InvalidConfigValueError
from .models import LoggingSettings, OutfitPickerConfig
from .resolver import (
    ENV_PREFIX,
    assign_nested,
    flatten_for_env,
    overrides_from_env,
    parse_scalar,
    resolve_with_precedence,
    split_key,
    validate_config,
)

LOGGER = logging.getLogger(__name__)

DEFAULT_CONFIG_PATH = Path("~/.outfitpicker/config.yaml")
_TIMESTAMP_PREFIX = "# Last updated:"
_CONFIG_HEADER = textwrap.dedent(
    """\
    # Outfit picker configuration file
    # Generated automatically; manage via `outfitpicker config edit` or `outfitpicker config set`.
    """
)


class ConfigManager:
    """Own the YAML configuration file and resolve the effective settings.

    The file holds only what the user chose to store. Defaults, environment
    variables, and CLI overrides are layered on top at load time.
    """

    def __init__(
        self,
        config_path: Path | None = None,
        *,
        env: Mapping[str, str] | None = None,
    ) -> None:
        """Initialize the manager.

        Args:
            config_path: Location of the YAML file.
            env: Environment consulted for ``OUTFITPICKER__`` overrides.
        """
        self._config_path = (config_path or DEFAULT_CONFIG_PATH).expanduser()
        self._env = env if env is not None else os.environ

    @property
    def config_path(self) -> Path:
        return self._config_path

    def exists(self) -> bool:
        return self._config_path.exists()

    def load(
        self,
        *,
        cli_overrides: Mapping[str, Any] | None = None,
        include_env: bool = True,
        ensure_file: bool = False,
        env_overrides: Mapping[str, str] | None = None,
    ) -> OutfitPickerConfig:
        """Return the effective configuration.

        Args:
            cli_overrides: Dotted-key values that win over every other layer.
            include_env: Whether environment variables are applied.
            ensure_file: Create a default file first when none exists.
            env_overrides: Environment to use instead of the manager's own.

        Returns:
            OutfitPickerConfig: Validated configuration.

        Raises:
            ConfigError: If the file is unreadable or the values are invalid.
        """
        if ensure_file:
            self.ensure_exists()

        env_layer: dict[str, Any] | None = None
        if include_env:
            env_layer = overrides_from_env(
                env_overrides if env_overrides is not None else self._env
            )

        return resolve_with_precedence(
            defaults=OutfitPickerConfig(),
            file_overrides=self._read_file(),
            env_overrides=env_layer,
            cli_overrides=cli_overrides,
        )

    def load_file_overrides(self) -> dict[str, Any]:
        """Return the raw values stored in the file."""
        return self._read_file()

    def save(self, config: OutfitPickerConfig | Mapping[str, Any]) -> None:
        """Write ``config`` to the file, replacing it atomically."""
        if isinstance(config, OutfitPickerConfig):
            data = config.model_dump(mode="python")
        else:
            data = dict(config)
        self._write_file(data)

    def set_value(self, key: str, raw_value: str) -> OutfitPickerConfig:
        """Store a YAML literal at a dotted ``key`` and persist the file.

        The file is only written when the resulting configuration validates.

        Args:
            key: Dotted path such as ``logging.level``.
            raw_value: YAML literal, e.g. ``DEBUG`` or ``[work, gym]``.

        Returns:
            OutfitPickerConfig: Configuration resolved from the updated file.

        Raises:
            ConfigError: If the key is malformed or the value is invalid.
        """
        data = self._read_file()
        assign_nested(data, split_key(key), parse_scalar(raw_value))
        config = resolve_with_precedence(defaults=OutfitPickerConfig(), file_overrides=data)
        self._write_file(data)
        LOGGER.info("Configuration key %s updated.", key)
        return config

    def replace_text(self, text: str) -> OutfitPickerConfig:
        """Validate edited file contents and persist them.

        Raises:
            ConfigError: If ``text`` is not a valid configuration document.
        """
        data = _parse_document(text)
        config = resolve_with_precedence(defaults=OutfitPickerConfig(), file_overrides=data)
        self._write_file(data)
        return config

    def ensure_exists(self) -> Path:
        """Create a file holding the defaults unless one already exists."""
        if not self._config_path.exists():
            self._write_file(OutfitPickerConfig().model_dump(mode="python"))
        return self._config_path

    def delete(self) -> None:
        """Remove the configuration file if present.

        Raises:
            ConfigError: If the file exists but cannot be removed.
        """
        try:
            self._config_path.unlink(missing_ok=True)
        except OSError as exc:
            raise ConfigError(f"Unable to delete configuration file: {exc}") from exc

    def read_text(self) -> str:
        """Return the file contents, or an empty string when there is no file."""
        if not self._config_path.exists():
            return ""
        return self._config_path.read_text(encoding="utf-8")

    # Internal helpers -------------------------------------------------

    def _read_file(self) -> dict[str, Any]:
        if not self._config_path.exists():
            return {}
        try:
            text = self._config_path.read_text(encoding="utf-8")
        except OSError as exc:
            raise ConfigError(f"Unable to read configuration file: {exc}") from exc
        return _parse_document(text)

    def _write_file(self, data: Mapping[str, Any]) -> None:
        stamp = datetime.now(timezone.utc).isoformat().replace("+00:00", "Z")
        document = (
            f"{_CONFIG_HEADER}{_TIMESTAMP_PREFIX} {stamp}\n"
            f"{yaml.safe_dump(dict(data), sort_keys=False)}"
        )
        directory = self._config_path.parent
        try:
            directory.mkdir(parents=True, exist_ok=True)
            fd, tmp_name = tempfile.mkstemp(dir=directory, prefix=".config-", suffix=".tmp")
            try:
                with os.fdopen(fd, "w", encoding="utf-8") as handle:
                    handle.write(document)
                os.replace(tmp_name, self._config_path)
            except BaseException:
                Path(tmp_name).unlink(missing_ok=True)
                raise
        except OSError as exc:
            raise ConfigError(f"Unable to write configuration file: {exc}") from exc


def strip_timestamp(lines: list[str]) -> list[str]:
    """Return file ``lines`` without the generated timestamp comment."""
    return [line for line in lines if not line.startswith(_TIMESTAMP_PREFIX)]


def _parse_document(text: str) -> dict[str, Any]:
    try:
        raw = yaml.safe_load(text) or {}
    except yaml.YAMLError as exc:
        raise ConfigError(f"Failed to parse configuration file: {exc}") from exc
    if not isinstance(raw, dict):
        raise ConfigError("Configuration file must contain a mapping at the top level.")
    return raw


__all__ = [
    "ConfigManager",
    "DEFAULT_CONFIG_PATH",
    "ENV_PREFIX",
    "OutfitPickerConfig",
    "LoggingSettings",
    "resolve_with_precedence",
    "validate_config",
    "flatten_for_env",
    "assign_nested",
    "strip_timestamp",
    "ConfigError",
    "InvalidConfigValueError",
]

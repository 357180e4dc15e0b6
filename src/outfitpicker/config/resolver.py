"""Layered configuration resolution.

Settings come from four layers: model defaults, the YAML file, environment
variables prefixed with ``OUTFITPICKER__``, and CLI overrides. Later layers
win key by key; nested sections are merged rather than replaced.
"""

from __future__ import annotations

from collections.abc import Mapping as MappingABC
from copy import deepcopy
from typing import Any, Dict, Mapping, Sequence

import yaml
from pydantic import ValidationError

from .exceptions import ConfigError, InvalidConfigValueError
from .models import OutfitPickerConfig

ENV_PREFIX = "OUTFITPICKER__"
_LAYER_ORDER = ("file", "environment", "cli")


def resolve_with_precedence(
    *,
    defaults: OutfitPickerConfig,
    file_overrides: Mapping[str, Any] | None = None,
    env_overrides: Mapping[str, Any] | None = None,
    cli_overrides: Mapping[str, Any] | None = None,
) -> OutfitPickerConfig:
    """Merge every configuration layer on top of ``defaults`` and validate.

    Keys in any layer may be dotted (``logging.level``) or nested mappings.

    Args:
        defaults: Baseline configuration.
        file_overrides: Values read from the configuration file.
        env_overrides: Values parsed from the environment.
        cli_overrides: Values supplied on the command line.

    Returns:
        OutfitPickerConfig: Validated configuration.

    Raises:
        ConfigError: If a layer is malformed.
        InvalidConfigValueError: If the merged values fail validation.
    """
    layers = {"file": file_overrides, "environment": env_overrides, "cli": cli_overrides}
    merged = defaults.model_dump(mode="python")
    for name in _LAYER_ORDER:
        layer = layers[name]
        if layer:
            merged = _merge(merged, _expand(layer, source_name=name))
    return validate_config(merged)


def validate_config(data: Mapping[str, Any]) -> OutfitPickerConfig:
    """Return ``data`` as a validated configuration model.

    Raises:
        InvalidConfigValueError: Naming every field that failed validation.
    """
    try:
        return OutfitPickerConfig.model_validate(dict(data))
    except ValidationError as exc:
        problems = [
            (".".join(str(part) for part in error["loc"]), error["msg"]) for error in exc.errors()
        ]
        detail = "; ".join(f"{field}: {message}" for field, message in problems)
        raise InvalidConfigValueError(
            f"Invalid configuration values: {detail}",
            tuple(field for field, _ in problems),
        ) from exc


def overrides_from_env(env: Mapping[str, str]) -> dict[str, Any]:
    """Collect ``OUTFITPICKER__SECTION__KEY`` variables into a nested mapping.

    Values are parsed as YAML literals so lists and numbers survive.
    """
    overrides: dict[str, Any] = {}
    for key, raw_value in sorted(env.items()):
        if not key.startswith(ENV_PREFIX):
            continue
        segments = [segment.lower() for segment in key[len(ENV_PREFIX) :].split("__") if segment]
        if segments:
            assign_nested(overrides, segments, parse_scalar(raw_value), source_name="environment")
    return overrides


def flatten_for_env(config: OutfitPickerConfig) -> Dict[str, str]:
    """Render ``config`` as the environment variables that would reproduce it."""
    flat: Dict[str, str] = {}
    pending: list[tuple[list[str], Any]] = [
        ([key], value) for key, value in config.model_dump(mode="python").items()
    ]
    while pending:
        path, value = pending.pop()
        if isinstance(value, dict):
            pending.extend(([*path, str(key)], child) for key, child in value.items())
            continue
        flat[ENV_PREFIX + "__".join(part.upper() for part in path)] = _render(value)
    return dict(sorted(flat.items()))


def split_key(key: str) -> list[str]:
    """Split a dotted key such as ``logging.level`` into its segments.

    Raises:
        ConfigError: If the key is blank or has an empty segment.
    """
    segments = [segment.strip() for segment in key.split(".")]
    if not all(segments):
        raise ConfigError(
            f"Invalid configuration key '{key}'; use a dotted path such as 'logging.level'."
        )
    return segments


def parse_scalar(raw_value: str) -> Any:
    """Parse ``raw_value`` as a YAML literal, keeping the raw text when that fails."""
    try:
        return yaml.safe_load(raw_value)
    except yaml.YAMLError:
        return raw_value


def assign_nested(
    target: dict[str, Any],
    path: Sequence[str],
    value: Any,
    *,
    source_name: str = "file",
) -> None:
    """Store ``value`` under ``path`` inside ``target``, creating sections on the way.

    Raises:
        ConfigError: If a segment along ``path`` already holds a plain value.
    """
    node = target
    for depth, segment in enumerate(path[:-1], start=1):
        child = node.setdefault(segment, {})
        if not isinstance(child, dict):
            section = ".".join(path[:depth])
            raise ConfigError(
                f"{source_name.capitalize()} value for '{'.'.join(path)}' conflicts with "
                f"'{section}', which is not a section."
            )
        node = child
    node[path[-1]] = value


def _expand(
    source: Mapping[str, Any],
    *,
    source_name: str,
    prefix: Sequence[str] = (),
) -> dict[str, Any]:
    if not isinstance(source, MappingABC):
        raise ConfigError(f"{source_name.capitalize()} overrides must be a mapping.")

    expanded: dict[str, Any] = {}
    for key, value in source.items():
        if not isinstance(key, str):
            raise ConfigError(f"{source_name.capitalize()} override keys must be strings.")
        path = [*prefix, *key.split(".")]
        if isinstance(value, MappingABC):
            expanded = _merge(expanded, _expand(value, source_name=source_name, prefix=path))
        else:
            assign_nested(expanded, path, value, source_name=source_name)
    return expanded


def _merge(base: Mapping[str, Any], overrides: Mapping[str, Any]) -> dict[str, Any]:
    merged = deepcopy(dict(base))
    for key, value in overrides.items():
        current = merged.get(key)
        if isinstance(value, dict) and isinstance(current, dict):
            merged[key] = _merge(current, value)
        else:
            merged[key] = deepcopy(value)
    return merged


def _render(value: Any) -> str:
    if value is None:
        return "null"
    if isinstance(value, bool):
        return "true" if value else "false"
    if isinstance(value, list):
        return yaml.safe_dump(value, default_flow_style=True).strip()
    return str(value)


__all__ = [
    "ENV_PREFIX",
    "resolve_with_precedence",
    "validate_config",
    "overrides_from_env",
    "flatten_for_env",
    "split_key",
    "parse_scalar",
    "assign_nested",
]

"""Configuration models describing outfit picker settings."""

from __future__ import annotations

from typing import List, Optional

from pydantic import BaseModel, ConfigDict, Field, field_validator

SUPPORTED_LANGUAGES = ("en", "es", "fr", "de", "it", "pt", "nl", "ja", "zh")
DEFAULT_LANGUAGE = "en"


class OutfitPickerBaseModel(BaseModel):
    """Shared configuration for outfit picker Pydantic models."""

    model_config = ConfigDict(extra="forbid")


class LoggingSettings(OutfitPickerBaseModel):
    """Runtime logging configuration.

    Attributes:
        level: Logging verbosity level.
        max_size_mb: Maximum log size before rotation.
        backup_count: Number of historical log files to retain.
    """

    level: str = "WARNING"
    max_size_mb: int = 5
    backup_count: int = 3


class CLIOptions(OutfitPickerBaseModel):
    """CLI behavior defaults and presentation preferences.

    Attributes:
        quiet_default: Whether commands suppress non-error output by default.
    """

    quiet_default: bool = False


class OutfitPickerConfig(OutfitPickerBaseModel):
    """Top-level configuration struct for the outfit picker.

    Attributes:
        root: Directory whose subdirectories are the outfit categories.
        language: Preferred language code.
        excluded_categories: Category names the user does not want to pick from.
        logging: Logging configuration.
        cli: CLI presentation defaults.
    """

    root: Optional[str] = None
    language: str = DEFAULT_LANGUAGE
    excluded_categories: List[str] = Field(default_factory=list)
    logging: LoggingSettings = Field(default_factory=LoggingSettings)
    cli: CLIOptions = Field(default_factory=CLIOptions)

    @field_validator("root")
    @classmethod
    def _validate_root(cls, value: Optional[str]) -> Optional[str]:
        if value is None:
            return None
        stripped = value.strip()
        if not stripped:
            raise ValueError("root directory cannot be empty")
        if ".." in stripped.replace("\\", "/").split("/"):
            raise ValueError("root directory may not contain '..' segments")
        return stripped

    @field_validator("language")
    @classmethod
    def _validate_language(cls, value: str) -> str:
        normalized = value.strip().lower() or DEFAULT_LANGUAGE
        if normalized not in SUPPORTED_LANGUAGES:
            raise ValueError(f"unsupported language '{value}'")
        return normalized

    @field_validator("excluded_categories")
    @classmethod
    def _normalize_excluded(cls, value: List[str]) -> List[str]:
        return sorted({name.strip() for name in value if name and name.strip()})

    @property
    def excluded(self) -> frozenset[str]:
        """Return the excluded category names as a set."""
        return frozenset(self.excluded_categories)


__all__ = [
    "SUPPORTED_LANGUAGES",
    "DEFAULT_LANGUAGE",
    "OutfitPickerBaseModel",
    "LoggingSettings",
    "CLIOptions",
    "OutfitPickerConfig",
]

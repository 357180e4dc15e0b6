"""Exceptions raised by the configuration layer."""


class ConfigError(Exception):
    """Raised when the configuration file cannot be read, parsed, or written."""


class InvalidConfigValueError(ConfigError):
    """Raised when merged configuration values fail validation.

    Attributes:
        fields: Dotted field paths that failed validation.
    """

    def __init__(self, message: str, fields: tuple[str, ...] = ()) -> None:
        super().__init__(message)
        self.fields = fields

"""Rotation state errors."""


class StateError(Exception):
    """Base exception for rotation state repository operations."""


class MissingStateError(StateError):
    """Raised when no rotation cache has been persisted yet."""

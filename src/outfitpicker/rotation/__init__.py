"""Rotation engine and session tracking."""

from .engine import OutfitPicker
from .models import RotationProgress
from .session import OutfitSession

__all__ = ["OutfitPicker", "OutfitSession", "RotationProgress"]

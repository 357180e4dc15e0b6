"""Top-level package for the outfit picker.

The public API is resolved lazily so importing the package stays cheap for
the CLI entry point.
"""

from importlib import import_module
from importlib import metadata as _metadata

_LAZY_EXPORTS = {
    "OutfitPicker": "outfitpicker.rotation.engine",
    "OutfitSession": "outfitpicker.rotation.session",
    "RotationProgress": "outfitpicker.rotation.models",
    "Category": "outfitpicker.catalog.models",
    "CategoryInfo": "outfitpicker.catalog.models",
    "CategoryState": "outfitpicker.catalog.models",
    "Item": "outfitpicker.catalog.models",
    "WearOutcome": "outfitpicker.errors",
    "OutfitPickerError": "outfitpicker.errors",
}

__all__ = ["__version__", *_LAZY_EXPORTS]


def __getattr__(name: str):
    if name == "__version__":
        return _metadata.version("outfitpicker")
    module_name = _LAZY_EXPORTS.get(name)
    if module_name is not None:
        return getattr(import_module(module_name), name)
    raise AttributeError(f"module {__name__!r} has no attribute {name!r}")


def __dir__():
    return sorted(list(globals().keys()) + __all__)

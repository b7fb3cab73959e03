"""
Editing model, selected attachment and the media widget control.

Exports are resolved lazily so the service layer can import the leaf
modules here without pulling in the control.
"""

from __future__ import annotations

import importlib
from typing import TYPE_CHECKING

if TYPE_CHECKING:
    from .attachment import AttachmentSnapshot
    from .editing_model import EditingModel
    from .media_widget_control import MediaWidgetControl

_EXPORTS = {
    "AttachmentSnapshot": ("pyqt_mediawidgets.forms.attachment", "AttachmentSnapshot"),
    "EditingModel": ("pyqt_mediawidgets.forms.editing_model", "EditingModel"),
    "MediaWidgetControl": ("pyqt_mediawidgets.forms.media_widget_control", "MediaWidgetControl"),
}


def __getattr__(name: str):
    if name in _EXPORTS:
        module_name, attr = _EXPORTS[name]
        module = importlib.import_module(module_name)
        value = getattr(module, attr)
        globals()[name] = value
        return value
    raise AttributeError(f"module {__name__!r} has no attribute {name!r}")


__all__ = list(_EXPORTS.keys())

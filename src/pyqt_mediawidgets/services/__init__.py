"""
Service layer for media widget editing.

Selection, preview rendering, field change dispatch and signal
blocking.
"""

from .field_change_dispatcher import FieldChangeDispatcher, FieldChangeEvent
from .http_preview_client import AjaxPreviewClient
from .preview_service import PreviewRenderer, PreviewSnapshot, PreviewState
from .selection_session import (
    PickerRequest,
    ResolvedVia,
    SelectionMode,
    SelectionResolver,
    SelectionResult,
    SelectionSession,
    SessionState,
)
from .shortcode import Shortcode, build_preview_shortcode
from .signal_service import SignalService

__all__ = [
    "FieldChangeDispatcher",
    "FieldChangeEvent",
    "AjaxPreviewClient",
    "PreviewRenderer",
    "PreviewSnapshot",
    "PreviewState",
    "PickerRequest",
    "ResolvedVia",
    "SelectionMode",
    "SelectionResolver",
    "SelectionResult",
    "SelectionSession",
    "SessionState",
    "Shortcode",
    "build_preview_shortcode",
    "SignalService",
]

"""
Unified Field Change Dispatcher.

Routes every field edit of a media widget control through one place:
update the editing model, then refresh the preview when the field affects it.
"""
from __future__ import annotations

import logging
from dataclasses import dataclass
from typing import TYPE_CHECKING, Any

if TYPE_CHECKING:
    from pyqt_mediawidgets.forms.media_widget_control import MediaWidgetControl

logger = logging.getLogger(__name__)

# Debug flag for verbose dispatcher logging
DEBUG_DISPATCHER = False


@dataclass(frozen=True)
class FieldChangeEvent:
    """Immutable event representing a field change."""
    field_name: str                         # Schema field name
    value: Any                              # New raw value
    source_control: 'MediaWidgetControl'    # Where change originated
    is_reset: bool = False                  # True when reverting a rejected value (no preview refresh)


class FieldChangeDispatcher:
    """Singleton dispatcher for all field changes. Stateless."""

    _instance = None

    @classmethod
    def instance(cls) -> 'FieldChangeDispatcher':
        if cls._instance is None:
            cls._instance = cls()
        return cls._instance

    def dispatch(self, event: FieldChangeEvent) -> bool:
        """Handle a field change event.

        Returns:
            True if a preview refresh was requested
        """
        source = event.source_control

        if DEBUG_DISPATCHER:
            reset_tag = " [RESET]" if event.is_reset else ""
            logger.info(f"DISPATCH{reset_tag}: {source.instance_id}.{event.field_name} = {repr(event.value)[:50]}")

        # Reentrancy guard: model observers may echo the change back
        if source._dispatching:
            if DEBUG_DISPATCHER:
                logger.warning(f"DISPATCH BLOCKED: {source.instance_id} already dispatching")
            return False
        source._dispatching = True

        try:
            # 1. Update the editing model (type coercion only, observers notified synchronously)
            source.model.set(event.field_name, event.value)

            # 2. Refresh preview for preview-relevant fields
            if event.is_reset or event.field_name not in source.preview_fields:
                return False
            logger.debug(f"Field '{event.field_name}' affects preview, refreshing")
            source.refresh_preview()
            return True
        finally:
            source._dispatching = False

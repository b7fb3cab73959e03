"""
Instance schema layer.

Pure data plus validation; no Qt dependency.
"""

from .field_schema import FieldDescriptor, Schema, ValueType
from .sanitizers import esc_url_raw, kses_post, sanitize_text_field
from .widget_schemas import (
    MEDIA_WIDGET_SCHEMA,
    VIDEO_WIDGET_SCHEMA,
    export_widget_schemas,
    get_preview_fields,
    get_widget_schema,
)

__all__ = [
    "FieldDescriptor",
    "Schema",
    "ValueType",
    "esc_url_raw",
    "kses_post",
    "sanitize_text_field",
    "MEDIA_WIDGET_SCHEMA",
    "VIDEO_WIDGET_SCHEMA",
    "export_widget_schemas",
    "get_preview_fields",
    "get_widget_schema",
]

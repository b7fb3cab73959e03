"""Instance schemas for the media widget family."""

from typing import Any, Dict, FrozenSet

from pyqt_mediawidgets.schema.field_schema import FieldDescriptor, Schema, ValueType
from pyqt_mediawidgets.schema.sanitizers import esc_url_raw, kses_post, sanitize_text_field

LINK_TYPES = ("none", "post", "file", "custom")
PRELOAD_VALUES = ("none", "auto", "metadata")

MEDIA_WIDGET_SCHEMA = Schema(
    [
        ("attachment_id", FieldDescriptor(ValueType.INTEGER, default=0, minimum=0)),
        ("url", FieldDescriptor(ValueType.STRING, default="", sanitize=esc_url_raw, format="uri")),
        ("title", FieldDescriptor(ValueType.STRING, default="", sanitize=sanitize_text_field)),
        ("description", FieldDescriptor(ValueType.STRING, default="", sanitize=kses_post)),
        ("link_type", FieldDescriptor(ValueType.STRING, default="none", allowed_values=LINK_TYPES)),
        ("link_url", FieldDescriptor(ValueType.STRING, default="", sanitize=esc_url_raw, format="uri")),
    ],
    name="media",
)

VIDEO_WIDGET_SCHEMA = MEDIA_WIDGET_SCHEMA.extend(
    [
        ("autoplay", FieldDescriptor(ValueType.BOOLEAN, default=False)),
        ("caption", FieldDescriptor(ValueType.STRING, default="", sanitize=kses_post)),
        ("preload", FieldDescriptor(ValueType.STRING, default="none", allowed_values=PRELOAD_VALUES)),
        ("loop", FieldDescriptor(ValueType.BOOLEAN, default=False)),
    ],
    name="media_video",
)

WIDGET_SCHEMAS: Dict[str, Schema] = {
    "media_video": VIDEO_WIDGET_SCHEMA,
}

# Fields whose change invalidates the rendered preview
PREVIEW_FIELDS: Dict[str, FrozenSet[str]] = {
    "media_video": frozenset({"attachment_id", "url"}),
}


def get_widget_schema(id_base: str) -> Schema:
    """Return the schema registered for a widget type.

    Raises:
        KeyError: If no schema is registered for ``id_base``.
    """
    try:
        return WIDGET_SCHEMAS[id_base]
    except KeyError:
        raise KeyError(f"No instance schema registered for widget type '{id_base}'") from None


def get_preview_fields(id_base: str) -> FrozenSet[str]:
    return PREVIEW_FIELDS.get(id_base, frozenset({"attachment_id", "url"}))


def export_widget_schemas() -> Dict[str, Dict[str, Dict[str, Any]]]:
    """Exported schema metadata, one mapping per widget type."""
    return {id_base: schema.export() for id_base, schema in WIDGET_SCHEMAS.items()}

"""Tests for instance schemas and sanitizers."""

import pytest

from pyqt_mediawidgets.exceptions import InvalidFieldValue, SchemaCompositionError
from pyqt_mediawidgets.schema import (
    MEDIA_WIDGET_SCHEMA,
    VIDEO_WIDGET_SCHEMA,
    FieldDescriptor,
    Schema,
    ValueType,
    esc_url_raw,
    export_widget_schemas,
    get_preview_fields,
    get_widget_schema,
    kses_post,
    sanitize_text_field,
)


def test_video_schema_field_order():
    """Base fields keep their position, video fields are appended."""
    assert list(VIDEO_WIDGET_SCHEMA) == [
        "attachment_id", "url", "title", "description", "link_type", "link_url",
        "autoplay", "caption", "preload", "loop",
    ]
    assert VIDEO_WIDGET_SCHEMA.name == "media_video"


def test_validate_empty_returns_defaults():
    record = VIDEO_WIDGET_SCHEMA.validate({})
    assert record == VIDEO_WIDGET_SCHEMA.defaults()
    assert record["preload"] == "none"
    assert record["autoplay"] is False


def test_validate_bogus_enum_falls_back_to_default():
    errors = []
    record = VIDEO_WIDGET_SCHEMA.validate({"preload": "bogus", "loop": "1"}, errors=errors)

    assert record["preload"] == "none"
    assert record["loop"] is True
    assert [error.field for error in errors] == ["preload"]
    assert errors[0].value == "bogus"
    assert errors[0].default == "none"


def test_validate_is_idempotent():
    raw = {
        "attachment_id": "42",
        "url": " https://example.com/my video.mp4 ",
        "title": "<b>Launch</b>   day <script>alert(1)</script>",
        "description": '<p onclick="x()">Watch <a href="javascript:evil()">this</a></p>',
        "link_type": "file",
        "autoplay": "yes",
        "caption": "Tom & Jerry",
        "preload": "metadata",
    }
    once = VIDEO_WIDGET_SCHEMA.validate(raw)
    assert VIDEO_WIDGET_SCHEMA.validate(once) == once
    assert once["attachment_id"] == 42
    assert once["url"] == "https://example.com/my%20video.mp4"
    assert once["title"] == "Launch day"
    assert once["autoplay"] is True


def test_validate_drops_unknown_fields():
    record = MEDIA_WIDGET_SCHEMA.validate({"url": "https://example.com", "color": "red"})
    assert "color" not in record
    assert set(record) == set(MEDIA_WIDGET_SCHEMA)


def test_validate_rejects_negative_and_non_numeric_ids():
    errors = []
    assert MEDIA_WIDGET_SCHEMA.validate({"attachment_id": -3}, errors=errors)["attachment_id"] == 0
    assert MEDIA_WIDGET_SCHEMA.validate({"attachment_id": "abc"}, errors=errors)["attachment_id"] == 0
    assert [error.field for error in errors] == ["attachment_id", "attachment_id"]


def test_validate_field_is_strict():
    with pytest.raises(InvalidFieldValue) as exc_info:
        VIDEO_WIDGET_SCHEMA.validate_field("link_type", "somewhere")
    assert exc_info.value.field == "link_type"
    assert VIDEO_WIDGET_SCHEMA.validate_field("link_type", "post") == "post"

    with pytest.raises(KeyError):
        VIDEO_WIDGET_SCHEMA.validate_field("color", "red")


def test_coerce_does_not_sanitize():
    """Coercion keeps markup; only validation strips it."""
    assert VIDEO_WIDGET_SCHEMA.coerce("title", "<b>Bold</b>") == "<b>Bold</b>"
    assert VIDEO_WIDGET_SCHEMA.coerce("autoplay", "on") is True
    assert VIDEO_WIDGET_SCHEMA.coerce("attachment_id", 7.0) == 7

    with pytest.raises(InvalidFieldValue):
        VIDEO_WIDGET_SCHEMA.coerce("autoplay", "maybe")
    with pytest.raises(InvalidFieldValue):
        VIDEO_WIDGET_SCHEMA.coerce("attachment_id", 1.5)


def test_value_type_coerce():
    assert ValueType.BOOLEAN.coerce("0") is False
    assert ValueType.BOOLEAN.coerce("") is False
    assert ValueType.BOOLEAN.coerce(1) is True
    assert ValueType.INTEGER.coerce("") == 0
    assert ValueType.INTEGER.coerce(True) == 1
    assert ValueType.STRING.coerce(None) == ""
    assert ValueType.STRING.coerce(False) == ""
    assert ValueType.STRING.coerce(12) == "12"


def test_extend_override_keeps_position():
    schema = MEDIA_WIDGET_SCHEMA.extend(
        {"link_type": FieldDescriptor(ValueType.STRING, default="file", allowed_values=("file", "none"))},
        name="media_file",
    )
    assert list(schema) == list(MEDIA_WIDGET_SCHEMA)
    assert schema["link_type"].default == "file"
    assert schema.name == "media_file"
    # Base schema untouched
    assert MEDIA_WIDGET_SCHEMA["link_type"].default == "none"


def test_extend_rejects_type_change():
    with pytest.raises(SchemaCompositionError):
        MEDIA_WIDGET_SCHEMA.extend({"attachment_id": FieldDescriptor(ValueType.STRING, default="")})


def test_default_must_be_fixed_point():
    with pytest.raises(ValueError):
        FieldDescriptor(ValueType.STRING, default="<b>x</b>", sanitize=sanitize_text_field)
    with pytest.raises(ValueError):
        FieldDescriptor(ValueType.STRING, default="sometimes", allowed_values=("always", "never"))
    with pytest.raises(ValueError):
        FieldDescriptor(ValueType.INTEGER, default="0")


def test_schema_requires_descriptors():
    with pytest.raises(TypeError):
        Schema({"url": "https://example.com"})


def test_schema_is_read_only():
    with pytest.raises(TypeError):
        VIDEO_WIDGET_SCHEMA["url"] = FieldDescriptor(ValueType.STRING, default="")


def test_export_metadata():
    exported = VIDEO_WIDGET_SCHEMA.export()
    assert exported["preload"] == {"type": "string", "default": "none", "enum": ["none", "auto", "metadata"]}
    assert exported["attachment_id"] == {"type": "integer", "default": 0, "minimum": 0}
    assert exported["url"]["format"] == "uri"
    assert exported["autoplay"] == {"type": "boolean", "default": False}


def test_from_export_round_trips_metadata():
    rebuilt = Schema.from_export(VIDEO_WIDGET_SCHEMA.export(), name="media_video")
    assert rebuilt.export() == VIDEO_WIDGET_SCHEMA.export()
    assert rebuilt.validate({"preload": "bogus"})["preload"] == "none"


def test_widget_schema_registry():
    assert get_widget_schema("media_video") is VIDEO_WIDGET_SCHEMA
    assert get_preview_fields("media_video") == frozenset({"attachment_id", "url"})
    assert set(export_widget_schemas()) == {"media_video"}
    with pytest.raises(KeyError):
        get_widget_schema("media_gallery")


# ========== SANITIZERS ==========

def test_sanitize_text_field_strips_markup():
    assert sanitize_text_field("<b>Hi</b>\n  there<script>steal()</script>") == "Hi there"
    assert sanitize_text_field("") == ""


def test_sanitize_text_field_escapes_and_is_idempotent():
    once = sanitize_text_field("Tom & Jerry")
    assert once == "Tom &amp; Jerry"
    assert sanitize_text_field(once) == once


@pytest.mark.parametrize("url", [
    "javascript:alert(1)",
    "JavaScript:alert(1)",
    "data:text/html;base64,PHNjcmlwdD4=",
    "vbscript:msgbox",
])
def test_esc_url_raw_rejects_unsafe_schemes(url):
    assert esc_url_raw(url) == ""


def test_esc_url_raw_keeps_safe_urls():
    assert esc_url_raw("https://example.com/a b.mp4") == "https://example.com/a%20b.mp4"
    assert esc_url_raw("/wp-content/uploads/clip.mp4") == "/wp-content/uploads/clip.mp4"
    assert esc_url_raw("https://exa\x00mple.com") == "https://example.com"


def test_kses_post_keeps_safe_markup():
    dirty = '<p onclick="x()">Watch <a href="javascript:evil()" title="t">this</a><script>bad()</script></p>'
    cleaned = kses_post(dirty)
    assert cleaned == '<p>Watch <a title="t">this</a></p>'
    assert kses_post(cleaned) == cleaned


def test_kses_post_unwraps_unknown_tags():
    cleaned = kses_post('<div class="x"><em>Hello</em> <a href="https://example.com">world</a></div>')
    assert cleaned == '<em>Hello</em> <a href="https://example.com">world</a>'


HOSTILE_MARKUP = [
    "<!DOCTYPE html><p>x</p>",
    "<!-- <script>steal()</script> -->kept",
    "<?php system($_GET[1]) ?>ok",
    "<![CDATA[<script>x</script>]]>ok",
    "<p>open <b>bold <a href='javascript:x()'>link",
    "<b><i>mis</b>nested</i>",
    "&lt;script&gt;alert(1)&lt;/script&gt; &amp;amp; a&nbsp;b",
    "<!DOCTYPE html><!-- c --><?xml version='1.0'?><div><em>deep</em></div>",
]


@pytest.mark.parametrize("markup", HOSTILE_MARKUP)
@pytest.mark.parametrize("field_name", ["title", "description", "caption"])
def test_validate_is_idempotent_for_hostile_markup(field_name, markup):
    once = VIDEO_WIDGET_SCHEMA.validate({field_name: markup})
    assert VIDEO_WIDGET_SCHEMA.validate(once) == once
    assert "<!" not in once[field_name]
    assert "<?" not in once[field_name]


@pytest.mark.parametrize("markup, expected", [
    ("<!DOCTYPE html><p>x</p>", "<p>x</p>"),
    ("<!-- <script>x</script> -->ok", "ok"),
    ("<?php system($_GET[1]) ?>ok", "ok"),
    ("<![CDATA[hidden]]>ok", "ok"),
    ("<!DOCTYPE html>\n<em>a</em>", "<em>a</em>"),
])
def test_kses_post_drops_non_text_nodes(markup, expected):
    assert kses_post(markup) == expected


def test_sanitize_text_field_drops_non_text_nodes():
    assert sanitize_text_field("<!-- hidden -->Shown<?php echo 1 ?>") == "Shown"
    assert sanitize_text_field("<!DOCTYPE html>Title") == "Title"

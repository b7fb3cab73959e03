"""Shortcode representation of the instance fields sent for preview rendering."""

from dataclasses import dataclass, field
from types import MappingProxyType
from typing import Any, Mapping, Optional

from pyqt_mediawidgets.protocols.form_config import MediaWidgetConfig


def _escape_brackets(value: str) -> str:
    return str(value).replace("[", "&#91;").replace("]", "&#93;")


def _escape_attr(value: str) -> str:
    return _escape_brackets(str(value).replace('"', "&quot;"))


@dataclass(frozen=True)
class Shortcode:
    """A closed shortcode: ``[tag key="value"]content[/tag]``."""
    tag: str
    attrs: Mapping[str, str] = field(default_factory=dict)
    content: Optional[str] = None

    def __post_init__(self):
        object.__setattr__(self, "attrs", MappingProxyType(dict(self.attrs)))

    def string(self) -> str:
        parts = [self.tag]
        parts.extend(f'{key}="{_escape_attr(value)}"' for key, value in self.attrs.items())
        # Brackets in content would open or close shortcodes of their own
        content = _escape_brackets(self.content) if self.content else ""
        return f"[{' '.join(parts)}]{content}[/{self.tag}]"

    def __str__(self) -> str:
        return self.string()


def build_preview_shortcode(values: Mapping[str, Any], config: MediaWidgetConfig) -> Shortcode:
    """Derive the preview shortcode from the current instance values.

    With an attachment id the media tag is used with fixed preview
    dimensions; a bare URL falls back to the embed tag.
    """
    url = values.get("url") or ""
    if values.get("attachment_id"):
        return Shortcode(
            tag=config.preview_tag,
            attrs={
                "src": url,
                "width": config.preview_width,
                "height": config.preview_height,
            },
        )
    return Shortcode(tag=config.embed_tag, content=url)

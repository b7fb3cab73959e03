"""Configuration for media widget controls.

Applications set one process-wide configuration; controls may also be handed
an explicit instance.
"""

from typing import Dict, Optional, Tuple
from dataclasses import dataclass, field


DEFAULT_MESSAGES: Dict[str, str] = {
    "no_media_selected": "No video selected",
    "select_media": "Select Video",
    "change_media": "Change Video",
    "edit_media": "Edit Video",
    "replace_media": "Replace Video",
    "save": "Save",
    "loading_preview": "Loading preview…",
    "missing_attachment": (
        "We can't find that video. Check your media library and make sure it wasn't deleted."
    ),
    "unknown_error": "Unable to preview media due to an unknown error.",
    "field_reset": "{field} was reset to its default value.",
}


@dataclass
class MediaWidgetConfig:
    """Configuration for media widget editing.

    Attributes:
        preview_width: Width attribute of the preview shortcode
        preview_height: Height attribute of the preview shortcode
        preview_tag: Shortcode tag used when an attachment is selected
        embed_tag: Shortcode tag used for a bare URL
        preview_action: Ajax action sent with preview requests
        preview_endpoint: URL of the preview rendering endpoint
        preview_request_timeout: Seconds before an HTTP preview request fails (None waits)
        preview_debounce_ms: Trailing debounce for preview refreshes (0 renders immediately)
        hidden_fields: Schema fields not shown as form rows
        messages: User-visible strings
    """

    preview_width: str = "250"
    preview_height: str = "150"
    preview_tag: str = "video"
    embed_tag: str = "embed"
    preview_action: str = "parse-media-shortcode"
    preview_endpoint: Optional[str] = None
    preview_request_timeout: Optional[float] = None
    preview_debounce_ms: int = 0
    hidden_fields: Tuple[str, ...] = ("attachment_id", "url")
    messages: Dict[str, str] = field(default_factory=lambda: dict(DEFAULT_MESSAGES))

    def message(self, key: str, **kwargs) -> str:
        text = self.messages.get(key, DEFAULT_MESSAGES.get(key, key))
        return text.format(**kwargs) if kwargs else text


# Global config instance (set by application)
_media_widget_config: Optional[MediaWidgetConfig] = None


def set_media_widget_config(config: MediaWidgetConfig) -> None:
    """Set the global media widget configuration.

    Args:
        config: MediaWidgetConfig instance
    """
    global _media_widget_config
    _media_widget_config = config


def get_media_widget_config() -> MediaWidgetConfig:
    """Get the current media widget configuration.

    Returns:
        Current MediaWidgetConfig or default if not set
    """
    if _media_widget_config is None:
        return MediaWidgetConfig()
    return _media_widget_config

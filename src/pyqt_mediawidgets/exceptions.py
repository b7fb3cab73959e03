"""Domain exceptions for media widget editing."""

from typing import Any, Optional


class MediaWidgetError(Exception):
    """Base class for media widget errors."""


class InvalidFieldValue(MediaWidgetError, ValueError):
    """Raised when a field value fails type, enumeration or range checks.

    Recovered locally: callers substitute ``default`` and never persist ``value``.
    """

    def __init__(self, field: str, value: Any, default: Any = None, reason: str = ""):
        self.field = field
        self.value = value
        self.default = default
        self.reason = reason
        message = f"Invalid value {value!r} for field '{field}'"
        if reason:
            message = f"{message}: {reason}"
        super().__init__(message)


class MissingAttachment(MediaWidgetError):
    """Raised when the selected attachment can no longer be resolved."""

    def __init__(self, attachment_id: Optional[int] = None):
        self.attachment_id = attachment_id
        super().__init__(f"Attachment {attachment_id} could not be found")


class PreviewRenderFailure(MediaWidgetError):
    """Raised when the remote preview round trip fails."""


class SelectionCancelled(MediaWidgetError):
    """Raised when reading the result of a cancelled selection session."""


class SelectionStateError(MediaWidgetError, RuntimeError):
    """Raised on an illegal selection session transition."""


class SchemaCompositionError(MediaWidgetError, ValueError):
    """Raised when a schema extension changes the type of an inherited field."""

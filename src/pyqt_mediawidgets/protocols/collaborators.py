"""Protocols for the external collaborators a media widget control talks to.

All collaborators are passed to the control explicitly; nothing is looked up
from a global registry.
"""

from dataclasses import dataclass
from typing import TYPE_CHECKING, Protocol

if TYPE_CHECKING:
    from pyqt_mediawidgets.forms.attachment import AttachmentSnapshot
    from pyqt_mediawidgets.services.selection_session import SelectionSession
    from pyqt_mediawidgets.services.shortcode import Shortcode


@dataclass(frozen=True)
class PreviewMarkup:
    """Markup fragments returned by a preview rendering round trip."""
    head: str = ""
    body: str = ""


class PickerProvider(Protocol):
    """Protocol for the attachment picker UI.

    ``open`` receives the session and drives it: it reads ``session.request``,
    calls ``session.mark_ready()`` once the picker is interactive, and later
    ``session.confirm(state_id, payload, display_settings)`` or
    ``session.cancel()``.
    """

    def open(self, session: "SelectionSession") -> None:
        ...


class PreviewRenderProvider(Protocol):
    """Protocol for the remote preview renderer.

    ``render`` blocks and is called off the GUI thread. Any exception is
    treated as a preview failure.
    """

    def render(self, shortcode: "Shortcode") -> PreviewMarkup:
        ...


class AttachmentLookup(Protocol):
    """Protocol for resolving an attachment id to its metadata.

    Raises ``MissingAttachment`` when the attachment no longer exists.
    """

    def fetch(self, attachment_id: int) -> "AttachmentSnapshot":
        ...

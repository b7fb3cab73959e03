"""
Selection session: the transient state of picking or replacing an attachment.

    CLOSED -> OPENING -> OPEN -> RESOLVED -> CLOSED
                          OPEN -> CANCELLED -> CLOSED

The picker collaborator owns the UI; this module only defines what crosses
the boundary. How a confirmed payload becomes instance properties depends on
the picker's named state at confirmation time, never on the payload's shape:

- "embed": a URL with no backing attachment, attachment_id is 0 and the link
  type comes from the payload itself
- "video-details" / "replace-video": the edit frame, which reports the
  attachment id, link, autoplay and loop it was editing
- any other state: a library attachment, whose link type comes from the
  picker's active display settings
"""

import logging
from dataclasses import dataclass, field
from enum import Enum
from types import MappingProxyType
from typing import TYPE_CHECKING, Any, Callable, Dict, Mapping, Optional

from PyQt6.QtCore import QObject, pyqtSignal

from pyqt_mediawidgets.exceptions import SelectionCancelled, SelectionStateError

if TYPE_CHECKING:
    from pyqt_mediawidgets.protocols.collaborators import PickerProvider

logger = logging.getLogger(__name__)

EMBED_STATE = "embed"
DETAILS_STATES = frozenset({"video-details", "replace-video"})


class SelectionMode(Enum):
    SELECT_NEW = "select-new"
    REPLACE_EMBED = "replace-embed"
    EDIT_DETAILS = "edit-details"


class SessionState(Enum):
    CLOSED = "closed"
    OPENING = "opening"
    OPEN = "open"
    RESOLVED = "resolved"
    CANCELLED = "cancelled"


class ResolvedVia(Enum):
    ATTACHMENT = "attachment"
    EMBED = "embed"


class ResolutionStrategy(Enum):
    LIBRARY = "library"
    EMBED = "embed"
    DETAILS = "details"


_TRANSITIONS = {
    SessionState.CLOSED: frozenset({SessionState.OPENING}),
    SessionState.OPENING: frozenset({SessionState.OPEN}),
    SessionState.OPEN: frozenset({SessionState.RESOLVED, SessionState.CANCELLED}),
    SessionState.RESOLVED: frozenset({SessionState.CLOSED}),
    SessionState.CANCELLED: frozenset({SessionState.CLOSED}),
}


@dataclass(frozen=True)
class PickerRequest:
    """What the control asks of the picker."""
    mode: SelectionMode
    seed_attachment_id: Optional[int] = None
    metadata: Mapping[str, Any] = field(default_factory=dict)

    def __post_init__(self):
        object.__setattr__(self, "metadata", MappingProxyType(dict(self.metadata)))


@dataclass(frozen=True)
class SelectionResult:
    """Property set produced by a confirmed selection."""
    resolved_via: ResolvedVia
    attachment_id: int
    url: str
    caption: str
    description: str
    link_type: str
    extra: Mapping[str, Any] = field(default_factory=dict)

    def __post_init__(self):
        object.__setattr__(self, "extra", MappingProxyType(dict(self.extra)))

    def to_props(self) -> Dict[str, Any]:
        """Instance fields to apply to the editing model."""
        props = {
            "attachment_id": self.attachment_id,
            "caption": self.caption,
            "description": self.description,
            "link_type": self.link_type,
            "url": self.url,
        }
        props.update(self.extra)
        return props


class SelectionResolver:
    """Turns a confirmed picker payload into a ``SelectionResult``.

    One handler per ``ResolutionStrategy``; the strategy is picked from the
    picker state id alone.
    """

    def __init__(self):
        self._handlers: Dict[ResolutionStrategy, Callable[..., SelectionResult]] = {
            ResolutionStrategy.LIBRARY: self._resolve_library,
            ResolutionStrategy.EMBED: self._resolve_embed,
            ResolutionStrategy.DETAILS: self._resolve_details,
        }

    @staticmethod
    def strategy_for(state_id: str) -> ResolutionStrategy:
        if state_id == EMBED_STATE:
            return ResolutionStrategy.EMBED
        if state_id in DETAILS_STATES:
            return ResolutionStrategy.DETAILS
        return ResolutionStrategy.LIBRARY

    def resolve(
        self,
        state_id: str,
        payload: Optional[Mapping[str, Any]],
        display_settings: Optional[Mapping[str, Any]] = None,
    ) -> Optional[SelectionResult]:
        """Return the property set, or None when the payload is empty."""
        if not payload:
            return None
        strategy = self.strategy_for(state_id)
        logger.debug(f"Resolving selection confirmed in '{state_id}' as {strategy.value}")
        return self._handlers[strategy](payload, display_settings or {})

    def _resolve_library(self, payload, display_settings) -> SelectionResult:
        return SelectionResult(
            resolved_via=ResolvedVia.ATTACHMENT,
            attachment_id=int(payload.get("id") or 0),
            url=payload.get("url", ""),
            caption=payload.get("caption", ""),
            description=payload.get("description", ""),
            link_type=display_settings.get("link", "none"),
        )

    def _resolve_embed(self, payload, display_settings) -> SelectionResult:
        return SelectionResult(
            resolved_via=ResolvedVia.EMBED,
            attachment_id=0,
            url=payload.get("url", ""),
            caption=payload.get("caption", ""),
            description=payload.get("description", ""),
            link_type=payload.get("link", "none"),
        )

    def _resolve_details(self, payload, display_settings) -> SelectionResult:
        return SelectionResult(
            resolved_via=ResolvedVia.ATTACHMENT,
            attachment_id=int(payload.get("attachment_id") or 0),
            url=payload.get("url", ""),
            caption=payload.get("caption", ""),
            description=payload.get("description", ""),
            link_type=payload.get("link", "none"),
            extra={
                "autoplay": bool(payload.get("autoplay", False)),
                "loop": bool(payload.get("loop", False)),
            },
        )


class SelectionSession(QObject):
    """One picker interaction. Discarded once closed; never reused."""

    state_changed = pyqtSignal(object)
    resolved = pyqtSignal(object)
    cancelled = pyqtSignal()
    closed = pyqtSignal()

    def __init__(self, request: PickerRequest, resolver: Optional[SelectionResolver] = None, parent=None):
        super().__init__(parent)
        self.request = request
        self._resolver = resolver or SelectionResolver()
        self._state = SessionState.CLOSED
        self._discarded = False
        self._result: Optional[SelectionResult] = None
        self._was_cancelled = False

    @property
    def state(self) -> SessionState:
        return self._state

    @property
    def mode(self) -> SelectionMode:
        return self.request.mode

    @property
    def is_active(self) -> bool:
        return not self._discarded and self._state in (SessionState.OPENING, SessionState.OPEN)

    @property
    def is_discarded(self) -> bool:
        return self._discarded

    @property
    def result(self) -> SelectionResult:
        """
        Raises:
            SelectionCancelled: If the session was cancelled
            SelectionStateError: If the session has not resolved yet
        """
        if self._was_cancelled:
            raise SelectionCancelled(f"Selection ({self.mode.value}) was cancelled")
        if self._result is None:
            raise SelectionStateError(f"Selection is {self._state.value}, not resolved")
        return self._result

    def _transition(self, new_state: SessionState) -> None:
        if self._discarded:
            raise SelectionStateError("Selection session is closed and cannot be reused")
        if new_state not in _TRANSITIONS[self._state]:
            raise SelectionStateError(
                f"Illegal selection transition {self._state.value} -> {new_state.value}"
            )
        logger.debug(f"Selection ({self.mode.value}): {self._state.value} -> {new_state.value}")
        self._state = new_state
        self.state_changed.emit(new_state)

    def _finish(self) -> None:
        self._transition(SessionState.CLOSED)
        self._discarded = True
        self.closed.emit()

    def open(self, picker: "PickerProvider") -> None:
        """Hand the session to the picker collaborator."""
        self._transition(SessionState.OPENING)
        try:
            picker.open(self)
        except Exception:
            # Picker never became interactive; nothing was selected
            self._discarded = True
            self._state = SessionState.CLOSED
            self.closed.emit()
            raise

    def mark_ready(self) -> None:
        """Called by the picker once it accepts user interaction."""
        self._transition(SessionState.OPEN)

    def confirm(
        self,
        state_id: str,
        payload: Optional[Mapping[str, Any]],
        display_settings: Optional[Mapping[str, Any]] = None,
    ) -> Optional[SelectionResult]:
        """
        Confirm the picker's current state.

        Args:
            state_id: Named picker state the user confirmed in
            payload: Selected attachment or embed properties
            display_settings: Active display settings (library states only)

        Returns:
            The resolved property set, or None if the payload was empty (the
            session is then cancelled).
        """
        if self._discarded or self._state is not SessionState.OPEN:
            raise SelectionStateError(f"Cannot confirm a selection that is {self._state.value}")

        result = self._resolver.resolve(state_id, payload, display_settings)
        if result is None:
            logger.debug(f"Empty payload confirmed in state '{state_id}', treating as cancel")
            self.cancel()
            return None

        self._transition(SessionState.RESOLVED)
        self._result = result
        self.resolved.emit(result)
        self._finish()
        return result

    def cancel(self) -> None:
        """User dismissed the picker without confirming."""
        self._transition(SessionState.CANCELLED)
        self._was_cancelled = True
        self.cancelled.emit()
        self._finish()

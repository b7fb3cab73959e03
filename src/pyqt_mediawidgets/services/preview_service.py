"""
Preview renderer.

Decides, for the current instance values and selected attachment, whether the
preview can be produced locally (nothing selected, or a known attachment
error) or needs a remote round trip, and publishes the resulting state.

Every request gets a token from a monotonically increasing counter. Only the
response to the latest token is applied; anything older is dropped, so the
preview never goes back to an outdated render.
"""

import itertools
import logging
from functools import partial
from dataclasses import dataclass
from enum import Enum
from typing import Any, Mapping, Optional

from PyQt6.QtCore import QObject, pyqtSignal

from pyqt_mediawidgets.core.background_task import BackgroundTaskManager, TaskRunner
from pyqt_mediawidgets.exceptions import MissingAttachment, PreviewRenderFailure
from pyqt_mediawidgets.forms.attachment import AttachmentSnapshot
from pyqt_mediawidgets.protocols.collaborators import PreviewMarkup, PreviewRenderProvider
from pyqt_mediawidgets.protocols.form_config import MediaWidgetConfig, get_media_widget_config
from pyqt_mediawidgets.services.shortcode import Shortcode, build_preview_shortcode

logger = logging.getLogger(__name__)


class PreviewState(Enum):
    EMPTY = "empty"
    LOADING = "loading"
    READY = "ready"
    MISSING_ATTACHMENT = "missing_attachment"
    FAILED = "failed"

    @property
    def is_error(self) -> bool:
        return self in (PreviewState.MISSING_ATTACHMENT, PreviewState.FAILED)


@dataclass(frozen=True)
class PreviewSnapshot:
    """What the preview surface should display."""
    state: PreviewState
    token: int = 0
    markup: Optional[PreviewMarkup] = None
    error: Optional[Exception] = None
    shortcode: Optional[Shortcode] = None


class PreviewRenderer(QObject):
    """Produces preview snapshots; at most one remote render is in flight."""

    preview_changed = pyqtSignal(object)

    def __init__(
        self,
        provider: PreviewRenderProvider,
        task_runner: Optional[TaskRunner] = None,
        config: Optional[MediaWidgetConfig] = None,
        parent=None,
    ):
        super().__init__(parent)
        self._provider = provider
        self._task_runner = task_runner or BackgroundTaskManager()
        self._config = config or get_media_widget_config()
        self._tokens = itertools.count(1)
        self._latest_token = 0
        self._snapshot = PreviewSnapshot(state=PreviewState.EMPTY)

    @property
    def snapshot(self) -> PreviewSnapshot:
        return self._snapshot

    @property
    def latest_token(self) -> int:
        return self._latest_token

    def _publish(self, snapshot: PreviewSnapshot) -> None:
        self._snapshot = snapshot
        logger.debug(f"Preview #{snapshot.token}: {snapshot.state.value}")
        self.preview_changed.emit(snapshot)

    def request(self, values: Mapping[str, Any], attachment: AttachmentSnapshot) -> int:
        """
        Render the preview for ``values`` and ``attachment``.

        Returns:
            The token of this request
        """
        token = next(self._tokens)
        self._latest_token = token

        if attachment.has_error:
            # Known attachment error: no round trip
            if attachment.is_missing:
                error = MissingAttachment(attachment.id or values.get("attachment_id"))
                self._publish(PreviewSnapshot(PreviewState.MISSING_ATTACHMENT, token, error=error))
            else:
                error = PreviewRenderFailure(f"Attachment error: {attachment.error}")
                self._publish(PreviewSnapshot(PreviewState.FAILED, token, error=error))
            return token

        if not values.get("attachment_id") and not values.get("url"):
            self._publish(PreviewSnapshot(PreviewState.EMPTY, token))
            return token

        shortcode = build_preview_shortcode(values, self._config)
        if not values.get("attachment_id"):
            logger.debug(f"Preview #{token}: no attachment id, rendering bare URL as {shortcode.tag}")

        self._publish(PreviewSnapshot(PreviewState.LOADING, token, shortcode=shortcode))
        self._task_runner.run(
            target=self._provider.render,
            args=(shortcode,),
            on_success=partial(self._on_rendered, token, shortcode),
            on_error=partial(self._on_failed, token, shortcode),
        )
        return token

    def _is_stale(self, token: int) -> bool:
        if token != self._latest_token:
            logger.debug(f"Discarding stale preview response #{token} (latest #{self._latest_token})")
            return True
        return False

    def _on_rendered(self, token: int, shortcode: Shortcode, markup: Any) -> None:
        if self._is_stale(token):
            return
        if not isinstance(markup, PreviewMarkup):
            self._on_failed(token, shortcode, PreviewRenderFailure(
                f"Preview renderer returned {type(markup).__name__}, expected PreviewMarkup"
            ))
            return
        self._publish(PreviewSnapshot(PreviewState.READY, token, markup=markup, shortcode=shortcode))

    def _on_failed(self, token: int, shortcode: Shortcode, error: Exception) -> None:
        if self._is_stale(token):
            return
        if not isinstance(error, PreviewRenderFailure):
            failure = PreviewRenderFailure(f"Preview render failed: {error}")
            failure.__cause__ = error
            error = failure
        logger.warning(f"Preview #{token} failed for {shortcode.string()}: {error}")
        self._publish(PreviewSnapshot(PreviewState.FAILED, token, error=error, shortcode=shortcode))

    def cleanup(self) -> None:
        """Drop any in-flight render; its response will never be applied."""
        self._latest_token = next(self._tokens)
        self._task_runner.cleanup()

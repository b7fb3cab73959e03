"""Preview surface showing the rendered media or an explicit error notice."""

import logging
from typing import Optional

from PyQt6.QtWidgets import QLabel, QStackedWidget, QTextBrowser, QVBoxLayout, QWidget

from pyqt_mediawidgets.protocols.form_config import MediaWidgetConfig, get_media_widget_config
from pyqt_mediawidgets.services.preview_service import PreviewSnapshot, PreviewState

logger = logging.getLogger(__name__)

# --- Module-level constants ---
NOTICE_ERROR_STYLE = "color: #b32d2e; border-left: 4px solid #d63638; padding: 6px;"
NOTICE_INFO_STYLE = "color: #646970; padding: 6px;"


class PreviewPanel(QWidget):
    """
    Displays a ``PreviewSnapshot``.

    Content is replaced wholesale on every snapshot; an error snapshot always
    swaps the rendered markup out for a notice, never leaving stale content.

    Usage:
        panel = PreviewPanel(parent=self)
        control.preview.preview_changed.connect(panel.show_snapshot)
    """

    def __init__(self, config: Optional[MediaWidgetConfig] = None, parent=None):
        super().__init__(parent)
        self._config = config or get_media_widget_config()
        self._state = PreviewState.EMPTY
        self._setup_ui()
        self.show_snapshot(PreviewSnapshot(PreviewState.EMPTY))

    def _setup_ui(self):
        layout = QVBoxLayout(self)
        layout.setContentsMargins(0, 0, 0, 0)

        self._stack = QStackedWidget(self)

        self._notice = QLabel(self)
        self._notice.setWordWrap(True)
        self._stack.addWidget(self._notice)

        self._browser = QTextBrowser(self)
        self._browser.setOpenExternalLinks(False)
        self._stack.addWidget(self._browser)

        layout.addWidget(self._stack)

    @property
    def state(self) -> PreviewState:
        return self._state

    @property
    def notice_text(self) -> str:
        return self._notice.text()

    @property
    def showing_markup(self) -> bool:
        return self._stack.currentWidget() is self._browser

    def _show_notice(self, text: str, is_error: bool):
        self._browser.clear()
        self._notice.setText(text)
        self._notice.setStyleSheet(NOTICE_ERROR_STYLE if is_error else NOTICE_INFO_STYLE)
        self._stack.setCurrentWidget(self._notice)

    def show_snapshot(self, snapshot: PreviewSnapshot):
        """Replace the panel content with ``snapshot``."""
        self._state = snapshot.state
        messages = self._config

        if snapshot.state is PreviewState.READY and snapshot.markup is not None:
            self._browser.setHtml(snapshot.markup.body)
            self._stack.setCurrentWidget(self._browser)
        elif snapshot.state is PreviewState.LOADING:
            self._show_notice(messages.message("loading_preview"), is_error=False)
        elif snapshot.state is PreviewState.MISSING_ATTACHMENT:
            self._show_notice(messages.message("missing_attachment"), is_error=True)
        elif snapshot.state is PreviewState.FAILED:
            self._show_notice(messages.message("unknown_error"), is_error=True)
        else:
            self._show_notice(messages.message("no_media_selected"), is_error=False)

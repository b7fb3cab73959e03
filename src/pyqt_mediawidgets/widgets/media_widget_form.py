"""Qt form for a media widget control.

Rows are generated from the control's exported schema metadata; widget edits
go to ``control.on_field_changed`` and model changes are mirrored back into
the widgets with their signals blocked.
"""

import logging
from functools import partial
from typing import Any, Dict, Mapping, Optional

from PyQt6.QtWidgets import QFormLayout, QHBoxLayout, QLabel, QPushButton, QVBoxLayout, QWidget

from pyqt_mediawidgets.exceptions import SelectionStateError
from pyqt_mediawidgets.forms.attachment import AttachmentSnapshot
from pyqt_mediawidgets.forms.media_widget_control import MediaWidgetControl
from pyqt_mediawidgets.io.instance_store import SaveResult
from pyqt_mediawidgets.protocols import CheckBoxAdapter, LineEditAdapter, MediaWidgetConfig
from pyqt_mediawidgets.services.selection_session import SelectionMode
from pyqt_mediawidgets.services.signal_service import SignalService
from pyqt_mediawidgets.widgets.no_scroll_widgets import NoScrollComboBox, NoScrollSpinBox
from pyqt_mediawidgets.widgets.preview_panel import PreviewPanel

logger = logging.getLogger(__name__)

# --- Module-level constants ---
MAX_INTEGER = 2147483647


def _field_label(field_name: str) -> str:
    return field_name.replace("_", " ").capitalize()


def create_field_widget(field_name: str, metadata: Mapping[str, Any], parent=None) -> QWidget:
    """Pick a field widget from exported schema metadata."""
    value_type = metadata["type"]
    if value_type == "boolean":
        return CheckBoxAdapter(_field_label(field_name), parent)
    if "enum" in metadata:
        widget = NoScrollComboBox(parent)
        widget.set_choices(metadata["enum"])
        return widget
    if value_type == "integer":
        widget = NoScrollSpinBox(parent)
        widget.configure_range(metadata.get("minimum", 0), MAX_INTEGER)
        return widget
    widget = LineEditAdapter(parent)
    if metadata.get("format") == "uri":
        widget.setPlaceholderText("https://")
    return widget


class MediaWidgetForm(QWidget):
    """Editing surface: media buttons, field rows, live preview and save."""

    def __init__(self, control: MediaWidgetControl, config: Optional[MediaWidgetConfig] = None, parent=None):
        super().__init__(parent)
        self.control = control
        self._config = config or control.config
        self._widgets: Dict[str, QWidget] = {}

        self._setup_ui()
        self._connect_signals()
        self._update_media_buttons(control.selected_attachment)
        control.refresh_preview()

    def _setup_ui(self):
        layout = QVBoxLayout(self)
        messages = self._config

        self.preview_panel = PreviewPanel(self._config, self)
        layout.addWidget(self.preview_panel)

        buttons = QHBoxLayout()
        self._select_button = QPushButton(messages.message("select_media"), self)
        self._select_button.clicked.connect(partial(self._start_selection, SelectionMode.SELECT_NEW))
        buttons.addWidget(self._select_button)

        self._replace_button = QPushButton(messages.message("replace_media"), self)
        self._replace_button.clicked.connect(partial(self._start_selection, SelectionMode.REPLACE_EMBED))
        buttons.addWidget(self._replace_button)

        self._edit_button = QPushButton(messages.message("edit_media"), self)
        self._edit_button.clicked.connect(partial(self._start_selection, SelectionMode.EDIT_DETAILS))
        buttons.addWidget(self._edit_button)
        layout.addLayout(buttons)

        form = QFormLayout()
        for field_name, metadata in self.control.schema_metadata.items():
            if field_name in self._config.hidden_fields:
                continue
            widget = create_field_widget(field_name, metadata, self)
            widget.set_value(self.control.model.get(field_name))
            widget.connect_change_signal(partial(self._on_widget_changed, field_name))
            self._widgets[field_name] = widget
            label = "" if metadata["type"] == "boolean" else _field_label(field_name)
            form.addRow(label, widget)
        layout.addLayout(form)

        footer = QHBoxLayout()
        self._status = QLabel("", self)
        self._status.setWordWrap(True)
        footer.addWidget(self._status, 1)
        self._save_button = QPushButton(messages.message("save"), self)
        self._save_button.clicked.connect(self._on_save_clicked)
        footer.addWidget(self._save_button)
        layout.addLayout(footer)

    def _connect_signals(self):
        self.control.model.field_changed.connect(self._on_model_field_changed)
        self.control.preview.preview_changed.connect(self.preview_panel.show_snapshot)
        self.control.attachment_changed.connect(self._update_media_buttons)
        self.control.field_reset.connect(self._on_field_reset)
        self.control.saved.connect(self._on_saved)

    def field_widget(self, field_name: str) -> QWidget:
        return self._widgets[field_name]

    @property
    def status_text(self) -> str:
        return self._status.text()

    # ========== WIDGET -> MODEL ==========

    def _on_widget_changed(self, field_name: str, value: Any):
        if value is None:
            return
        self.control.on_field_changed(field_name, value)

    def _start_selection(self, mode: SelectionMode, checked: bool = False):
        try:
            self.control.start_selection(mode)
        except SelectionStateError as e:
            logger.warning(f"Cannot start {mode.value} selection: {e}")
            self._status.setText(str(e))

    def _on_save_clicked(self, checked: bool = False):
        self.control.save()

    # ========== MODEL -> WIDGET ==========

    def _on_model_field_changed(self, field_name: str, value: Any):
        widget = self._widgets.get(field_name)
        if widget is None or widget.get_value() == value:
            return
        with SignalService.block_signals(widget):
            widget.set_value(value)

    def _update_media_buttons(self, attachment: AttachmentSnapshot):
        model = self.control.model
        has_media = bool(model.get("attachment_id") or model.get("url"))
        key = "change_media" if has_media else "select_media"
        self._select_button.setText(self._config.message(key))
        self._edit_button.setEnabled(has_media and not attachment.is_missing)
        self._replace_button.setEnabled(has_media)

    def _on_field_reset(self, field_name: str, default: Any):
        self._status.setText(self._config.message("field_reset", field=_field_label(field_name)))

    def _on_saved(self, result: SaveResult):
        if result.ok:
            self._status.setText("")

    def closeEvent(self, event):
        self.control.close()
        super().closeEvent(event)

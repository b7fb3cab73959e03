"""
Media widget control.

The single coordinator of one editing session: it owns the editing model and
the selected attachment snapshot, drives selection sessions through the picker
collaborator, routes field edits, saves through the instance store and keeps
the preview in step.

All collaborators are constructor arguments:

    control = MediaWidgetControl(
        schema=VIDEO_WIDGET_SCHEMA,
        store=InstanceStore(VIDEO_WIDGET_SCHEMA, JsonDirectoryBackend(path)),
        instance_id="media_video-3",
        picker=my_picker,
        preview_provider=AjaxPreviewClient("https://example.com/wp-admin/admin-ajax.php"),
    )
"""

import logging
from functools import partial
from typing import Any, Iterable, Optional, Union

from PyQt6.QtCore import QObject, pyqtSignal

from pyqt_mediawidgets.core.background_task import TaskRunner
from pyqt_mediawidgets.core.debounce_timer import DebounceTimer
from pyqt_mediawidgets.exceptions import MissingAttachment, SelectionStateError
from pyqt_mediawidgets.forms.attachment import AttachmentSnapshot
from pyqt_mediawidgets.forms.editing_model import EditingModel
from pyqt_mediawidgets.io.instance_store import InstanceStore, SaveResult
from pyqt_mediawidgets.protocols.collaborators import AttachmentLookup, PickerProvider, PreviewRenderProvider
from pyqt_mediawidgets.protocols.form_config import MediaWidgetConfig, get_media_widget_config
from pyqt_mediawidgets.schema.field_schema import Schema
from pyqt_mediawidgets.schema.widget_schemas import get_preview_fields
from pyqt_mediawidgets.services.field_change_dispatcher import FieldChangeDispatcher, FieldChangeEvent
from pyqt_mediawidgets.services.preview_service import PreviewRenderer
from pyqt_mediawidgets.services.selection_session import (
    PickerRequest,
    SelectionMode,
    SelectionResult,
    SelectionSession,
    SessionState,
)

logger = logging.getLogger(__name__)

# Model fields handed to the picker when editing or replacing
PICKER_METADATA_FIELDS = ("attachment_id", "caption", "description", "link_type")


class MediaWidgetControl(QObject):
    """Coordinates editing, selection, saving and preview of one widget instance.

    Not safe to share across editing contexts: one control, one session.
    """

    attachment_changed = pyqtSignal(object)     # AttachmentSnapshot
    field_reset = pyqtSignal(str, object)       # field, default after a rejected save
    saved = pyqtSignal(object)                  # SaveResult
    selection_started = pyqtSignal(object)      # SelectionSession

    def __init__(
        self,
        schema: Schema,
        store: InstanceStore,
        instance_id: str,
        picker: PickerProvider,
        preview_provider: PreviewRenderProvider,
        task_runner: Optional[TaskRunner] = None,
        attachment_lookup: Optional[AttachmentLookup] = None,
        preview_fields: Optional[Iterable[str]] = None,
        config: Optional[MediaWidgetConfig] = None,
        parent=None,
    ):
        super().__init__(parent)
        if list(store.schema) != list(schema):
            raise ValueError(f"Store schema {store.schema.name} does not match control schema {schema.name}")

        self.schema = schema
        self.schema_metadata = schema.export()
        self.store = store
        self.instance_id = instance_id
        self.config = config or get_media_widget_config()
        if preview_fields is None:
            preview_fields = get_preview_fields(schema.name or "")
        self.preview_fields = frozenset(preview_fields)

        self._picker = picker
        self._attachment_lookup = attachment_lookup
        self._dispatcher = FieldChangeDispatcher.instance()
        self._dispatching = False
        self._session: Optional[SelectionSession] = None

        record = store.load(instance_id)
        self.model = EditingModel(schema, record, parent=self)
        self.preview = PreviewRenderer(preview_provider, task_runner, self.config, parent=self)
        self._selected_attachment = self._resolve_attachment(record)
        self._preview_debounce = DebounceTimer(self.config.preview_debounce_ms, self._render_preview)
        logger.debug(f"MediaWidgetControl ready for '{instance_id}' ({schema.name})")

    # ========== ATTACHMENT ==========

    @property
    def selected_attachment(self) -> AttachmentSnapshot:
        return self._selected_attachment

    def _set_attachment(self, snapshot: AttachmentSnapshot) -> None:
        self._selected_attachment = snapshot
        self.attachment_changed.emit(snapshot)

    def _resolve_attachment(self, record) -> AttachmentSnapshot:
        snapshot = AttachmentSnapshot.from_record(record)
        if not snapshot.id or self._attachment_lookup is None:
            return snapshot
        try:
            return self._attachment_lookup.fetch(snapshot.id)
        except MissingAttachment as e:
            logger.warning(f"Instance '{self.instance_id}': {e}")
            return snapshot.with_error("missing")

    # ========== SELECTION ==========

    @property
    def active_session(self) -> Optional[SelectionSession]:
        if self._session is not None and self._session.is_active:
            return self._session
        return None

    def start_selection(self, mode: Union[SelectionMode, str]) -> SelectionSession:
        """
        Open the picker in ``mode``.

        Raises:
            SelectionStateError: If another selection session is still open
        """
        mode = SelectionMode(mode)
        if self.active_session is not None:
            raise SelectionStateError("A selection session is already open for this control")

        if mode is SelectionMode.SELECT_NEW:
            request = PickerRequest(mode)
        else:
            request = PickerRequest(
                mode,
                seed_attachment_id=self.model.get("attachment_id"),
                metadata={name: self.model.get(name) for name in PICKER_METADATA_FIELDS if name in self.model},
            )

        session = SelectionSession(request, parent=self)
        session.resolved.connect(self._apply_selection)
        session.closed.connect(partial(self._on_session_closed, session))
        self._session = session
        self.selection_started.emit(session)
        session.open(self._picker)
        return session

    def _on_session_closed(self, session: SelectionSession) -> None:
        if self._session is session:
            self._session = None

    def _apply_selection(self, result: SelectionResult) -> None:
        # Coerce everything first so a bad value cannot leave the model half applied
        props = {
            field_name: self.schema.coerce(field_name, value)
            for field_name, value in result.to_props().items()
            if field_name in self.schema
        }
        logger.debug(f"Applying {result.resolved_via.value} selection to '{self.instance_id}': {sorted(props)}")

        for field_name, value in props.items():
            self.model.set(field_name, value)
        self._set_attachment(AttachmentSnapshot.from_selection(result))
        self._preview_debounce.force()

    # ========== EDITING ==========

    def on_field_changed(self, field_name: str, value: Any) -> bool:
        """Route a user edit into the model.

        Returns:
            True if the edit requested a preview refresh
        """
        return self._dispatcher.dispatch(FieldChangeEvent(field_name, value, self))

    def save(self) -> SaveResult:
        """
        Persist the current model through the instance store.

        Rejected fields are reverted to their default on the model and
        reported through ``field_reset``; the rest of the record is saved.

        Raises:
            InstanceStoreError: If persistence fails
        """
        result = self.store.save(self.instance_id, self.model.to_record())
        for rejection in result.rejected:
            self._dispatcher.dispatch(
                FieldChangeEvent(rejection.field, rejection.default, self, is_reset=True)
            )
            self.field_reset.emit(rejection.field, rejection.default)

        self.saved.emit(result)
        self._preview_debounce.force()
        return result

    def reload(self) -> None:
        """Discard unsaved edits and reload the persisted record."""
        record = self.store.load(self.instance_id)
        self.model.update(record)
        self._set_attachment(self._resolve_attachment(record))
        self._preview_debounce.force()

    # ========== PREVIEW ==========

    def refresh_preview(self) -> None:
        """Debounced refresh for field edits; selection, save and reload render at once."""
        self._preview_debounce.trigger()

    def _render_preview(self) -> int:
        return self.preview.request(self.model.to_record(), self._selected_attachment)

    def close(self) -> None:
        """Cancel pending work; call when the editing surface goes away."""
        self._preview_debounce.cancel()
        self.preview.cleanup()
        session = self.active_session
        if session is not None and session.state is SessionState.OPEN:
            session.cancel()

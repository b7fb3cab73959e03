"""
In-memory editing model for one widget instance.

Mirrors an instance record while a control edits it. Values are coerced to
their declared type on ``set`` but not sanitized: sanitizing happens when the
record is saved, so interactive typing is never rewritten.

Change notification is a plain Qt signal emitted synchronously from ``set``;
observers run before ``set`` returns, in the order fields were set.
"""

import logging
from typing import Any, Callable, Dict, Mapping, Optional

from PyQt6.QtCore import QObject, pyqtSignal

from pyqt_mediawidgets.schema.field_schema import Schema

logger = logging.getLogger(__name__)


class EditingModel(QObject):
    """Editable mirror of an instance record, owned by a single control."""

    field_changed = pyqtSignal(str, object)

    def __init__(self, schema: Schema, record: Optional[Mapping[str, Any]] = None, parent=None):
        super().__init__(parent)
        self.schema = schema
        self._values: Dict[str, Any] = schema.defaults()
        for field_name, value in (record or {}).items():
            if field_name in schema:
                self._values[field_name] = value
            else:
                logger.debug(f"Ignoring field '{field_name}' not declared by schema {schema.name}")

    def get(self, field_name: str) -> Any:
        return self._values[field_name]

    def __getitem__(self, field_name: str) -> Any:
        return self._values[field_name]

    def __contains__(self, field_name: object) -> bool:
        return field_name in self._values

    def set(self, field_name: str, value: Any) -> Any:
        """Coerce and store ``value``, then notify observers.

        Returns:
            The stored (coerced) value

        Raises:
            KeyError: If the field is not declared by the schema
            InvalidFieldValue: If the value cannot be coerced; the model is unchanged
        """
        if field_name not in self.schema:
            raise KeyError(f"Field '{field_name}' is not declared by schema {self.schema.name}")
        coerced = self.schema.coerce(field_name, value)
        self._values[field_name] = coerced
        self.field_changed.emit(field_name, coerced)
        return coerced

    def update(self, values: Mapping[str, Any]) -> None:
        """Set several fields, one change notification each, in mapping order."""
        for field_name, value in values.items():
            self.set(field_name, value)

    def reset_field(self, field_name: str) -> Any:
        return self.set(field_name, self.schema[field_name].default)

    def subscribe(self, callback: Callable[[str, Any], None]) -> Callable[[], None]:
        """Observe every ``set``. Returns a callable that unsubscribes."""
        self.field_changed.connect(callback)

        def unsubscribe():
            try:
                self.field_changed.disconnect(callback)
            except TypeError:
                pass

        return unsubscribe

    def to_record(self) -> Dict[str, Any]:
        """Current raw values; exactly what is handed to ``InstanceStore.save``."""
        return dict(self._values)

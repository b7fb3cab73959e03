"""
Instance store.

Owns the canonical, persisted instance records of one widget type. Every
record goes through ``Schema.validate`` on the way in and on the way out, so
callers never observe an unsanitized value.
"""

import logging
import threading
from dataclasses import dataclass, field
from typing import Any, Dict, Mapping, Optional, Tuple

from pyqt_mediawidgets.exceptions import InvalidFieldValue
from pyqt_mediawidgets.io.base import InstanceBackend
from pyqt_mediawidgets.io.exceptions import InstanceStoreError
from pyqt_mediawidgets.schema.field_schema import Schema

logger = logging.getLogger(__name__)


@dataclass(frozen=True)
class SaveResult:
    """Outcome of ``InstanceStore.save``.

    Attributes:
        record: The sanitized record now persisted
        rejected: Fields that failed validation and were reset to their default
        written: False when the sanitized record was already stored
    """
    record: Dict[str, Any]
    rejected: Tuple[InvalidFieldValue, ...] = field(default_factory=tuple)
    written: bool = True

    @property
    def ok(self) -> bool:
        return not self.rejected

    @property
    def rejected_fields(self) -> Tuple[str, ...]:
        return tuple(error.field for error in self.rejected)


class InstanceStore:

    def __init__(self, schema: Schema, backend: InstanceBackend):
        """
        Initialize the instance store.

        Args:
            schema: Schema applied to every read and write
            backend: Persistence backend (see ``InstanceBackend``)

        Thread Safety:
            Writes are serialized by a store-level lock and replaced in one
            step by the backend, so a concurrent ``load`` sees either the old
            or the new record.
        """
        if backend is None:
            raise ValueError("Backend must be provided to InstanceStore.")
        self.schema = schema
        self.backend = backend
        self._write_lock = threading.Lock()
        logger.debug(f"InstanceStore initialized for schema {schema.name}")

    def _read(self, instance_id: str) -> Optional[Dict[str, Any]]:
        try:
            return self.backend.read(instance_id)
        except InstanceStoreError:
            raise
        except Exception as e:
            logger.error(f"Unexpected error reading instance '{instance_id}': {e}", exc_info=True)
            raise InstanceStoreError(f"Failed to read instance '{instance_id}'") from e

    def _write(self, instance_id: str, record: Dict[str, Any]) -> None:
        try:
            self.backend.write(instance_id, record)
        except InstanceStoreError:
            raise
        except Exception as e:
            logger.error(f"Unexpected error writing instance '{instance_id}': {e}", exc_info=True)
            raise InstanceStoreError(f"Failed to write instance '{instance_id}'") from e

    def load(self, instance_id: str) -> Dict[str, Any]:
        """
        Load a fully sanitized record.

        Returns the schema defaults when nothing is stored for ``instance_id``.

        Raises:
            InstanceStoreError: If the backend fails
        """
        stored = self._read(instance_id)
        if stored is None:
            logger.debug(f"No record for '{instance_id}', using defaults")
            return self.schema.defaults()
        return self.schema.validate(stored)

    def save(self, instance_id: str, candidate: Mapping[str, Any]) -> SaveResult:
        """
        Validate ``candidate`` and persist the sanitized record.

        Rejected fields are stored as their default and reported in
        ``SaveResult.rejected``; the rest of the record is saved. Saving a
        record equal to the stored one performs no write.

        Raises:
            InstanceStoreError: If the backend fails
        """
        errors = []
        record = self.schema.validate(candidate, errors=errors)

        with self._write_lock:
            stored = self._read(instance_id)
            if stored == record:
                logger.debug(f"Instance '{instance_id}' unchanged, skipping write")
                return SaveResult(record=record, rejected=tuple(errors), written=False)
            self._write(instance_id, record)

        if errors:
            logger.info(f"Saved '{instance_id}' with {len(errors)} field(s) reset to default: "
                        f"{[error.field for error in errors]}")
        else:
            logger.debug(f"Saved '{instance_id}'")
        return SaveResult(record=record, rejected=tuple(errors), written=True)

    def create(self, instance_id: str) -> Dict[str, Any]:
        """
        Persist an all-defaults record for a newly placed widget.

        A record already stored under ``instance_id`` is kept and returned
        (sanitized); it is never overwritten with defaults.
        """
        with self._write_lock:
            stored = self._read(instance_id)
            if stored is not None:
                logger.debug(f"Instance '{instance_id}' already exists, not overwriting")
                return self.schema.validate(stored)
            record = self.schema.defaults()
            self._write(instance_id, record)
        logger.debug(f"Created instance '{instance_id}'")
        return record

    def exists(self, instance_id: str) -> bool:
        return self._read(instance_id) is not None

    def delete(self, instance_id: str) -> None:
        """Remove the record of a widget placement that no longer exists."""
        with self._write_lock:
            try:
                self.backend.delete(instance_id)
            except InstanceStoreError:
                raise
            except Exception as e:
                raise InstanceStoreError(f"Failed to delete instance '{instance_id}'") from e
        logger.debug(f"Deleted instance '{instance_id}'")

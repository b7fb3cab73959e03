"""
Instance record backends.

MemoryBackend keeps records in a dict; JsonDirectoryBackend keeps one JSON
file per instance and replaces it atomically with ``os.replace``.
"""

import copy
import json
import logging
import os
import re
import tempfile
import threading
from pathlib import Path
from typing import Any, Dict, Optional, Union

from pyqt_mediawidgets.io.exceptions import InstanceStoreError

logger = logging.getLogger(__name__)

_SAFE_ID_RE = re.compile(r"^[A-Za-z0-9_.\-]+$")


class MemoryBackend:
    """In-process backend. Records are deep-copied on the way in and out."""

    def __init__(self):
        self._records: Dict[str, Dict[str, Any]] = {}
        self._lock = threading.Lock()
        self.write_count = 0

    def read(self, instance_id: str) -> Optional[Dict[str, Any]]:
        with self._lock:
            record = self._records.get(instance_id)
            return copy.deepcopy(record) if record is not None else None

    def write(self, instance_id: str, record: Dict[str, Any]) -> None:
        snapshot = copy.deepcopy(record)
        with self._lock:
            self._records[instance_id] = snapshot
            self.write_count += 1

    def delete(self, instance_id: str) -> None:
        with self._lock:
            self._records.pop(instance_id, None)


class JsonDirectoryBackend:
    """One ``<instance_id>.json`` file per instance under ``root``."""

    def __init__(self, root: Union[str, Path]):
        self.root = Path(root)
        self.root.mkdir(parents=True, exist_ok=True)
        logger.debug(f"JsonDirectoryBackend initialized at {self.root}")

    def _path_for(self, instance_id: str) -> Path:
        if not _SAFE_ID_RE.match(instance_id) or instance_id in (".", ".."):
            raise InstanceStoreError(f"Invalid instance id '{instance_id}'")
        return self.root / f"{instance_id}.json"

    def read(self, instance_id: str) -> Optional[Dict[str, Any]]:
        path = self._path_for(instance_id)
        try:
            with path.open("r", encoding="utf-8") as handle:
                data = json.load(handle)
        except FileNotFoundError:
            return None
        except (OSError, json.JSONDecodeError) as e:
            raise InstanceStoreError(f"Failed to read instance '{instance_id}' from {path}: {e}") from e
        if not isinstance(data, dict):
            raise InstanceStoreError(f"Instance '{instance_id}' at {path} is not a JSON object")
        return data

    def write(self, instance_id: str, record: Dict[str, Any]) -> None:
        path = self._path_for(instance_id)
        fd, tmp_name = tempfile.mkstemp(prefix=f".{instance_id}.", suffix=".tmp", dir=self.root)
        try:
            with os.fdopen(fd, "w", encoding="utf-8") as handle:
                json.dump(record, handle, indent=2, sort_keys=False)
                handle.flush()
                os.fsync(handle.fileno())
            os.replace(tmp_name, path)
        except OSError as e:
            try:
                os.unlink(tmp_name)
            except FileNotFoundError:
                pass
            raise InstanceStoreError(f"Failed to write instance '{instance_id}' to {path}: {e}") from e

    def delete(self, instance_id: str) -> None:
        path = self._path_for(instance_id)
        try:
            path.unlink()
        except FileNotFoundError:
            pass
        except OSError as e:
            raise InstanceStoreError(f"Failed to delete instance '{instance_id}': {e}") from e

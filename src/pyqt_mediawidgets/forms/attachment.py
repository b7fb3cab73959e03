"""Snapshot of the attachment currently selected in a control."""

from dataclasses import dataclass, field, replace
from types import MappingProxyType
from typing import TYPE_CHECKING, Any, Mapping, Optional

if TYPE_CHECKING:
    from pyqt_mediawidgets.services.selection_session import SelectionResult

MISSING_ERROR_MARKERS = frozenset({"missing", "missing_attachment"})


@dataclass(frozen=True)
class AttachmentSnapshot:
    """Read-mostly attachment metadata.

    Never mutated in place: a new selection or edit produces a new snapshot.
    ``error`` is None, a missing marker ("missing"/"missing_attachment") or any
    other string describing an unknown failure.
    """
    id: int = 0
    url: str = ""
    caption: str = ""
    description: str = ""
    error: Optional[str] = None
    extra: Mapping[str, Any] = field(default_factory=dict)

    def __post_init__(self):
        object.__setattr__(self, "extra", MappingProxyType(dict(self.extra)))

    @property
    def is_missing(self) -> bool:
        return self.error in MISSING_ERROR_MARKERS

    @property
    def has_error(self) -> bool:
        return bool(self.error)

    def with_error(self, error: Optional[str]) -> "AttachmentSnapshot":
        return replace(self, error=error)

    @classmethod
    def from_record(cls, record: Mapping[str, Any]) -> "AttachmentSnapshot":
        """Seed a snapshot from instance values before anything is fetched."""
        return cls(
            id=int(record.get("attachment_id") or 0),
            url=record.get("url", ""),
            caption=record.get("caption", ""),
            description=record.get("description", ""),
        )

    @classmethod
    def from_selection(cls, result: "SelectionResult") -> "AttachmentSnapshot":
        return cls(
            id=result.attachment_id,
            url=result.url,
            caption=result.caption,
            description=result.description,
            error=None,
            extra=result.extra,
        )

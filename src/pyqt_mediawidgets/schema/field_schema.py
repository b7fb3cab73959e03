"""
Declarative instance schema.

A schema is an ordered, read-only mapping from field name to a
``FieldDescriptor``. It is the single source of truth for what a widget
instance may hold and how each value is sanitized before it is persisted.

Composition is explicit rather than class based:

    VIDEO_SCHEMA = MEDIA_SCHEMA.extend({
        "loop": FieldDescriptor(ValueType.BOOLEAN, default=False),
    })

Base keys keep their position, new keys are appended, and an override wins
on key collision as long as it keeps the inherited value type.
"""

import logging
from collections.abc import Mapping
from dataclasses import dataclass
from enum import Enum
from types import MappingProxyType
from typing import Any, Callable, Dict, Iterable, Iterator, List, Optional, Tuple, Union

from pyqt_mediawidgets.exceptions import InvalidFieldValue, SchemaCompositionError

logger = logging.getLogger(__name__)

Sanitizer = Callable[[Any], Any]

_TRUE_STRINGS = frozenset({"1", "true", "on", "yes"})
_FALSE_STRINGS = frozenset({"", "0", "false", "off", "no"})


class ValueType(Enum):
    """Value types a schema field may declare."""
    BOOLEAN = "boolean"
    STRING = "string"
    INTEGER = "integer"

    def coerce(self, value: Any) -> Any:
        """Convert ``value`` to this type.

        Raises:
            TypeError, ValueError: If the value cannot represent this type.
        """
        if self is ValueType.BOOLEAN:
            if isinstance(value, str):
                lowered = value.strip().lower()
                if lowered in _TRUE_STRINGS:
                    return True
                if lowered in _FALSE_STRINGS:
                    return False
                raise ValueError(f"'{value}' is not a boolean")
            return bool(value)

        if self is ValueType.INTEGER:
            if isinstance(value, bool):
                return int(value)
            if isinstance(value, float):
                if not value.is_integer():
                    raise ValueError(f"{value} is not an integer")
                return int(value)
            if isinstance(value, str):
                return int(value.strip() or "0")
            if value is None:
                raise TypeError("None is not an integer")
            return int(value)

        if value is None:
            return ""
        if isinstance(value, bool):
            return "1" if value else ""
        return str(value)


@dataclass(frozen=True)
class FieldDescriptor:
    """Declaration of a single instance field."""
    value_type: ValueType
    default: Any
    allowed_values: Optional[Tuple[str, ...]] = None
    sanitize: Optional[Sanitizer] = None
    minimum: Optional[int] = None
    format: Optional[str] = None

    def __post_init__(self):
        if self.allowed_values is not None:
            object.__setattr__(self, "allowed_values", tuple(self.allowed_values))
        # Defaults must survive their own validation unchanged
        try:
            cleaned = self.clean("<default>", self.default)
        except InvalidFieldValue as e:
            raise ValueError(f"Default {self.default!r} is not valid: {e.reason}") from e
        if cleaned != self.default or type(cleaned) is not type(self.default):
            raise ValueError(
                f"Default {self.default!r} is not a fixed point of its sanitizer ({cleaned!r})"
            )

    @property
    def is_enum(self) -> bool:
        return self.allowed_values is not None

    def coerce(self, name: str, value: Any) -> Any:
        """Type coercion only; no sanitizer, no enumeration check."""
        try:
            return self.value_type.coerce(value)
        except (TypeError, ValueError) as e:
            raise InvalidFieldValue(name, value, self.default, str(e)) from e

    def clean(self, name: str, value: Any) -> Any:
        """Coerce, sanitize and check a value.

        Raises:
            InvalidFieldValue: If the value cannot be stored for this field.
        """
        cleaned = self.coerce(name, value)
        if self.sanitize is not None:
            cleaned = self.value_type.coerce(self.sanitize(cleaned))
        if self.allowed_values is not None and cleaned not in self.allowed_values:
            raise InvalidFieldValue(
                name, value, self.default, f"expected one of {list(self.allowed_values)}"
            )
        if self.minimum is not None and cleaned < self.minimum:
            raise InvalidFieldValue(name, value, self.default, f"must be >= {self.minimum}")
        return cleaned

    def export(self) -> Dict[str, Any]:
        """Serializable metadata for front-end consumers."""
        exported: Dict[str, Any] = {"type": self.value_type.value, "default": self.default}
        if self.allowed_values is not None:
            exported["enum"] = list(self.allowed_values)
        if self.minimum is not None:
            exported["minimum"] = self.minimum
        if self.format is not None:
            exported["format"] = self.format
        return exported


FieldSource = Union[Mapping, Iterable[Tuple[str, FieldDescriptor]]]


class Schema(Mapping):
    """Immutable ordered mapping of field name to ``FieldDescriptor``."""

    def __init__(self, fields: FieldSource, name: Optional[str] = None):
        items = fields.items() if isinstance(fields, Mapping) else fields
        resolved: Dict[str, FieldDescriptor] = {}
        for field_name, descriptor in items:
            if not isinstance(descriptor, FieldDescriptor):
                raise TypeError(f"Field '{field_name}' must be a FieldDescriptor, got {type(descriptor).__name__}")
            resolved[field_name] = descriptor
        self._fields = MappingProxyType(resolved)
        self.name = name

    def __getitem__(self, field_name: str) -> FieldDescriptor:
        return self._fields[field_name]

    def __iter__(self) -> Iterator[str]:
        return iter(self._fields)

    def __len__(self) -> int:
        return len(self._fields)

    def __repr__(self) -> str:
        return f"Schema(name={self.name!r}, fields={list(self._fields)})"

    def extend(self, additions: FieldSource, name: Optional[str] = None) -> "Schema":
        """Return a new schema with ``additions`` merged after the base fields.

        Raises:
            SchemaCompositionError: If an override changes an inherited value type.
        """
        merged: Dict[str, FieldDescriptor] = dict(self._fields)
        items = additions.items() if isinstance(additions, Mapping) else additions
        for field_name, descriptor in items:
            inherited = merged.get(field_name)
            if inherited is not None and inherited.value_type is not descriptor.value_type:
                raise SchemaCompositionError(
                    f"Field '{field_name}' cannot change type from "
                    f"{inherited.value_type.value} to {descriptor.value_type.value}"
                )
            merged[field_name] = descriptor
        return Schema(merged, name=name or self.name)

    def defaults(self) -> Dict[str, Any]:
        return {field_name: descriptor.default for field_name, descriptor in self._fields.items()}

    def coerce(self, field_name: str, value: Any) -> Any:
        """Coerce ``value`` to the declared type of ``field_name``.

        Raises:
            KeyError: If the field is not declared.
            InvalidFieldValue: If the value cannot be coerced.
        """
        return self._fields[field_name].coerce(field_name, value)

    def validate_field(self, field_name: str, value: Any) -> Any:
        """Strict single-field validation.

        Raises:
            KeyError: If the field is not declared.
            InvalidFieldValue: If the value is rejected.
        """
        return self._fields[field_name].clean(field_name, value)

    def validate(
        self,
        raw: Optional[Mapping],
        errors: Optional[List[InvalidFieldValue]] = None,
    ) -> Dict[str, Any]:
        """Return a fully sanitized record for ``raw``.

        Rejected values are replaced by their default and, when ``errors`` is
        given, the rejection is appended to it. Unknown fields are dropped.
        """
        raw = raw or {}
        record: Dict[str, Any] = {}
        for field_name, descriptor in self._fields.items():
            if field_name not in raw:
                record[field_name] = descriptor.default
                continue
            try:
                record[field_name] = descriptor.clean(field_name, raw[field_name])
            except InvalidFieldValue as e:
                logger.warning(f"Rejected {field_name}={raw[field_name]!r}, using default {descriptor.default!r}: {e.reason}")
                if errors is not None:
                    errors.append(e)
                record[field_name] = descriptor.default

        unknown = [key for key in raw if key not in self._fields]
        if unknown:
            logger.debug(f"Dropping unknown fields {unknown} for schema {self.name}")
        return record

    def export(self) -> Dict[str, Dict[str, Any]]:
        """Field name to ``{type, default, enum?, minimum?, format?}``."""
        return {field_name: descriptor.export() for field_name, descriptor in self._fields.items()}

    @classmethod
    def from_export(cls, metadata: Mapping, name: Optional[str] = None) -> "Schema":
        """Rebuild a schema (without sanitizers) from exported metadata."""
        fields = []
        for field_name, entry in metadata.items():
            fields.append((field_name, FieldDescriptor(
                value_type=ValueType(entry["type"]),
                default=entry["default"],
                allowed_values=tuple(entry["enum"]) if "enum" in entry else None,
                minimum=entry.get("minimum"),
                format=entry.get("format"),
            )))
        return cls(fields, name=name)

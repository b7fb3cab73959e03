"""
Field widget contracts for the media widget form.

The form only talks to its row widgets through these ABCs: it writes model
values in, reads edits out and listens for user changes, whatever Qt class
sits underneath. Each capability is its own ABC so an adapter lists exactly
what it supports.
"""

from abc import ABC, abstractmethod
from typing import Any, Callable, Iterable


class ValueGettable(ABC):
    """A widget whose current value can be read as a field value."""

    @abstractmethod
    def get_value(self) -> Any:
        """
        Returns:
            The displayed value in the field's value type, or None when the
            widget shows nothing selectable (e.g. an unknown enum value).
        """


class ValueSettable(ABC):
    """A widget that can display a field value coming from the editing model."""

    @abstractmethod
    def set_value(self, value: Any) -> None:
        ...


class RangeConfigurable(ABC):
    """Integer widgets bounded by the field's declared minimum."""

    @abstractmethod
    def configure_range(self, minimum: int, maximum: int) -> None:
        ...


class ChoiceSelectable(ABC):
    """Widgets offering the allowed values of an enumerated string field."""

    @abstractmethod
    def set_choices(self, choices: Iterable[str]) -> None:
        """Replace the options; ``choices`` are stored values in display order."""


class ChangeSignalEmitter(ABC):
    """
    Widgets that report user edits.

    ``callback(new_value)`` receives the value from ``get_value``, not the raw
    Qt signal arguments, so textEdited, valueChanged, currentIndexChanged and
    toggled all look the same to the form.
    """

    @abstractmethod
    def connect_change_signal(self, callback: Callable[[Any], None]) -> None:
        ...

    @abstractmethod
    def disconnect_change_signal(self, callback: Callable[[Any], None]) -> None:
        ...

"""
Widget adapters that wrap Qt widgets to implement the field widget ABCs.

Normalizes Qt's inconsistent APIs:
- QLineEdit.text() vs QSpinBox.value() vs QComboBox.currentData()
- QLineEdit.setText() vs QSpinBox.setValue() vs QComboBox.setCurrentIndex()
- textChanged vs valueChanged vs currentIndexChanged vs toggled

All adapters implement consistent interface via ABCs:
- get_value() / set_value() for all widgets
- connect_change_signal() for all widgets
"""

from abc import ABCMeta
from typing import Any, Callable, Dict, Iterable

from PyQt6.QtCore import QObject
from PyQt6.QtWidgets import QCheckBox, QComboBox, QLineEdit, QSpinBox

from .widget_protocols import (
    ChangeSignalEmitter,
    ChoiceSelectable,
    RangeConfigurable,
    ValueGettable,
    ValueSettable,
)

# Order matters: Qt's metaclass first, ABCMeta supplies abstract-method checks
_QtMetaclass = type(QObject)


class PyQtWidgetMeta(_QtMetaclass, ABCMeta):
    """Metaclass for PyQt widgets that need ABC support."""
    pass


class _SignalAdapterMixin:
    """Tracks wrapped callbacks so they can be disconnected later."""

    def _change_signal(self):
        raise NotImplementedError

    def connect_change_signal(self, callback: Callable[[Any], None]) -> None:
        """Implement ChangeSignalEmitter ABC."""
        slots: Dict[Callable, Callable] = self.__dict__.setdefault("_change_slots", {})
        slot = lambda *_: callback(self.get_value())
        slots[callback] = slot
        self._change_signal().connect(slot)

    def disconnect_change_signal(self, callback: Callable[[Any], None]) -> None:
        """Implement ChangeSignalEmitter ABC."""
        slot = self.__dict__.get("_change_slots", {}).pop(callback, None)
        if slot is None:
            return
        try:
            self._change_signal().disconnect(slot)
        except TypeError:
            # Signal not connected - ignore
            pass


class LineEditAdapter(_SignalAdapterMixin, QLineEdit, ValueGettable, ValueSettable,
                      ChangeSignalEmitter, metaclass=PyQtWidgetMeta):
    """
    Adapter for QLineEdit.

    Returns the raw text; sanitizing happens when the instance is saved so
    typing is never rewritten under the cursor.
    """

    _widget_id = "line_edit"

    def _change_signal(self):
        return self.textEdited

    def get_value(self) -> Any:
        """Implement ValueGettable ABC."""
        return self.text()

    def set_value(self, value: Any) -> None:
        """Implement ValueSettable ABC."""
        text = "" if value is None else str(value)
        if text != self.text():
            self.setText(text)


class SpinBoxAdapter(_SignalAdapterMixin, QSpinBox, ValueGettable, ValueSettable,
                     RangeConfigurable, ChangeSignalEmitter, metaclass=PyQtWidgetMeta):
    """Adapter for QSpinBox holding integer fields."""

    _widget_id = "spin_box"

    def __init__(self, parent=None):
        super().__init__(parent)
        self.setRange(0, 2147483647)

    def _change_signal(self):
        return self.valueChanged

    def get_value(self) -> Any:
        """Implement ValueGettable ABC."""
        return self.value()

    def set_value(self, value: Any) -> None:
        """Implement ValueSettable ABC."""
        self.setValue(int(value or 0))

    def configure_range(self, minimum: int, maximum: int) -> None:
        """Implement RangeConfigurable ABC."""
        self.setRange(int(minimum), int(maximum))


class ComboBoxAdapter(_SignalAdapterMixin, QComboBox, ValueGettable, ValueSettable,
                      ChoiceSelectable, ChangeSignalEmitter, metaclass=PyQtWidgetMeta):
    """
    Adapter for QComboBox holding enumerated string fields.

    Stores actual values in itemData, not just display text.
    """

    _widget_id = "combo_box"

    def _change_signal(self):
        return self.currentIndexChanged

    def get_value(self) -> Any:
        """Implement ValueGettable ABC."""
        if self.currentIndex() < 0:
            return None
        return self.itemData(self.currentIndex())

    def set_value(self, value: Any) -> None:
        """Implement ValueSettable ABC."""
        index = self.findData(value)
        self.setCurrentIndex(index)

    def set_choices(self, choices: Iterable[str]) -> None:
        """Implement ChoiceSelectable ABC."""
        self.clear()
        for choice in choices:
            self.addItem(choice.replace("_", " ").capitalize(), choice)


class CheckBoxAdapter(_SignalAdapterMixin, QCheckBox, ValueGettable, ValueSettable,
                      ChangeSignalEmitter, metaclass=PyQtWidgetMeta):
    """
    Adapter for QCheckBox holding boolean fields.

    Returns bool values, treats None as False.
    """

    _widget_id = "check_box"

    def _change_signal(self):
        return self.toggled

    def get_value(self) -> Any:
        """Implement ValueGettable ABC."""
        return self.isChecked()

    def set_value(self, value: Any) -> None:
        """Implement ValueSettable ABC."""
        self.setChecked(bool(value) if value is not None else False)

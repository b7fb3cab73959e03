"""
No-scroll field widgets for PyQt6.

Prevents accidental value changes from mouse wheel events while the form
scrolls past them.
"""

from PyQt6.QtGui import QWheelEvent

from pyqt_mediawidgets.protocols import ComboBoxAdapter, SpinBoxAdapter


class NoScrollSpinBox(SpinBoxAdapter):
    """SpinBox that ignores wheel events to prevent accidental value changes."""

    def wheelEvent(self, event: QWheelEvent):
        event.ignore()


class NoScrollComboBox(ComboBoxAdapter):
    """ComboBox that ignores wheel events to prevent accidental value changes."""

    def wheelEvent(self, event: QWheelEvent):
        event.ignore()

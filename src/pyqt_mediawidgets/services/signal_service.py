"""
Signal blocking for widget synchronization.

When the editing model changes (selection applied, field reset after save),
the form mirrors the value into its widget. Blocking the widget's signals
while doing so keeps the mirror from being reported back as a user edit.
"""

from contextlib import contextmanager
import logging

from PyQt6.QtCore import QObject

logger = logging.getLogger(__name__)


class SignalService:
    """
    Examples:
        with SignalService.block_signals(checkbox):
            checkbox.setChecked(True)

        with SignalService.block_signals(widget1, widget2):
            widget1.set_value(1)
            widget2.set_value("auto")
    """

    @staticmethod
    @contextmanager
    def block_signals(*objects: QObject):
        """Context manager for blocking signals; restores the previous blocked state."""
        previous = []
        for obj in objects:
            if obj is not None:
                previous.append((obj, obj.blockSignals(True)))
                logger.debug(f"Blocked signals on {type(obj).__name__}")

        try:
            yield
        finally:
            for obj, was_blocked in previous:
                obj.blockSignals(was_blocked)

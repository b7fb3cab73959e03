"""
Core PyQt6 utilities.

Background execution and debouncing with no domain-specific logic.
"""

from .debounce_timer import DebounceTimer
from .background_task import BackgroundTask, BackgroundTaskManager, TaskRunner

__all__ = [
    "DebounceTimer",
    "BackgroundTask",
    "BackgroundTaskManager",
    "TaskRunner",
]

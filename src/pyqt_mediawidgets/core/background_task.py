"""Background execution for remote preview round trips."""

import logging
from functools import partial
from typing import Any, Callable, Optional, Protocol, Set, Tuple

from PyQt6.QtCore import QThread, pyqtSignal

logger = logging.getLogger(__name__)

# --- Module-level constants ---
CLEANUP_WAIT_MS = 200     # Wait time per task during control shutdown


class TaskRunner(Protocol):
    """Anything that can run ``target`` off the caller's turn and report back.

    ``on_success``/``on_error`` must be invoked on the GUI thread.
    """

    def run(
        self,
        target: Callable[..., Any],
        args: Tuple = (),
        kwargs: dict = None,
        on_success: Callable[[Any], None] = None,
        on_error: Callable[[Exception], None] = None,
    ) -> Any:
        ...

    def cleanup(self) -> None:
        ...


class BackgroundTask(QThread):
    """
    Single background call with cancellation.

    Usage:
        task = BackgroundTask(target=provider.render, args=(shortcode,))
        task.result_ready.connect(on_success)
        task.error_occurred.connect(on_error)  # Receives Exception, not str
        task.start()

        task.cancel()  # Signals won't emit after this
    """

    result_ready = pyqtSignal(object)
    error_occurred = pyqtSignal(Exception)

    def __init__(
        self,
        target: Callable[..., Any],
        args: Tuple = (),
        kwargs: dict = None,
        parent=None
    ):
        super().__init__(parent)
        self._target = target
        self._args = args
        self._kwargs = kwargs or {}
        self.cancelled = False

    def run(self):
        """Execute target in background, respecting cancellation."""
        try:
            result = self._target(*self._args, **self._kwargs)
            if not self.cancelled:
                self.result_ready.emit(result)
        except Exception as e:
            if not self.cancelled:
                self.error_occurred.emit(e)

    def cancel(self):
        """Cancel task; signals won't emit after this."""
        self.cancelled = True


class BackgroundTaskManager:
    """
    Keeps at most one background task in flight.

    Starting a task cancels the previous one without waiting for it, so a
    superseded round trip never reports back and never blocks the caller.

    Usage:
        self._task_manager = BackgroundTaskManager()
        self._task_manager.run(
            target=provider.render,
            args=(shortcode,),
            on_success=self._on_markup,
            on_error=self._on_error,
        )

        # On shutdown:
        self._task_manager.cleanup()
    """

    def __init__(self):
        self._current_task: Optional[BackgroundTask] = None
        # Cancelled tasks whose thread is still running; referenced until finished
        self._retired: Set[BackgroundTask] = set()

    @property
    def in_flight(self) -> bool:
        return self._current_task is not None and self._current_task.isRunning()

    def run(
        self,
        target: Callable[..., Any],
        args: Tuple = (),
        kwargs: dict = None,
        on_success: Callable[[Any], None] = None,
        on_error: Callable[[Exception], None] = None,
    ) -> BackgroundTask:
        """
        Run a background task, cancelling any previous one.

        Args:
            target: Function to execute in background
            args: Positional arguments for target
            kwargs: Keyword arguments for target
            on_success: Callback for successful result
            on_error: Callback for error (receives Exception, not str)

        Returns:
            The started BackgroundTask
        """
        if self.in_flight:
            self._retire(self._current_task)
            logger.debug(f"Superseded in-flight background task ({len(self._retired)} still finishing)")

        task = BackgroundTask(target=target, args=args, kwargs=kwargs)
        if on_success:
            task.result_ready.connect(on_success)
        if on_error:
            task.error_occurred.connect(on_error)

        self._current_task = task
        task.start()
        return task

    def _retire(self, task: BackgroundTask) -> None:
        task.cancel()
        if task.isRunning():
            self._retired.add(task)
            task.finished.connect(partial(self._retired.discard, task))
            # Finished before the connection was made
            if task.isFinished():
                self._retired.discard(task)

    def cleanup(self):
        """Cancel every task and wait briefly for their threads."""
        if self._current_task is not None:
            self._retire(self._current_task)
            self._current_task = None
        for task in list(self._retired):
            if task.wait(CLEANUP_WAIT_MS):
                self._retired.discard(task)

"""Tests for core utilities and service helpers."""

import time

import pytest


def test_debounce_timer_zero_delay_fires_synchronously(qapp):
    from pyqt_mediawidgets.core import DebounceTimer

    called = []
    timer = DebounceTimer(delay_ms=0, handler=lambda: called.append(1))
    timer.trigger()
    timer.trigger()
    assert called == [1, 1]
    assert not timer.pending


def test_debounce_timer_trailing(qapp):
    """Test DebounceTimer restarts and fires once."""
    from pyqt_mediawidgets.core import DebounceTimer

    called = []
    timer = DebounceTimer(delay_ms=20, handler=lambda: called.append(1))
    timer.trigger()
    timer.trigger()
    assert timer.pending
    assert called == []

    deadline = time.monotonic() + 2
    while timer.pending and time.monotonic() < deadline:
        qapp.processEvents()
        time.sleep(0.005)
    qapp.processEvents()
    assert called == [1]


def test_debounce_timer_cancel_and_force(qapp):
    from pyqt_mediawidgets.core import DebounceTimer

    called = []
    timer = DebounceTimer(delay_ms=1000, handler=lambda: called.append(1))
    timer.trigger()
    timer.cancel()
    assert not timer.pending

    timer.trigger()
    timer.force()
    assert called == [1]
    assert not timer.pending


def test_background_task_run_inline(qapp):
    """BackgroundTask.run emits the result or the exception itself."""
    from pyqt_mediawidgets.core import BackgroundTask

    results, errors = [], []
    task = BackgroundTask(target=lambda value: value * 2, args=(21,))
    task.result_ready.connect(results.append)
    task.run()
    assert results == [42]

    def boom():
        raise RuntimeError("render failed")

    failing = BackgroundTask(target=boom)
    failing.error_occurred.connect(errors.append)
    failing.run()
    assert isinstance(errors[0], RuntimeError)


def test_background_task_cancelled_emits_nothing(qapp):
    from pyqt_mediawidgets.core import BackgroundTask

    results = []
    task = BackgroundTask(target=lambda: "late")
    task.result_ready.connect(results.append)
    task.cancel()
    task.run()
    assert results == []


def test_background_task_manager_delivers_result(qapp):
    from pyqt_mediawidgets.core import BackgroundTaskManager

    manager = BackgroundTaskManager()
    results = []
    task = manager.run(target=lambda: "markup", on_success=results.append)
    assert task.wait(2000)

    deadline = time.monotonic() + 2
    while not results and time.monotonic() < deadline:
        qapp.processEvents()
    assert results == ["markup"]
    manager.cleanup()
    assert not manager.in_flight


def test_background_task_manager_supersedes_without_waiting(qapp):
    """A superseded task is cancelled, not waited on, and never reports back."""
    import threading

    from pyqt_mediawidgets.core import BackgroundTaskManager

    release = threading.Event()
    manager = BackgroundTaskManager()
    results = []

    first = manager.run(target=lambda: release.wait(5) and "first", on_success=results.append)
    started = time.monotonic()
    second = manager.run(target=lambda: "second", on_success=results.append)
    elapsed = time.monotonic() - started

    assert elapsed < 0.09
    assert first.cancelled
    assert first.isRunning()

    release.set()
    assert first.wait(2000)
    assert second.wait(2000)
    deadline = time.monotonic() + 2
    while not results and time.monotonic() < deadline:
        qapp.processEvents()
    qapp.processEvents()
    assert results == ["second"]
    manager.cleanup()


def test_signal_service_restores_blocked_state(qapp):
    from PyQt6.QtWidgets import QLineEdit

    from pyqt_mediawidgets.services import SignalService

    widget = QLineEdit()
    seen = []
    widget.textChanged.connect(seen.append)

    with SignalService.block_signals(widget, None):
        widget.setText("quiet")
        assert widget.signalsBlocked()
    assert not widget.signalsBlocked()
    assert seen == []

    widget.blockSignals(True)
    with SignalService.block_signals(widget):
        pass
    assert widget.signalsBlocked()


def test_field_change_dispatcher_reentrancy(make_control):
    """Model observers echoing a change back do not dispatch again."""
    from pyqt_mediawidgets.services import FieldChangeDispatcher, FieldChangeEvent

    control, _ = make_control()
    dispatcher = FieldChangeDispatcher.instance()
    assert dispatcher is FieldChangeDispatcher.instance()

    echoes = []
    control.model.subscribe(
        lambda name, value: echoes.append(dispatcher.dispatch(FieldChangeEvent(name, value, control)))
    )
    assert dispatcher.dispatch(FieldChangeEvent("url", "https://example.com/v.mp4", control)) is True
    assert echoes == [False]

    assert dispatcher.dispatch(FieldChangeEvent("url", "", control, is_reset=True)) is False

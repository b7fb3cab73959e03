"""pytest configuration and fixtures for pyqt-mediawidgets tests."""

import os

os.environ.setdefault("QT_QPA_PLATFORM", "offscreen")

import pytest
from PyQt6.QtWidgets import QApplication

from pyqt_mediawidgets.protocols import MediaWidgetConfig, PreviewMarkup


@pytest.fixture(scope="session")
def qapp():
    """Create QApplication instance for tests."""
    app = QApplication.instance() or QApplication([])
    yield app
    # Don't quit - may cause issues with other tests


class ManualTaskRunner:
    """Task runner that holds every call until the test resolves it."""

    def __init__(self):
        self.calls = []
        self.cleaned_up = 0

    def run(self, target, args=(), kwargs=None, on_success=None, on_error=None):
        self.calls.append((target, args, on_success, on_error))

    def resolve(self, index, result=None):
        target, args, on_success, _ = self.calls[index]
        on_success(target(*args) if result is None else result)

    def fail(self, index, error):
        self.calls[index][3](error)

    def cleanup(self):
        self.cleaned_up += 1


class CannedPreviewProvider:
    def __init__(self):
        self.rendered = []

    def render(self, shortcode):
        self.rendered.append(shortcode.string())
        return PreviewMarkup(head="", body=f"<div class='preview'>{shortcode.string()}</div>")


class RecordingPicker:
    """Picker that only records the sessions it is handed."""

    def __init__(self, error=None):
        self.sessions = []
        self.error = error

    def open(self, session):
        self.sessions.append(session)
        if self.error is not None:
            raise self.error
        session.mark_ready()

    @property
    def last(self):
        return self.sessions[-1]


@pytest.fixture
def task_runner():
    return ManualTaskRunner()


@pytest.fixture
def preview_provider():
    return CannedPreviewProvider()


@pytest.fixture
def picker():
    return RecordingPicker()


@pytest.fixture
def failing_picker():
    return RecordingPicker(error=RuntimeError("media frame failed to open"))


@pytest.fixture
def config():
    return MediaWidgetConfig()


@pytest.fixture
def make_control(qapp, task_runner, preview_provider, picker, config):
    """Build a control over an in-memory store; returns (control, store)."""
    from pyqt_mediawidgets.forms import MediaWidgetControl
    from pyqt_mediawidgets.io.backends import MemoryBackend
    from pyqt_mediawidgets.io.instance_store import InstanceStore
    from pyqt_mediawidgets.schema import VIDEO_WIDGET_SCHEMA

    def factory(record=None, instance_id="media_video-2", **kwargs):
        store = InstanceStore(VIDEO_WIDGET_SCHEMA, MemoryBackend())
        if record is not None:
            store.backend.write(instance_id, record)
        control = MediaWidgetControl(
            schema=VIDEO_WIDGET_SCHEMA,
            store=store,
            instance_id=instance_id,
            picker=kwargs.pop("picker", picker),
            preview_provider=preview_provider,
            task_runner=task_runner,
            config=kwargs.pop("config", config),
            **kwargs,
        )
        return control, store

    return factory

"""Tests for the media widget form and preview panel."""

import pytest


@pytest.fixture
def form(make_control):
    from pyqt_mediawidgets.widgets import MediaWidgetForm

    control, store = make_control({"attachment_id": 42, "url": "https://example.com/clip.mp4"})
    widget = MediaWidgetForm(control)
    yield widget
    widget.close()


def test_no_scroll_widgets(qapp):
    """Test no-scroll widgets implement the adapter protocols."""
    from pyqt_mediawidgets.protocols import ComboBoxAdapter, SpinBoxAdapter
    from pyqt_mediawidgets.widgets import NoScrollComboBox, NoScrollSpinBox

    assert isinstance(NoScrollSpinBox(), SpinBoxAdapter)
    assert isinstance(NoScrollComboBox(), ComboBoxAdapter)


def test_create_field_widget_by_metadata(qapp):
    from pyqt_mediawidgets.protocols import CheckBoxAdapter, LineEditAdapter
    from pyqt_mediawidgets.schema import VIDEO_WIDGET_SCHEMA
    from pyqt_mediawidgets.widgets import NoScrollComboBox, NoScrollSpinBox, create_field_widget

    metadata = VIDEO_WIDGET_SCHEMA.export()
    assert isinstance(create_field_widget("autoplay", metadata["autoplay"]), CheckBoxAdapter)
    assert isinstance(create_field_widget("preload", metadata["preload"]), NoScrollComboBox)
    assert isinstance(create_field_widget("attachment_id", metadata["attachment_id"]), NoScrollSpinBox)

    link = create_field_widget("link_url", metadata["link_url"])
    assert isinstance(link, LineEditAdapter)
    assert link.placeholderText() == "https://"


def test_form_hides_internal_fields(form):
    with pytest.raises(KeyError):
        form.field_widget("attachment_id")
    assert form.field_widget("preload").get_value() == "none"


def test_form_edit_reaches_model(form):
    checkbox = form.field_widget("autoplay")
    checkbox.setChecked(True)
    assert form.control.model.get("autoplay") is True

    caption = form.field_widget("caption")
    caption.setText("New caption")
    caption.textEdited.emit("New caption")
    assert form.control.model.get("caption") == "New caption"


def test_model_change_mirrors_into_widget(form):
    form.control.model.set("preload", "auto")
    assert form.field_widget("preload").get_value() == "auto"


def test_rejected_field_reset_is_shown(form):
    form.control.model.set("preload", "bogus")
    form.control.save()

    assert form.status_text == "Preload was reset to its default value."
    assert form.field_widget("preload").get_value() == "none"


def test_form_requests_initial_preview(form, task_runner):
    assert len(task_runner.calls) == 1
    task_runner.resolve(0)
    assert form.preview_panel.showing_markup


def test_media_buttons_follow_selection(make_control, picker):
    from pyqt_mediawidgets.protocols import DEFAULT_MESSAGES
    from pyqt_mediawidgets.widgets import MediaWidgetForm

    control, _ = make_control()
    form = MediaWidgetForm(control)
    assert form._select_button.text() == DEFAULT_MESSAGES["select_media"]
    assert not form._edit_button.isEnabled()

    form._select_button.click()
    picker.last.confirm("library", {"id": 7, "url": "https://example.com/seven.mp4"})

    assert form._select_button.text() == DEFAULT_MESSAGES["change_media"]
    assert form._edit_button.isEnabled()
    form.close()


def test_second_selection_reports_in_status(make_control, picker):
    from pyqt_mediawidgets.widgets import MediaWidgetForm

    control, _ = make_control({"attachment_id": 42})
    form = MediaWidgetForm(control)
    form._select_button.click()
    form._edit_button.click()

    assert "already open" in form.status_text
    assert len(picker.sessions) == 1
    form.close()


# ========== PREVIEW PANEL ==========

def test_preview_panel_states(qapp):
    from pyqt_mediawidgets.protocols import DEFAULT_MESSAGES, PreviewMarkup
    from pyqt_mediawidgets.services import PreviewSnapshot, PreviewState
    from pyqt_mediawidgets.widgets import PreviewPanel

    panel = PreviewPanel()
    assert panel.state is PreviewState.EMPTY
    assert panel.notice_text == DEFAULT_MESSAGES["no_media_selected"]

    panel.show_snapshot(PreviewSnapshot(PreviewState.READY, 1, markup=PreviewMarkup(body="<p>video</p>")))
    assert panel.showing_markup

    panel.show_snapshot(PreviewSnapshot(PreviewState.MISSING_ATTACHMENT, 2))
    assert not panel.showing_markup
    assert panel.notice_text == DEFAULT_MESSAGES["missing_attachment"]

    panel.show_snapshot(PreviewSnapshot(PreviewState.FAILED, 3))
    assert panel.notice_text == DEFAULT_MESSAGES["unknown_error"]

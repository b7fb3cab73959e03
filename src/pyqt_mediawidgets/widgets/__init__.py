"""
Qt widgets for editing a media widget instance.
"""

from .no_scroll_widgets import NoScrollComboBox, NoScrollSpinBox
from .preview_panel import PreviewPanel
from .media_widget_form import MediaWidgetForm, create_field_widget

__all__ = [
    "NoScrollComboBox",
    "NoScrollSpinBox",
    "PreviewPanel",
    "MediaWidgetForm",
    "create_field_widget",
]

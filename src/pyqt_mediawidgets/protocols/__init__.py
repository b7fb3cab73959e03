"""
Collaborator protocols, configuration and widget contracts.
"""

from .widget_protocols import (
    ValueGettable,
    ValueSettable,
    RangeConfigurable,
    ChoiceSelectable,
    ChangeSignalEmitter,
)
from .widget_adapters import (
    LineEditAdapter,
    SpinBoxAdapter,
    ComboBoxAdapter,
    CheckBoxAdapter,
    PyQtWidgetMeta,
)
from .collaborators import AttachmentLookup, PickerProvider, PreviewMarkup, PreviewRenderProvider
from .form_config import (
    DEFAULT_MESSAGES,
    MediaWidgetConfig,
    set_media_widget_config,
    get_media_widget_config,
)

__all__ = [
    "ValueGettable",
    "ValueSettable",
    "RangeConfigurable",
    "ChoiceSelectable",
    "ChangeSignalEmitter",
    "LineEditAdapter",
    "SpinBoxAdapter",
    "ComboBoxAdapter",
    "CheckBoxAdapter",
    "PyQtWidgetMeta",
    "AttachmentLookup",
    "PickerProvider",
    "PreviewMarkup",
    "PreviewRenderProvider",
    "DEFAULT_MESSAGES",
    "MediaWidgetConfig",
    "set_media_widget_config",
    "get_media_widget_config",
]

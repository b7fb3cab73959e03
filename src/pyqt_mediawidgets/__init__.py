"""
pyqt-mediawidgets: schema-driven media widget editing for PyQt6.

Lets an editor attach a video to a layout widget, edit its metadata and
persist a validated instance record, with a live preview rendered remotely.

Architecture:
- Schema: declarative fields, sanitizers and composition (no Qt)
- IO: instance store that validates every write, with pluggable backends
- Forms: editing model, selected attachment and the coordinating control
- Services: selection sessions, preview rendering, field change dispatch
- Widgets: generated field rows, preview panel

Key Features:
- No invalid or unsanitized value is ever persisted
- Selection resolved by picker state, not payload shape
- Latest-request-wins preview rendering off the GUI thread
- All collaborators injected explicitly
"""

__version__ = "0.1.0"

__all__ = [
    "__version__",
]

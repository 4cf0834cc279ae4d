"""Editing machinery on top of the drawing model.

- commands: Reversible mutations (AddPole, AddLine, DeleteElement, ...)
- CommandHistory: Bounded undo/redo stack
- SnapEngine: Priority-ordered snapping with a throttled cache
- DimensionEngine: Angle/aligned capture state machines and styles
- TrackProjector: Fits parsed GPS data into the canvas
- DrawingSession: Controller wiring all of the above
"""

from powerline_planner.editor.commands import (
    AddDimension,
    AddLine,
    AddPole,
    BatchRename,
    BatchRestyle,
    BatchRetype,
    Command,
    DeleteElement,
    PropertyChange,
    UpdateProperty,
    apply_command,
    invert_command,
)
from powerline_planner.editor.dimension_tools import (
    AlignedDimensionTool,
    AngleDimensionTool,
    CapturedPoint,
    DimensionEngine,
    DimensionPreview,
)
from powerline_planner.editor.drawing_session import DrawingSession
from powerline_planner.editor.history import CommandHistory, EditorHistory
from powerline_planner.editor.snap_engine import SnapEngine
from powerline_planner.editor.track_import import TrackProjector

__all__ = [
    # Commands
    "AddPole",
    "AddLine",
    "AddDimension",
    "DeleteElement",
    "UpdateProperty",
    "BatchRetype",
    "BatchRename",
    "BatchRestyle",
    "PropertyChange",
    "Command",
    "apply_command",
    "invert_command",
    # History
    "CommandHistory",
    "EditorHistory",
    # Snapping
    "SnapEngine",
    # Dimensions
    "DimensionEngine",
    "AngleDimensionTool",
    "AlignedDimensionTool",
    "CapturedPoint",
    "DimensionPreview",
    # Import
    "TrackProjector",
    # Session
    "DrawingSession",
]

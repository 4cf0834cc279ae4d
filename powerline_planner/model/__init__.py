"""Data model classes for the pole/line network drawing.

- Pole: Support structure on the drawing plane
- Line: Conductor span with optional pole references, lengths and sag
- Dimension: Angle or aligned measurement with its style choice
- SnapCandidate: Transient snap result
- ToastMessage: User-facing rejection notices
- ImportedTrack: GPS track projected onto the canvas
- DrawingModel: Entity store owning all poles, lines and dimensions
"""

from powerline_planner.model.dimension import (
    Dimension,
    DimensionStyle,
    InheritedStyle,
    OverriddenStyle,
)
from powerline_planner.model.drawing_model import (
    DrawingModel,
    DrawingSnapshot,
    Element,
    SnapshotMetadata,
)
from powerline_planner.model.line import Line, ProjectedPoint, SagSpec
from powerline_planner.model.message import (
    DegenerateLineMessage,
    EmptyNameMessage,
    IncompatibleTypeMessage,
    InvalidValueMessage,
    NothingSelectedMessage,
    ToastMessage,
    UnknownElementMessage,
    UnknownPresetMessage,
)
from powerline_planner.model.pole import Pole
from powerline_planner.model.snap_candidate import SnapCandidate, SnapKind
from powerline_planner.model.track import (
    ImportedTrack,
    TrackMetadata,
    TrackPath,
    TrackPoint,
    Waypoint,
)

__all__ = [
    "Pole",
    "Line",
    "ProjectedPoint",
    "SagSpec",
    "Dimension",
    "DimensionStyle",
    "InheritedStyle",
    "OverriddenStyle",
    "SnapCandidate",
    "SnapKind",
    "ToastMessage",
    "NothingSelectedMessage",
    "EmptyNameMessage",
    "IncompatibleTypeMessage",
    "UnknownElementMessage",
    "InvalidValueMessage",
    "DegenerateLineMessage",
    "UnknownPresetMessage",
    "TrackPoint",
    "Waypoint",
    "TrackPath",
    "TrackMetadata",
    "ImportedTrack",
    "DrawingModel",
    "DrawingSnapshot",
    "SnapshotMetadata",
    "Element",
]

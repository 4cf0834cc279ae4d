"""SnapCandidate - Anchor point proposed by the snap engine.

Transient value, never persisted.
"""

from dataclasses import dataclass

from powerline_planner.core.geometry import XY


class SnapKind:
    """Fine-grained candidate kinds (the strategy tag is coarser)."""

    ENDPOINT_POLE = "endpoint-pole"
    ENDPOINT_LINE_START = "endpoint-line-start"
    ENDPOINT_LINE_END = "endpoint-line-end"
    INTERSECTION = "intersection"
    MIDPOINT = "midpoint"
    PERPENDICULAR = "perpendicular"
    PARALLEL = "parallel"
    GRID = "grid"
    CENTER = "center"


@dataclass(frozen=True)
class SnapCandidate:
    """A point the cursor is pulled toward.

    Attributes:
        x, y: Anchor position on the drawing plane
        strategy: Snap strategy that produced it (SnapConfig.PRIORITY entry)
        kind: Fine-grained kind (SnapKind)
        distance: Distance from the cursor when found
        description: Human-readable label, e.g. "Pole: Pole 3"
        source_ids: Ids of the pole/line(s) the anchor derives from
    """

    x: float
    y: float
    strategy: str
    kind: str
    distance: float
    description: str
    source_ids: tuple[str, ...] = ()

    @property
    def position(self) -> XY:
        return (self.x, self.y)

    @property
    def pole_id(self) -> str | None:
        """Id of the snapped pole for pole endpoint snaps."""
        if self.kind == SnapKind.ENDPOINT_POLE and self.source_ids:
            return self.source_ids[0]
        return None

    def __repr__(self) -> str:
        return f"SnapCandidate({self.kind} at ({self.x:.1f}, {self.y:.1f}), '{self.description}')"

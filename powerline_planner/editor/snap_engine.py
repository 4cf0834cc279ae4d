"""SnapEngine - Pull the cursor to the best nearby anchor point.

Strategies are evaluated in a fixed priority order:

    endpoints -> intersections -> midpoints -> perpendicular -> grid -> center -> parallel

Within the search radius the nearest candidate wins (strictly nearer; ties
keep the first found). The running best distance carries over between
tiers, so a later tier only wins if it is strictly nearer. A hit in the
endpoints or intersections tier ends the search immediately, even when a
weaker tier would offer a nearer point.

Perpendicular and parallel candidates need a construction anchor (the start
point of the line being drawn), set via `set_anchor`.

Results are cached in a small LRU keyed by the rounded cursor position,
the excluded element and the anchor. An entry is reused only within the
throttle window, and the whole cache is dropped when settings change or the
model's version moves.

Scaling limit: the intersection tier is O(n²) in the number of lines.
"""

import logging
import time
from collections import OrderedDict
from collections.abc import Callable, Iterator
from math import atan2, cos, pi, sin

from powerline_planner.constants import SnapConfig
from powerline_planner.core.geometry import XY, GeometryKernel
from powerline_planner.model.drawing_model import DrawingModel
from powerline_planner.model.snap_candidate import SnapCandidate, SnapKind

logger = logging.getLogger(__name__)

# (x, y, kind, description, source_ids) before distance is known
RawCandidate = tuple[float, float, str, str, tuple[str, ...]]

CacheKey = tuple[int, int, str | None, XY | None]


class SnapEngine:
    """Snap engine over a DrawingModel.

    Example:
        engine = SnapEngine(model=model)
        snap = engine.find_snap(x=101.0, y=48.0)
        if snap is not None:
            x, y = snap.position
    """

    def __init__(
        self,
        model: DrawingModel,
        clock: Callable[[], float] = time.monotonic,
    ) -> None:
        """Initialize with all strategies enabled.

        Args:
            model: Entity store to snap against
            clock: Monotonic clock in seconds (injectable for tests)
        """
        self.model = model
        self._clock = clock

        self.enabled = True
        self.types: dict[str, bool] = {snap_type: True for snap_type in SnapConfig.PRIORITY}
        self.snap_distance = SnapConfig.DEFAULT_DISTANCE
        self.snap_to_grid = True
        self.show_grid = True
        self.grid_size = SnapConfig.DEFAULT_GRID_SIZE
        self.anchor: XY | None = None

        self._cache: OrderedDict[CacheKey, tuple[float, SnapCandidate | None]] = OrderedDict()
        self._cache_version = model.version

    # =========================================================================
    # Settings (each change drops the cache)
    # =========================================================================

    def set_enabled(self, enabled: bool) -> None:
        self.enabled = enabled
        self.invalidate()

    def set_type_enabled(self, snap_type: str, enabled: bool) -> None:
        """Toggle one strategy.

        Raises:
            ValueError: If snap_type is not a known strategy.
        """
        if snap_type not in self.types:
            raise ValueError(f"Unknown snap type '{snap_type}', expected one of {SnapConfig.PRIORITY}")
        self.types[snap_type] = enabled
        self.invalidate()

    def toggle_all(self, enabled: bool) -> None:
        """Enable or disable every strategy."""
        for snap_type in self.types:
            self.types[snap_type] = enabled
        self.invalidate()

    def set_snap_distance(self, distance: float) -> None:
        """Set search radius, clamped to [MIN_DISTANCE, MAX_DISTANCE]."""
        self.snap_distance = max(SnapConfig.MIN_DISTANCE, min(SnapConfig.MAX_DISTANCE, distance))
        self.invalidate()

    def set_grid(self, grid_size: float | None = None, show_grid: bool | None = None, snap_to_grid: bool | None = None) -> None:
        """Update grid settings; omitted arguments keep their value."""
        if grid_size is not None:
            if grid_size <= 0:
                raise ValueError(f"grid_size must be positive, got {grid_size}")
            self.grid_size = grid_size
        if show_grid is not None:
            self.show_grid = show_grid
        if snap_to_grid is not None:
            self.snap_to_grid = snap_to_grid
        self.invalidate()

    def set_anchor(self, anchor: XY | None) -> None:
        """Set (or clear) the start point of the line under construction."""
        self.anchor = anchor

    def invalidate(self) -> None:
        """Drop all cached results."""
        self._cache.clear()
        self._cache_version = self.model.version

    # =========================================================================
    # Snapping
    # =========================================================================

    def find_snap(self, x: float, y: float, exclude_id: str | None = None) -> SnapCandidate | None:
        """Best snap candidate for a cursor position.

        Args:
            x, y: Cursor position on the drawing plane
            exclude_id: Element to ignore (e.g. the one being dragged)

        Returns:
            The winning SnapCandidate, or None when snapping is off or no
            candidate lies within the search radius.
        """
        if not self.enabled:
            return None

        if self._cache_version != self.model.version:
            self.invalidate()

        now = self._clock()
        key: CacheKey = (round(x), round(y), exclude_id, self.anchor)
        cached = self._cache.get(key)
        if cached is not None and now - cached[0] < SnapConfig.THROTTLE_S:
            self._cache.move_to_end(key)
            return cached[1]

        best = self._search(x=x, y=y, exclude_id=exclude_id)

        self._cache[key] = (now, best)
        self._cache.move_to_end(key)
        while len(self._cache) > SnapConfig.CACHE_SIZE:
            self._cache.popitem(last=False)

        if best is not None:
            logger.debug(f"Snap at ({x:.1f}, {y:.1f}) -> {best}")
        return best

    def _search(self, x: float, y: float, exclude_id: str | None) -> SnapCandidate | None:
        best: SnapCandidate | None = None
        best_distance = self.snap_distance

        for snap_type in SnapConfig.PRIORITY:
            if not self.types[snap_type]:
                continue
            for cx, cy, kind, description, source_ids in self._generate(snap_type=snap_type, x=x, y=y, exclude_id=exclude_id):
                distance = GeometryKernel.distance(a=(x, y), b=(cx, cy))
                if distance < best_distance:
                    best_distance = distance
                    best = SnapCandidate(
                        x=cx,
                        y=cy,
                        strategy=snap_type,
                        kind=kind,
                        distance=distance,
                        description=description,
                        source_ids=source_ids,
                    )
            if best is not None and snap_type in SnapConfig.SHORT_CIRCUIT_TIERS:
                break

        return best

    def _generate(self, snap_type: str, x: float, y: float, exclude_id: str | None) -> Iterator[RawCandidate]:
        generators = {
            SnapConfig.ENDPOINTS: self._endpoint_candidates,
            SnapConfig.INTERSECTIONS: self._intersection_candidates,
            SnapConfig.MIDPOINTS: self._midpoint_candidates,
            SnapConfig.PERPENDICULAR: self._perpendicular_candidates,
            SnapConfig.GRID: self._grid_candidates,
            SnapConfig.CENTER: self._center_candidates,
            SnapConfig.PARALLEL: self._parallel_candidates,
        }
        return generators[snap_type](x=x, y=y, exclude_id=exclude_id)

    # =========================================================================
    # Candidate generators
    # =========================================================================

    def _endpoint_candidates(self, x: float, y: float, exclude_id: str | None) -> Iterator[RawCandidate]:
        for pole in self.model.poles.values():
            if pole.id == exclude_id:
                continue
            yield (pole.x, pole.y, SnapKind.ENDPOINT_POLE, f"Pole: {pole.name or 'Unnamed'}", (pole.id,))
        for line in self.model.lines.values():
            if line.id == exclude_id:
                continue
            name = line.name or "Unnamed"
            yield (line.start_x, line.start_y, SnapKind.ENDPOINT_LINE_START, f"Line Start: {name}", (line.id,))
            yield (line.end_x, line.end_y, SnapKind.ENDPOINT_LINE_END, f"Line End: {name}", (line.id,))

    def _intersection_candidates(self, x: float, y: float, exclude_id: str | None) -> Iterator[RawCandidate]:
        lines = [line for line in self.model.lines.values() if line.id != exclude_id]
        for i, first in enumerate(lines):
            for second in lines[i + 1 :]:
                point = GeometryKernel.segment_intersection(a1=first.start, a2=first.end, b1=second.start, b2=second.end)
                if point is None:
                    continue
                yield (
                    point[0],
                    point[1],
                    SnapKind.INTERSECTION,
                    f"Intersection: {first.name or 'Line'} × {second.name or 'Line'}",
                    (first.id, second.id),
                )

    def _midpoint_candidates(self, x: float, y: float, exclude_id: str | None) -> Iterator[RawCandidate]:
        for line in self.model.lines.values():
            if line.id == exclude_id:
                continue
            mx, my = line.midpoint
            yield (mx, my, SnapKind.MIDPOINT, f"Midpoint: {line.name or 'Unnamed'}", (line.id,))

    def _perpendicular_candidates(self, x: float, y: float, exclude_id: str | None) -> Iterator[RawCandidate]:
        if self.anchor is None:
            return
        for line in self.model.lines.values():
            if line.id == exclude_id:
                continue
            foot = GeometryKernel.perpendicular_foot(point=self.anchor, seg_start=line.start, seg_end=line.end)
            if foot is None:
                continue
            yield (foot[0], foot[1], SnapKind.PERPENDICULAR, f"Perpendicular to: {line.name or 'Line'}", (line.id,))

    def _grid_candidates(self, x: float, y: float, exclude_id: str | None) -> Iterator[RawCandidate]:
        if not (self.snap_to_grid and self.show_grid):
            return
        gx, gy = GeometryKernel.nearest_grid_point(point=(x, y), grid_size=self.grid_size)
        yield (gx, gy, SnapKind.GRID, f"Grid ({gx:g}, {gy:g})", ())

    def _center_candidates(self, x: float, y: float, exclude_id: str | None) -> Iterator[RawCandidate]:
        # Only pole centers for now; shapes with a geometric center would add theirs here
        for pole in self.model.poles.values():
            if pole.id == exclude_id:
                continue
            yield (pole.x, pole.y, SnapKind.CENTER, f"Center: {pole.name or 'Unnamed'}", (pole.id,))

    def _parallel_candidates(self, x: float, y: float, exclude_id: str | None) -> Iterator[RawCandidate]:
        if self.anchor is None:
            return
        ax, ay = self.anchor
        cursor_vector = (x - ax, y - ay)
        length = GeometryKernel.distance(a=self.anchor, b=(x, y))
        if length == 0:
            return
        cursor_angle = atan2(cursor_vector[1], cursor_vector[0])

        for line in self.model.lines.values():
            if line.id == exclude_id:
                continue
            direction = (line.end_x - line.start_x, line.end_y - line.start_y)
            if not GeometryKernel.is_parallel(v1=cursor_vector, v2=direction, tolerance_deg=SnapConfig.PARALLEL_TOLERANCE_DEG):
                continue
            line_angle = atan2(direction[1], direction[0])
            # Follow the line direction closest to the cursor (the line or its reverse)
            if abs(_wrap_angle(cursor_angle - line_angle)) > pi / 2:
                line_angle += pi
            yield (
                ax + length * cos(line_angle),
                ay + length * sin(line_angle),
                SnapKind.PARALLEL,
                f"Parallel to: {line.name or 'Line'}",
                (line.id,),
            )

    def __repr__(self) -> str:
        active = [t for t in SnapConfig.PRIORITY if self.types[t]]
        return f"SnapEngine(enabled={self.enabled}, distance={self.snap_distance}, types={active})"


def _wrap_angle(angle: float) -> float:
    """Wrap an angle in radians to (-pi, pi]."""
    while angle <= -pi:
        angle += 2 * pi
    while angle > pi:
        angle -= 2 * pi
    return angle

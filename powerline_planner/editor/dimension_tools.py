"""Dimension tools - State machines and builder for measurement annotations.

Uses python-statemachine for the two interactive capture flows.

Angle tool:
    IDLE -> SELECTING_FIRST: activate
    SELECTING_FIRST -> SELECTING_SECOND: seed_point (pole clicked), seed_line (line clicked)
    SELECTING_SECOND -> SELECTING_THIRD: add_vertex (3-point flow only)
    SELECTING_SECOND -> SELECTING_FIRST: complete (2-line flow, second line clicked)
    SELECTING_THIRD -> SELECTING_FIRST: complete (third point clicked)

Aligned tool:
    IDLE -> SELECTING_FIRST: activate
    SELECTING_FIRST -> SELECTING_SECOND: seed_point (pole clicked away from any line)
    SELECTING_FIRST -> SELECTING_FIRST: complete (line or a pole on a line clicked, measured at once)
    SELECTING_SECOND -> SELECTING_FIRST: complete (second point clicked)

Both tools:
    any active state -> SELECTING_FIRST: cancel (captures discarded)
    any active state -> IDLE: deactivate

Entering SELECTING_FIRST or IDLE clears the captures, so a finished or
abandoned capture never leaks into the next one. Nothing is committed to
the model here: DimensionEngine.handle_click returns the built Dimension
and the caller submits it through the command history.
"""

import copy
import logging
from dataclasses import dataclass, field
from typing import Any

from statemachine import State, StateMachine
from statemachine.exceptions import TransitionNotAllowed

from powerline_planner.constants import DimensionConfig
from powerline_planner.core.coordinate_system import CoordinateSystem
from powerline_planner.core.geometry import XY, GeometryKernel
from powerline_planner.editor.snap_engine import SnapEngine
from powerline_planner.model.dimension import Dimension, InheritedStyle, OverriddenStyle
from powerline_planner.model.drawing_model import DrawingModel
from powerline_planner.model.line import Line

logger = logging.getLogger(__name__)


# =============================================================================
# Tool contexts
# =============================================================================


@dataclass(frozen=True)
class CapturedPoint:
    """A clicked (snapped) position and the pole it landed on, if any."""

    x: float
    y: float
    pole_id: str | None = None
    elevation: float | None = None

    @property
    def position(self) -> XY:
        return (self.x, self.y)


@dataclass
class AngleToolContext:
    """Captures of the angle tool.

    Note: The 'state' field is managed by python-statemachine when this
    object is passed as the model.
    """

    state: str | None = None
    points: list[CapturedPoint] = field(default_factory=list)
    lines: list[Line] = field(default_factory=list)

    def clear(self) -> None:
        self.points = []
        self.lines = []


@dataclass
class AlignedToolContext:
    """Captures of the aligned tool."""

    state: str | None = None
    points: list[CapturedPoint] = field(default_factory=list)

    def clear(self) -> None:
        self.points = []


@dataclass(frozen=True)
class DimensionPreview:
    """Rubber-band geometry shown while a capture is in progress.

    Attributes:
        kind: "angle" or "aligned"
        points: Captured points followed by the cursor position
        value: Measured value once enough points exist, else None
    """

    kind: str
    points: tuple[XY, ...]
    value: float | None = None


# =============================================================================
# State machines
# =============================================================================


class ToolMachineMixin:
    """Shared helpers for the dimension tool machines."""

    @property
    def context(self) -> Any:
        """Alias for model."""
        return self.model

    def _state(self) -> State:
        return self.states_map[self.current_state_value]

    @property
    def state_id(self) -> str:
        """Current state id (e.g., "selecting_second")."""
        return self._state().id

    @property
    def is_active(self) -> bool:
        return not self.idle.is_active

    def try_transition(self, event: str, **kwargs: Any) -> bool:
        """Attempt a transition, returning success/failure.

        Args:
            event: Transition event name
            **kwargs: Arguments for transition

        Returns:
            True if transition succeeded, False otherwise.
        """
        try:
            self.send(event, **kwargs)
            return True
        except TransitionNotAllowed:
            logger.warning(f"Transition '{event}' not allowed from {self._state().name}")
            return False

    def after_transition(self, event: str, source: State, target: State) -> None:
        logger.debug(f"[{type(self).__name__}] {source.name} --({event})--> {target.name}")


class AngleDimensionTool(ToolMachineMixin, StateMachine):
    """Capture flow for angle dimensions (3-point or 2-line)."""

    idle = State("Idle", initial=True)
    selecting_first = State("SelectingFirst")
    selecting_second = State("SelectingSecond")
    selecting_third = State("SelectingThird")

    activate = idle.to(selecting_first)
    seed_point = selecting_first.to(selecting_second)
    seed_line = selecting_first.to(selecting_second)
    add_vertex = selecting_second.to(selecting_third, unless="has_line_seed")
    complete = selecting_second.to(selecting_first, cond="has_line_seed") | selecting_third.to(selecting_first)
    cancel = (
        selecting_first.to(selecting_first)
        | selecting_second.to(selecting_first)
        | selecting_third.to(selecting_first)
    )
    deactivate = selecting_first.to(idle) | selecting_second.to(idle) | selecting_third.to(idle)

    def __init__(self, context: AngleToolContext | None = None) -> None:
        super().__init__(model=context or AngleToolContext())

    def has_line_seed(self) -> bool:
        """Guard: the capture started on a line (2-line flow)."""
        return len(self.context.lines) > 0

    def on_enter_idle(self) -> None:
        self.context.clear()

    def on_enter_selecting_first(self) -> None:
        self.context.clear()

    def before_seed_point(self, point: CapturedPoint) -> None:
        self.context.points.append(point)

    def before_seed_line(self, line: Line) -> None:
        self.context.lines.append(line)

    def before_add_vertex(self, point: CapturedPoint) -> None:
        self.context.points.append(point)

    def __repr__(self) -> str:
        ctx = self.context
        return f"AngleDimensionTool(state={self.state_id}, points={len(ctx.points)}, lines={len(ctx.lines)})"


class AlignedDimensionTool(ToolMachineMixin, StateMachine):
    """Capture flow for aligned (point-to-point) dimensions."""

    idle = State("Idle", initial=True)
    selecting_first = State("SelectingFirst")
    selecting_second = State("SelectingSecond")

    activate = idle.to(selecting_first)
    seed_point = selecting_first.to(selecting_second)
    complete = selecting_first.to(selecting_first) | selecting_second.to(selecting_first)
    cancel = selecting_first.to(selecting_first) | selecting_second.to(selecting_first)
    deactivate = selecting_first.to(idle) | selecting_second.to(idle)

    def __init__(self, context: AlignedToolContext | None = None) -> None:
        super().__init__(model=context or AlignedToolContext())

    def on_enter_idle(self) -> None:
        self.context.clear()

    def on_enter_selecting_first(self) -> None:
        self.context.clear()

    def before_seed_point(self, point: CapturedPoint) -> None:
        self.context.points.append(point)

    def __repr__(self) -> str:
        return f"AlignedDimensionTool(state={self.state_id}, points={len(self.context.points)})"


# =============================================================================
# Engine
# =============================================================================


class DimensionEngine:
    """Builds angle and aligned dimensions from clicks and owns the default styles.

    Example:
        engine = DimensionEngine(model=model, coords=coords, snap=snap)
        engine.activate(kind="angle")
        for x, y in clicks:
            dimension = engine.handle_click(x=x, y=y)
            if dimension is not None:
                history.execute(command=AddDimension(dimension=dimension))
    """

    def __init__(self, model: DrawingModel, coords: CoordinateSystem, snap: SnapEngine | None = None) -> None:
        self.model = model
        self.coords = coords
        self.snap = snap
        self.angle_tool = AngleDimensionTool()
        self.aligned_tool = AlignedDimensionTool()
        self.default_styles: dict[str, dict[str, Any]] = {
            DimensionConfig.ANGLE: dict(DimensionConfig.DEFAULT_STYLE),
            DimensionConfig.ALIGNED: dict(DimensionConfig.ALIGNED_STYLE),
        }

    # =========================================================================
    # Tool lifecycle
    # =========================================================================

    @property
    def active_kind(self) -> str | None:
        """Kind of the active tool, None when both are idle."""
        if self.angle_tool.is_active:
            return DimensionConfig.ANGLE
        if self.aligned_tool.is_active:
            return DimensionConfig.ALIGNED
        return None

    def activate(self, kind: str) -> None:
        """Activate one tool (the other one is deactivated)."""
        if kind not in DimensionConfig.KINDS:
            raise ValueError(f"Unknown dimension kind '{kind}'")
        self.deactivate()
        tool = self.angle_tool if kind == DimensionConfig.ANGLE else self.aligned_tool
        tool.activate()
        logger.info(f"{kind} dimension tool active")

    def deactivate(self) -> None:
        """Return both tools to idle, discarding any captures."""
        for tool in (self.angle_tool, self.aligned_tool):
            if tool.is_active:
                tool.deactivate()

    def cancel(self) -> None:
        """Abandon the capture in progress but keep the tool active."""
        for tool in (self.angle_tool, self.aligned_tool):
            if tool.is_active:
                tool.cancel()

    # =========================================================================
    # Click handling
    # =========================================================================

    def _resolve_click(self, x: float, y: float) -> CapturedPoint:
        if self.snap is not None:
            snapped = self.snap.find_snap(x=x, y=y)
            if snapped is not None:
                x, y = snapped.position
        pole = self.model.find_pole_at(x=x, y=y)
        if pole is not None:
            return CapturedPoint(x=x, y=y, pole_id=pole.id, elevation=pole.elevation)
        return CapturedPoint(x=x, y=y)

    def handle_click(self, x: float, y: float) -> Dimension | None:
        """Feed a click to the active tool.

        Returns:
            The finished Dimension when this click completes a capture,
            otherwise None. The model is not modified.
        """
        if self.angle_tool.is_active:
            return self._angle_click(x=x, y=y)
        if self.aligned_tool.is_active:
            return self._aligned_click(x=x, y=y)
        return None

    def _angle_click(self, x: float, y: float) -> Dimension | None:
        tool = self.angle_tool
        ctx = tool.context
        point = self._resolve_click(x=x, y=y)
        line = self.model.find_line_at(x=point.x, y=point.y)

        if tool.selecting_first.is_active:
            if point.pole_id is not None:
                tool.seed_point(point=point)
            elif line is not None:
                tool.seed_line(line=line)
            return None

        if tool.selecting_second.is_active:
            if ctx.points:
                tool.add_vertex(point=point)
                return None
            if line is None:
                return None
            dimension = self.build_two_line(first=ctx.lines[0], second=line)
            if dimension is None:
                logger.debug("Angle between parallel lines has no vertex, capture reset")
                tool.cancel()
                return None
            tool.complete()
            return dimension

        # selecting_third
        p1, p2 = ctx.points
        dimension = self.build_three_point(points=(p1, p2, point))
        tool.complete()
        return dimension

    def _aligned_click(self, x: float, y: float) -> Dimension | None:
        tool = self.aligned_tool
        point = self._resolve_click(x=x, y=y)

        if tool.selecting_first.is_active:
            # A line wins over a pole, also at the poles it connects
            line = self.model.find_line_at(x=point.x, y=point.y)
            if line is not None:
                dimension = self.build_from_line(line=line)
                tool.complete()
                return dimension
            if point.pole_id is None:
                tool.cancel()
                return None
            tool.seed_point(point=point)
            return None

        first = tool.context.points[0]
        dimension = self.build_two_point(start=first, end=point)
        tool.complete()
        return dimension

    # =========================================================================
    # Builders
    # =========================================================================

    def build_three_point(self, points: tuple[CapturedPoint, CapturedPoint, CapturedPoint]) -> Dimension:
        """Angle at the middle point."""
        p1, vertex, p3 = points
        value = GeometryKernel.angle_at_vertex(p1=p1.position, vertex=vertex.position, p3=p3.position)
        return Dimension(
            id=self.model.next_dimension_id(kind=DimensionConfig.ANGLE),
            kind=DimensionConfig.ANGLE,
            method=DimensionConfig.METHOD_THREE_POINT,
            points=(p1.position, vertex.position, p3.position),
            value=value,
            vertex=vertex.position,
            source_ids=(p1.pole_id, vertex.pole_id, p3.pole_id),
            style=self.new_style(kind=DimensionConfig.ANGLE),
        )

    def build_two_line(self, first: Line, second: Line) -> Dimension | None:
        """Unsigned angle between two lines, or None when they never meet."""
        vertex = GeometryKernel.line_intersection(a1=first.start, a2=first.end, b1=second.start, b2=second.end)
        if vertex is None:
            return None
        value = GeometryKernel.unsigned_line_angle(a1=first.start, a2=first.end, b1=second.start, b2=second.end)
        return Dimension(
            id=self.model.next_dimension_id(kind=DimensionConfig.ANGLE),
            kind=DimensionConfig.ANGLE,
            method=DimensionConfig.METHOD_TWO_LINE,
            points=(first.start, first.end, second.start, second.end),
            value=value,
            vertex=vertex,
            source_ids=(first.id, second.id),
            style=self.new_style(kind=DimensionConfig.ANGLE),
        )

    def build_two_point(self, start: CapturedPoint, end: CapturedPoint) -> Dimension:
        """Aligned distance between two clicked points."""
        elevations = (start.elevation, end.elevation)
        return Dimension(
            id=self.model.next_dimension_id(kind=DimensionConfig.ALIGNED),
            kind=DimensionConfig.ALIGNED,
            method=DimensionConfig.METHOD_TWO_POINT,
            points=(start.position, end.position),
            value=self.real_distance(a=start.position, b=end.position, elevations=elevations),
            source_ids=(start.pole_id, end.pole_id),
            elevations=elevations,
            style=self.new_style(kind=DimensionConfig.ALIGNED),
        )

    def build_from_line(self, line: Line) -> Dimension:
        """Aligned distance between a line's endpoints."""
        elevations = (line.start_elevation, line.end_elevation)
        return Dimension(
            id=self.model.next_dimension_id(kind=DimensionConfig.ALIGNED),
            kind=DimensionConfig.ALIGNED,
            method=DimensionConfig.METHOD_LINE,
            points=(line.start, line.end),
            value=self.real_distance(a=line.start, b=line.end, elevations=elevations),
            source_ids=(line.id,),
            elevations=elevations,
            style=self.new_style(kind=DimensionConfig.ALIGNED),
        )

    def real_distance(self, a: XY, b: XY, elevations: tuple[float | None, float | None] = (None, None)) -> float:
        """3D distance between two drawing-plane points in real units.

        Horizontal components come from the projected coordinates; the
        vertical component is the elevation difference, 0 when either end
        has no elevation.
        """
        ax, ay = self.coords.to_projected(px=a[0], py=a[1])
        bx, by = self.coords.to_projected(px=b[0], py=b[1])
        start_elev, end_elev = elevations
        dz = 0.0 if start_elev is None or end_elev is None else end_elev - start_elev
        return GeometryKernel.distance_3d(dx=bx - ax, dy=by - ay, dz=dz)

    # =========================================================================
    # Re-evaluation and preview
    # =========================================================================

    def reevaluate(self, dimension: Dimension) -> float:
        """Value of a dimension under the current geometry and coordinate system.

        Line-based dimensions follow their source lines while those exist;
        point-based dimensions keep their captured points. Two-line angles
        whose lines became parallel keep their stored value.
        """
        if dimension.method == DimensionConfig.METHOD_THREE_POINT:
            p1, vertex, p3 = dimension.points
            return GeometryKernel.angle_at_vertex(p1=p1, vertex=vertex, p3=p3)

        if dimension.method == DimensionConfig.METHOD_TWO_LINE:
            a1, a2, b1, b2 = dimension.points
            lines = [self.model.lines.get(line_id) for line_id in dimension.source_ids]
            if len(lines) == 2 and all(line is not None for line in lines):
                a1, a2, b1, b2 = lines[0].start, lines[0].end, lines[1].start, lines[1].end
            if GeometryKernel.line_intersection(a1=a1, a2=a2, b1=b1, b2=b2) is None:
                return dimension.value
            return GeometryKernel.unsigned_line_angle(a1=a1, a2=a2, b1=b1, b2=b2)

        if dimension.method == DimensionConfig.METHOD_LINE:
            line = self.model.lines.get(dimension.source_ids[0]) if dimension.source_ids else None
            if line is not None:
                return self.real_distance(
                    a=line.start, b=line.end, elevations=(line.start_elevation, line.end_elevation)
                )

        start, end = dimension.points
        return self.real_distance(a=start, b=end, elevations=dimension.elevations)

    def preview(self, x: float, y: float) -> DimensionPreview | None:
        """Rubber-band geometry for the cursor position, None when nothing is captured."""
        cursor_point = self._resolve_click(x=x, y=y)
        cursor = cursor_point.position

        if self.angle_tool.is_active:
            points = [p.position for p in self.angle_tool.context.points]
            if self.angle_tool.selecting_second.is_active and len(points) == 1:
                return DimensionPreview(kind=DimensionConfig.ANGLE, points=(points[0], cursor))
            if self.angle_tool.selecting_third.is_active:
                value = GeometryKernel.angle_at_vertex(p1=points[0], vertex=points[1], p3=cursor)
                return DimensionPreview(kind=DimensionConfig.ANGLE, points=(points[0], points[1], cursor), value=value)
            return None

        if self.aligned_tool.is_active and self.aligned_tool.selecting_second.is_active:
            first = self.aligned_tool.context.points[0]
            value = self.real_distance(
                a=first.position, b=cursor, elevations=(first.elevation, cursor_point.elevation)
            )
            return DimensionPreview(kind=DimensionConfig.ALIGNED, points=(first.position, cursor), value=value)

        return None

    # =========================================================================
    # Styles
    # =========================================================================

    def new_style(self, kind: str) -> OverriddenStyle:
        """Private copy of the current default style of a kind."""
        return OverriddenStyle(values=copy.deepcopy(self.default_styles[kind]))

    def resolve_style(self, dimension: Dimension) -> dict[str, Any]:
        """Effective style values of a dimension.

        Inheriting dimensions get the live default; overriding ones get their
        own values, with keys they lack filled from the default.
        """
        default = self.default_styles[dimension.kind]
        if isinstance(dimension.style, InheritedStyle):
            return dict(default)
        return {**default, **dimension.style.values}

    def format_text(self, dimension: Dimension) -> str:
        return dimension.format_text(style=self.resolve_style(dimension=dimension))

    def set_default_style(self, kind: str, **changes: Any) -> None:
        """Change default style values of a kind.

        Only dimensions with InheritedStyle see the change.

        Raises:
            ValueError: On an unknown style key or an unsupported angle unit.
        """
        unknown = set(changes) - set(DimensionConfig.DEFAULT_STYLE)
        if unknown:
            raise ValueError(f"Unknown style keys: {sorted(unknown)}")
        if kind == DimensionConfig.ANGLE and "unit" in changes and changes["unit"] not in DimensionConfig.ANGLE_UNITS:
            raise ValueError(f"Unknown angle unit '{changes['unit']}', expected one of {DimensionConfig.ANGLE_UNITS}")
        self.default_styles[kind].update(changes)
        logger.info(f"Default {kind} style updated: {sorted(changes)}")

    def apply_preset(self, name: str) -> None:
        """Load a named preset into both default styles (units are kept).

        Raises:
            ValueError: If the preset does not exist.
        """
        preset = DimensionConfig.PRESETS.get(name)
        if preset is None:
            raise ValueError(f"Unknown preset '{name}', expected one of {sorted(DimensionConfig.PRESETS)}")
        for kind in DimensionConfig.KINDS:
            self.default_styles[kind].update(preset)
        logger.info(f"Dimension preset '{name}' applied")

    def __repr__(self) -> str:
        return f"DimensionEngine(active={self.active_kind}, angle={self.angle_tool!r}, aligned={self.aligned_tool!r})"

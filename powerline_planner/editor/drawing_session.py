"""DrawingSession - Editor controller tying the drawing components together.

Owns one of each component and routes user intent through them:

    pointer -> pointer_to_drawing -> SnapEngine -> build entity -> Command
            -> CommandHistory -> DrawingModel -> listeners(snapshot)

Every committed change goes through the history, so listeners (renderer,
map, elevation profile) receive a fresh DrawingSnapshot after each execute,
undo or redo. Loading, importing and coordinate-system switches notify too.

User mistakes (empty selection, blank name, unknown id, incompatible type)
are reported by returning a ToastMessage; the model and history are left
untouched in that case.
"""

import logging
import time
from collections.abc import Callable
from dataclasses import dataclass
from math import atan2, degrees
from typing import Any

from powerline_planner.constants import (
    CoordinateConfig,
    DimensionConfig,
    ElementTypes,
    LineConfig,
    ToolNames,
    ViewConfig,
)
from powerline_planner.core.coordinate_system import CoordinateSystem, ReferencePoint
from powerline_planner.core.geometry import XY, GeometryKernel
from powerline_planner.editor.commands import (
    AddDimension,
    AddLine,
    AddPole,
    BatchRename,
    BatchRestyle,
    BatchRetype,
    Command,
    DeleteElement,
    UpdateProperty,
    is_type_compatible,
)
from powerline_planner.editor.dimension_tools import DimensionEngine
from powerline_planner.editor.history import CommandHistory
from powerline_planner.editor.snap_engine import SnapEngine
from powerline_planner.editor.track_import import TrackProjector
from powerline_planner.model.dimension import Dimension, DimensionStyle, InheritedStyle, OverriddenStyle
from powerline_planner.model.drawing_model import DrawingModel, DrawingSnapshot, Element, SnapshotMetadata
from powerline_planner.model.line import Line, ProjectedPoint
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
from powerline_planner.model.track import ImportedTrack

logger = logging.getLogger(__name__)

SessionListener = Callable[[DrawingSnapshot], None]


@dataclass
class ViewState:
    """Pan and zoom applied between the screen and the drawing plane."""

    zoom: float = ViewConfig.DEFAULT_ZOOM
    pan_x: float = 0.0
    pan_y: float = 0.0


@dataclass
class PreciseInput:
    """Angle/length entry for the line being drawn.

    Length is in meters in real mode and in pixels otherwise. A locked
    value constrains the preview; an unlocked one tracks the cursor.
    """

    angle_deg: float = 0.0
    angle_locked: bool = False
    length: float = 0.0
    length_locked: bool = False

    def reset(self) -> None:
        self.angle_deg = 0.0
        self.length = 0.0


@dataclass
class LineDraft:
    """A line between its first and second click."""

    start_x: float
    start_y: float
    end_x: float
    end_y: float
    start_snap: SnapCandidate | None = None

    @property
    def start(self) -> XY:
        return (self.start_x, self.start_y)

    @property
    def end(self) -> XY:
        return (self.end_x, self.end_y)


class DrawingSession:
    """One open drawing with its editing state.

    Example:
        session = DrawingSession(canvas_width=1200, canvas_height=800)
        session.add_pole(x=100, y=100)
        session.add_pole(x=200, y=100)
        session.start_line(x=100, y=100)
        line = session.finish_line(x=200, y=100)
        session.undo()
    """

    def __init__(
        self,
        canvas_width: float = CoordinateConfig.DEFAULT_CANVAS_WIDTH,
        canvas_height: float = CoordinateConfig.DEFAULT_CANVAS_HEIGHT,
        clock: Callable[[], float] = time.monotonic,
    ) -> None:
        self.model = DrawingModel()
        self.coords = CoordinateSystem(canvas_width=canvas_width, canvas_height=canvas_height)
        self.snap = SnapEngine(model=self.model, clock=clock)
        self.history: CommandHistory[Command] = CommandHistory(model=self.model)
        self.dimensions = DimensionEngine(model=self.model, coords=self.coords, snap=self.snap)

        self.view = ViewState()
        self.tool = ToolNames.SELECT
        self.current_pole_type = ElementTypes.DEFAULT_POLE_TYPE
        self.current_line_type = ElementTypes.DEFAULT_LINE_TYPE
        self.add_grounding = False
        self.add_guywire = False

        self.draft: LineDraft | None = None
        self.precise = PreciseInput()
        self.selection: list[str] = []

        self._listeners: list[SessionListener] = []
        self.history.add_listener(self._on_history_change)

    # =========================================================================
    # Listeners
    # =========================================================================

    def add_listener(self, listener: SessionListener) -> None:
        """Register a callback receiving a snapshot after every committed change."""
        self._listeners.append(listener)

    def _notify(self) -> None:
        if not self._listeners:
            return
        snapshot = self.snapshot()
        for listener in self._listeners:
            listener(snapshot)

    def _on_history_change(self, event: str, command: object) -> None:
        self.selection = [eid for eid in self.selection if self.model.contains(element_id=eid)]
        self._notify()

    def snapshot(self) -> DrawingSnapshot:
        """Read-only copy of the drawing with coordinate-system metadata."""
        metadata = SnapshotMetadata(
            meters_per_pixel=self.coords.meters_per_pixel,
            coordinate_system=self.coords.coordinate_system_name,
            total_distance=round(self.model.total_distance_m(), LineConfig.LENGTH_DECIMALS),
        )
        return self.model.snapshot(metadata=metadata)

    # =========================================================================
    # View and tools
    # =========================================================================

    def pointer_to_drawing(self, client_x: float, client_y: float, rect_left: float = 0.0, rect_top: float = 0.0) -> XY:
        """Convert a screen pointer position to drawing-plane coordinates."""
        v = self.view
        return ((client_x - rect_left - v.pan_x) / v.zoom, (client_y - rect_top - v.pan_y) / v.zoom)

    def set_zoom(self, zoom: float) -> None:
        self.view.zoom = max(ViewConfig.MIN_ZOOM, min(ViewConfig.MAX_ZOOM, zoom))

    def zoom_at(self, mouse_x: float, mouse_y: float, zoom_in: bool) -> None:
        """Wheel zoom keeping the drawing point under the mouse fixed."""
        factor = ViewConfig.WHEEL_ZOOM_IN if zoom_in else ViewConfig.WHEEL_ZOOM_OUT
        old_zoom = self.view.zoom
        self.set_zoom(zoom=old_zoom * factor)
        change = self.view.zoom / old_zoom
        self.view.pan_x = mouse_x - (mouse_x - self.view.pan_x) * change
        self.view.pan_y = mouse_y - (mouse_y - self.view.pan_y) * change

    def zoom_in(self) -> None:
        self.set_zoom(zoom=self.view.zoom * ViewConfig.BUTTON_ZOOM_STEP)

    def zoom_out(self) -> None:
        self.set_zoom(zoom=self.view.zoom / ViewConfig.BUTTON_ZOOM_STEP)

    def pan_by(self, dx: float, dy: float) -> None:
        self.view.pan_x += dx
        self.view.pan_y += dy

    def reset_view(self) -> None:
        self.view = ViewState()

    def set_tool(self, tool: str) -> None:
        """Switch tool; any capture in progress is abandoned.

        Raises:
            ValueError: If tool is not one of ToolNames.ALL.
        """
        if tool not in ToolNames.ALL:
            raise ValueError(f"Unknown tool '{tool}', expected one of {ToolNames.ALL}")
        self.cancel_line()
        self.dimensions.deactivate()
        if tool == ToolNames.ANGLE_DIMENSION:
            self.dimensions.activate(kind=DimensionConfig.ANGLE)
        elif tool == ToolNames.ALIGNED_DIMENSION:
            self.dimensions.activate(kind=DimensionConfig.ALIGNED)
        self.tool = tool
        logger.debug(f"Tool: {tool}")

    def handle_click(self, x: float, y: float) -> Element | ToastMessage | None:
        """Apply a drawing-plane click with the current tool.

        Returns:
            The created entity, a rejection message, or None when the click
            only advanced a capture or changed the selection.
        """
        if self.tool == ToolNames.SELECT:
            self.select_at(x=x, y=y)
            return None
        if self.tool == ToolNames.POLE:
            return self.add_pole(x=x, y=y)
        if self.tool == ToolNames.LINE:
            if self.draft is None:
                self.start_line(x=x, y=y)
                return None
            return self.finish_line(x=x, y=y)
        dimension = self.dimensions.handle_click(x=x, y=y)
        if dimension is not None:
            self.history.execute(command=AddDimension(dimension=dimension))
        return dimension

    def handle_escape(self) -> None:
        """Abandon the line or dimension capture in progress."""
        self.cancel_line()
        self.dimensions.cancel()

    # =========================================================================
    # Poles
    # =========================================================================

    def add_pole(self, x: float, y: float, pole_type: str | None = None, snap: bool = True) -> Pole:
        """Place a pole, snapped unless snap is False."""
        if snap:
            candidate = self.snap.find_snap(x=x, y=y)
            if candidate is not None:
                x, y = candidate.position

        pole = Pole(
            id=self.model.next_pole_id(),
            x=x,
            y=y,
            type=pole_type or self.current_pole_type,
            name=f"Pole {len(self.model.poles) + 1}",
            has_grounding=self.add_grounding,
            has_guywire=self.add_guywire,
            elevation=0.0,
        )
        if self.coords.is_real:
            pole.utm_x, pole.utm_y = self.coords.to_projected(px=x, py=y)
            pole.utm_zone = self.coords.utm_zone
            pole.lat, pole.lon = self.coords.projected_to_geographic(mx=pole.utm_x, my=pole.utm_y)

        self.history.execute(command=AddPole(pole=pole))
        self.selection = [pole.id]
        return pole

    # =========================================================================
    # Lines
    # =========================================================================

    def start_line(self, x: float, y: float) -> LineDraft:
        """First click of a line: snap the start and begin the draft."""
        candidate = self.snap.find_snap(x=x, y=y)
        if candidate is not None:
            x, y = candidate.position
        self.draft = LineDraft(start_x=x, start_y=y, end_x=x, end_y=y, start_snap=candidate)
        self.precise.reset()
        self.snap.set_anchor(anchor=(x, y))
        return self.draft

    def _length_to_pixels(self, length: float) -> float:
        return length * self.coords.scale if self.coords.is_real else length

    def _pixels_to_length(self, pixels: float) -> float:
        return pixels / self.coords.scale if self.coords.is_real else pixels

    def set_precise_angle(self, angle_deg: float, locked: bool = True) -> None:
        """Set (and by default lock) the drawing angle in degrees, clockwise on screen."""
        self.precise.angle_deg = angle_deg
        self.precise.angle_locked = locked
        self._apply_locks()

    def set_precise_length(self, length: float, locked: bool = True) -> None:
        """Set (and by default lock) the line length in meters (real mode) or pixels."""
        if length < 0:
            raise ValueError(f"Line length must not be negative, got {length}")
        self.precise.length = length
        self.precise.length_locked = locked
        self._apply_locks()

    def _apply_locks(self) -> None:
        if self.draft is None or not (self.precise.angle_locked and self.precise.length_locked):
            return
        self.draft.end_x, self.draft.end_y = GeometryKernel.polar_offset(
            origin=self.draft.start,
            angle_deg=self.precise.angle_deg,
            length=self._length_to_pixels(length=self.precise.length),
        )

    def update_line_preview(self, x: float, y: float) -> XY | None:
        """Move the free end of the draft line toward the cursor.

        Returns:
            New end point, or None when no line is being drawn.
        """
        draft = self.draft
        if draft is None:
            return None
        p = self.precise

        if p.angle_locked and p.length_locked:
            self._apply_locks()
        elif p.angle_locked:
            cursor_distance = GeometryKernel.distance(a=draft.start, b=(x, y))
            draft.end_x, draft.end_y = GeometryKernel.polar_offset(
                origin=draft.start, angle_deg=p.angle_deg, length=cursor_distance
            )
            p.length = round(self._pixels_to_length(pixels=cursor_distance), ViewConfig.PRECISE_LENGTH_DECIMALS)
        elif p.length_locked:
            cursor_angle = degrees(atan2(y - draft.start_y, x - draft.start_x))
            draft.end_x, draft.end_y = GeometryKernel.polar_offset(
                origin=draft.start, angle_deg=cursor_angle, length=self._length_to_pixels(length=p.length)
            )
            p.angle_deg = round(cursor_angle, ViewConfig.PRECISE_ANGLE_DECIMALS)
        else:
            candidate = self.snap.find_snap(x=x, y=y)
            draft.end_x, draft.end_y = candidate.position if candidate is not None else (x, y)
            pixels = GeometryKernel.distance(a=draft.start, b=draft.end)
            p.length = round(self._pixels_to_length(pixels=pixels), ViewConfig.PRECISE_LENGTH_DECIMALS)
            p.angle_deg = round(
                degrees(atan2(draft.end_y - draft.start_y, draft.end_x - draft.start_x)),
                ViewConfig.PRECISE_ANGLE_DECIMALS,
            )
        return draft.end

    def finish_line(self, x: float | None = None, y: float | None = None) -> Line | ToastMessage | None:
        """Second click of a line: commit it.

        Without locks the end snaps to the best candidate near (x, y). With
        an angle or length lock the constrained preview end is used.

        Returns:
            The new Line, DegenerateLineMessage when end equals start, or
            None when no line is being drawn.
        """
        draft = self.draft
        if draft is None:
            return None

        end_snap = None
        if x is not None and y is not None:
            self.update_line_preview(x=x, y=y)
            if not (self.precise.angle_locked or self.precise.length_locked):
                end_snap = self.snap.find_snap(x=x, y=y)
                if end_snap is not None:
                    draft.end_x, draft.end_y = end_snap.position

        if draft.start == draft.end:
            message = DegenerateLineMessage()
            message.log()
            return message

        line = Line(
            id=self.model.next_line_id(),
            start_x=draft.start_x,
            start_y=draft.start_y,
            end_x=draft.end_x,
            end_y=draft.end_y,
            type=self.current_line_type,
            name=f"Line {len(self.model.lines) + 1}",
            start_elevation=0.0,
            end_elevation=0.0,
        )

        start_pole = self._snapped_pole(candidate=draft.start_snap)
        if start_pole is not None:
            line.start_pole_id = start_pole.id
            line.start_elevation = start_pole.elevation or 0.0
        end_pole = self._snapped_pole(candidate=end_snap)
        if end_pole is not None:
            line.end_pole_id = end_pole.id
            line.end_elevation = end_pole.elevation or 0.0

        if self.coords.is_real:
            zone = self.coords.utm_zone
            sx, sy = self.coords.to_projected(px=line.start_x, py=line.start_y)
            ex, ey = self.coords.to_projected(px=line.end_x, py=line.end_y)
            line.start_utm = ProjectedPoint(x=sx, y=sy, zone=zone)
            line.end_utm = ProjectedPoint(x=ex, y=ey, zone=zone)
            line.refresh_lengths()

        self.history.execute(command=AddLine(line=line))
        self.cancel_line()
        self.selection = [line.id]
        return line

    def _snapped_pole(self, candidate: SnapCandidate | None) -> Pole | None:
        if candidate is None or candidate.kind != SnapKind.ENDPOINT_POLE:
            return None
        return self.model.poles.get(candidate.pole_id)

    def cancel_line(self) -> None:
        """Drop the draft line; nothing is committed."""
        if self.draft is not None:
            logger.debug("Line draft cancelled")
        self.draft = None
        self.precise = PreciseInput()
        self.snap.set_anchor(anchor=None)

    # =========================================================================
    # Editing
    # =========================================================================

    def delete_element(self, element_id: str) -> ToastMessage | None:
        """Delete one element (no cascade to lines referencing a pole)."""
        if not self.model.contains(element_id=element_id):
            return _reject(UnknownElementMessage(element_id=element_id))
        self.history.execute(command=DeleteElement.capture(model=self.model, element_id=element_id))
        return None

    def delete_selected(self) -> ToastMessage | None:
        """Delete every selected element as separate undoable steps."""
        if not self.selection:
            return _reject(NothingSelectedMessage(action="delete"))
        for element_id in list(self.selection):
            if self.model.contains(element_id=element_id):
                self.history.execute(command=DeleteElement.capture(model=self.model, element_id=element_id))
        self.selection = []
        return None

    def update_property(self, element_id: str, field_name: str, value: Any) -> ToastMessage | None:
        """Set one field of one element through the history."""
        element = self.model.get(element_id=element_id)
        if element is None:
            return _reject(UnknownElementMessage(element_id=element_id))
        if field_name == "id" or not hasattr(element, field_name):
            return _reject(InvalidValueMessage(field_name=field_name, reason="not an editable property"))
        if field_name == "type" and not is_type_compatible(element=element, new_type=value):
            return _reject(InvalidValueMessage(field_name=field_name, reason=f"'{value}' is not valid here"))
        if getattr(element, field_name) == value:
            return None
        self.history.execute(
            command=UpdateProperty.capture(model=self.model, element_id=element_id, field_name=field_name, new_value=value)
        )
        return None

    def batch_retype(self, element_ids: list[str], new_type: str) -> ToastMessage | None:
        """Change the category of all compatible elements in one undoable step."""
        if not element_ids:
            return _reject(NothingSelectedMessage(action="change type"))
        command = BatchRetype.capture(model=self.model, element_ids=element_ids, new_type=new_type)
        if not command.changes:
            return _reject(IncompatibleTypeMessage(new_type=new_type))
        self.history.execute(command=command)
        return None

    def batch_rename(self, element_ids: list[str], name: str, numbered: bool = True) -> ToastMessage | None:
        """Rename poles and lines; with numbered, several get "<name> 1", "<name> 2", ..."""
        if not element_ids:
            return _reject(NothingSelectedMessage(action="rename"))
        if not name.strip():
            return _reject(EmptyNameMessage())
        command = BatchRename.capture(model=self.model, element_ids=element_ids, name=name.strip(), numbered=numbered)
        if not command.changes:
            return _reject(NothingSelectedMessage(action="rename"))
        self.history.execute(command=command)
        return None

    def batch_restyle(self, dimension_ids: list[str], **changes: Any) -> ToastMessage | None:
        """Apply style values to several dimensions, each getting its own overriding copy."""
        dimensions = [self.model.dimensions[d] for d in dimension_ids if d in self.model.dimensions]
        if not dimensions:
            return _reject(NothingSelectedMessage(action="restyle"))
        unknown = set(changes) - set(DimensionConfig.DEFAULT_STYLE)
        if unknown:
            return _reject(InvalidValueMessage(field_name="style", reason=f"unknown keys {sorted(unknown)}"))
        styles: dict[str, DimensionStyle] = {
            dim.id: OverriddenStyle(values={**self.dimensions.resolve_style(dimension=dim), **changes})
            for dim in dimensions
        }
        self.history.execute(command=BatchRestyle.capture(model=self.model, styles=styles))
        return None

    def reset_dimension_style(self, dimension_ids: list[str]) -> ToastMessage | None:
        """Make dimensions follow the default style of their kind again."""
        ids = [d for d in dimension_ids if d in self.model.dimensions]
        if not ids:
            return _reject(NothingSelectedMessage(action="reset style"))
        styles: dict[str, DimensionStyle] = {dim_id: InheritedStyle() for dim_id in ids}
        self.history.execute(command=BatchRestyle.capture(model=self.model, styles=styles))
        return None

    def apply_dimension_preset(self, preset: str) -> ToastMessage | None:
        """Load a named style preset into the default styles."""
        if preset not in DimensionConfig.PRESETS:
            return _reject(UnknownPresetMessage(preset=preset))
        self.dimensions.apply_preset(name=preset)
        self._notify()
        return None

    def set_default_dimension_style(self, kind: str, **changes: Any) -> ToastMessage | None:
        """Change the default style of a kind (seen by inheriting dimensions)."""
        try:
            self.dimensions.set_default_style(kind=kind, **changes)
        except ValueError as e:
            return _reject(InvalidValueMessage(field_name="style", reason=str(e)))
        self._notify()
        return None

    def dimension_value(self, dimension: Dimension) -> float:
        """Current value of a dimension under the active coordinate system."""
        return self.dimensions.reevaluate(dimension=dimension)

    # =========================================================================
    # History
    # =========================================================================

    def undo(self) -> Command | None:
        return self.history.undo()

    def redo(self) -> Command | None:
        return self.history.redo()

    def can_undo(self) -> bool:
        return self.history.can_undo()

    def can_redo(self) -> bool:
        return self.history.can_redo()

    # =========================================================================
    # Selection
    # =========================================================================

    def select_at(self, x: float, y: float) -> str | None:
        """Select the pole (preferred) or line under a point; empty space clears."""
        element = self.model.find_pole_at(x=x, y=y) or self.model.find_line_at(x=x, y=y)
        self.selection = [] if element is None else [element.id]
        return None if element is None else element.id

    def select_in_box(self, x1: float, y1: float, x2: float, y2: float) -> list[str]:
        self.selection = self.model.select_in_box(x1=x1, y1=y1, x2=x2, y2=y2)
        return list(self.selection)

    def select_by_type(self, element_type: str) -> list[str]:
        self.selection = self.model.select_by_type(element_type=element_type)
        return list(self.selection)

    def clear_selection(self) -> None:
        self.selection = []

    # =========================================================================
    # Real coordinates
    # =========================================================================

    def enable_real_coordinates(self, reference: ReferencePoint | None = None) -> None:
        """Switch to UTM coordinates (see CoordinateSystem.enable for reference resolution)."""
        self.coords.enable(reference=reference, entity_points=self.model.projected_points())
        self.snap.invalidate()
        self._notify()

    def disable_real_coordinates(self) -> None:
        self.coords.disable()
        self.snap.invalidate()
        self._notify()

    # =========================================================================
    # Import / export
    # =========================================================================

    def load_from_external_track(self, track: ImportedTrack | dict[str, Any]) -> None:
        """Replace the drawing with an imported GPS track.

        Args:
            track: A fitted ImportedTrack, or the GPX reader's plain output
                (fitted to this session's canvas first)

        History and selection are cleared. A UTM import switches real
        coordinates on with the import's center, zone and scale.
        """
        if not isinstance(track, ImportedTrack):
            track = TrackProjector.from_parsed(
                data=track, canvas_width=self.coords.canvas_width, canvas_height=self.coords.canvas_height
            )
        poles, lines = track.to_elements()

        self.cancel_line()
        self.dimensions.deactivate()
        self.model.clear()
        for pole in poles:
            self.model.insert(element=pole)
        for line in lines:
            self.model.insert(element=line)
        self.history.clear()
        self.selection = []

        meta = track.metadata
        if meta.coordinate_system == "UTM" and meta.center_utm_x is not None and meta.center_utm_y is not None:
            self.coords.enable(
                reference=ReferencePoint(
                    utm_x=meta.center_utm_x,
                    utm_y=meta.center_utm_y,
                    utm_zone=meta.utm_zone or CoordinateConfig.DEFAULT_UTM_ZONE,
                    scale=1 / meta.meters_per_pixel,
                )
            )
        elif meta.coordinate_system == "UTM":
            self.coords.enable(entity_points=self.model.projected_points())
        self.reset_view()
        self.snap.invalidate()

        logger.info(f"Loaded track: {len(poles)} poles, {len(lines)} lines, {meta.total_distance:.2f} m")
        self._notify()

    def export_data(self) -> dict[str, Any]:
        """Serializable drawing with view state."""
        return {
            "elements": self.model.to_dict(),
            "zoom": self.view.zoom,
            "panX": self.view.pan_x,
            "panY": self.view.pan_y,
            "coordinateSystem": self.coords.state.to_dict(),
        }

    def import_data(self, data: dict[str, Any]) -> None:
        """Replace the drawing with exported data.

        Missing zoom defaults to 1 and missing pan to 0; without a stored
        coordinate system the drawing is in canvas mode. Lines without sag
        get the default sag; missing chord/actual lengths are recomputed.

        Raises:
            KeyError: If an element lacks a required key (id, coordinates).
        """
        self.cancel_line()
        self.dimensions.deactivate()
        self.model.replace_with(other=DrawingModel.from_dict(data=data.get("elements") or {}))
        self.history.clear()
        self.selection = []

        self.view = ViewState(pan_x=data.get("panX") or 0.0, pan_y=data.get("panY") or 0.0)
        self.set_zoom(zoom=data.get("zoom") or ViewConfig.DEFAULT_ZOOM)

        self.coords.reset()
        state = data.get("coordinateSystem")
        if state is not None and state.get("is_real"):
            self.coords.enable(
                reference=ReferencePoint(
                    utm_x=state["center_utm_x"],
                    utm_y=state["center_utm_y"],
                    utm_zone=state.get("utm_zone") or CoordinateConfig.DEFAULT_UTM_ZONE,
                    scale=state.get("scale") or CoordinateConfig.DEFAULT_SCALE,
                )
            )
        self.snap.invalidate()

        logger.info(f"Imported drawing: {self.model!r}")
        self._notify()

    def __repr__(self) -> str:
        return f"DrawingSession(tool={self.tool}, {self.model!r}, {self.coords!r}, {self.history!r})"


def _reject(message: ToastMessage) -> ToastMessage:
    message.log()
    return message

"""Tests for dimension tools.

Tests: AngleDimensionTool, AlignedDimensionTool state machines, DimensionEngine
Focus: Capture flows, measured values, re-evaluation, style defaults and presets

Engines here run without a snap engine so clicks land exactly where given.
"""

import warnings

import pytest

from powerline_planner.constants import DimensionConfig
from powerline_planner.core.coordinate_system import CoordinateSystem, ReferencePoint
from powerline_planner.editor.dimension_tools import (
    AlignedDimensionTool,
    AngleDimensionTool,
    CapturedPoint,
    DimensionEngine,
)
from powerline_planner.model.dimension import InheritedStyle, OverriddenStyle
from powerline_planner.model.drawing_model import DrawingModel
from powerline_planner.model.line import Line
from powerline_planner.model.pole import Pole


@pytest.fixture
def right_angle_model() -> DrawingModel:
    """Three poles forming a right angle at pole_2.

    pole_3 (200, 0)
        |
    pole_2 (200, 100) ---- pole_1 (100, 100) to the left
    """
    model = DrawingModel()
    for x, y in [(100.0, 100.0), (200.0, 100.0), (200.0, 0.0)]:
        model.insert(element=Pole(id=model.next_pole_id(), x=x, y=y, elevation=0.0))
    return model


def engine_for(model: DrawingModel, coords: CoordinateSystem | None = None) -> DimensionEngine:
    return DimensionEngine(model=model, coords=coords or CoordinateSystem(canvas_width=1200, canvas_height=800))


# =============================================================================
# STATE MACHINES
# =============================================================================


class TestAngleToolMachine:
    """Transitions of the angle capture flow."""

    def test_three_point_flow(self) -> None:
        tool = AngleDimensionTool()
        assert tool.state_id == "idle" and not tool.is_active

        tool.activate()
        tool.seed_point(point=CapturedPoint(x=0, y=0))
        tool.add_vertex(point=CapturedPoint(x=10, y=0))
        assert tool.state_id == "selecting_third"
        assert len(tool.context.points) == 2

        tool.complete()
        assert tool.state_id == "selecting_first"
        assert tool.context.points == []

    def test_line_seed_skips_vertex(self) -> None:
        """After a line seed, add_vertex is guarded out and complete is allowed."""
        tool = AngleDimensionTool()
        tool.activate()
        tool.seed_line(line=Line(id="line_1", start_x=0, start_y=0, end_x=10, end_y=0))
        assert tool.has_line_seed()

        tool.try_transition("add_vertex", point=CapturedPoint(x=5, y=5))
        assert tool.state_id == "selecting_second"

        tool.complete()
        assert tool.state_id == "selecting_first"
        assert tool.context.lines == []

    def test_cancel_and_deactivate(self) -> None:
        tool = AngleDimensionTool()
        tool.activate()
        tool.seed_point(point=CapturedPoint(x=0, y=0))
        tool.cancel()
        assert tool.state_id == "selecting_first"
        assert tool.context.points == []

        tool.seed_point(point=CapturedPoint(x=0, y=0))
        tool.deactivate()
        assert tool.state_id == "idle"
        assert tool.context.points == []

    def test_invalid_transition_from_idle(self) -> None:
        tool = AngleDimensionTool()
        assert tool.try_transition("seed_point", point=CapturedPoint(x=0, y=0)) is False
        assert tool.state_id == "idle"

    def test_state_queries_use_current_api(self, caplog: pytest.LogCaptureFixture) -> None:
        """Reading the state and logging a rejected event emit no DeprecationWarning."""
        tool = AngleDimensionTool()
        with warnings.catch_warnings():
            warnings.simplefilter("error", DeprecationWarning)
            assert tool.state_id == "idle"
            assert tool.try_transition("complete") is False
        assert "not allowed from Idle" in caplog.text


class TestAlignedToolMachine:
    def test_two_point_flow(self) -> None:
        tool = AlignedDimensionTool()
        tool.activate()
        tool.seed_point(point=CapturedPoint(x=0, y=0))
        assert tool.state_id == "selecting_second"
        tool.complete()
        assert tool.state_id == "selecting_first"
        assert tool.context.points == []

    def test_complete_from_first_for_line_measure(self) -> None:
        tool = AlignedDimensionTool()
        tool.activate()
        tool.complete()
        assert tool.state_id == "selecting_first"


# =============================================================================
# ANGLE DIMENSIONS
# =============================================================================


class TestAngleDimensions:
    """Angle measured from three poles or two lines."""

    def test_three_point_right_angle(self, right_angle_model: DrawingModel) -> None:
        engine = engine_for(model=right_angle_model)
        engine.activate(kind="angle")

        assert engine.handle_click(x=100, y=100) is None
        assert engine.handle_click(x=200, y=100) is None
        dimension = engine.handle_click(x=200, y=0)

        assert dimension is not None
        assert dimension.value == pytest.approx(90.0)
        assert dimension.method == DimensionConfig.METHOD_THREE_POINT
        assert dimension.vertex == (200, 100)
        assert dimension.source_ids == ("pole_1", "pole_2", "pole_3")
        assert dimension.id.startswith("angle_")
        assert engine.angle_tool.state_id == "selecting_first"
        assert right_angle_model.dimensions == {}  # Caller commits

    def test_first_click_must_hit_pole_or_line(self, right_angle_model: DrawingModel) -> None:
        engine = engine_for(model=right_angle_model)
        engine.activate(kind="angle")
        engine.handle_click(x=500, y=500)
        assert engine.angle_tool.state_id == "selecting_first"

    def test_later_points_may_be_free(self, right_angle_model: DrawingModel) -> None:
        """Only the first click needs a pole; vertex and third point can be anywhere."""
        engine = engine_for(model=right_angle_model)
        engine.activate(kind="angle")
        engine.handle_click(x=100, y=100)
        engine.handle_click(x=500, y=100)
        dimension = engine.handle_click(x=500, y=500)
        assert dimension.value == pytest.approx(90.0)
        assert dimension.source_ids == ("pole_1", None, None)

    def test_two_lines(self, model_crossing_lines: DrawingModel) -> None:
        engine = engine_for(model=model_crossing_lines)
        engine.activate(kind="angle")

        assert engine.handle_click(x=160, y=100) is None  # On "Feeder"
        dimension = engine.handle_click(x=200, y=160)  # On "Branch"

        assert dimension.value == pytest.approx(90.0)
        assert dimension.method == DimensionConfig.METHOD_TWO_LINE
        assert dimension.vertex == pytest.approx((200.0, 100.0))
        assert dimension.source_ids == ("line_1", "line_2")
        assert len(dimension.points) == 4

    def test_parallel_lines_reset_capture(self, model_crossing_lines: DrawingModel) -> None:
        engine = engine_for(model=model_crossing_lines)
        engine.activate(kind="angle")
        engine.handle_click(x=160, y=100)
        assert engine.handle_click(x=160, y=200) is None
        assert engine.angle_tool.state_id == "selecting_first"
        assert engine.angle_tool.context.lines == []

    def test_reevaluate_follows_moved_line(self, model_crossing_lines: DrawingModel) -> None:
        """Rotating the branch to 45° changes the live value, not the stored one."""
        engine = engine_for(model=model_crossing_lines)
        engine.activate(kind="angle")
        engine.handle_click(x=160, y=100)
        dimension = engine.handle_click(x=200, y=160)

        branch = model_crossing_lines.lines["line_2"]
        branch.start_x, branch.start_y, branch.end_x, branch.end_y = 100.0, 0.0, 300.0, 200.0
        assert engine.reevaluate(dimension=dimension) == pytest.approx(45.0)
        assert dimension.value == pytest.approx(90.0)

        branch.start_x, branch.start_y, branch.end_x, branch.end_y = 100.0, 50.0, 300.0, 50.0
        assert engine.reevaluate(dimension=dimension) == pytest.approx(90.0)  # Parallel: stored value


# =============================================================================
# ALIGNED DIMENSIONS
# =============================================================================


class TestAlignedDimensions:
    """3D distances between poles or along a line."""

    def test_two_poles_with_elevation(self) -> None:
        """300 x 400 px horizontal (500), 1200 m climb: 1300 in 3D."""
        model = DrawingModel()
        model.insert(element=Pole(id="pole_1", x=100.0, y=100.0, elevation=0.0))
        model.insert(element=Pole(id="pole_2", x=400.0, y=500.0, elevation=1200.0))
        engine = engine_for(model=model)
        engine.activate(kind="aligned")

        assert engine.handle_click(x=100, y=100) is None
        dimension = engine.handle_click(x=400, y=500)
        assert dimension.value == pytest.approx(1300.0)
        assert dimension.elevations == (0.0, 1200.0)
        assert dimension.source_ids == ("pole_1", "pole_2")

    def test_free_end_ignores_elevation(self) -> None:
        model = DrawingModel()
        model.insert(element=Pole(id="pole_1", x=0.0, y=0.0, elevation=500.0))
        engine = engine_for(model=model)
        engine.activate(kind="aligned")
        engine.handle_click(x=0, y=0)
        assert engine.handle_click(x=30, y=40).value == pytest.approx(50.0)

    def test_line_click_measures_at_once(self, model_two_poles_one_line: DrawingModel) -> None:
        engine = engine_for(model=model_two_poles_one_line)
        engine.activate(kind="aligned")
        dimension = engine.handle_click(x=200, y=100)
        assert dimension.method == DimensionConfig.METHOD_LINE
        assert dimension.value == pytest.approx(200.0)
        assert dimension.source_ids == ("line_1",)
        assert engine.aligned_tool.state_id == "selecting_first"

    def test_connected_pole_measures_line(self, model_two_poles_one_line: DrawingModel) -> None:
        """A pole carrying a line counts as a click on that line."""
        engine = engine_for(model=model_two_poles_one_line)
        engine.activate(kind="aligned")
        dimension = engine.handle_click(x=100, y=100)
        assert dimension is not None
        assert dimension.method == DimensionConfig.METHOD_LINE
        assert dimension.source_ids == ("line_1",)
        assert dimension.value == pytest.approx(200.0)
        assert engine.aligned_tool.state_id == "selecting_first"

    def test_empty_click_keeps_waiting(self, model_two_poles_one_line: DrawingModel) -> None:
        engine = engine_for(model=model_two_poles_one_line)
        engine.activate(kind="aligned")
        assert engine.handle_click(x=700, y=700) is None
        assert engine.aligned_tool.state_id == "selecting_first"

    def test_real_units(self, model_two_poles_one_line: DrawingModel) -> None:
        """At 2 px per meter the 200 px line is 100 m; re-evaluation follows the scale."""
        coords = CoordinateSystem(canvas_width=1200, canvas_height=800)
        coords.enable(reference=ReferencePoint(utm_x=500_000, utm_y=5_200_000, utm_zone=33, scale=2.0))
        engine = engine_for(model=model_two_poles_one_line, coords=coords)
        engine.activate(kind="aligned")
        dimension = engine.handle_click(x=100, y=100)
        assert dimension.value == pytest.approx(100.0)

        coords.disable()
        assert engine.reevaluate(dimension=dimension) == pytest.approx(200.0)

    def test_preview(self, right_angle_model: DrawingModel) -> None:
        engine = engine_for(model=right_angle_model)
        engine.activate(kind="aligned")
        assert engine.preview(x=150, y=150) is None
        engine.handle_click(x=100, y=100)
        preview = engine.preview(x=130, y=140)
        assert preview.points == ((100.0, 100.0), (130, 140))
        assert preview.value == pytest.approx(50.0)

    def test_preview_matches_committed_value(self) -> None:
        """Over a pole the preview uses both elevations, like the dimension it becomes."""
        model = DrawingModel()
        model.insert(element=Pole(id="pole_1", x=100.0, y=100.0, elevation=0.0))
        model.insert(element=Pole(id="pole_2", x=400.0, y=500.0, elevation=1200.0))
        engine = engine_for(model=model)
        engine.activate(kind="aligned")
        engine.handle_click(x=100, y=100)

        preview = engine.preview(x=400, y=500)
        assert preview.value == pytest.approx(1300.0)
        assert engine.handle_click(x=400, y=500).value == pytest.approx(preview.value)


# =============================================================================
# TOOL LIFECYCLE
# =============================================================================


class TestEngineLifecycle:
    def test_only_one_tool_active(self, right_angle_model: DrawingModel) -> None:
        engine = engine_for(model=right_angle_model)
        engine.activate(kind="angle")
        engine.handle_click(x=100, y=100)
        engine.activate(kind="aligned")
        assert engine.active_kind == "aligned"
        assert engine.angle_tool.state_id == "idle"
        assert engine.angle_tool.context.points == []

    def test_unknown_kind(self, right_angle_model: DrawingModel) -> None:
        with pytest.raises(ValueError, match="Unknown dimension kind"):
            engine_for(model=right_angle_model).activate(kind="radius")

    def test_idle_engine_ignores_clicks(self, right_angle_model: DrawingModel) -> None:
        engine = engine_for(model=right_angle_model)
        assert engine.active_kind is None
        assert engine.handle_click(x=100, y=100) is None


# =============================================================================
# STYLES
# =============================================================================


class TestStyles:
    """Defaults, overrides and presets."""

    def test_new_dimension_owns_style_copy(self, right_angle_model: DrawingModel) -> None:
        """Changing the default later does not touch a dimension created before."""
        engine = engine_for(model=right_angle_model)
        engine.activate(kind="angle")
        engine.handle_click(x=100, y=100)
        engine.handle_click(x=200, y=100)
        dimension = engine.handle_click(x=200, y=0)
        assert isinstance(dimension.style, OverriddenStyle)

        engine.set_default_style(kind="angle", precision=3)
        assert engine.format_text(dimension=dimension) == "90.0°"

        dimension.style = InheritedStyle()
        assert engine.format_text(dimension=dimension) == "90.000°"

    def test_override_fills_missing_keys_from_default(self, right_angle_model: DrawingModel) -> None:
        engine = engine_for(model=right_angle_model)
        engine.activate(kind="angle")
        engine.handle_click(x=100, y=100)
        engine.handle_click(x=200, y=100)
        dimension = engine.handle_click(x=200, y=0)
        dimension.style = OverriddenStyle(values={"unit": "grad"})
        assert engine.format_text(dimension=dimension) == "100.0grad"

    def test_invalid_default_style(self, right_angle_model: DrawingModel) -> None:
        engine = engine_for(model=right_angle_model)
        with pytest.raises(ValueError, match="Unknown style keys"):
            engine.set_default_style(kind="angle", glow=True)
        with pytest.raises(ValueError, match="Unknown angle unit"):
            engine.set_default_style(kind="angle", unit="turns")

    def test_preset_keeps_units(self, right_angle_model: DrawingModel) -> None:
        engine = engine_for(model=right_angle_model)
        engine.apply_preset(name="technical")
        assert engine.default_styles["angle"]["prefix"] == "∠"
        assert engine.default_styles["angle"]["unit"] == "°"
        assert engine.default_styles["aligned"]["unit"] == "m"
        assert engine.default_styles["aligned"]["precision"] == 2

    def test_unknown_preset(self, right_angle_model: DrawingModel) -> None:
        with pytest.raises(ValueError, match="Unknown preset"):
            engine_for(model=right_angle_model).apply_preset(name="neon")

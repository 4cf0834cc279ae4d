"""Shared pytest fixtures for powerline_planner tests.

Provides a controllable clock and reusable drawings for all tests.
All fixtures use explicit values with documented rationale.

COORDINATE SYSTEM:
    Drawing-plane coordinates are multiples of 20 wherever a click goes
    through the snap engine. The default grid is 20 px and grid snapping is
    on, so such clicks snap onto themselves and results stay exact.

    Real-mode fixtures anchor the canvas center (600, 400) of a 1200x800
    canvas at UTM (500000, 5200000) zone 33 with 1 px = 1 m, so a 100 px
    line is 100 m long.
"""

import pytest

from powerline_planner.core.coordinate_system import CoordinateSystem, ReferencePoint
from powerline_planner.editor.drawing_session import DrawingSession
from powerline_planner.editor.snap_engine import SnapEngine
from powerline_planner.model.drawing_model import DrawingModel
from powerline_planner.model.line import Line
from powerline_planner.model.pole import Pole


# =============================================================================
# CLOCK
# =============================================================================


class FakeClock:
    """Monotonic clock that only moves when told to.

    Snap results are cached for 16 ms; tests advance this clock to step
    past (or stay inside) that window deterministically.
    """

    def __init__(self, start: float = 1000.0) -> None:
        self.now = start

    def __call__(self) -> float:
        return self.now

    def advance(self, seconds: float) -> None:
        self.now += seconds


@pytest.fixture
def clock() -> FakeClock:
    return FakeClock()


# =============================================================================
# REFERENCE POINTS
# =============================================================================


@pytest.fixture
def reference_zone33() -> ReferencePoint:
    """Canvas center at (500000, 5200000) in zone 33, 1 px per meter.

    Roughly 46.9°N 15°E (central meridian of zone 33).
    """
    return ReferencePoint(utm_x=500_000.0, utm_y=5_200_000.0, utm_zone=33, scale=1.0)


@pytest.fixture
def real_coords(reference_zone33: ReferencePoint) -> CoordinateSystem:
    """1200x800 canvas in real mode at 1 px per meter."""
    coords = CoordinateSystem(canvas_width=1200, canvas_height=800)
    coords.enable(reference=reference_zone33)
    return coords


# =============================================================================
# MODEL FIXTURES
# =============================================================================


@pytest.fixture
def empty_model() -> DrawingModel:
    return DrawingModel()


@pytest.fixture
def model_two_poles_one_line() -> DrawingModel:
    """Two poles 200 px apart on y=100, joined by one line.

    pole_1 (100, 100) elevation 0  ---- line_1 ----  pole_2 (300, 100) elevation 0
    """
    model = DrawingModel()
    model.insert(element=Pole(id=model.next_pole_id(), x=100.0, y=100.0, name="Pole 1", elevation=0.0))
    model.insert(element=Pole(id=model.next_pole_id(), x=300.0, y=100.0, name="Pole 2", elevation=0.0))
    model.insert(
        element=Line(
            id=model.next_line_id(),
            start_x=100.0,
            start_y=100.0,
            end_x=300.0,
            end_y=100.0,
            name="Line 1",
            start_pole_id="pole_1",
            end_pole_id="pole_2",
        )
    )
    return model


@pytest.fixture
def model_crossing_lines() -> DrawingModel:
    """Horizontal and vertical line crossing at (200, 100), plus a parallel line.

    line_1: (100, 100) -> (300, 100)   "Feeder"
    line_2: (200, 0)   -> (200, 200)   "Branch"
    line_3: (100, 200) -> (300, 200)   "Parallel" (parallel to line_1)
    """
    model = DrawingModel()
    for start, end, name in [
        ((100.0, 100.0), (300.0, 100.0), "Feeder"),
        ((200.0, 0.0), (200.0, 200.0), "Branch"),
        ((100.0, 200.0), (300.0, 200.0), "Parallel"),
    ]:
        model.insert(
            element=Line(
                id=model.next_line_id(),
                start_x=start[0],
                start_y=start[1],
                end_x=end[0],
                end_y=end[1],
                name=name,
            )
        )
    return model


@pytest.fixture
def snap_engine(empty_model: DrawingModel, clock: FakeClock) -> SnapEngine:
    """Snap engine with grid snapping off, so only geometry candidates compete."""
    engine = SnapEngine(model=empty_model, clock=clock)
    engine.set_grid(snap_to_grid=False)
    return engine


# =============================================================================
# SESSION FIXTURES
# =============================================================================


@pytest.fixture
def session(clock: FakeClock) -> DrawingSession:
    """Fresh 1200x800 session in canvas mode."""
    return DrawingSession(canvas_width=1200, canvas_height=800, clock=clock)


@pytest.fixture
def real_session(session: DrawingSession, reference_zone33: ReferencePoint) -> DrawingSession:
    """Session in real mode at 1 px per meter (see reference_zone33)."""
    session.enable_real_coordinates(reference=reference_zone33)
    return session


@pytest.fixture
def parsed_gpx_graz() -> dict:
    """GPX reader output near Graz (zone 33): two waypoints and one 3-point track.

    Track runs roughly 1.1 km north then 0.75 km east.
    """
    return {
        "waypoints": [
            {"lat": 47.07, "lon": 15.43, "elevation": 350.0, "name": "Concrete pole plan"},
            {"lat": 47.08, "lon": 15.44, "elevation": 360.0},
        ],
        "tracks": [
            {
                "name": "20kV feeder",
                "points": [
                    {"lat": 47.07, "lon": 15.43, "elevation": 350.0},
                    {"lat": 47.08, "lon": 15.43, "elevation": 355.0},
                    {"lat": 47.08, "lon": 15.44, "elevation": 360.0},
                ],
            }
        ],
        "routes": [],
    }

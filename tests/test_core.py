"""Tests for powerline_planner core foundation classes.

Tests: GeometryKernel, UTMProjection, CoordinateSystem
Focus: Degenerate inputs, projection accuracy against pyproj, round-trips
"""

import math

import pytest
from hypothesis import given, settings, strategies as st

from powerline_planner.constants import CoordinateConfig
from powerline_planner.core.coordinate_system import CoordinateSystem, ReferencePoint
from powerline_planner.core.geometry import GeometryKernel
from powerline_planner.core.utm_projection import UTMProjection

coordinate = st.floats(min_value=-1000, max_value=1000, allow_nan=False, allow_infinity=False)
point = st.tuples(coordinate, coordinate)


# =============================================================================
# GEOMETRY KERNEL
# =============================================================================


class TestIntersections:
    """Segment and infinite-line intersection."""

    def test_crossing_segments(self) -> None:
        """Diagonals of a 100x100 square cross at its center."""
        result = GeometryKernel.segment_intersection(a1=(0, 0), a2=(100, 100), b1=(0, 100), b2=(100, 0))
        assert result == pytest.approx((50.0, 50.0))

    def test_segments_not_reaching_each_other(self) -> None:
        """Lines cross at (50, 50) but the second segment stops at x=40."""
        assert GeometryKernel.segment_intersection(a1=(0, 0), a2=(100, 100), b1=(0, 100), b2=(40, 60)) is None

    def test_parallel_segments(self) -> None:
        assert GeometryKernel.segment_intersection(a1=(0, 0), a2=(100, 0), b1=(0, 10), b2=(100, 10)) is None

    def test_touching_at_endpoint(self) -> None:
        """Shared endpoint counts as an intersection (t=1, u=0)."""
        result = GeometryKernel.segment_intersection(a1=(0, 0), a2=(50, 0), b1=(50, 0), b2=(50, 80))
        assert result == pytest.approx((50.0, 0.0))

    def test_line_intersection_beyond_segments(self) -> None:
        """Infinite lines meet even when the segments don't."""
        result = GeometryKernel.line_intersection(a1=(0, 0), a2=(10, 0), b1=(50, 10), b2=(50, 20))
        assert result == pytest.approx((50.0, 0.0))

    def test_line_intersection_parallel(self) -> None:
        assert GeometryKernel.line_intersection(a1=(0, 0), a2=(10, 10), b1=(0, 5), b2=(10, 15)) is None


class TestProjections:
    """Perpendicular foot, point-segment distance and on-segment test."""

    def test_perpendicular_foot_inside(self) -> None:
        assert GeometryKernel.perpendicular_foot(point=(30, 40), seg_start=(0, 0), seg_end=(100, 0)) == (30.0, 0.0)

    def test_perpendicular_foot_clamped_to_segment(self) -> None:
        """Points beyond the segment ends project onto the nearest end."""
        assert GeometryKernel.perpendicular_foot(point=(-20, 5), seg_start=(0, 0), seg_end=(100, 0)) == (0.0, 0.0)
        assert GeometryKernel.perpendicular_foot(point=(150, 5), seg_start=(0, 0), seg_end=(100, 0)) == (100.0, 0.0)

    def test_perpendicular_foot_zero_length_segment(self) -> None:
        assert GeometryKernel.perpendicular_foot(point=(5, 5), seg_start=(1, 1), seg_end=(1, 1)) is None

    def test_point_segment_distance(self) -> None:
        assert GeometryKernel.point_segment_distance(point=(30, 40), seg_start=(0, 0), seg_end=(100, 0)) == 40.0
        assert GeometryKernel.point_segment_distance(point=(3, 4), seg_start=(0, 0), seg_end=(0, 0)) == 5.0

    def test_is_point_on_segment_uses_elliptical_tolerance(self) -> None:
        """|AP| + |PB| - |AB| < 5: 25 px off the middle of a 200 px line is too far."""
        assert GeometryKernel.is_point_on_segment(point=(100, 2), seg_start=(0, 0), seg_end=(200, 0))
        assert not GeometryKernel.is_point_on_segment(point=(100, 25), seg_start=(0, 0), seg_end=(200, 0))
        assert not GeometryKernel.is_point_on_segment(point=(210, 0), seg_start=(0, 0), seg_end=(200, 0))


class TestAngles:
    """Vector and line angles."""

    def test_right_angle_at_vertex(self) -> None:
        assert GeometryKernel.angle_at_vertex(p1=(0, 0), vertex=(100, 0), p3=(100, 100)) == pytest.approx(90.0)

    def test_straight_angle(self) -> None:
        assert GeometryKernel.angle_at_vertex(p1=(0, 0), vertex=(50, 0), p3=(100, 0)) == pytest.approx(180.0)

    def test_zero_vector_gives_zero(self) -> None:
        assert GeometryKernel.angle_between(v1=(0, 0), v2=(1, 0)) == 0.0
        assert GeometryKernel.angle_at_vertex(p1=(5, 5), vertex=(5, 5), p3=(10, 0)) == 0.0

    def test_unsigned_line_angle_ignores_direction(self) -> None:
        """Lines at 135° between directions report the acute 45°."""
        assert GeometryKernel.unsigned_line_angle(a1=(0, 0), a2=(10, 0), b1=(0, 0), b2=(-10, 10)) == pytest.approx(45.0)
        assert GeometryKernel.unsigned_line_angle(a1=(0, 0), a2=(10, 0), b1=(0, 0), b2=(0, -7)) == pytest.approx(90.0)

    def test_is_parallel_within_tolerance(self) -> None:
        """Anti-parallel counts as parallel; zero vectors never do."""
        assert GeometryKernel.is_parallel(v1=(100, 0), v2=(100, 5), tolerance_deg=5.0)  # ~2.9°
        assert GeometryKernel.is_parallel(v1=(100, 0), v2=(-100, 3), tolerance_deg=5.0)
        assert not GeometryKernel.is_parallel(v1=(100, 0), v2=(100, 20), tolerance_deg=5.0)  # ~11.3°
        assert not GeometryKernel.is_parallel(v1=(0, 0), v2=(1, 0), tolerance_deg=5.0)


class TestConstructionHelpers:
    def test_nearest_grid_point(self) -> None:
        assert GeometryKernel.nearest_grid_point(point=(29, -11), grid_size=20) == (20, -20)

    def test_polar_offset_turns_toward_positive_y(self) -> None:
        """90° points down the screen (+y)."""
        x, y = GeometryKernel.polar_offset(origin=(10, 10), angle_deg=90, length=50)
        assert (x, y) == pytest.approx((10.0, 60.0))

    def test_distance_3d(self) -> None:
        assert GeometryKernel.distance_3d(dx=300, dy=0, dz=400) == 500.0


class TestGeometryProperties:
    """Property-based checks over random points."""

    @given(a=point, b=point)
    @settings(max_examples=50)
    def test_distance_symmetric(self, a: tuple[float, float], b: tuple[float, float]) -> None:
        assert GeometryKernel.distance(a=a, b=b) == GeometryKernel.distance(a=b, b=a)

    @given(p=point, a=point, b=point)
    @settings(max_examples=50)
    def test_segment_distance_not_above_endpoint_distance(
        self, p: tuple[float, float], a: tuple[float, float], b: tuple[float, float]
    ) -> None:
        """The closest point of a segment is never farther than either end."""
        d = GeometryKernel.point_segment_distance(point=p, seg_start=a, seg_end=b)
        assert d <= min(GeometryKernel.distance(a=p, b=a), GeometryKernel.distance(a=p, b=b)) + 1e-6

    @given(p1=point, vertex=point, p3=point)
    @settings(max_examples=50)
    def test_vertex_angle_in_range(
        self, p1: tuple[float, float], vertex: tuple[float, float], p3: tuple[float, float]
    ) -> None:
        assert 0.0 <= GeometryKernel.angle_at_vertex(p1=p1, vertex=vertex, p3=p3) <= 180.0


# =============================================================================
# UTM PROJECTION
# =============================================================================


class TestUTMProjection:
    """Closed-form inverse checked against the pyproj forward transform."""

    def test_zone_for_lon(self) -> None:
        assert UTMProjection.zone_for_lon(lon=15.43) == 33
        assert UTMProjection.zone_for_lon(lon=-180.0) == 1
        assert UTMProjection.zone_for_lon(lon=180.0) == 60  # Clamped

    def test_central_meridian(self) -> None:
        assert UTMProjection.central_meridian_deg(zone=33) == 15.0
        assert UTMProjection.central_meridian_deg(zone=1) == -177.0

    def test_origin_of_zone(self) -> None:
        """False easting on the equator is the central meridian at lat 0."""
        lat, lon = UTMProjection.utm_to_lat_lon(utm_x=500_000.0, utm_y=0.0, zone=33)
        assert lat == pytest.approx(0.0, abs=1e-9)
        assert lon == pytest.approx(15.0, abs=1e-9)

    @pytest.mark.parametrize(
        "lat, lon",
        [
            (47.07, 15.43),  # Graz, near the central meridian
            (48.21, 17.9),  # ~2.9° east of the meridian
            (60.17, 24.94),  # Helsinki, zone 35
        ],
    )
    def test_inverse_matches_pyproj(self, lat: float, lon: float) -> None:
        """pyproj forward then closed-form inverse returns the start within 1e-5°."""
        utm_x, utm_y, zone = UTMProjection.lat_lon_to_utm(lat=lat, lon=lon)
        back_lat, back_lon = UTMProjection.utm_to_lat_lon(utm_x=utm_x, utm_y=utm_y, zone=zone)
        assert back_lat == pytest.approx(lat, abs=1e-5)
        assert back_lon == pytest.approx(lon, abs=1e-5)

    def test_southern_hemisphere_encoding(self) -> None:
        """Northing >= 10,000,000 encodes the mirrored southern latitude."""
        utm_x, utm_y, zone = UTMProjection.lat_lon_to_utm(lat=33.92, lon=18.42)
        lat, lon = UTMProjection.utm_to_lat_lon(utm_x=utm_x, utm_y=utm_y + 10_000_000.0, zone=zone)
        assert lat == pytest.approx(-33.92, abs=1e-5)
        assert lon == pytest.approx(18.42, abs=1e-5)

    def test_longitude_normalized(self) -> None:
        """Far east of zone 60 wraps past the antimeridian into [-180, 180]."""
        _, lon = UTMProjection.utm_to_lat_lon(utm_x=900_000.0, utm_y=1_000_000.0, zone=60)
        assert -180.0 <= lon <= 180.0
        assert lon < 0

    def test_forward_uses_requested_zone(self) -> None:
        """Projecting into a neighbouring zone keeps the requested zone number."""
        _, _, zone = UTMProjection.lat_lon_to_utm(lat=47.0, lon=18.1, zone=33)
        assert zone == 33


# =============================================================================
# COORDINATE SYSTEM
# =============================================================================


class TestCoordinateSystemCanvasMode:
    """Real mode off: the mapping is the identity."""

    def test_identity(self) -> None:
        coords = CoordinateSystem(canvas_width=1200, canvas_height=800)
        assert coords.to_projected(px=123.5, py=-7.0) == (123.5, -7.0)
        assert coords.to_canvas(mx=123.5, my=-7.0) == (123.5, -7.0)
        assert coords.meters_per_pixel == 1.0
        assert coords.coordinate_system_name == "Canvas"
        assert coords.canvas_to_geographic(px=10, py=10) is None


class TestCoordinateSystemRealMode:
    """Real mode: canvas center anchored to a UTM reference, y inverted."""

    def test_center_maps_to_reference(self, real_coords: CoordinateSystem) -> None:
        assert real_coords.to_projected(px=600, py=400) == (500_000.0, 5_200_000.0)

    def test_y_axis_inverted(self, real_coords: CoordinateSystem) -> None:
        """100 px down the canvas is 100 m south."""
        _, my = real_coords.to_projected(px=600, py=500)
        assert my == 5_199_900.0

    def test_scale_and_meters_per_pixel(self) -> None:
        coords = CoordinateSystem(canvas_width=1000, canvas_height=800)
        coords.enable(reference=ReferencePoint(utm_x=600_000, utm_y=5_300_000, utm_zone=32, scale=2.0))
        assert coords.meters_per_pixel == 0.5
        assert coords.to_projected(px=600, py=400) == (600_050.0, 5_300_000.0)
        assert coords.coordinate_system_name == "UTM"

    def test_zero_scale_clamped(self, real_coords: CoordinateSystem) -> None:
        real_coords.set_scale(scale=0.0)
        assert real_coords.scale == CoordinateConfig.MIN_SCALE
        assert math.isfinite(real_coords.to_projected(px=0, py=0)[0])

    def test_enable_from_entity_points(self) -> None:
        """Without a reference, the average of entity coordinates becomes the center."""
        coords = CoordinateSystem(canvas_width=1200, canvas_height=800)
        coords.enable(entity_points=[(500_000.0, 5_000_000.0), (500_200.0, 5_000_100.0)])
        assert coords.to_projected(px=600, py=400) == (500_100.0, 5_000_050.0)
        assert coords.utm_zone == CoordinateConfig.DEFAULT_UTM_ZONE

    def test_enable_with_defaults(self) -> None:
        coords = CoordinateSystem(canvas_width=1200, canvas_height=800)
        coords.enable()
        assert coords.to_projected(px=600, py=400) == (
            CoordinateConfig.DEFAULT_CENTER_UTM_X,
            CoordinateConfig.DEFAULT_CENTER_UTM_Y,
        )
        assert coords.scale == CoordinateConfig.DEFAULT_SCALE

    def test_disable_keeps_reference_for_reenable(self, real_coords: CoordinateSystem) -> None:
        real_coords.disable()
        assert real_coords.to_projected(px=600, py=400) == (600, 400)
        real_coords.enable(entity_points=[(1.0, 2.0)])  # Ignored: existing reference wins
        assert real_coords.to_projected(px=600, py=400) == (500_000.0, 5_200_000.0)

    def test_canvas_to_geographic(self, real_coords: CoordinateSystem) -> None:
        """Canvas center sits on the zone 33 central meridian."""
        lat, lon = real_coords.canvas_to_geographic(px=600, py=400)
        assert lon == pytest.approx(15.0, abs=1e-9)
        assert 46.0 < lat < 48.0

    @given(
        px=st.floats(min_value=-10_000, max_value=10_000, allow_nan=False),
        py=st.floats(min_value=-10_000, max_value=10_000, allow_nan=False),
        scale=st.floats(min_value=0.01, max_value=100),
    )
    @settings(max_examples=50)
    def test_round_trip(self, px: float, py: float, scale: float) -> None:
        """canvas -> projected -> canvas returns the start within 1e-6 px."""
        coords = CoordinateSystem(canvas_width=1200, canvas_height=800)
        coords.enable(reference=ReferencePoint(utm_x=512_345.6, utm_y=5_234_567.8, utm_zone=33, scale=scale))
        mx, my = coords.to_projected(px=px, py=py)
        back = coords.to_canvas(mx=mx, my=my)
        assert back == pytest.approx((px, py), abs=CoordinateConfig.ROUNDTRIP_TOLERANCE)

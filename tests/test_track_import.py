"""Tests for GPS track import.

Tests: TrackProjector (classification, zone choice, bounds fit), ImportedTrack conversion
Focus: Imported geometry fits the canvas and converts to consistent poles and lines

Note: parsed_gpx_graz (conftest.py) spans ~760 m east-west and ~1110 m
north-south, so the 700 px usable canvas height limits the scale.
"""

import pytest

from powerline_planner.core.geometry import GeometryKernel
from powerline_planner.editor.track_import import TrackProjector
from powerline_planner.model.track import ImportedTrack, Waypoint


@pytest.fixture
def graz_import(parsed_gpx_graz: dict) -> ImportedTrack:
    return TrackProjector.from_parsed(data=parsed_gpx_graz, canvas_width=1200, canvas_height=800)


class TestClassification:
    """Element categories guessed from names."""

    @pytest.mark.parametrize(
        "name, expected",
        [
            ("Portal A", "substation-portal"),
            ("Concrete pole plan", "concrete-planned"),
            ("Old steel mast", "steel-existing"),
            ("WP 12", "steel-existing"),
        ],
    )
    def test_pole_types(self, name: str, expected: str) -> None:
        assert TrackProjector.classify_pole_type(name=name) == expected

    @pytest.mark.parametrize(
        "name, expected",
        [
            ("20kV feeder", "mv-existing"),
            ("LV planned spur", "lv-planned"),
            ("Hiking trail", "mv-existing"),
        ],
    )
    def test_line_types(self, name: str, expected: str) -> None:
        assert TrackProjector.classify_line_type(name=name) == expected


class TestZone:
    def test_dominant_zone(self) -> None:
        """Two points in zone 33, one in zone 34: everything goes to 33."""
        points = [Waypoint(lat=47.0, lon=14.9), Waypoint(lat=47.0, lon=15.2), Waypoint(lat=47.0, lon=18.1)]
        assert TrackProjector.dominant_zone(points=points) == 33

    def test_no_points_uses_default(self) -> None:
        assert TrackProjector.dominant_zone(points=[]) == 33


class TestFit:
    """Uniform scale into the padded canvas, centered."""

    def test_metadata(self, graz_import: ImportedTrack) -> None:
        meta = graz_import.metadata
        assert meta.utm_zone == 33
        assert meta.coordinate_system == "UTM"
        assert 1.4 < meta.meters_per_pixel < 1.8  # ~1110 m over 700 px
        assert meta.center_utm_x is not None and meta.center_utm_y is not None

    def test_points_inside_padding(self, graz_import: ImportedTrack) -> None:
        points = [*graz_import.waypoints, *graz_import.tracks[0].points]
        for point in points:
            assert 50 - 1e-6 <= point.x <= 1150 + 1e-6
            assert 50 - 1e-6 <= point.y <= 750 + 1e-6

        ys = [p.y for p in points]
        assert min(ys) == pytest.approx(50.0)
        assert max(ys) == pytest.approx(750.0)

    def test_north_is_up(self, graz_import: ImportedTrack) -> None:
        south, north, _ = graz_import.tracks[0].points
        assert north.y < south.y
        assert north.x == pytest.approx(south.x, abs=10)  # Grid convergence shifts x by a few pixels

    def test_total_distance(self, graz_import: ImportedTrack) -> None:
        p = graz_import.tracks[0].points
        expected = sum(
            GeometryKernel.distance(a=(a.utm_x, a.utm_y), b=(b.utm_x, b.utm_y)) for a, b in zip(p, p[1:])
        )
        assert graz_import.metadata.total_distance == round(expected, 2)
        assert 1800 < graz_import.metadata.total_distance < 1950

    def test_single_point_falls_back_to_one_meter_per_pixel(self) -> None:
        imported = TrackProjector.fit(waypoints=[Waypoint(lat=47.0, lon=15.0)], canvas_width=1200, canvas_height=800)
        assert imported.metadata.meters_per_pixel == 1.0
        assert (imported.waypoints[0].x, imported.waypoints[0].y) == (600.0, 400.0)

    def test_inputs_not_modified(self) -> None:
        waypoint = Waypoint(lat=47.0, lon=15.0)
        TrackProjector.fit(waypoints=[waypoint])
        assert waypoint.x is None and waypoint.utm_x is None

    def test_empty_import(self, caplog: pytest.LogCaptureFixture) -> None:
        imported = TrackProjector.fit()
        assert imported.metadata.utm_zone == 33
        assert imported.metadata.total_distance == 0.0
        assert imported.to_elements() == ([], [])
        assert "without any points" in caplog.text


class TestConversion:
    """ImportedTrack -> poles and lines."""

    def test_generated_ids_names_and_types(self, graz_import: ImportedTrack) -> None:
        poles, lines = graz_import.to_elements()
        assert [p.id for p in poles] == ["wpt_0", "wpt_1"]
        assert [p.name for p in poles] == ["Concrete pole plan", "Point 2"]
        assert [p.type for p in poles] == ["concrete-planned", "steel-existing"]

        assert [ln.id for ln in lines] == ["trk_0_line_0", "trk_0_line_1"]
        assert lines[0].name == "20kV feeder - Segment 1"
        assert all(ln.type == "mv-existing" for ln in lines)
        assert all(ln.track_id == "trk_0" for ln in lines)

    def test_poles_carry_coordinates(self, graz_import: ImportedTrack) -> None:
        pole = graz_import.to_poles()[0]
        assert (pole.lat, pole.lon) == (47.07, 15.43)
        assert pole.utm_zone == 33
        assert pole.elevation == 350.0
        assert pole.projected is not None

    def test_lines_share_endpoints_and_lengths(self, graz_import: ImportedTrack) -> None:
        first, second = graz_import.to_lines()
        assert first.end == second.start
        assert first.is_georeferenced
        assert (first.start_elevation, first.end_elevation) == (350.0, 355.0)
        # 5 m climb over ~1110 m: chord barely longer than the horizontal distance
        assert first.chord_length_m >= first.distance_m
        assert first.chord_length_m - first.distance_m < 0.1
        assert first.reported_length_m() == first.actual_length_m

    def test_routes_follow_tracks(self) -> None:
        imported = TrackProjector.from_parsed(
            data={
                "tracks": [{"points": [{"lat": 47.0, "lon": 15.0}, {"lat": 47.01, "lon": 15.0}]}],
                "routes": [{"name": "Survey", "points": [{"lat": 47.0, "lon": 15.01}, {"lat": 47.01, "lon": 15.01}]}],
            }
        )
        lines = imported.to_lines()
        assert [ln.id for ln in lines] == ["trk_0_line_0", "rte_0_line_0"]
        assert lines[0].name == "Track 1 - Segment 1"
        assert lines[1].name == "Survey - Segment 1"

    def test_metadata_to_dict(self, graz_import: ImportedTrack) -> None:
        data = graz_import.metadata.to_dict()
        assert set(data) == {"metersPerPixel", "coordinateSystem", "totalDistance", "centerUtmX", "centerUtmY", "utmZone"}

"""Track - Parsed GPS tracks projected onto the drawing plane.

The GPX reader lives outside this package; it hands over waypoints, tracks
and routes as plain lat/lon/elevation records. TrackProjector fills in UTM
and canvas coordinates, and `ImportedTrack.to_elements` turns the result
into poles (waypoints) and lines (consecutive track or route points).
"""

from dataclasses import dataclass, field
from typing import Any

from powerline_planner.constants import LineConfig, TrackImportConfig
from powerline_planner.core.geometry import GeometryKernel
from powerline_planner.model.line import Line, ProjectedPoint
from powerline_planner.model.pole import Pole


@dataclass
class TrackPoint:
    """One recorded position.

    Attributes:
        lat, lon: Geographic position in decimal degrees
        elevation: Recorded elevation in meters (None if absent)
        utm_x, utm_y: Projected position (set by TrackProjector)
        x, y: Canvas position (set by TrackProjector)
    """

    lat: float
    lon: float
    elevation: float | None = None
    utm_x: float | None = None
    utm_y: float | None = None
    x: float | None = None
    y: float | None = None

    @classmethod
    def from_dict(cls, data: dict[str, Any]) -> "TrackPoint":
        return cls(lat=float(data["lat"]), lon=float(data["lon"]), elevation=data.get("elevation"))


@dataclass
class Waypoint(TrackPoint):
    """A named point that becomes a pole."""

    id: str = ""
    name: str = ""
    description: str = ""
    type: str = TrackImportConfig.DEFAULT_WAYPOINT_POLE_TYPE
    has_grounding: bool = False
    has_guywire: bool = False

    @classmethod
    def from_dict(cls, data: dict[str, Any]) -> "Waypoint":
        return cls(
            lat=float(data["lat"]),
            lon=float(data["lon"]),
            elevation=data.get("elevation"),
            id=data.get("id", ""),
            name=data.get("name", ""),
            description=data.get("description", ""),
            type=data.get("type", TrackImportConfig.DEFAULT_WAYPOINT_POLE_TYPE),
        )


@dataclass
class TrackPath:
    """A track or route: an ordered run of points that becomes a chain of lines."""

    id: str
    name: str
    points: list[TrackPoint] = field(default_factory=list)
    description: str = ""
    type: str = TrackImportConfig.DEFAULT_TRACK_LINE_TYPE

    @classmethod
    def from_dict(cls, data: dict[str, Any]) -> "TrackPath":
        return cls(
            id=data.get("id", ""),
            name=data.get("name", ""),
            points=[TrackPoint.from_dict(data=p) for p in data.get("points", [])],
            description=data.get("description", ""),
            type=data.get("type", TrackImportConfig.DEFAULT_TRACK_LINE_TYPE),
        )


@dataclass(frozen=True)
class TrackMetadata:
    """Coordinate-system parameters of a projected import."""

    meters_per_pixel: float = 1.0
    coordinate_system: str = "UTM"
    total_distance: float = 0.0
    center_utm_x: float | None = None
    center_utm_y: float | None = None
    utm_zone: int | None = None

    def to_dict(self) -> dict[str, Any]:
        return {
            "metersPerPixel": self.meters_per_pixel,
            "coordinateSystem": self.coordinate_system,
            "totalDistance": self.total_distance,
            "centerUtmX": self.center_utm_x,
            "centerUtmY": self.center_utm_y,
            "utmZone": self.utm_zone,
        }


@dataclass
class ImportedTrack:
    """Projected import ready to be loaded into a drawing."""

    waypoints: list[Waypoint] = field(default_factory=list)
    tracks: list[TrackPath] = field(default_factory=list)
    routes: list[TrackPath] = field(default_factory=list)
    metadata: TrackMetadata = field(default_factory=TrackMetadata)

    def to_poles(self) -> list[Pole]:
        """One pole per waypoint, carrying its projected and geographic position."""
        return [
            Pole(
                id=wpt.id,
                x=wpt.x,
                y=wpt.y,
                type=wpt.type,
                name=wpt.name,
                description=wpt.description,
                has_grounding=wpt.has_grounding,
                has_guywire=wpt.has_guywire,
                elevation=wpt.elevation,
                utm_x=wpt.utm_x,
                utm_y=wpt.utm_y,
                utm_zone=self.metadata.utm_zone,
                lat=wpt.lat,
                lon=wpt.lon,
            )
            for wpt in self.waypoints
        ]

    def to_lines(self) -> list[Line]:
        """One line per consecutive point pair of every track, then every route."""
        zone = self.metadata.utm_zone
        lines = []
        for path in [*self.tracks, *self.routes]:
            for i, (start, end) in enumerate(zip(path.points, path.points[1:])):
                distance = GeometryKernel.distance(a=(start.utm_x, start.utm_y), b=(end.utm_x, end.utm_y))
                line = Line(
                    id=f"{path.id}_line_{i}",
                    start_x=start.x,
                    start_y=start.y,
                    end_x=end.x,
                    end_y=end.y,
                    type=path.type,
                    name=f"{path.name} - Segment {i + 1}",
                    start_elevation=start.elevation,
                    end_elevation=end.elevation,
                    start_utm=ProjectedPoint(x=start.utm_x, y=start.utm_y, zone=zone),
                    end_utm=ProjectedPoint(x=end.utm_x, y=end.utm_y, zone=zone),
                    distance_m=round(distance, LineConfig.LENGTH_DECIMALS),
                    track_id=path.id,
                )
                line.refresh_lengths()
                lines.append(line)
        return lines

    def to_elements(self) -> tuple[list[Pole], list[Line]]:
        """Convert to drawing elements (poles, lines)."""
        return self.to_poles(), self.to_lines()

    def __repr__(self) -> str:
        return (
            f"ImportedTrack(waypoints={len(self.waypoints)}, tracks={len(self.tracks)}, "
            f"routes={len(self.routes)}, zone={self.metadata.utm_zone})"
        )

"""Line - Conductor span between two drawing-plane points.

A Line stores its endpoints on the drawing plane and optional weak
references to the poles it was snapped to. Pole references are ids only;
a referenced pole may have been deleted since (see DrawingModel.resolve_pole).

Real-world lengths:
- chord_length_m: straight 3D distance between the projected endpoints
- actual_length_m: length along the sagged conductor profile

Sag uses a parabolic approximation of the catenary:
    z(t) = (1-t)*z0 + t*z1 - 4*s*t*(1-t)
where s is the sag depth at midspan.
"""

from dataclasses import dataclass, field
from typing import Any

import numpy as np
from shapely.geometry import LineString

from powerline_planner.constants import ElementTypes, GeometryConfig, LineConfig
from powerline_planner.core.geometry import XY, GeometryKernel


@dataclass(frozen=True)
class ProjectedPoint:
    """UTM position of a line endpoint."""

    x: float
    y: float
    zone: int

    @property
    def xy(self) -> XY:
        return (self.x, self.y)


@dataclass
class SagSpec:
    """Sag parameters of a span.

    Attributes:
        enabled: Whether sag is applied to profiles and actual length
        kind: "percentage" (value is a fraction of the chord) or "absolute" (meters)
        value: Sag amount interpreted according to kind
    """

    enabled: bool = False
    kind: str = LineConfig.SAG_PERCENTAGE
    value: float = LineConfig.DEFAULT_SAG_VALUE

    def __post_init__(self) -> None:
        if self.kind not in LineConfig.SAG_KINDS:
            raise ValueError(f"Unknown sag kind '{self.kind}', expected one of {LineConfig.SAG_KINDS}")

    def depth_m(self, chord_length_m: float) -> float:
        """Sag depth at midspan in meters for a given chord length."""
        if self.kind == LineConfig.SAG_ABSOLUTE:
            return self.value
        return self.value * chord_length_m


@dataclass
class Line:
    """A conductor span.

    Attributes:
        id: Unique identifier (e.g., "line_3")
        start_x, start_y, end_x, end_y: Drawing-plane endpoints in pixels
        type: Category from ElementTypes.LINE_TYPES
        name: Display name
        start_pole_id, end_pole_id: Weak references to snapped poles
        start_elevation, end_elevation: Endpoint elevations in meters
        start_utm, end_utm: Projected endpoints (real mode only)
        chord_length_m: Rounded 3D chord length in meters
        actual_length_m: Rounded sagged length in meters
        distance_m: Horizontal length supplied by a track import
        sag: Sag parameters
        track_id: Source track when created by an import
    """

    id: str
    start_x: float
    start_y: float
    end_x: float
    end_y: float
    type: str = ElementTypes.DEFAULT_LINE_TYPE
    name: str = ""
    description: str = ""
    start_pole_id: str | None = None
    end_pole_id: str | None = None
    start_elevation: float | None = None
    end_elevation: float | None = None
    start_utm: ProjectedPoint | None = None
    end_utm: ProjectedPoint | None = None
    chord_length_m: float | None = None
    actual_length_m: float | None = None
    distance_m: float | None = None
    sag: SagSpec = field(default_factory=SagSpec)
    track_id: str | None = None

    @property
    def start(self) -> XY:
        return (self.start_x, self.start_y)

    @property
    def end(self) -> XY:
        return (self.end_x, self.end_y)

    @property
    def midpoint(self) -> XY:
        return GeometryKernel.midpoint(a=self.start, b=self.end)

    @property
    def length_px(self) -> float:
        """Drawing-plane length in pixels."""
        return GeometryKernel.distance(a=self.start, b=self.end)

    @property
    def is_georeferenced(self) -> bool:
        return self.start_utm is not None and self.end_utm is not None

    def contains(self, x: float, y: float, tolerance: float = GeometryConfig.LINE_HIT_TOLERANCE) -> bool:
        """Check whether a drawing-plane point hits this line."""
        return GeometryKernel.is_point_on_segment(point=(x, y), seg_start=self.start, seg_end=self.end, tolerance=tolerance)

    def get_linestring(self) -> LineString:
        """Get Shapely LineString of the drawing-plane geometry."""
        return LineString([self.start, self.end])

    # =========================================================================
    # Real-world lengths
    # =========================================================================

    def horizontal_length_m(self) -> float | None:
        """Horizontal span in meters from projected endpoints, None if not georeferenced."""
        if not self.is_georeferenced:
            return None
        return GeometryKernel.distance(a=self.start_utm.xy, b=self.end_utm.xy)

    def compute_chord_length_m(self) -> float | None:
        """Straight 3D distance between projected endpoints (missing elevations count as 0)."""
        if not self.is_georeferenced:
            return None
        dz = (self.end_elevation or 0.0) - (self.start_elevation or 0.0)
        return GeometryKernel.distance_3d(
            dx=self.end_utm.x - self.start_utm.x,
            dy=self.end_utm.y - self.start_utm.y,
            dz=dz,
        )

    @staticmethod
    def cable_elevation(t: float, start_elev: float, end_elev: float, sag_depth_m: float) -> float:
        """Conductor elevation at fraction t along the span using parabolic sag.

        Args:
            t: Fraction along span (0.0 = start, 1.0 = end)
            start_elev: Elevation at start anchor
            end_elev: Elevation at end anchor
            sag_depth_m: Maximum sag at midspan

        Returns:
            Conductor elevation at position t.
        """
        linear_elev = (1 - t) * start_elev + t * end_elev
        return linear_elev - 4 * sag_depth_m * t * (1 - t)

    def sag_depth_m(self) -> float:
        """Sag depth at midspan; 0 when sag is disabled or the line is not georeferenced."""
        chord = self.compute_chord_length_m()
        if not self.sag.enabled or chord is None:
            return 0.0
        return self.sag.depth_m(chord_length_m=chord)

    def profile(self, samples: int = LineConfig.PROFILE_SAMPLES) -> tuple[np.ndarray, np.ndarray]:
        """Sample the conductor profile along the span.

        Args:
            samples: Number of intervals (samples + 1 points are returned)

        Returns:
            Tuple (distance_m, elevation_m) arrays. Distances are horizontal
            meters from the start when georeferenced, pixels otherwise.
        """
        span = self.horizontal_length_m()
        if span is None:
            span = self.length_px
        t = np.linspace(0.0, 1.0, samples + 1)
        start_elev = self.start_elevation or 0.0
        end_elev = self.end_elevation or 0.0
        elevations = self.cable_elevation(t=t, start_elev=start_elev, end_elev=end_elev, sag_depth_m=self.sag_depth_m())
        return t * span, elevations

    def compute_actual_length_m(self) -> float | None:
        """Length along the sagged conductor, equal to the chord when sag is off."""
        if not self.is_georeferenced:
            return None
        if not self.sag.enabled:
            return self.compute_chord_length_m()
        distances, elevations = self.profile()
        return float(np.sum(np.hypot(np.diff(distances), np.diff(elevations))))

    def refresh_lengths(self) -> None:
        """Recompute chord and actual length (rounded to centimetres)."""
        chord = self.compute_chord_length_m()
        actual = self.compute_actual_length_m()
        self.chord_length_m = None if chord is None else round(chord, LineConfig.LENGTH_DECIMALS)
        self.actual_length_m = None if actual is None else round(actual, LineConfig.LENGTH_DECIMALS)

    def reported_length_m(self) -> float | None:
        """Best available real length: actual, then chord, then imported distance."""
        for value in (self.actual_length_m, self.chord_length_m, self.distance_m):
            if value is not None:
                return value
        return None

    # =========================================================================
    # Serialization
    # =========================================================================

    def to_dict(self) -> dict[str, Any]:
        return {
            "id": self.id,
            "start_x": self.start_x,
            "start_y": self.start_y,
            "end_x": self.end_x,
            "end_y": self.end_y,
            "type": self.type,
            "name": self.name,
            "description": self.description,
            "start_pole_id": self.start_pole_id,
            "end_pole_id": self.end_pole_id,
            "start_elevation": self.start_elevation,
            "end_elevation": self.end_elevation,
            "start_utm": None if self.start_utm is None else {"x": self.start_utm.x, "y": self.start_utm.y, "zone": self.start_utm.zone},
            "end_utm": None if self.end_utm is None else {"x": self.end_utm.x, "y": self.end_utm.y, "zone": self.end_utm.zone},
            "chord_length_m": self.chord_length_m,
            "actual_length_m": self.actual_length_m,
            "distance_m": self.distance_m,
            "sag": {"enabled": self.sag.enabled, "kind": self.sag.kind, "value": self.sag.value},
            "track_id": self.track_id,
        }

    @classmethod
    def from_dict(cls, data: dict[str, Any]) -> "Line":
        """Create Line from dictionary.

        Missing sag gets the default sag; missing chord/actual lengths are
        recomputed when both projected endpoints are present.
        """
        start_utm = data.get("start_utm")
        end_utm = data.get("end_utm")
        sag = data.get("sag")
        line = cls(
            id=data["id"],
            start_x=data["start_x"],
            start_y=data["start_y"],
            end_x=data["end_x"],
            end_y=data["end_y"],
            type=data.get("type", ElementTypes.DEFAULT_LINE_TYPE),
            name=data.get("name", ""),
            description=data.get("description", ""),
            start_pole_id=data.get("start_pole_id"),
            end_pole_id=data.get("end_pole_id"),
            start_elevation=data.get("start_elevation"),
            end_elevation=data.get("end_elevation"),
            start_utm=None if start_utm is None else ProjectedPoint(**start_utm),
            end_utm=None if end_utm is None else ProjectedPoint(**end_utm),
            chord_length_m=data.get("chord_length_m"),
            actual_length_m=data.get("actual_length_m"),
            distance_m=data.get("distance_m"),
            sag=SagSpec() if sag is None else SagSpec(**sag),
            track_id=data.get("track_id"),
        )
        if line.is_georeferenced:
            if line.chord_length_m is None:
                chord = line.compute_chord_length_m()
                line.chord_length_m = round(chord, LineConfig.LENGTH_DECIMALS)
            if line.actual_length_m is None:
                actual = line.compute_actual_length_m()
                line.actual_length_m = round(actual, LineConfig.LENGTH_DECIMALS)
        return line

    def __repr__(self) -> str:
        return (
            f"Line({self.id}, '{self.name}', ({self.start_x:.1f}, {self.start_y:.1f}) -> "
            f"({self.end_x:.1f}, {self.end_y:.1f}), {self.type})"
        )

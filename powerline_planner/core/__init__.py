"""Core foundation classes for drawing-plane geometry and georeferencing.

- GeometryKernel: Pure planar geometry (intersections, feet, angles)
- UTMProjection: WGS84 <-> UTM conversion (closed-form inverse, pyproj forward)
- CoordinateSystem: Canvas pixels <-> projected meters <-> lat/lon
"""

from powerline_planner.core.coordinate_system import (
    CoordinateSystem,
    CoordinateSystemState,
    ReferencePoint,
)
from powerline_planner.core.geometry import XY, GeometryKernel
from powerline_planner.core.utm_projection import UTMProjection

__all__ = [
    # Geometry
    "XY",
    "GeometryKernel",
    # Projection
    "UTMProjection",
    # Coordinate system
    "CoordinateSystem",
    "CoordinateSystemState",
    "ReferencePoint",
]

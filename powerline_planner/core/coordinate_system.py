"""CoordinateSystem - Canvas pixels <-> projected meters <-> geographic lat/lon.

The drawing plane is a pixel canvas whose y axis grows downward. In real mode
the canvas is anchored to a UTM reference point: the canvas-space center maps
to (center_utm_x, center_utm_y) and `scale` pixels correspond to one meter.
Northing grows upward, so the y mapping is inverted.

When real mode is off the mapping is the identity and scale is 1.
"""

import logging
from collections.abc import Iterable
from dataclasses import dataclass

from powerline_planner.constants import CoordinateConfig
from powerline_planner.core.geometry import XY
from powerline_planner.core.utm_projection import UTMProjection

logger = logging.getLogger(__name__)


@dataclass
class ReferencePoint:
    """Projected anchor supplied when enabling real coordinates.

    Attributes:
        utm_x: Easting of the canvas center in meters
        utm_y: Northing of the canvas center in meters
        utm_zone: UTM zone number
        scale: Pixels per meter
    """

    utm_x: float
    utm_y: float
    utm_zone: int = CoordinateConfig.DEFAULT_UTM_ZONE
    scale: float = CoordinateConfig.DEFAULT_SCALE


@dataclass
class CoordinateSystemState:
    """Mutable parameters of the canvas <-> projected mapping."""

    is_real: bool = False
    center_utm_x: float = 0.0
    center_utm_y: float = 0.0
    utm_zone: int | None = None
    scale: float = CoordinateConfig.DEFAULT_SCALE
    canvas_center_x: float = 0.0
    canvas_center_y: float = 0.0

    def to_dict(self) -> dict:
        return {
            "is_real": self.is_real,
            "center_utm_x": self.center_utm_x,
            "center_utm_y": self.center_utm_y,
            "utm_zone": self.utm_zone,
            "scale": self.scale,
            "canvas_center_x": self.canvas_center_x,
            "canvas_center_y": self.canvas_center_y,
        }


class CoordinateSystem:
    """Bidirectional mapping between drawing-plane pixels and real-world coordinates.

    Example:
        cs = CoordinateSystem(canvas_width=1000, canvas_height=800)
        cs.enable(reference=ReferencePoint(utm_x=600_000, utm_y=5_300_000, utm_zone=32, scale=2.0))
        mx, my = cs.to_projected(px=500, py=400)  # (600000.0, 5300000.0)
        lat, lon = cs.projected_to_geographic(mx=mx, my=my)
    """

    def __init__(
        self,
        canvas_width: float = CoordinateConfig.DEFAULT_CANVAS_WIDTH,
        canvas_height: float = CoordinateConfig.DEFAULT_CANVAS_HEIGHT,
    ) -> None:
        self.canvas_width = canvas_width
        self.canvas_height = canvas_height
        self.state = CoordinateSystemState()

    # =========================================================================
    # Properties
    # =========================================================================

    @property
    def is_real(self) -> bool:
        return self.state.is_real

    @property
    def scale(self) -> float:
        """Pixels per meter, never below CoordinateConfig.MIN_SCALE."""
        return max(self.state.scale, CoordinateConfig.MIN_SCALE)

    @property
    def meters_per_pixel(self) -> float:
        """1 / scale in real mode; canvas units are unitless (1.0) otherwise."""
        if not self.state.is_real:
            return 1.0
        return 1 / self.scale

    @property
    def coordinate_system_name(self) -> str:
        """Name reported in snapshot metadata."""
        return "UTM" if self.state.is_real else "Canvas"

    @property
    def utm_zone(self) -> int:
        """Active zone, falling back to the default zone."""
        return self.state.utm_zone or CoordinateConfig.DEFAULT_UTM_ZONE

    def set_scale(self, scale: float) -> None:
        """Set pixels per meter, clamping degenerate values."""
        if scale <= 0:
            logger.warning(f"Rejected scale {scale}, clamping to {CoordinateConfig.MIN_SCALE}")
        self.state.scale = max(scale, CoordinateConfig.MIN_SCALE)

    def set_canvas_size(self, width: float, height: float) -> None:
        """Update canvas size; re-centers the canvas-space anchor in real mode."""
        self.canvas_width = width
        self.canvas_height = height
        if self.state.is_real:
            self.state.canvas_center_x = width / 2
            self.state.canvas_center_y = height / 2

    # =========================================================================
    # Conversions
    # =========================================================================

    def to_projected(self, px: float, py: float) -> XY:
        """Convert drawing-plane pixels to projected meters (identity if not real)."""
        if not self.state.is_real:
            return (px, py)
        s = self.state
        return (
            s.center_utm_x + (px - s.canvas_center_x) / self.scale,
            s.center_utm_y - (py - s.canvas_center_y) / self.scale,
        )

    def to_canvas(self, mx: float, my: float) -> XY:
        """Convert projected meters to drawing-plane pixels (identity if not real)."""
        if not self.state.is_real:
            return (mx, my)
        s = self.state
        return (
            s.canvas_center_x + (mx - s.center_utm_x) * self.scale,
            s.canvas_center_y - (my - s.center_utm_y) * self.scale,
        )

    def projected_to_geographic(self, mx: float, my: float, zone: int | None = None) -> tuple[float, float]:
        """Convert projected meters to (lat, lon), using the active zone by default."""
        return UTMProjection.utm_to_lat_lon(utm_x=mx, utm_y=my, zone=zone if zone is not None else self.utm_zone)

    def geographic_to_projected(self, lat: float, lon: float, zone: int | None = None) -> tuple[float, float, int]:
        """Convert (lat, lon) to projected meters in the given or lon-derived zone."""
        return UTMProjection.lat_lon_to_utm(lat=lat, lon=lon, zone=zone)

    def canvas_to_geographic(self, px: float, py: float) -> tuple[float, float] | None:
        """Geographic position of a canvas point, None when not in real mode."""
        if not self.state.is_real:
            return None
        mx, my = self.to_projected(px=px, py=py)
        return self.projected_to_geographic(mx=mx, my=my)

    # =========================================================================
    # Mode switching
    # =========================================================================

    def enable(
        self,
        reference: ReferencePoint | None = None,
        entity_points: Iterable[XY] = (),
    ) -> None:
        """Switch to real coordinates.

        Reference resolution order:
            1. The supplied reference point
            2. An already configured reference (zone set, non-zero easting)
            3. The average of projected coordinates carried by entities
            4. Default reference (500000, 0, zone 33) at 1 meter per pixel

        Args:
            reference: Explicit projected anchor for the canvas center
            entity_points: Projected (x, y) coordinates already stored on entities
        """
        s = self.state
        s.is_real = True

        if reference is not None:
            s.center_utm_x = reference.utm_x
            s.center_utm_y = reference.utm_y
            s.utm_zone = reference.utm_zone or CoordinateConfig.DEFAULT_UTM_ZONE
            self.set_scale(scale=reference.scale or CoordinateConfig.DEFAULT_SCALE)
            source = "reference point"
        elif s.utm_zone and s.center_utm_x != 0:
            source = "existing reference"
        else:
            points = list(entity_points)
            if points:
                s.center_utm_x = sum(p[0] for p in points) / len(points)
                s.center_utm_y = sum(p[1] for p in points) / len(points)
                s.utm_zone = s.utm_zone or CoordinateConfig.DEFAULT_UTM_ZONE
                source = f"average of {len(points)} entity points"
            else:
                s.center_utm_x = CoordinateConfig.DEFAULT_CENTER_UTM_X
                s.center_utm_y = CoordinateConfig.DEFAULT_CENTER_UTM_Y
                s.utm_zone = CoordinateConfig.DEFAULT_UTM_ZONE
                s.scale = CoordinateConfig.DEFAULT_SCALE
                source = "defaults"

        s.canvas_center_x = self.canvas_width / 2
        s.canvas_center_y = self.canvas_height / 2

        logger.info(
            f"Real coordinates enabled from {source}: center=({s.center_utm_x:.2f}, {s.center_utm_y:.2f}) "
            f"zone={s.utm_zone} scale={self.scale:.6f} px/m"
        )

    def disable(self) -> None:
        """Return to passthrough canvas coordinates; the reference is kept for re-enabling."""
        self.state.is_real = False
        logger.info("Real coordinates disabled")

    def reset(self) -> None:
        """Forget the reference point entirely."""
        self.state = CoordinateSystemState()

    def __repr__(self) -> str:
        s = self.state
        if not s.is_real:
            return "CoordinateSystem(Canvas)"
        return f"CoordinateSystem(UTM zone={s.utm_zone}, center=({s.center_utm_x:.1f}, {s.center_utm_y:.1f}), scale={self.scale})"

"""Pole - Support structure placed on the drawing plane.

A Pole has a drawing-plane position and, when real coordinates are
enabled, projected UTM coordinates plus the geographic position they
were derived from.
"""

from dataclasses import dataclass
from typing import Any

from powerline_planner.constants import ElementTypes, GeometryConfig
from powerline_planner.core.geometry import XY, GeometryKernel


@dataclass
class Pole:
    """A pole in the network.

    Attributes:
        id: Unique identifier (e.g., "pole_1")
        x, y: Drawing-plane position in pixels
        type: Category from ElementTypes.POLE_TYPES
        name: Display name
        description: Free text
        has_grounding: Grounding installed
        has_guywire: Guy wire installed
        elevation: Ground elevation in meters (None if unknown)
        utm_x, utm_y, utm_zone: Projected coordinates (real mode only)
        lat, lon: Geographic coordinates (real mode or imported waypoints)

    Example:
        pole = Pole(id="pole_1", x=100.0, y=50.0, type="steel-planned", name="Pole 1")
        pole.position  # (100.0, 50.0)
    """

    id: str
    x: float
    y: float
    type: str = ElementTypes.DEFAULT_POLE_TYPE
    name: str = ""
    description: str = ""
    has_grounding: bool = False
    has_guywire: bool = False
    elevation: float | None = None
    utm_x: float | None = None
    utm_y: float | None = None
    utm_zone: int | None = None
    lat: float | None = None
    lon: float | None = None

    @property
    def position(self) -> XY:
        """Drawing-plane (x, y)."""
        return (self.x, self.y)

    @property
    def projected(self) -> XY | None:
        """Projected (utm_x, utm_y), or None if not georeferenced."""
        if self.utm_x is None or self.utm_y is None:
            return None
        return (self.utm_x, self.utm_y)

    @property
    def lat_lon(self) -> tuple[float, float] | None:
        """Return (lat, lon) tuple - standard geographic order."""
        if self.lat is None or self.lon is None:
            return None
        return (self.lat, self.lon)

    def contains(self, x: float, y: float, radius: float = GeometryConfig.POLE_HIT_RADIUS) -> bool:
        """Check whether a drawing-plane point hits this pole."""
        return GeometryKernel.distance(a=self.position, b=(x, y)) <= radius

    def to_dict(self) -> dict[str, Any]:
        return {
            "id": self.id,
            "x": self.x,
            "y": self.y,
            "type": self.type,
            "name": self.name,
            "description": self.description,
            "has_grounding": self.has_grounding,
            "has_guywire": self.has_guywire,
            "elevation": self.elevation,
            "utm_x": self.utm_x,
            "utm_y": self.utm_y,
            "utm_zone": self.utm_zone,
            "lat": self.lat,
            "lon": self.lon,
        }

    @classmethod
    def from_dict(cls, data: dict[str, Any]) -> "Pole":
        """Create Pole from dictionary; optional keys may be missing."""
        return cls(
            id=data["id"],
            x=data["x"],
            y=data["y"],
            type=data.get("type", ElementTypes.DEFAULT_POLE_TYPE),
            name=data.get("name", ""),
            description=data.get("description", ""),
            has_grounding=data.get("has_grounding", False),
            has_guywire=data.get("has_guywire", False),
            elevation=data.get("elevation"),
            utm_x=data.get("utm_x"),
            utm_y=data.get("utm_y"),
            utm_zone=data.get("utm_zone"),
            lat=data.get("lat"),
            lon=data.get("lon"),
        )

    def __repr__(self) -> str:
        return f"Pole({self.id}, '{self.name}', ({self.x:.1f}, {self.y:.1f}), {self.type})"

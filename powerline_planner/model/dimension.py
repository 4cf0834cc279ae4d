"""Dimension - Angular and aligned measurement annotations.

A Dimension stores the drawing-plane geometry it was measured from, the
computed value (degrees or meters) and a style choice:
- InheritedStyle: follow the engine default of the dimension's kind
- OverriddenStyle: own a private copy of the style values

Style values are opaque to the geometry; only unit, precision, prefix and
suffix affect the formatted text.
"""

import copy
from dataclasses import dataclass, field
from math import pi
from typing import Any

from powerline_planner.constants import DimensionConfig
from powerline_planner.core.geometry import XY


@dataclass(frozen=True)
class InheritedStyle:
    """Marker: resolve the style from the engine default at render time."""

    def to_dict(self) -> dict[str, Any]:
        return {"inherit": True}


@dataclass
class OverriddenStyle:
    """Style values owned by a single dimension."""

    values: dict[str, Any] = field(default_factory=dict)

    def to_dict(self) -> dict[str, Any]:
        return {"inherit": False, "values": dict(self.values)}


DimensionStyle = InheritedStyle | OverriddenStyle


def style_from_dict(data: dict[str, Any] | None) -> DimensionStyle:
    """Rebuild a style choice; missing or empty data means inherit."""
    if not data or data.get("inherit", False) or not data.get("values"):
        return InheritedStyle()
    return OverriddenStyle(values=dict(data["values"]))


def format_angle(angle_deg: float, style: dict[str, Any]) -> str:
    """Format an angle in the style's unit (°, rad or grad)."""
    unit = style["unit"]
    precision = style["precision"]
    if unit == "rad":
        value = angle_deg * pi / 180
    elif unit == "grad":
        value = angle_deg * 10 / 9
    else:
        value = angle_deg
    return f"{style['prefix']}{value:.{precision}f}{unit}{style['suffix']}"


def format_distance(distance_m: float, style: dict[str, Any]) -> str:
    """Format a distance in meters."""
    return f"{style['prefix']}{distance_m:.{style['precision']}f}{style['unit']}{style['suffix']}"


@dataclass
class Dimension:
    """A measurement annotation.

    Attributes:
        id: Unique identifier (e.g., "angle_4", "aligned_7")
        kind: "angle" or "aligned"
        method: Geometry layout (see DimensionConfig.METHOD_*)
        points: Captured drawing-plane points, layout depends on method
        vertex: Angle vertex (three_point: middle point, two_line: intersection)
        source_ids: Pole ids (point methods) or line ids (line methods) the points came from
        elevations: Endpoint elevations for aligned dimensions (None if unknown)
        value: Angle in degrees or distance in meters, unrounded
        style: InheritedStyle or OverriddenStyle
    """

    id: str
    kind: str
    method: str
    points: tuple[XY, ...]
    value: float
    vertex: XY | None = None
    source_ids: tuple[str | None, ...] = ()
    elevations: tuple[float | None, float | None] = (None, None)
    style: DimensionStyle = field(default_factory=InheritedStyle)

    def __post_init__(self) -> None:
        if self.kind not in DimensionConfig.KINDS:
            raise ValueError(f"Unknown dimension kind '{self.kind}'")

    @property
    def is_angle(self) -> bool:
        return self.kind == DimensionConfig.ANGLE

    def format_text(self, style: dict[str, Any]) -> str:
        """Display text for the value using a resolved style dict."""
        if self.is_angle:
            return format_angle(angle_deg=self.value, style=style)
        return format_distance(distance_m=self.value, style=style)

    def to_dict(self) -> dict[str, Any]:
        return {
            "id": self.id,
            "kind": self.kind,
            "method": self.method,
            "points": [list(p) for p in self.points],
            "value": self.value,
            "vertex": None if self.vertex is None else list(self.vertex),
            "source_ids": list(self.source_ids),
            "elevations": list(self.elevations),
            "style": self.style.to_dict(),
        }

    @classmethod
    def from_dict(cls, data: dict[str, Any]) -> "Dimension":
        """Create Dimension from dictionary; a missing style inherits the default."""
        vertex = data.get("vertex")
        return cls(
            id=data["id"],
            kind=data["kind"],
            method=data["method"],
            points=tuple((float(p[0]), float(p[1])) for p in data["points"]),
            value=data["value"],
            vertex=None if vertex is None else (float(vertex[0]), float(vertex[1])),
            source_ids=tuple(data.get("source_ids", ())),
            elevations=tuple(data.get("elevations", (None, None))),
            style=style_from_dict(data=data.get("style")),
        )

    def copy(self) -> "Dimension":
        return copy.deepcopy(self)

    def __repr__(self) -> str:
        return f"Dimension({self.id}, {self.kind}/{self.method}, value={self.value:.3f})"

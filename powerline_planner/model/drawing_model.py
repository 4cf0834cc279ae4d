"""DrawingModel - Entity store for poles, lines and dimensions.

Owns all entities in three insertion-ordered dicts keyed by id. Every
mutation bumps `version`, which lets caches (e.g. the snap engine) detect
stale geometry without explicit wiring.

Entities are mutated only through editor commands; renderers and external
viewers get deep-copied snapshots.

Line -> Pole references are weak (ids only). Deleting a pole does not
cascade; `resolve_pole` returns None for a dangling reference and
`dangling_pole_refs` lists them.
"""

import copy
import logging
import re
from dataclasses import dataclass, field
from typing import Any

from shapely.geometry import Point, box

from powerline_planner.constants import ElementTypes, EntityPrefixes
from powerline_planner.core.geometry import XY
from powerline_planner.model.dimension import Dimension
from powerline_planner.model.line import Line
from powerline_planner.model.pole import Pole

logger = logging.getLogger(__name__)

Element = Pole | Line | Dimension

_ID_NUMBER = re.compile(r"_(\d+)$")


@dataclass(frozen=True)
class SnapshotMetadata:
    """Coordinate-system facts shipped with every snapshot."""

    meters_per_pixel: float = 1.0
    coordinate_system: str = "Canvas"
    total_distance: float = 0.0

    def to_dict(self) -> dict[str, Any]:
        return {
            "metersPerPixel": self.meters_per_pixel,
            "coordinateSystem": self.coordinate_system,
            "totalDistance": self.total_distance,
        }


@dataclass(frozen=True)
class DrawingSnapshot:
    """Read-only copy of the entity store for renderers and viewers."""

    poles: tuple[Pole, ...] = ()
    lines: tuple[Line, ...] = ()
    dimensions: tuple[Dimension, ...] = ()
    metadata: SnapshotMetadata = field(default_factory=SnapshotMetadata)

    def to_dict(self) -> dict[str, Any]:
        return {
            "poles": [p.to_dict() for p in self.poles],
            "lines": [ln.to_dict() for ln in self.lines],
            "dimensions": [d.to_dict() for d in self.dimensions],
            "metadata": self.metadata.to_dict(),
        }


class DrawingModel:
    """Entity store for the drawing.

    Example:
        model = DrawingModel()
        pole = Pole(id=model.next_pole_id(), x=0.0, y=0.0, name="Pole 1")
        model.insert(element=pole)
        model.find_pole_at(x=3.0, y=4.0)  # pole (within hit radius)
    """

    def __init__(self) -> None:
        """Initialize empty drawing."""
        self.poles: dict[str, Pole] = {}
        self.lines: dict[str, Line] = {}
        self.dimensions: dict[str, Dimension] = {}
        self.version = 0

        self._pole_counter = 0
        self._line_counter = 0
        self._dimension_counter = 0

    # =========================================================================
    # IDs
    # =========================================================================

    def next_pole_id(self) -> str:
        self._pole_counter += 1
        return f"{EntityPrefixes.POLE}_{self._pole_counter}"

    def next_line_id(self) -> str:
        self._line_counter += 1
        return f"{EntityPrefixes.LINE}_{self._line_counter}"

    def next_dimension_id(self, kind: str) -> str:
        """Next dimension id; kind is "angle" or "aligned" and becomes the prefix."""
        self._dimension_counter += 1
        return f"{kind}_{self._dimension_counter}"

    @property
    def pole_count(self) -> int:
        """Number of poles ever numbered (drives default names)."""
        return self._pole_counter

    # =========================================================================
    # Collections
    # =========================================================================

    @staticmethod
    def kind_of(element: Element) -> str:
        """Element kind name for an entity instance."""
        if isinstance(element, Pole):
            return ElementTypes.POLE
        if isinstance(element, Line):
            return ElementTypes.LINE
        if isinstance(element, Dimension):
            return ElementTypes.DIMENSION
        raise TypeError(f"Not a drawing element: {element!r}")

    def _collection(self, kind: str) -> dict[str, Any]:
        if kind == ElementTypes.POLE:
            return self.poles
        if kind == ElementTypes.LINE:
            return self.lines
        if kind == ElementTypes.DIMENSION:
            return self.dimensions
        raise ValueError(f"Unknown element kind '{kind}'")

    def get(self, element_id: str) -> Element | None:
        """Look up any element by id."""
        for collection in (self.poles, self.lines, self.dimensions):
            if element_id in collection:
                return collection[element_id]
        return None

    def contains(self, element_id: str) -> bool:
        return self.get(element_id=element_id) is not None

    def touch(self) -> None:
        """Record a mutation made in place on an entity."""
        self.version += 1

    def insert(self, element: Element, position: int | None = None) -> None:
        """Add an element, optionally at a given index of its collection.

        Args:
            element: Pole, Line or Dimension
            position: Index to insert at (restores original order on undo); appends if None

        Raises:
            ValueError: If an element with the same id already exists.
        """
        collection = self._collection(kind=self.kind_of(element=element))
        if element.id in collection:
            raise ValueError(f"Element {element.id} already exists")

        if position is None or position >= len(collection):
            collection[element.id] = element
        else:
            items = list(collection.items())
            items.insert(max(position, 0), (element.id, element))
            collection.clear()
            collection.update(items)
        self.touch()

    def remove(self, element_id: str) -> tuple[Element, int]:
        """Remove an element by id.

        Returns:
            Tuple (removed element, index it occupied in its collection).

        Raises:
            KeyError: If no element has this id.
        """
        for collection in (self.poles, self.lines, self.dimensions):
            if element_id in collection:
                position = list(collection).index(element_id)
                element = collection.pop(element_id)
                self.touch()
                return element, position
        raise KeyError(f"No element with id {element_id}")

    def clear(self) -> None:
        """Remove all entities and reset id counters."""
        self.poles.clear()
        self.lines.clear()
        self.dimensions.clear()
        self._pole_counter = 0
        self._line_counter = 0
        self._dimension_counter = 0
        self.touch()

    def replace_with(self, other: "DrawingModel") -> None:
        """Take over all entities and counters of another model, in place.

        Components holding a reference to this model keep working.
        """
        self.poles = other.poles
        self.lines = other.lines
        self.dimensions = other.dimensions
        self._pole_counter = other._pole_counter
        self._line_counter = other._line_counter
        self._dimension_counter = other._dimension_counter
        self.touch()

    # =========================================================================
    # Queries
    # =========================================================================

    def find_pole_at(self, x: float, y: float) -> Pole | None:
        """First pole whose hit radius contains the point."""
        for pole in self.poles.values():
            if pole.contains(x=x, y=y):
                return pole
        return None

    def find_line_at(self, x: float, y: float) -> Line | None:
        """First line whose hit tolerance contains the point."""
        for line in self.lines.values():
            if line.contains(x=x, y=y):
                return line
        return None

    def resolve_pole(self, pole_id: str | None) -> Pole | None:
        """Follow a line's pole reference; a deleted pole resolves to None."""
        if pole_id is None:
            return None
        pole = self.poles.get(pole_id)
        if pole is None:
            logger.debug(f"Dangling pole reference {pole_id}")
        return pole

    def dangling_pole_refs(self) -> list[tuple[str, str, str]]:
        """List (line_id, "start"|"end", pole_id) for references to missing poles."""
        dangling = []
        for line in self.lines.values():
            for end, pole_id in (("start", line.start_pole_id), ("end", line.end_pole_id)):
                if pole_id is not None and pole_id not in self.poles:
                    dangling.append((line.id, end, pole_id))
        return dangling

    def projected_points(self) -> list[XY]:
        """All projected coordinates carried by poles and line endpoints."""
        points = [pole.projected for pole in self.poles.values() if pole.projected is not None]
        for line in self.lines.values():
            if line.start_utm is not None:
                points.append(line.start_utm.xy)
            if line.end_utm is not None:
                points.append(line.end_utm.xy)
        return points

    def select_in_box(self, x1: float, y1: float, x2: float, y2: float) -> list[str]:
        """Ids of poles inside and lines crossing a drawing-plane rectangle."""
        region = box(min(x1, x2), min(y1, y2), max(x1, x2), max(y1, y2))
        selected = [pole.id for pole in self.poles.values() if region.intersects(Point(pole.position))]
        selected.extend(line.id for line in self.lines.values() if region.intersects(line.get_linestring()))
        return selected

    def select_by_type(self, element_type: str) -> list[str]:
        """Ids of poles and lines with the given category."""
        selected = [pole.id for pole in self.poles.values() if pole.type == element_type]
        selected.extend(line.id for line in self.lines.values() if line.type == element_type)
        return selected

    def total_distance_m(self) -> float:
        """Sum of the best available real length of every line."""
        return sum(length for line in self.lines.values() if (length := line.reported_length_m()) is not None)

    # =========================================================================
    # Snapshots and serialization
    # =========================================================================

    def snapshot(self, metadata: SnapshotMetadata | None = None) -> DrawingSnapshot:
        """Deep copy of all entities; consumers may not mutate the live store."""
        return DrawingSnapshot(
            poles=tuple(copy.deepcopy(list(self.poles.values()))),
            lines=tuple(copy.deepcopy(list(self.lines.values()))),
            dimensions=tuple(copy.deepcopy(list(self.dimensions.values()))),
            metadata=metadata or SnapshotMetadata(),
        )

    def to_dict(self) -> dict[str, Any]:
        """Serialize entities to JSON-compatible dict."""
        return {
            "poles": [pole.to_dict() for pole in self.poles.values()],
            "lines": [line.to_dict() for line in self.lines.values()],
            "dimensions": [dim.to_dict() for dim in self.dimensions.values()],
            "counters": {
                "pole": self._pole_counter,
                "line": self._line_counter,
                "dimension": self._dimension_counter,
            },
        }

    @classmethod
    def from_dict(cls, data: dict[str, Any]) -> "DrawingModel":
        """Deserialize entities; counters are derived from ids when absent."""
        model = cls()
        for pole_data in data.get("poles", []):
            pole = Pole.from_dict(data=pole_data)
            model.poles[pole.id] = pole
        for line_data in data.get("lines", []):
            line = Line.from_dict(data=line_data)
            model.lines[line.id] = line
        for dim_data in data.get("dimensions", []):
            dim = Dimension.from_dict(data=dim_data)
            model.dimensions[dim.id] = dim

        counters = data.get("counters")
        if counters is not None:
            model._pole_counter = counters["pole"]
            model._line_counter = counters["line"]
            model._dimension_counter = counters["dimension"]
        else:
            model._pole_counter = _max_id_number(ids=model.poles)
            model._line_counter = _max_id_number(ids=model.lines)
            model._dimension_counter = _max_id_number(ids=model.dimensions)

        for line_id, end, pole_id in model.dangling_pole_refs():
            logger.warning(f"Line {line_id} {end} references missing pole {pole_id}")

        model.version = 1
        return model

    def __repr__(self) -> str:
        return (
            f"DrawingModel(poles={len(self.poles)}, lines={len(self.lines)}, "
            f"dimensions={len(self.dimensions)}, version={self.version})"
        )


def _max_id_number(ids: dict[str, Any]) -> int:
    """Largest trailing number among ids like "pole_12" (0 if none)."""
    numbers = [int(m.group(1)) for element_id in ids if (m := _ID_NUMBER.search(element_id))]
    return max(numbers, default=0)

"""Reversible editor commands.

Each command is a frozen dataclass describing one mutation of the
DrawingModel. `apply_command` performs it and `invert_command` reverses it;
`invert_command(model, cmd)` followed by `apply_command(model, cmd)`
restores the affected entities exactly.

Commands never hold live entities: additions and deletions carry deep
copies, property changes carry element ids plus before/after values.

Command types:
    AddPole, AddLine, AddDimension: insert / remove by id
    DeleteElement: remove by id / re-insert at the original position
    UpdateProperty: set / restore one field
    BatchRetype, BatchRename, BatchRestyle: per-element before/after pairs
"""

import copy
import logging
from dataclasses import dataclass
from typing import Any

from powerline_planner.constants import ElementTypes
from powerline_planner.model.dimension import Dimension, DimensionStyle
from powerline_planner.model.drawing_model import DrawingModel, Element
from powerline_planner.model.line import Line
from powerline_planner.model.pole import Pole

logger = logging.getLogger(__name__)

# Line fields whose change invalidates the stored chord/actual lengths
LINE_LENGTH_FIELDS = frozenset(
    {"start_x", "start_y", "end_x", "end_y", "start_elevation", "end_elevation", "start_utm", "end_utm", "sag"}
)


# =============================================================================
# Command Types
# =============================================================================


@dataclass(frozen=True)
class PropertyChange:
    """Before/after value of one field on one element."""

    element_id: str
    field_name: str
    old_value: Any
    new_value: Any


@dataclass(frozen=True)
class AddPole:
    """Place a pole."""

    pole: Pole

    @property
    def label(self) -> str:
        return f"Add pole {self.pole.id}"


@dataclass(frozen=True)
class AddLine:
    """Draw a line."""

    line: Line

    @property
    def label(self) -> str:
        return f"Add line {self.line.id}"


@dataclass(frozen=True)
class AddDimension:
    """Place a dimension annotation."""

    dimension: Dimension

    @property
    def label(self) -> str:
        return f"Add dimension {self.dimension.id}"


@dataclass(frozen=True)
class DeleteElement:
    """Delete any element (stores a copy and its position for restore)."""

    element: Element
    position: int

    @property
    def label(self) -> str:
        return f"Delete {self.element.id}"

    @classmethod
    def capture(cls, model: DrawingModel, element_id: str) -> "DeleteElement":
        """Build from the current state of an element.

        Raises:
            KeyError: If the element does not exist.
        """
        element = model.get(element_id=element_id)
        if element is None:
            raise KeyError(f"No element with id {element_id}")
        collection = {
            ElementTypes.POLE: model.poles,
            ElementTypes.LINE: model.lines,
            ElementTypes.DIMENSION: model.dimensions,
        }[DrawingModel.kind_of(element=element)]
        return cls(element=copy.deepcopy(element), position=list(collection).index(element_id))


@dataclass(frozen=True)
class UpdateProperty:
    """Change a single field of a single element."""

    change: PropertyChange

    @property
    def label(self) -> str:
        return f"Set {self.change.element_id}.{self.change.field_name}"

    @classmethod
    def capture(cls, model: DrawingModel, element_id: str, field_name: str, new_value: Any) -> "UpdateProperty":
        """Build from the element's current value of the field.

        Raises:
            KeyError: If the element does not exist.
            AttributeError: If the element has no such field.
        """
        element = model.get(element_id=element_id)
        if element is None:
            raise KeyError(f"No element with id {element_id}")
        old_value = copy.deepcopy(getattr(element, field_name))
        return cls(
            change=PropertyChange(
                element_id=element_id,
                field_name=field_name,
                old_value=old_value,
                new_value=copy.deepcopy(new_value),
            )
        )


@dataclass(frozen=True)
class BatchRetype:
    """Change the category of several poles/lines at once."""

    changes: tuple[PropertyChange, ...]

    @property
    def label(self) -> str:
        return f"Retype {len(self.changes)} elements"

    @classmethod
    def capture(cls, model: DrawingModel, element_ids: list[str], new_type: str) -> "BatchRetype":
        """Build for the elements compatible with new_type (others are skipped)."""
        changes = []
        for element_id in element_ids:
            element = model.get(element_id=element_id)
            if is_type_compatible(element=element, new_type=new_type):
                changes.append(
                    PropertyChange(element_id=element_id, field_name="type", old_value=element.type, new_value=new_type)
                )
        return cls(changes=tuple(changes))


@dataclass(frozen=True)
class BatchRename:
    """Rename several elements, optionally numbering them "<name> <n>"."""

    changes: tuple[PropertyChange, ...]

    @property
    def label(self) -> str:
        return f"Rename {len(self.changes)} elements"

    @classmethod
    def capture(cls, model: DrawingModel, element_ids: list[str], name: str, numbered: bool) -> "BatchRename":
        """Build for the named elements in selection order; unknown ids are skipped."""
        elements = [e for e in (model.get(element_id=eid) for eid in element_ids) if isinstance(e, (Pole, Line))]
        use_numbers = numbered and len(elements) > 1
        changes = tuple(
            PropertyChange(
                element_id=element.id,
                field_name="name",
                old_value=element.name,
                new_value=f"{name} {counter}" if use_numbers else name,
            )
            for counter, element in enumerate(elements, start=1)
        )
        return cls(changes=changes)


@dataclass(frozen=True)
class BatchRestyle:
    """Replace the style choice of several dimensions."""

    changes: tuple[PropertyChange, ...]

    @property
    def label(self) -> str:
        return f"Restyle {len(self.changes)} dimensions"

    @classmethod
    def capture(cls, model: DrawingModel, styles: dict[str, DimensionStyle]) -> "BatchRestyle":
        """Build from a dimension id -> new style mapping; non-dimension ids are skipped."""
        changes = tuple(
            PropertyChange(
                element_id=dim_id,
                field_name="style",
                old_value=copy.deepcopy(model.dimensions[dim_id].style),
                new_value=copy.deepcopy(style),
            )
            for dim_id, style in styles.items()
            if dim_id in model.dimensions
        )
        return cls(changes=changes)


Command = AddPole | AddLine | AddDimension | DeleteElement | UpdateProperty | BatchRetype | BatchRename | BatchRestyle


# =============================================================================
# Helpers
# =============================================================================


def is_type_compatible(element: Element | None, new_type: str) -> bool:
    """Whether an element can take a category (pole types for poles, line types for lines)."""
    if isinstance(element, Pole):
        return new_type in ElementTypes.POLE_TYPES
    if isinstance(element, Line):
        return new_type in ElementTypes.LINE_TYPES
    return False


def _set_field(model: DrawingModel, element_id: str, field_name: str, value: Any) -> None:
    element = model.get(element_id=element_id)
    if element is None:
        raise KeyError(f"No element with id {element_id}")
    setattr(element, field_name, copy.deepcopy(value))
    if isinstance(element, Line) and field_name in LINE_LENGTH_FIELDS:
        element.refresh_lengths()
    model.touch()


# =============================================================================
# Dispatch
# =============================================================================


def apply_command(model: DrawingModel, command: Command) -> None:
    """Perform a command on the model.

    Raises:
        TypeError: If command is not a known command type.
    """
    if isinstance(command, AddPole):
        model.insert(element=copy.deepcopy(command.pole))

    elif isinstance(command, AddLine):
        model.insert(element=copy.deepcopy(command.line))

    elif isinstance(command, AddDimension):
        if command.dimension.id not in model.dimensions:
            model.insert(element=copy.deepcopy(command.dimension))

    elif isinstance(command, DeleteElement):
        model.remove(element_id=command.element.id)

    elif isinstance(command, UpdateProperty):
        c = command.change
        _set_field(model=model, element_id=c.element_id, field_name=c.field_name, value=c.new_value)

    elif isinstance(command, (BatchRetype, BatchRename, BatchRestyle)):
        for c in command.changes:
            _set_field(model=model, element_id=c.element_id, field_name=c.field_name, value=c.new_value)

    else:
        raise TypeError(f"Unknown command type: {type(command).__name__}")

    logger.debug(f"Applied: {command.label}")


def invert_command(model: DrawingModel, command: Command) -> None:
    """Reverse a previously applied command.

    Raises:
        TypeError: If command is not a known command type.
    """
    if isinstance(command, AddPole):
        model.remove(element_id=command.pole.id)

    elif isinstance(command, AddLine):
        model.remove(element_id=command.line.id)

    elif isinstance(command, AddDimension):
        if command.dimension.id in model.dimensions:
            model.remove(element_id=command.dimension.id)

    elif isinstance(command, DeleteElement):
        model.insert(element=copy.deepcopy(command.element), position=command.position)

    elif isinstance(command, UpdateProperty):
        c = command.change
        _set_field(model=model, element_id=c.element_id, field_name=c.field_name, value=c.old_value)

    elif isinstance(command, (BatchRetype, BatchRename, BatchRestyle)):
        for c in reversed(command.changes):
            _set_field(model=model, element_id=c.element_id, field_name=c.field_name, value=c.old_value)

    else:
        raise TypeError(f"Unknown command type: {type(command).__name__}")

    logger.debug(f"Inverted: {command.label}")

"""Message - User-facing rejection notices.

Editor operations that refuse invalid user input return one of these
instead of raising. The model and history are untouched when a message
is returned; the caller decides how to show it.
"""

import logging
from abc import ABC, abstractmethod
from dataclasses import dataclass

logger = logging.getLogger(__name__)


@dataclass(frozen=True)
class ToastMessage(ABC):
    """Abstract base class for transient notifications.

    Good for: click errors, validation failures, quick confirmations
    Bad for: persistent status displays
    """

    @property
    @abstractmethod
    def message(self) -> str:
        """Formatted message text."""
        raise NotImplementedError

    @property
    @abstractmethod
    def icon(self) -> str:
        """Icon shown next to the message."""
        raise NotImplementedError

    def log(self) -> None:
        """Log this message at warning level."""
        logger.warning(f"[TOAST] {self.icon} {self.message}")

    def __str__(self) -> str:
        return f"{self.icon} {self.message}"


# =============================================================================
# TOAST MESSAGES
# =============================================================================


@dataclass(frozen=True)
class NothingSelectedMessage(ToastMessage):
    """Batch operation requested with an empty selection."""

    action: str  # e.g., "change type", "rename"

    @property
    def icon(self) -> str:
        return "⚠️"

    @property
    def message(self) -> str:
        return f"Cannot {self.action} — no elements selected"


@dataclass(frozen=True)
class EmptyNameMessage(ToastMessage):
    """Batch rename with a blank name."""

    @property
    def icon(self) -> str:
        return "✏️"

    @property
    def message(self) -> str:
        return "Name cannot be empty"


@dataclass(frozen=True)
class IncompatibleTypeMessage(ToastMessage):
    """Batch retype where no selected element accepts the type."""

    new_type: str

    @property
    def icon(self) -> str:
        return "🚫"

    @property
    def message(self) -> str:
        return f"No selected element can take type '{self.new_type}'"


@dataclass(frozen=True)
class UnknownElementMessage(ToastMessage):
    """Operation referenced an element id that is not in the drawing."""

    element_id: str

    @property
    def icon(self) -> str:
        return "❓"

    @property
    def message(self) -> str:
        return f"Element '{self.element_id}' does not exist"


@dataclass(frozen=True)
class InvalidValueMessage(ToastMessage):
    """Property update with a value the property does not accept."""

    field_name: str
    reason: str

    @property
    def icon(self) -> str:
        return "⚠️"

    @property
    def message(self) -> str:
        return f"Invalid value for '{self.field_name}' — {self.reason}"


@dataclass(frozen=True)
class DegenerateLineMessage(ToastMessage):
    """Line finished on its own start point."""

    @property
    def icon(self) -> str:
        return "📏"

    @property
    def message(self) -> str:
        return "Line end must differ from its start"


@dataclass(frozen=True)
class UnknownPresetMessage(ToastMessage):
    """Dimension preset name not known."""

    preset: str

    @property
    def icon(self) -> str:
        return "🎨"

    @property
    def message(self) -> str:
        return f"Unknown dimension preset '{self.preset}'"

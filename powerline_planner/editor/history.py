"""CommandHistory - Bounded undo/redo stack over the drawing model.

The history is a single list plus a cursor (`index`) pointing at the last
applied command:
- execute: drop the redo branch, apply, append, advance; evict the oldest
  entry when the list grows past max_size
- undo: invert commands[index], step back (no-op when nothing to undo)
- redo: step forward, re-apply (no-op when at the end)

Application is delegated to `apply`/`invert` callables so the stack itself
knows nothing about command types.
"""

import logging
from collections.abc import Callable
from typing import Generic, TypeVar

from powerline_planner.constants import UndoConfig
from powerline_planner.editor.commands import Command, apply_command, invert_command
from powerline_planner.model.drawing_model import DrawingModel

logger = logging.getLogger(__name__)

C = TypeVar("C")

# Listener signature: (event, command) with event in {"execute", "undo", "redo"}
HistoryListener = Callable[[str, object], None]


class CommandHistory(Generic[C]):
    """Undo/redo stack.

    Example:
        history = CommandHistory(model=model)
        history.execute(command=AddPole(pole=pole))
        history.undo()
        history.can_redo()  # True
    """

    def __init__(
        self,
        model: DrawingModel,
        max_size: int = UndoConfig.MAX_UNDO_STACK_SIZE,
        apply: Callable[[DrawingModel, C], None] = apply_command,
        invert: Callable[[DrawingModel, C], None] = invert_command,
    ) -> None:
        if max_size < 1:
            raise ValueError(f"max_size must be positive, got {max_size}")
        self.model = model
        self.max_size = max_size
        self.commands: list[C] = []
        self.index = -1
        self._apply = apply
        self._invert = invert
        self._listeners: list[HistoryListener] = []

    def add_listener(self, listener: HistoryListener) -> None:
        """Register a callback invoked after every execute/undo/redo."""
        self._listeners.append(listener)

    def _notify(self, event: str, command: C) -> None:
        for listener in self._listeners:
            listener(event, command)

    def execute(self, command: C) -> None:
        """Apply a command and record it, discarding any redo branch.

        The command is only recorded if applying it succeeds.
        """
        self._apply(self.model, command)

        del self.commands[self.index + 1 :]
        self.commands.append(command)
        self.index += 1

        while len(self.commands) > self.max_size:
            evicted = self.commands.pop(0)
            self.index -= 1
            logger.debug(f"History full, evicted: {_label(evicted)}")

        logger.info(f"Executed: {_label(command)} (history {self.index + 1}/{len(self.commands)})")
        self._notify("execute", command)

    def undo(self) -> C | None:
        """Undo the current command.

        Returns:
            The undone command, or None if there was nothing to undo.
        """
        if not self.can_undo():
            logger.debug("Undo requested with empty history")
            return None
        command = self.commands[self.index]
        self._invert(self.model, command)
        self.index -= 1
        logger.info(f"Undone: {_label(command)}")
        self._notify("undo", command)
        return command

    def redo(self) -> C | None:
        """Redo the next command.

        Returns:
            The redone command, or None if there was nothing to redo.
        """
        if not self.can_redo():
            logger.debug("Redo requested at end of history")
            return None
        self.index += 1
        command = self.commands[self.index]
        self._apply(self.model, command)
        logger.info(f"Redone: {_label(command)}")
        self._notify("redo", command)
        return command

    def can_undo(self) -> bool:
        return self.index >= 0

    def can_redo(self) -> bool:
        return self.index < len(self.commands) - 1

    def clear(self) -> None:
        """Forget all commands (the model is left as is)."""
        self.commands.clear()
        self.index = -1

    def __len__(self) -> int:
        return len(self.commands)

    def __repr__(self) -> str:
        return f"CommandHistory(index={self.index}, size={len(self.commands)}, max={self.max_size})"


def _label(command: object) -> str:
    return getattr(command, "label", type(command).__name__)


EditorHistory = CommandHistory[Command]

"""
UndoManager - Bounded undo/redo history for circuit edits.

A command is recorded only after its execute() returns, so an edit rejected
by validation leaves the history untouched.
"""

from collections import deque
from typing import Optional

from controllers.commands import Command


class UndoManager:
    """
    Manages command execution with undo/redo support.

    The undo stack keeps at most ``max_depth`` commands; the oldest entry is
    dropped when it overflows. Executing a new command clears the redo stack.
    """

    def __init__(self, max_depth: int = 100):
        if max_depth < 1:
            raise ValueError(f"max_depth must be at least 1, got {max_depth}")
        self.max_depth = max_depth
        self._undo_stack: deque[Command] = deque(maxlen=max_depth)
        self._redo_stack: list[Command] = []

    def execute(self, command: Command) -> None:
        """Execute a command and record it for undo."""
        command.execute()
        self._undo_stack.append(command)
        self._redo_stack.clear()

    def undo(self) -> bool:
        """
        Undo the last command.

        Returns:
            True if an action was undone, False if there was nothing to undo
        """
        if not self._undo_stack:
            return False
        command = self._undo_stack.pop()
        command.undo()
        self._redo_stack.append(command)
        return True

    def redo(self) -> bool:
        """
        Redo the last undone command.

        Returns:
            True if an action was redone, False if there was nothing to redo
        """
        if not self._redo_stack:
            return False
        command = self._redo_stack.pop()
        command.execute()
        self._undo_stack.append(command)
        return True

    def can_undo(self) -> bool:
        return bool(self._undo_stack)

    def can_redo(self) -> bool:
        return bool(self._redo_stack)

    def get_undo_description(self) -> Optional[str]:
        return self._undo_stack[-1].get_description() if self._undo_stack else None

    def get_redo_description(self) -> Optional[str]:
        return self._redo_stack[-1].get_description() if self._redo_stack else None

    def history(self) -> list[str]:
        """Descriptions of the undoable commands, oldest first."""
        return [command.get_description() for command in self._undo_stack]

    def clear(self) -> None:
        self._undo_stack.clear()
        self._redo_stack.clear()

    def get_undo_count(self) -> int:
        return len(self._undo_stack)

    def get_redo_count(self) -> int:
        return len(self._redo_stack)

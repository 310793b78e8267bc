from dataclasses import dataclass
from typing import Callable, List, Optional
from pix3l.commands.command import ICommand
from pix3l.kernel.system.logging import get_logger

logger = get_logger(__name__)


@dataclass(frozen=True)
class StackState:
    index: int
    count: int
    can_undo: bool
    can_redo: bool
    undo_label: Optional[str]
    redo_label: Optional[str]


StackListener = Callable[[StackState], None]


class CommandStack:
    """
    Linear undo/redo history. `index` is one past the last applied command.
    Not thread-safe; a single owner serialises access.
    """

    def __init__(self) -> None:
        self._commands: List[ICommand] = []
        self._index = 0
        self._listeners: List[StackListener] = []

    @property
    def index(self) -> int:
        return self._index

    @property
    def count(self) -> int:
        return len(self._commands)

    def __len__(self) -> int:
        return len(self._commands)

    def can_undo(self) -> bool:
        return self._index > 0

    def can_redo(self) -> bool:
        return self._index < len(self._commands)

    @property
    def undo_label(self) -> Optional[str]:
        return self._commands[self._index - 1].label if self.can_undo() else None

    @property
    def redo_label(self) -> Optional[str]:
        return self._commands[self._index].label if self.can_redo() else None

    def labels(self) -> List[str]:
        return [cmd.label for cmd in self._commands]

    def state(self) -> StackState:
        return StackState(
            index=self._index,
            count=len(self._commands),
            can_undo=self.can_undo(),
            can_redo=self.can_redo(),
            undo_label=self.undo_label,
            redo_label=self.redo_label,
        )

    def add_listener(self, listener: StackListener) -> None:
        self._listeners.append(listener)

    def remove_listener(self, listener: StackListener) -> None:
        if listener in self._listeners:
            self._listeners.remove(listener)

    def _notify(self) -> None:
        state = self.state()
        for listener in list(self._listeners):
            listener(state)

    def push(self, command: Optional[ICommand]) -> None:
        """
        Executes the command, then drops the redo branch and appends it.
        A command that raises leaves the history as it was.
        """
        if command is None:
            return
        logger.debug(f"Executing command: {command.label}")
        command.apply()
        del self._commands[self._index :]
        self._commands.append(command)
        self._index += 1
        self._notify()

    def undo(self) -> bool:
        if not self.can_undo():
            return False
        command = self._commands[self._index - 1]
        logger.debug(f"Undoing command: {command.label}")
        command.undo()
        self._index -= 1
        self._notify()
        return True

    def redo(self) -> bool:
        if not self.can_redo():
            return False
        command = self._commands[self._index]
        logger.debug(f"Redoing command: {command.label}")
        command.apply()
        self._index += 1
        self._notify()
        return True

    def set_index(self, index: int) -> None:
        """
        Walks undo/redo until the history sits at index (clamped to the valid range).
        """
        target = max(0, min(len(self._commands), index))
        while self._index > target:
            self.undo()
        while self._index < target:
            self.redo()

    def clear(self) -> None:
        self._commands.clear()
        self._index = 0
        self._notify()

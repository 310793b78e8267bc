from typing import Iterable, List, Optional, Protocol, runtime_checkable
from pix3l.core.interfaces import IRasterSlot
from pix3l.core.raster import Raster
from pix3l.commands.models import CommandState, Computed, Operation, Pending
from pix3l.kernel.system.logging import get_logger

logger = get_logger(__name__)


@runtime_checkable
class ICommand(Protocol):
    """
    A reversible history entry.
    """

    label: str

    def apply(self) -> None: ...

    def undo(self) -> None: ...

    def rebase(self) -> None: ...


def _capture(slot: IRasterSlot) -> Raster:
    current = slot.raster
    if current is None:
        return Raster.null().snapshot()
    return current.snapshot()


class ImageCommand:
    """
    Wraps one transformation with a before/after memento pair.

    The before snapshot is taken when the command is built. The first apply
    computes the after snapshot; every later apply (redo) only writes it back.
    """

    def __init__(
        self, slot: IRasterSlot, operation: Operation, label: Optional[str] = None
    ):
        self._slot = slot
        self.operation = operation
        self.label = label or operation.label
        self._state: CommandState = Pending(_capture(slot))

    @property
    def state(self) -> CommandState:
        return self._state

    @property
    def is_computed(self) -> bool:
        return isinstance(self._state, Computed)

    @property
    def before(self) -> Raster:
        return self._state.before

    @property
    def after(self) -> Optional[Raster]:
        return self._state.after if isinstance(self._state, Computed) else None

    def rebase(self) -> None:
        """
        Re-captures the before snapshot from the slot. Only valid while pending;
        computed mementos are never replaced.
        """
        if isinstance(self._state, Pending):
            self._state = Pending(_capture(self._slot))

    def _compute(self) -> Computed:
        state = self._state
        assert isinstance(state, Pending), f"'{self.label}' computed twice"
        after = self.operation.transform(state.before).snapshot()
        return Computed(state.before, after)

    def apply(self) -> None:
        if isinstance(self._state, Pending):
            self._state = self._compute()
        self._slot.replace_raster(self._state.after.copy())

    def undo(self) -> None:
        self._slot.replace_raster(self._state.before.copy())

    def __repr__(self) -> str:
        status = "computed" if self.is_computed else "pending"
        return f"ImageCommand({self.label!r}, {self.operation!r}, {status})"


class CompoundCommand:
    """
    An ordered group applied and undone as one history entry.
    Children apply in insertion order and undo in reverse. They compose:
    a child still pending on the first apply is rebased onto the result of
    the child before it. If a child raises, the ones already applied are
    undone so the slot is left as it was.
    """

    def __init__(
        self,
        label: str = "Adjust Image",
        children: Optional[Iterable[ICommand]] = None,
    ):
        self.label = label
        self._children: List[ICommand] = list(children or [])

    @property
    def children(self) -> List[ICommand]:
        return list(self._children)

    def add(self, command: ICommand) -> None:
        self._children.append(command)

    def __len__(self) -> int:
        return len(self._children)

    def rebase(self) -> None:
        # Children re-capture on apply
        pass

    def apply(self) -> None:
        applied: List[ICommand] = []
        try:
            for child in self._children:
                child.rebase()
                child.apply()
                applied.append(child)
        except Exception:
            for child in reversed(applied):
                child.undo()
            raise

    def undo(self) -> None:
        for child in reversed(self._children):
            child.undo()

    def __repr__(self) -> str:
        return f"CompoundCommand({self.label!r}, {len(self._children)} children)"

from __future__ import annotations

from dataclasses import dataclass, field
from typing import List, Optional

from .errors import InvariantError
from .move import Move


@dataclass
class MoveLog:
    """Executed moves and undone moves waiting to be redone.

    Both lists are stacks with the most recent move last.
    """

    history: List[Move] = field(default_factory=list)
    redo: List[Move] = field(default_factory=list)

    def record(self, move: Move, replaying: bool = False) -> None:
        if not move.executed:
            raise InvariantError(f"cannot log {move.describe()} before it runs")
        self.history.append(move)
        if not replaying:
            self.redo.clear()

    def pop_undo(self) -> Optional[Move]:
        return self.history.pop() if self.history else None

    def pop_redo(self) -> Optional[Move]:
        return self.redo.pop() if self.redo else None

    def push_redo(self, move: Move) -> None:
        if move.executed:
            raise InvariantError(f"{move.describe()} must be undone before it can be redone")
        self.redo.append(move)

    def can_undo(self) -> bool:
        return bool(self.history)

    def can_redo(self) -> bool:
        return bool(self.redo)

    def clear(self) -> None:
        self.history.clear()
        self.redo.clear()

from __future__ import annotations

from dataclasses import dataclass
from typing import Callable, List, Optional, Union

from .cards import Card
from .move import Move
from .rules import GameConfig


@dataclass(frozen=True)
class GameStarted:
    config: GameConfig


@dataclass(frozen=True)
class DraggableChanged:
    card: Card
    old: bool
    new: bool


@dataclass(frozen=True)
class MoveExecuted:
    move: Move
    replayed: bool = False


@dataclass(frozen=True)
class MoveUndone:
    move: Move


@dataclass(frozen=True)
class GameWon:
    moves: int


EngineEvent = Union[GameStarted, DraggableChanged, MoveExecuted, MoveUndone, GameWon]
Listener = Callable[[EngineEvent], None]


class EventBus:
    """Queues engine notifications for the caller to drain.

    An optional listener is also called synchronously for each event; its
    return value is ignored.
    """

    def __init__(self, listener: Optional[Listener] = None) -> None:
        self.listener = listener
        self._pending: List[EngineEvent] = []

    def emit(self, event: EngineEvent) -> None:
        self._pending.append(event)
        if self.listener is not None:
            self.listener(event)

    def drain(self) -> List[EngineEvent]:
        events, self._pending = self._pending, []
        return events

    def clear(self) -> None:
        self._pending.clear()

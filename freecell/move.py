from __future__ import annotations

from enum import Enum
from typing import Dict, List, Optional, Sequence, Tuple

from .cards import Card
from .deck import Deck, move_card
from .errors import InvariantError, MoveStateError


class MoveKind(str, Enum):
    SINGLE = "SINGLE"
    STACK = "STACK"
    SWAP = "SWAP"
    MULTI = "MULTI"


def _snapshot(cards: Sequence[Card]) -> Dict[int, Tuple[bool, bool]]:
    return {card.card_id: (card.face_up, card.draggable) for card in cards}


def _restore(cards: Sequence[Card], snapshot: Dict[int, Tuple[bool, bool]]) -> None:
    for card in cards:
        card.face_up, card.draggable = snapshot[card.card_id]


class Move:
    """A reversible state transition.

    ``execute`` and ``undo`` must alternate, starting with ``execute``.
    """

    kind: MoveKind

    def __init__(self) -> None:
        self._executed = False

    @property
    def executed(self) -> bool:
        return self._executed

    @property
    def source(self) -> Optional[Deck]:
        raise NotImplementedError

    @property
    def target(self) -> Optional[Deck]:
        raise NotImplementedError

    @property
    def cards(self) -> List[Card]:
        raise NotImplementedError

    def execute(self) -> None:
        if self._executed:
            raise MoveStateError(f"{self.describe()} already executed")
        self._apply()
        self._executed = True

    def undo(self) -> None:
        if not self._executed:
            raise MoveStateError(f"{self.describe()} undone without being executed")
        self._revert()
        self._executed = False

    def _apply(self) -> None:
        raise NotImplementedError

    def _revert(self) -> None:
        raise NotImplementedError

    def describe(self) -> str:
        cards = " ".join(card.short() for card in self.cards)
        source = self.source.name if self.source is not None else "?"
        target = self.target.name if self.target is not None else "?"
        return f"{self.kind.value.lower()} {cards} {source}->{target}"

    def __repr__(self) -> str:
        return f"<{type(self).__name__} {self.describe()}>"


class SingleMove(Move):
    kind = MoveKind.SINGLE

    def __init__(self, card: Card, target: Deck, index: Optional[int] = None, face_up: Optional[bool] = None) -> None:
        super().__init__()
        self.card = card
        self._source = card.deck
        self._target = target
        self.index = index
        self.face_up = face_up
        self._source_index = -1
        self._target_index = -1
        self._flags: Dict[int, Tuple[bool, bool]] = {}

    @property
    def source(self) -> Optional[Deck]:
        return self._source

    @property
    def target(self) -> Deck:
        return self._target

    @property
    def cards(self) -> List[Card]:
        return [self.card]

    def _apply(self) -> None:
        self._source = self.card.deck
        self._flags = _snapshot(self.cards)
        self._source_index = move_card(self.card, self._target, self.index)
        self._target_index = self._target.index_of(self.card)
        if self.face_up is not None:
            self.card.face_up = self.face_up

    def _revert(self) -> None:
        if self._source is None:
            raise InvariantError(f"{self.describe()} has no source to return to")
        if (
            self.card.deck is not self._target
            or not 0 <= self._target_index < len(self._target)
            or self._target.cards[self._target_index] is not self.card
        ):
            raise InvariantError(f"{self.card.short()} moved since {self.describe()}")
        self._target.pop_from(self._target_index)
        self._source.insert(self._source_index, self.card)
        _restore(self.cards, self._flags)


class StackMove(Move):
    """Moves a run that the caller has already resolved.

    ``cards`` must be the exact top of ``source``, bottom card first.
    """

    kind = MoveKind.STACK

    def __init__(self, source: Deck, target: Deck, cards: Sequence[Card]) -> None:
        super().__init__()
        if not cards:
            raise InvariantError("stack move needs at least one card")
        self._source = source
        self._target = target
        self._cards = list(cards)
        self._source_start = -1
        self._target_start = -1
        self._flags: Dict[int, Tuple[bool, bool]] = {}

    @property
    def source(self) -> Deck:
        return self._source

    @property
    def target(self) -> Deck:
        return self._target

    @property
    def cards(self) -> List[Card]:
        return list(self._cards)

    def _apply(self) -> None:
        if self._source is self._target:
            raise InvariantError("stack move source and target are the same deck")
        start = self._source.index_of(self._cards[0])
        run = self._source.cards[start:]
        if len(run) != len(self._cards) or any(a is not b for a, b in zip(run, self._cards)):
            raise InvariantError(f"{self.describe()} is not the top run of {self._source.name}")
        self._flags = _snapshot(self._cards)
        self._source_start = start
        self._target_start = len(self._target)
        for _ in self._cards:
            self._target.push(self._source.pop_from(start))

    def _revert(self) -> None:
        tail = self._target.cards[self._target_start:]
        if len(tail) != len(self._cards) or any(a is not b for a, b in zip(tail, self._cards)):
            raise InvariantError(f"{self.describe()} is no longer on top of {self._target.name}")
        for offset in range(len(self._cards)):
            card = self._target.pop_from(self._target_start)
            self._source.insert(self._source_start + offset, card)
        _restore(self._cards, self._flags)


class SwapMove(Move):
    """Two single moves undone together, e.g. a discard and its refill."""

    kind = MoveKind.SWAP

    def __init__(self, first: SingleMove, second: SingleMove) -> None:
        super().__init__()
        self.first = first
        self.second = second

    @property
    def source(self) -> Optional[Deck]:
        return self.first.source

    @property
    def target(self) -> Deck:
        return self.first.target

    @property
    def cards(self) -> List[Card]:
        return self.first.cards + self.second.cards

    def _apply(self) -> None:
        self.first.execute()
        try:
            self.second.execute()
        except Exception:
            self.first.undo()
            raise

    def _revert(self) -> None:
        self.second.undo()
        self.first.undo()


class MultiMove(Move):
    kind = MoveKind.MULTI

    def __init__(self, moves: Optional[Sequence[Move]] = None) -> None:
        super().__init__()
        self.moves: List[Move] = list(moves or [])

    def __len__(self) -> int:
        return len(self.moves)

    @property
    def source(self) -> Optional[Deck]:
        return self.moves[0].source if self.moves else None

    @property
    def target(self) -> Optional[Deck]:
        return self.moves[-1].target if self.moves else None

    @property
    def cards(self) -> List[Card]:
        return [card for move in self.moves for card in move.cards]

    def perform(self, move: Move) -> None:
        """Execute ``move`` now and make it part of this already executed batch."""
        if not self._executed:
            raise MoveStateError("cannot extend a batch that has not been executed")
        move.execute()
        self.moves.append(move)

    def _apply(self) -> None:
        done: List[Move] = []
        try:
            for move in self.moves:
                move.execute()
                done.append(move)
        except Exception:
            # Leave the decks as they were before the batch started.
            for move in reversed(done):
                move.undo()
            raise

    def _revert(self) -> None:
        for move in reversed(self.moves):
            move.undo()

from __future__ import annotations

import random
from dataclasses import dataclass, field
from enum import Enum
from typing import Iterator, List, Optional

from .cards import Card, Color
from .errors import InvariantError


class DeckRole(str, Enum):
    FREE = "FREE"
    PLAY = "PLAY"
    GOAL = "GOAL"
    STAIRCASE = "STAIRCASE"
    HAND = "HAND"
    JUNK = "JUNK"
    DEALER = "DEALER"
    OFFSCREEN = "OFFSCREEN"


@dataclass(eq=False)
class Deck:
    """An ordered pile of cards, bottom first.

    Decks are passive: they keep card ownership consistent but know nothing
    about which placements are legal.
    """

    role: DeckRole
    index: int = 0
    cards: List[Card] = field(default_factory=list, init=False)

    def __len__(self) -> int:
        return len(self.cards)

    def __iter__(self) -> Iterator[Card]:
        return iter(self.cards)

    def __repr__(self) -> str:
        return f"Deck({self.role.value}[{self.index}], {' '.join(c.short() for c in self.cards)})"

    @property
    def name(self) -> str:
        return f"{self.role.value.lower()}{self.index}"

    @property
    def has_cards(self) -> bool:
        return bool(self.cards)

    @property
    def top_card(self) -> Optional[Card]:
        return self.cards[-1] if self.cards else None

    @property
    def bottom_card(self) -> Optional[Card]:
        return self.cards[0] if self.cards else None

    def index_of(self, card: Card) -> int:
        for idx, held in enumerate(self.cards):
            if held is card:
                return idx
        raise InvariantError(f"{card.short()} is not in {self.name}")

    def has(self, rank: int, color: Color) -> bool:
        return any(card.rank == rank and card.color == color for card in self.cards)

    def push(self, card: Card) -> None:
        self.insert(len(self.cards), card)

    def insert(self, index: int, card: Card) -> None:
        if card.deck is not None:
            raise InvariantError(f"{card.short()} is still owned by {card.deck.name}")
        if not 0 <= index <= len(self.cards):
            raise InvariantError(f"insert position {index} outside {self.name}")
        self.cards.insert(index, card)
        card._deck = self

    def shuffle(self, rng: random.Random, passes: int = 1) -> None:
        for _ in range(passes):
            rng.shuffle(self.cards)

    def flip_all(self, face_up: bool = True) -> None:
        for card in self.cards:
            card.face_up = face_up

    def pop_from(self, index: int) -> Card:
        if not 0 <= index < len(self.cards):
            raise InvariantError(f"no card at position {index} of {self.name}")
        card = self.cards.pop(index)
        card._deck = None
        return card


def move_card(card: Card, target: Deck, index: Optional[int] = None) -> int:
    """Transfer ``card`` from its current deck into ``target``.

    Returns the position the card was taken from. ``index`` is the insertion
    position in ``target`` after removal (default: on top).
    """
    source = card.deck
    if source is None:
        raise InvariantError(f"{card.short()} is not in any deck")
    source_index = source.index_of(card)
    room = len(target.cards) - (1 if source is target else 0)
    if index is None:
        index = room
    if not 0 <= index <= room:
        raise InvariantError(f"insert position {index} outside {target.name}")
    source.pop_from(source_index)
    target.insert(index, card)
    return source_index


def make_decks(role: DeckRole, count: int) -> List[Deck]:
    return [Deck(role, idx) for idx in range(count)]

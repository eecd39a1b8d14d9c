from __future__ import annotations

from dataclasses import dataclass, field
from enum import Enum, IntEnum
from typing import TYPE_CHECKING, List, Optional

if TYPE_CHECKING:
    from .deck import Deck

CARDS_PER_SUIT = 13
LOW_RANK_MAX = 3


class Color(str, Enum):
    BLACK = "BLACK"
    RED = "RED"

    def opposite(self) -> "Color":
        return Color.RED if self is Color.BLACK else Color.BLACK


class Suit(IntEnum):
    SPADES = 1
    HEARTS = 2
    DIAMONDS = 3
    CLUBS = 4

    @property
    def color(self) -> Color:
        if self in (Suit.SPADES, Suit.CLUBS):
            return Color.BLACK
        return Color.RED

    @property
    def symbol(self) -> str:
        return "SHDC"[self.value - 1]


class Rank(IntEnum):
    ACE = 1
    DEUCE = 2
    THREE = 3
    FOUR = 4
    FIVE = 5
    SIX = 6
    SEVEN = 7
    EIGHT = 8
    NINE = 9
    TEN = 10
    JACK = 11
    QUEEN = 12
    KING = 13

    @property
    def label(self) -> str:
        return {1: "A", 10: "T", 11: "J", 12: "Q", 13: "K"}.get(self.value, str(self.value))


@dataclass(eq=False)
class Card:
    """A physical card.

    Equality is identity: with more than four suits the same suit and rank
    appear several times, so ``card_id`` is what tells them apart.
    """

    suit: Suit
    rank: Rank
    card_id: int
    face_up: bool = False
    draggable: bool = False
    _deck: Optional["Deck"] = field(default=None, init=False, repr=False)

    @property
    def deck(self) -> Optional["Deck"]:
        return self._deck

    @property
    def color(self) -> Color:
        return self.suit.color

    def is_low(self) -> bool:
        return self.rank <= LOW_RANK_MAX

    def can_stack_on(self, lower: "Card") -> bool:
        """True if this card may lie on ``lower`` in a play stack."""
        return self.color != lower.color and self.rank + 1 == lower.rank

    def follows_on_goal(self, top: "Card") -> bool:
        return self.suit == top.suit and self.rank == top.rank + 1

    def short(self) -> str:
        return f"{self.rank.label}{self.suit.symbol}"

    def __str__(self) -> str:
        return self.short() if self.face_up else "##"


def suit_for_index(index: int) -> Suit:
    return Suit((index % len(Suit)) + 1)


def build_cards(suits: int) -> List[Card]:
    """Create ``suits`` full suits, suit by suit, Ace to King."""
    cards: List[Card] = []
    for suit_index in range(suits):
        suit = suit_for_index(suit_index)
        for rank in Rank:
            cards.append(Card(suit, rank, card_id=len(cards)))
    return cards

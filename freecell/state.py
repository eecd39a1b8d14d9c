from __future__ import annotations

import hashlib
import logging
import random
from dataclasses import dataclass, field
from typing import Dict, Iterator, List, Optional, Tuple

from .cards import Card, build_cards
from .deck import Deck, DeckRole, make_decks, move_card
from .errors import InvariantError
from .move import MultiMove, SingleMove
from .rules import GameConfig

logger = logging.getLogger(__name__)


@dataclass
class GameState:
    config: GameConfig
    free_cells: List[Deck]
    play_stacks: List[Deck]
    goals: List[Deck]
    dealer: Deck
    cards: List[Card]
    deal_adjustment: MultiMove = field(default_factory=MultiMove)

    def decks(self) -> Iterator[Deck]:
        yield from self.free_cells
        yield from self.play_stacks
        yield from self.goals
        yield self.dealer

    def find_deck(self, role: DeckRole, index: int) -> Deck:
        for deck in self.decks():
            if deck.role == role and deck.index == index:
                return deck
        raise KeyError(f"no {role.value} deck with index {index}")

    def goal_count(self) -> int:
        return sum(len(goal) for goal in self.goals)

    def check_integrity(self) -> None:
        """Raise InvariantError unless every card sits in exactly one deck."""
        seen: Dict[int, Deck] = {}
        for deck in self.decks():
            for card in deck:
                if card.card_id in seen:
                    raise InvariantError(f"{card.short()} is in both {seen[card.card_id].name} and {deck.name}")
                if card.deck is not deck:
                    raise InvariantError(f"{card.short()} in {deck.name} points at another deck")
                seen[card.card_id] = deck
        expected = {card.card_id for card in self.cards}
        if set(seen) != expected:
            missing = sorted(expected - set(seen))
            extra = sorted(set(seen) - expected)
            raise InvariantError(f"card set mismatch: missing {missing}, unexpected {extra}")

    def snapshot(self) -> Tuple:
        return tuple(
            (
                deck.role.value,
                deck.index,
                tuple((card.card_id, card.face_up, card.draggable) for card in deck),
            )
            for deck in self.decks()
        )

    def stable_hash(self) -> str:
        return hashlib.sha256(repr(self.snapshot()).encode("utf-8")).hexdigest()


def _deal_round_robin(dealer: Deck, stacks: List[Deck]) -> None:
    count = 0
    while dealer.has_cards:
        move_card(dealer.top_card, stacks[count % len(stacks)])
        count += 1


def _bias_low_cards(cards: List[Card], config: GameConfig, rng: random.Random) -> MultiMove:
    # Positive difficulty buries aces through threes, negative raises them.
    batch = MultiMove()
    batch.execute()
    bury = config.difficulty > 0
    for _ in range(config.bias_operations()):
        if bury:
            pool = [c for c in cards if c.is_low() and c.deck.bottom_card is not c]
        else:
            pool = [c for c in cards if c.is_low() and c.deck.top_card is not c]
        if not pool:
            continue
        card = pool[rng.randrange(len(pool))]
        position = card.deck.index_of(card) + (-1 if bury else 1)
        batch.perform(SingleMove(card, card.deck, index=position))
    return batch


def new_game(config: Optional[GameConfig] = None) -> GameState:
    config = (config or GameConfig()).validate()
    rng = random.Random(config.seed)

    dealer = Deck(DeckRole.DEALER)
    cards = build_cards(config.suits)
    for card in cards:
        dealer.push(card)
    dealer.shuffle(rng, config.shuffle_passes)
    dealer.flip_all()

    play_stacks = make_decks(DeckRole.PLAY, config.stacks)
    _deal_round_robin(dealer, play_stacks)

    state = GameState(
        config=config,
        free_cells=make_decks(DeckRole.FREE, config.free_cells),
        play_stacks=play_stacks,
        goals=make_decks(DeckRole.GOAL, config.suits),
        dealer=dealer,
        cards=cards,
    )
    state.deal_adjustment = _bias_low_cards(cards, config, rng)
    logger.info(
        "dealt seed=%s suits=%d stacks=%d cells=%d difficulty=%s (%d low cards relocated)",
        config.seed,
        config.suits,
        config.stacks,
        config.free_cells,
        config.difficulty,
        len(state.deal_adjustment),
    )
    return state

import pathlib
import random
import sys

import pytest

ROOT = pathlib.Path(__file__).resolve().parents[1]
if str(ROOT) not in sys.path:
    sys.path.insert(0, str(ROOT))

from freecell.cards import Card, Color, Rank, Suit, build_cards
from freecell.deck import Deck, DeckRole, move_card
from freecell.errors import InvariantError


def test_build_cards_repeats_suits_past_four():
    cards = build_cards(8)
    assert len(cards) == 104
    assert len({c.card_id for c in cards}) == 104
    assert cards[0].suit == Suit.SPADES and cards[0].rank == Rank.ACE
    assert cards[12].rank == Rank.KING
    assert cards[52].suit == Suit.SPADES
    assert cards[52] is not cards[0]
    assert cards[52] != cards[0]


def test_suit_colors():
    assert Suit.SPADES.color == Color.BLACK
    assert Suit.CLUBS.color == Color.BLACK
    assert Suit.HEARTS.color == Color.RED
    assert Suit.DIAMONDS.color == Color.RED
    assert Color.RED.opposite() == Color.BLACK


def test_can_stack_on_needs_opposite_color_and_next_rank():
    seven_hearts = Card(Suit.HEARTS, Rank.SEVEN, card_id=0)
    eight_spades = Card(Suit.SPADES, Rank.EIGHT, card_id=1)
    eight_diamonds = Card(Suit.DIAMONDS, Rank.EIGHT, card_id=2)
    nine_clubs = Card(Suit.CLUBS, Rank.NINE, card_id=3)
    assert seven_hearts.can_stack_on(eight_spades)
    assert not seven_hearts.can_stack_on(eight_diamonds)
    assert not seven_hearts.can_stack_on(nine_clubs)


def test_push_and_pop_keep_back_reference():
    deck = Deck(DeckRole.PLAY, 0)
    card = Card(Suit.CLUBS, Rank.FOUR, card_id=0)
    deck.push(card)
    assert card.deck is deck
    assert deck.top_card is card and deck.bottom_card is card
    popped = deck.pop_from(0)
    assert popped is card
    assert card.deck is None
    assert not deck.has_cards


def test_cannot_push_card_owned_by_another_deck():
    first = Deck(DeckRole.PLAY, 0)
    second = Deck(DeckRole.FREE, 0)
    card = Card(Suit.CLUBS, Rank.FOUR, card_id=0)
    first.push(card)
    with pytest.raises(InvariantError):
        second.push(card)
    assert card.deck is first
    assert len(second) == 0


def test_move_card_transfers_ownership():
    source = Deck(DeckRole.PLAY, 0)
    target = Deck(DeckRole.PLAY, 1)
    cards = build_cards(1)[:3]
    for card in cards:
        source.push(card)
    index = move_card(cards[1], target)
    assert index == 1
    assert source.cards == [cards[0], cards[2]]
    assert target.cards == [cards[1]]
    assert cards[1].deck is target


def test_move_card_within_deck_relocates():
    deck = Deck(DeckRole.PLAY, 0)
    cards = build_cards(1)[:4]
    for card in cards:
        deck.push(card)
    move_card(cards[1], deck, index=2)
    assert deck.cards == [cards[0], cards[2], cards[1], cards[3]]


def test_move_card_rejects_bad_position_without_side_effects():
    source = Deck(DeckRole.PLAY, 0)
    target = Deck(DeckRole.PLAY, 1)
    card = build_cards(1)[0]
    source.push(card)
    with pytest.raises(InvariantError):
        move_card(card, target, index=3)
    assert card.deck is source
    assert source.cards == [card]


def test_has_matches_rank_and_color_anywhere_in_deck():
    deck = Deck(DeckRole.PLAY, 0)
    deck.push(Card(Suit.HEARTS, Rank.DEUCE, card_id=0))
    deck.push(Card(Suit.SPADES, Rank.KING, card_id=1))
    assert deck.has(2, Color.RED)
    assert not deck.has(2, Color.BLACK)
    assert deck.has(Rank.KING, Color.BLACK)


def test_shuffle_is_seeded():
    first = Deck(DeckRole.DEALER)
    second = Deck(DeckRole.DEALER)
    for card in build_cards(1):
        first.push(card)
    for card in build_cards(1):
        second.push(card)
    first.shuffle(random.Random(5), passes=3)
    second.shuffle(random.Random(5), passes=3)
    assert [c.card_id for c in first] == [c.card_id for c in second]
    assert all(c.deck is first for c in first)

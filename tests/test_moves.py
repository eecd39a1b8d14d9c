import pathlib
import sys

import pytest

ROOT = pathlib.Path(__file__).resolve().parents[1]
if str(ROOT) not in sys.path:
    sys.path.insert(0, str(ROOT))

from freecell.cards import build_cards
from freecell.deck import Deck, DeckRole
from freecell.errors import InvariantError, MoveStateError
from freecell.move import MoveKind, MultiMove, SingleMove, StackMove, SwapMove


def _decks(*sizes):
    cards = iter(build_cards(2))
    decks = []
    for idx, size in enumerate(sizes):
        deck = Deck(DeckRole.PLAY, idx)
        for _ in range(size):
            card = next(cards)
            card.face_up = True
            deck.push(card)
        decks.append(deck)
    return decks


def _layout(*decks):
    return [[(c.card_id, c.face_up, c.draggable) for c in deck] for deck in decks]


def test_single_move_round_trip_restores_flags():
    source, target = _decks(3, 1)
    card = source.cards[1]
    card.draggable = True
    before = _layout(source, target)

    move = SingleMove(card, target, face_up=False)
    move.execute()
    assert move.kind == MoveKind.SINGLE
    assert target.top_card is card
    assert card.face_up is False
    assert move.source is source and move.target is target

    card.draggable = False
    move.undo()
    assert _layout(source, target) == before
    assert card.deck is source


def test_single_move_relocates_inside_a_deck():
    (deck,) = _decks(4)
    before = _layout(deck)
    card = deck.cards[2]
    move = SingleMove(card, deck, index=1)
    move.execute()
    assert deck.index_of(card) == 1
    move.undo()
    assert _layout(deck) == before


def test_stack_move_keeps_run_order():
    source, target = _decks(5, 2)
    run = source.cards[2:]
    before = _layout(source, target)

    move = StackMove(source, target, run)
    move.execute()
    assert target.cards[2:] == run
    assert len(source) == 2
    assert all(card.deck is target for card in run)

    move.undo()
    assert _layout(source, target) == before


def test_stack_move_requires_the_top_run():
    source, target = _decks(5, 0)
    move = StackMove(source, target, source.cards[1:3])
    with pytest.raises(InvariantError):
        move.execute()
    assert len(source) == 5
    assert move.executed is False


def test_swap_move_is_one_undo_unit():
    hand, junk, refill = _decks(2, 0, 1)
    before = _layout(hand, junk, refill)
    discard = SingleMove(hand.top_card, junk)
    draw = SingleMove(refill.top_card, hand)
    swap = SwapMove(discard, draw)
    swap.execute()
    assert len(junk) == 1 and len(refill) == 0 and len(hand) == 2
    assert len(swap.cards) == 2
    swap.undo()
    assert _layout(hand, junk, refill) == before


def test_multi_move_undoes_in_reverse_order():
    first, second = _decks(3, 3)
    before = _layout(first, second)
    batch = MultiMove()
    batch.execute()
    batch.perform(SingleMove(first.top_card, second))
    batch.perform(SingleMove(second.top_card, first, index=0))
    assert len(batch) == 2
    batch.undo()
    assert _layout(first, second) == before
    batch.execute()
    assert first.bottom_card is batch.moves[1].card


def test_multi_move_cannot_grow_before_execution():
    first, second = _decks(1, 0)
    with pytest.raises(MoveStateError):
        MultiMove().perform(SingleMove(first.top_card, second))
    assert len(first) == 1


def test_execute_and_undo_must_alternate():
    source, target = _decks(1, 0)
    move = SingleMove(source.top_card, target)
    with pytest.raises(MoveStateError):
        move.undo()
    move.execute()
    with pytest.raises(MoveStateError):
        move.execute()
    move.undo()
    with pytest.raises(MoveStateError):
        move.undo()


def test_undo_detects_a_card_that_moved_away():
    source, target, other = _decks(1, 0, 0)
    card = source.top_card
    move = SingleMove(card, target)
    move.execute()
    SingleMove(card, other).execute()
    with pytest.raises(InvariantError):
        move.undo()


def test_undo_detects_a_target_that_shrank():
    source, target = _decks(1, 1)
    card = source.top_card
    move = SingleMove(card, target)
    move.execute()
    target.pop_from(0)
    with pytest.raises(InvariantError):
        move.undo()
    assert target.top_card is card


def _blocked_pair():
    """A move that can run, followed by one that was already executed."""
    first, second, third = _decks(2, 0, 0)
    bottom, top = first.cards
    done = SingleMove(bottom, third)
    done.execute()
    return (first, second, third), SingleMove(top, second), done


def test_failed_batch_leaves_decks_untouched():
    decks, ready, done = _blocked_pair()
    before = _layout(*decks)
    batch = MultiMove([ready, done])
    with pytest.raises(MoveStateError):
        batch.execute()
    assert _layout(*decks) == before
    assert not ready.executed
    assert not batch.executed


def test_failed_swap_leaves_decks_untouched():
    decks, ready, done = _blocked_pair()
    before = _layout(*decks)
    swap = SwapMove(ready, done)
    with pytest.raises(MoveStateError):
        swap.execute()
    assert _layout(*decks) == before
    assert not ready.executed
    assert not swap.executed

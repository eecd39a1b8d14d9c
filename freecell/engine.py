from __future__ import annotations

import logging
from itertools import chain
from typing import Dict, Iterable, List, Optional, Tuple

from .cards import CARDS_PER_SUIT, Card, Rank
from .deck import Deck, DeckRole
from .errors import InvariantError
from .events import DraggableChanged, EngineEvent, EventBus, GameStarted, GameWon, Listener, MoveExecuted, MoveUndone
from .history import MoveLog
from .move import Move, SingleMove, StackMove
from .rules import GameConfig
from .state import GameState, new_game

logger = logging.getLogger(__name__)


def movable_stack_limit(free_cells_empty: int, play_stacks_empty: int, target_is_empty_play: bool = False) -> int:
    """How many cards may move together (the FreeCell "power move").

    Each empty free cell carries one extra card; each empty play stack doubles
    the total, except the empty stack the run is headed for.
    """
    if free_cells_empty < 0 or play_stacks_empty < 0:
        raise ValueError("empty deck counts cannot be negative")
    if target_is_empty_play and play_stacks_empty == 0:
        raise ValueError("target is an empty play stack but no play stack is empty")
    return (1 + free_cells_empty) * 2 ** (play_stacks_empty - (1 if target_is_empty_play else 0))


def is_safe_to_move(card: Card, play_stacks: Iterable[Deck], free_cells: Iterable[Deck]) -> bool:
    """False while a card one rank lower and of the other colour is still out.

    That card may still need ``card`` as a landing spot.
    """
    rank = card.rank - 1
    color = card.color.opposite()
    return not any(deck.has(rank, color) for deck in chain(play_stacks, free_cells))


def goal_for(card: Card, goals: Iterable[Deck]) -> Optional[Deck]:
    for goal in goals:
        top = goal.top_card
        if top is None and card.rank == Rank.ACE:
            return goal
        if top is not None and card.follows_on_goal(top):
            return goal
    return None


def _count_empty(decks: Iterable[Deck]) -> int:
    return sum(1 for deck in decks if not deck.has_cards)


class RuleEngine:
    """Validates and performs moves for one game at a time.

    Every state change goes through :meth:`do_move` (or :meth:`undo`), which
    keeps the move log, the draggable flags and win detection in step.
    """

    def __init__(self, listener: Optional[Listener] = None) -> None:
        self.events = EventBus(listener)
        self.log = MoveLog()
        self._state: Optional[GameState] = None
        self.has_won = False
        self._autocomplete_running = False
        self._replay_forward = False

    # --- game lifecycle ---------------------------------------------------------

    @property
    def state(self) -> GameState:
        self._ensure_started()
        return self._state

    def _ensure_started(self) -> None:
        if self._state is None:
            raise InvariantError("no game in progress; call new_game first")

    def new_game(self, config: Optional[GameConfig] = None) -> GameState:
        state = new_game(config)
        self._state = state
        self.log.clear()
        self.events.clear()
        self.has_won = False
        self._autocomplete_running = False
        self._replay_forward = False
        self.events.emit(GameStarted(state.config))
        self.update_draggable()
        return state

    def drain_events(self) -> List[EngineEvent]:
        return self.events.drain()

    # --- legality ---------------------------------------------------------------

    def movable_stack_limit(self, is_target_empty_play: bool = False) -> int:
        state = self.state
        return movable_stack_limit(
            _count_empty(state.free_cells),
            _count_empty(state.play_stacks),
            is_target_empty_play,
        )

    def _in_game(self, deck: Deck) -> bool:
        return any(d is deck for d in self.state.decks())

    def _plan_stack_move(self, card: Card, target: Deck) -> Tuple[Optional[Move], str]:
        source = card.deck
        start = source.index_of(card)
        size = len(source) - start
        limit = self.movable_stack_limit(target.role == DeckRole.PLAY and not target.has_cards)
        if size > limit:
            return None, f"{size} cards cannot move together, the limit is {limit}"
        return StackMove(source, target, source.cards[start:]), ""

    def _plan_drag(self, card: Card, target: Deck) -> Tuple[Optional[Move], str]:
        if self.has_won:
            return None, "game already finished"
        source = card.deck
        if source is None:
            return None, "card is not in play"
        if not self._in_game(source):
            return None, "card is not part of this game"
        if not self._in_game(target):
            return None, "target deck is not part of this game"
        if source is target:
            return None, "card is already on that deck"
        if not card.draggable:
            return None, "card is not draggable"

        is_single = source.top_card is card
        if target.role == DeckRole.FREE:
            if is_single and not target.has_cards:
                return SingleMove(card, target), ""
            return None, "free cells take one card and must be empty"

        if target.role == DeckRole.PLAY:
            top = target.top_card
            if top is None or card.can_stack_on(top):
                return self._plan_stack_move(card, target)
            return None, f"{card.short()} cannot go on {top.short()}"

        if target.role == DeckRole.GOAL:
            if not is_single:
                return None, "only single cards go to a goal"
            top = target.top_card
            if top is None and card.rank == Rank.ACE:
                return SingleMove(card, target), ""
            if top is not None and card.follows_on_goal(top):
                return SingleMove(card, target), ""
            return None, f"{card.short()} does not continue {target.name}"

        return None, f"cannot drop cards on a {target.role.value} deck"

    def check_drag(self, card: Card, target: Deck) -> Tuple[bool, str]:
        move, reason = self._plan_drag(card, target)
        return move is not None, reason

    # --- player actions ---------------------------------------------------------

    def card_drag(self, card: Card, target: Deck) -> bool:
        move, reason = self._plan_drag(card, target)
        if move is None:
            logger.debug("rejected %s -> %s: %s", card.short(), target.name, reason)
            return False
        self.do_move(move)
        return True

    def on_double_click(self, card: Card) -> bool:
        """Send ``card`` to the best place it can go.

        Tries a goal, then a play stack it continues, then an empty free cell,
        then an empty play stack.
        """
        state = self.state
        source = card.deck
        if self.has_won or source is None or not self._in_game(source) or not card.draggable:
            return False
        is_top = source.top_card is card

        if is_top:
            goal = goal_for(card, (g for g in state.goals if g is not source))
            if goal is not None:
                self.do_move(SingleMove(card, goal))
                return True

        for deck in state.play_stacks:
            if deck is not source and deck.has_cards and card.can_stack_on(deck.top_card):
                move, _ = self._plan_stack_move(card, deck)
                if move is not None:
                    self.do_move(move)
                    return True

        if is_top and source.role != DeckRole.FREE:
            for deck in state.free_cells:
                if not deck.has_cards:
                    self.do_move(SingleMove(card, deck))
                    return True

        for deck in state.play_stacks:
            if not deck.has_cards:
                move, _ = self._plan_stack_move(card, deck)
                if move is not None:
                    self.do_move(move)
                    return True
        return False

    def do_move(self, move: Move, replaying: bool = False) -> None:
        """Run ``move`` and bring everything derived from the decks up to date."""
        self._ensure_started()
        move.execute()
        self.log.record(move, replaying=replaying)
        logger.debug("move %s%s", move.describe(), " (replay)" if replaying else "")
        self.events.emit(MoveExecuted(move, replayed=replaying))
        self.update_draggable()
        if self.has_won or self._check_win():
            return
        if not replaying and not self._autocomplete_running:
            self.autocomplete(only_safe=True)

    def _step_back(self) -> Optional[Move]:
        move = self.log.pop_undo()
        if move is None:
            return None
        move.undo()
        self.log.push_redo(move)
        logger.debug("undo %s", move.describe())
        self.events.emit(MoveUndone(move))
        self.update_draggable()
        return move

    def undo(self) -> bool:
        self._ensure_started()
        if self._step_back() is None:
            return False
        if self.has_won and not self._all_goals_full():
            self.has_won = False
        return True

    def redo(self) -> bool:
        self._ensure_started()
        move = self.log.pop_redo()
        if move is None:
            return False
        self.do_move(move, replaying=True)
        return True

    # --- autocomplete -----------------------------------------------------------

    def _autocomplete_deck(self, deck: Deck, only_safe: bool) -> bool:
        card = deck.top_card
        if card is None:
            return False
        state = self.state
        goal = goal_for(card, state.goals)
        if goal is None:
            return False
        if only_safe and not is_safe_to_move(card, state.play_stacks, state.free_cells):
            return False
        self.do_move(SingleMove(card, goal))
        return True

    def advance_autocomplete(self, only_safe: bool = False) -> bool:
        """Run one pass over free cells then play stacks.

        At most one card per deck goes to a goal. Returns whether anything moved.
        """
        state = self.state
        moved = False
        was_running = self._autocomplete_running
        self._autocomplete_running = True
        try:
            for deck in chain(state.free_cells, state.play_stacks):
                if self.has_won:
                    break
                if self._autocomplete_deck(deck, only_safe):
                    moved = True
        finally:
            self._autocomplete_running = was_running
        return moved

    def autocomplete(self, only_safe: bool = False) -> int:
        """Repeat autocomplete passes until one moves nothing or the game is won."""
        if self._autocomplete_running:
            return 0
        before = len(self.log.history)
        self._autocomplete_running = True
        try:
            while not self.has_won and self.advance_autocomplete(only_safe):
                pass
        finally:
            self._autocomplete_running = False
        moved = len(self.log.history) - before
        if moved:
            logger.debug("autocomplete (only_safe=%s) moved %d cards", only_safe, moved)
        return moved

    # --- win --------------------------------------------------------------------

    def _all_goals_full(self) -> bool:
        return all(len(goal) == CARDS_PER_SUIT for goal in self.state.goals)

    def _check_win(self) -> bool:
        if not self._all_goals_full():
            return False
        self.has_won = True
        self._replay_forward = False
        logger.info("game won in %d moves", len(self.log.history))
        self.events.emit(GameWon(len(self.log.history)))
        return True

    def replay_step(self) -> Optional[Move]:
        """Advance the victory replay by one move.

        Rewinds the game to the deal one undo at a time, then plays it forward
        again, and so on for as long as the game stays won.
        """
        if not self.has_won:
            return None
        for _ in range(2):
            if self._replay_forward:
                move = self.log.pop_redo()
                if move is not None:
                    self.do_move(move, replaying=True)
                    return move
            else:
                move = self._step_back()
                if move is not None:
                    return move
            self._replay_forward = not self._replay_forward
        return None

    # --- draggable flags --------------------------------------------------------

    def update_draggable(self) -> None:
        """Recompute every card's draggable flag.

        Only cards whose flag actually changed get a ``DraggableChanged`` event;
        a listener that mirrors the flags must keep its previous value.
        """
        state = self.state
        limit = self.movable_stack_limit(False)
        flags: Dict[int, bool] = {}

        for stack in state.play_stacks:
            # Walk down from the top while the run stays valid and movable.
            correct = True
            count = 0
            for j in range(len(stack) - 1, -1, -1):
                card = stack.cards[j]
                flags[card.card_id] = correct and card.face_up
                if correct:
                    if j != 0:
                        below = stack.cards[j - 1]
                        if not below.face_up or not card.can_stack_on(below) or count >= limit - 1:
                            correct = False
                    count += 1

        for deck in chain(state.free_cells, state.goals):
            if deck.top_card is not None:
                flags[deck.top_card.card_id] = True

        for card in state.cards:
            new = flags.get(card.card_id, False)
            if card.draggable != new:
                old = card.draggable
                card.draggable = new
                self.events.emit(DraggableChanged(card, old, new))

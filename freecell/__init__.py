"""FreeCell / Staircase Rummy rule engine package."""

from .cards import Card, Color, Rank, Suit
from .deck import Deck, DeckRole
from .engine import RuleEngine, goal_for, is_safe_to_move, movable_stack_limit
from .errors import ConfigError, InvariantError, MoveStateError
from .history import MoveLog
from .move import Move, MoveKind, MultiMove, SingleMove, StackMove, SwapMove
from .rules import PRESETS, GameConfig
from .state import GameState, new_game

__all__ = [
    "Card",
    "Color",
    "Rank",
    "Suit",
    "Deck",
    "DeckRole",
    "RuleEngine",
    "goal_for",
    "is_safe_to_move",
    "movable_stack_limit",
    "ConfigError",
    "InvariantError",
    "MoveStateError",
    "MoveLog",
    "Move",
    "MoveKind",
    "MultiMove",
    "SingleMove",
    "StackMove",
    "SwapMove",
    "PRESETS",
    "GameConfig",
    "GameState",
    "new_game",
]

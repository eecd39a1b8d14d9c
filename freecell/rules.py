from __future__ import annotations

import math
from dataclasses import dataclass, replace
from typing import Dict

from .cards import CARDS_PER_SUIT
from .errors import ConfigError

MAX_FREE_CELLS = 6
MAX_GOAL_CELLS = 8
MAX_STACKS = 12


@dataclass(frozen=True)
class GameConfig:
    seed: int = 100
    free_cells: int = 4
    suits: int = 4
    stacks: int = 8
    difficulty: float = 0.0
    shuffle_passes: int = 3

    def deck_size(self) -> int:
        return self.suits * CARDS_PER_SUIT

    def validate(self) -> "GameConfig":
        if not 0 <= self.free_cells <= MAX_FREE_CELLS:
            raise ConfigError(f"free cells must be between 0 and {MAX_FREE_CELLS}, got {self.free_cells}")
        if not 1 <= self.suits <= MAX_GOAL_CELLS:
            raise ConfigError(f"suits must be between 1 and {MAX_GOAL_CELLS}, got {self.suits}")
        if not 1 <= self.stacks <= MAX_STACKS:
            raise ConfigError(f"stacks must be between 1 and {MAX_STACKS}, got {self.stacks}")
        if self.shuffle_passes < 1:
            raise ConfigError("at least one shuffle pass is required")
        if not math.isfinite(self.difficulty):
            raise ConfigError(f"difficulty must be finite, got {self.difficulty}")
        return self

    def bias_operations(self) -> int:
        """Number of low-card relocations the deal performs."""
        return math.ceil(abs(self.difficulty) * self.suits)

    @classmethod
    def preset(cls, name: str, **overrides) -> "GameConfig":
        try:
            base = PRESETS[name]
        except KeyError:
            raise ConfigError(f"unknown preset {name!r}; choose from {', '.join(sorted(PRESETS))}") from None
        return replace(base, **overrides)


PRESETS: Dict[str, GameConfig] = {
    "normal": GameConfig(free_cells=4, suits=4, stacks=8),
    "hard": GameConfig(free_cells=6, suits=8, stacks=12, difficulty=2.0),
    "easy": GameConfig(free_cells=1, suits=2, stacks=8, difficulty=-1.0),
    # Staircase Rummy deals two full decks onto the FreeCell layout.
    "staircase": GameConfig(free_cells=4, suits=8, stacks=8),
}

from __future__ import annotations

import argparse
import logging
from typing import List, Optional, Sequence

from .deck import Deck
from .engine import RuleEngine
from .errors import ConfigError
from .rules import PRESETS, GameConfig
from .state import GameState


def _cell(deck: Deck) -> str:
    top = deck.top_card
    return f"{top.short():>3}" if top is not None else "  ."


def format_board(state: GameState) -> str:
    lines: List[str] = []
    lines.append("free: " + " ".join(_cell(deck) for deck in state.free_cells))
    lines.append("goal: " + " ".join(_cell(deck) for deck in state.goals))
    lines.append("")
    depth = max((len(stack) for stack in state.play_stacks), default=0)
    for row in range(depth):
        cells = []
        for stack in state.play_stacks:
            cells.append(f"{str(stack.cards[row]):>3}" if row < len(stack) else "   ")
        lines.append("      " + " ".join(cells).rstrip())
    return "\n".join(lines)


def build_config(args: argparse.Namespace) -> GameConfig:
    overrides = {"seed": args.seed}
    for name in ("free_cells", "suits", "stacks", "difficulty"):
        value = getattr(args, name)
        if value is not None:
            overrides[name] = value
    return GameConfig.preset(args.preset, **overrides)


def run_game(config: GameConfig, autocomplete: bool = False) -> RuleEngine:
    engine = RuleEngine()
    engine.new_game(config)
    if autocomplete:
        engine.autocomplete(only_safe=False)
    return engine


def main(argv: Optional[Sequence[str]] = None) -> int:
    parser = argparse.ArgumentParser(description="Deal a FreeCell game and print the layout.")
    parser.add_argument("--seed", type=int, default=100, help="Random seed for reproducible deals.")
    parser.add_argument("--preset", choices=sorted(PRESETS), default="normal", help="Starting configuration.")
    parser.add_argument("--cells", dest="free_cells", type=int, default=None, help="Number of free cells.")
    parser.add_argument("--suits", type=int, default=None, help="Number of suits (one goal deck each).")
    parser.add_argument("--stacks", type=int, default=None, help="Number of play stacks.")
    parser.add_argument("--difficulty", type=float, default=None, help="Bury (>0) or raise (<0) low cards.")
    parser.add_argument("--autocomplete", action="store_true", help="Send every playable card to the goals.")
    parser.add_argument("-v", "--verbose", action="store_true", help="Log every move.")
    args = parser.parse_args(argv)

    logging.basicConfig(level=logging.DEBUG if args.verbose else logging.INFO, format="%(levelname)s %(name)s: %(message)s")

    try:
        config = build_config(args)
        engine = run_game(config, autocomplete=args.autocomplete)
    except ConfigError as exc:
        parser.error(str(exc))

    state = engine.state
    print(format_board(state))
    print()
    print(f"Seed {config.seed}: {state.goal_count()}/{config.deck_size()} cards on goals, {len(engine.log.history)} moves")
    if engine.has_won:
        print("Won")
    return 0


if __name__ == "__main__":
    raise SystemExit(main())

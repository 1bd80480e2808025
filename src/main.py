"""Entry point for the Tenfall sum-to-ten puzzle.

Runs a headless session that plays the suggested hint each time the board
settles, printing the board and the final outcome.
"""
import argparse
import logging
import random
import sys

from tenfall.components.cascade_state import CascadePhase
from tenfall.config import default_config, load_config
from tenfall.constants import TICK_DT
from tenfall.events.bus import EVENT_GRID_UNSOLVABLE, EVENT_SOLVE_SCORED
from tenfall.exceptions import ConfigError
from tenfall.game import TenfallGame
from tenfall.systems.board_ops import format_board
from tenfall.utils.logger import configure_logging

logger = logging.getLogger(__name__)


def parse_args(argv=None) -> argparse.Namespace:
    parser = argparse.ArgumentParser(description="Play a headless Tenfall session")
    parser.add_argument("--difficulty", default=None, help="difficulty tier (easy, normal, hard)")
    parser.add_argument("--config", default=None, help="path to a YAML game config")
    parser.add_argument("--seed", type=int, default=None, help="random seed for tile spawns")
    parser.add_argument("--moves", type=int, default=50, help="maximum number of swaps to play")
    parser.add_argument("--think-time", type=float, default=1.0, help="seconds of session clock spent per move")
    parser.add_argument("--verbose", "-v", action="store_true", help="enable debug logging")
    return parser.parse_args(argv)


def play(game: TenfallGame, moves: int, think_time: float) -> None:
    """Swap along the current hint until the session ends or no hint remains."""
    game.settle()
    for _ in range(moves):
        if not game.session.active:
            break
        hint = game.request_hint()
        if hint is None:
            # Burn clock until the session ends; nothing useful to swap.
            game.tick(think_time)
            continue
        game.request_swap(hint.origin, hint.target)
        game.settle()
        ticks = max(1, int(think_time / TICK_DT))
        for _ in range(ticks):
            game.tick(TICK_DT)
            if not game.session.active:
                break
    # Run the remaining clock down so the session resolves.
    while game.session.active and game.settle() is CascadePhase.IDLE:
        game.tick(1.0)


def _log_score(sender, **kwargs):
    if kwargs.get("delta"):
        logger.info("+%d -> %d", kwargs["delta"], kwargs["total"])


def main(argv=None) -> int:
    args = parse_args(argv)
    configure_logging(logging.DEBUG if args.verbose else logging.INFO)
    try:
        config = load_config(args.config) if args.config else default_config()
    except (ConfigError, FileNotFoundError) as exc:
        logger.error("Could not load config: %s", exc)
        return 2

    rng = random.Random(args.seed) if args.seed is not None else None
    game = TenfallGame(config, rng=rng)
    game.event_bus.subscribe(EVENT_SOLVE_SCORED, _log_score)
    game.event_bus.subscribe(EVENT_GRID_UNSOLVABLE, lambda sender, **k: logger.info("No solution left, new board"))

    if not game.start_new_session(args.difficulty):
        logger.error("Could not start a session with difficulty %r", args.difficulty)
        return 2
    print(format_board(game.world))
    play(game, args.moves, args.think_time)
    print(format_board(game.world))
    outcome = game.session.outcome
    print(f"{outcome.name if outcome else 'UNFINISHED'}: {game.score} points")
    return 0


if __name__ == "__main__":
    sys.exit(main())

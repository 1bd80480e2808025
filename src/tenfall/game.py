"""Headless host that wires the world, event bus and systems together."""
from __future__ import annotations

import logging
import random
from typing import Optional

from tenfall.components.cascade_state import CascadePhase
from tenfall.config import GameConfig, default_config
from tenfall.constants import TICK_DT
from tenfall.events.bus import EventBus, EVENT_PRESENTATION_HOLD, EVENT_TICK
from tenfall.systems import board_ops
from tenfall.systems.board import BoardSystem
from tenfall.systems.cascade import CascadeSystem
from tenfall.systems.hint import Direction, HintMove, HintSystem
from tenfall.systems.match import scan_for_first_match
from tenfall.systems.scoring import ScoringSystem
from tenfall.systems.session import SessionSystem
from tenfall.systems.solvability import has_valid_moves
from tenfall.world import create_world

logger = logging.getLogger(__name__)

Position = board_ops.Position


class TenfallGame:
    """One board, one session at a time.

    Construction builds the default difficulty's board but does not start the
    clock; call ``start_new_session`` to begin playing.
    """

    def __init__(
        self,
        config: GameConfig | None = None,
        *,
        event_bus: EventBus | None = None,
        rng: random.Random | None = None,
    ):
        self.config = config or default_config()
        self.event_bus = event_bus or EventBus()
        self.world = create_world(self.event_bus, rng=rng)
        target = self.config.target_sum
        tier = self.config.difficulty()

        self.board_system = BoardSystem(
            self.world,
            self.event_bus,
            tier.width,
            tier.height,
            max_value=tier.max_value,
            spawn_weights=tier.spawn_weights,
        )
        self.cascade_system = CascadeSystem(
            self.world,
            self.event_bus,
            detector=lambda world: scan_for_first_match(world, target),
            viability_check=lambda world: has_valid_moves(world, target),
            reset_delay=self.config.unsolvable_reset_delay,
        )
        self.scoring_system = ScoringSystem(self.world, self.event_bus, self.config.scoring)
        self.hint_system = HintSystem(
            self.world,
            self.event_bus,
            hint_delay=self.config.hint_delay,
            repeat_interval=self.config.hint_repeat_interval,
            target=target,
        )
        self.session_system = SessionSystem(
            self.world,
            self.event_bus,
            board_system=self.board_system,
            cascade_system=self.cascade_system,
            scoring_system=self.scoring_system,
            config=self.config,
        )

    # ------------------------------------------------------------------
    # Commands
    # ------------------------------------------------------------------

    def start_new_session(self, difficulty: Optional[str] = None) -> bool:
        return self.session_system.start_session(difficulty)

    def request_swap(self, a: Position, b: Position) -> bool:
        return self.board_system.request_swap(a, b)

    def swipe(self, origin: Position, direction: Direction) -> bool:
        return self.board_system.swipe(origin, direction)

    def request_hint(self) -> HintMove | None:
        return self.hint_system.request_hint()

    def set_presentation_hold(self, active: bool) -> None:
        self.event_bus.emit(EVENT_PRESENTATION_HOLD, active=active)

    def tick(self, dt: float = TICK_DT) -> None:
        self.event_bus.emit(EVENT_TICK, dt=dt)

    def settle(self, max_ticks: int = 10_000) -> CascadePhase:
        """Tick with zero elapsed time until the cascade is idle again.

        The unsolvable reset delay is skipped so the board regenerates at once.
        Session and multiplier clocks do not move.
        """
        phase = self.cascade_system.run_until_idle(max_ticks)
        # Zero-length tick so listeners that wait for an idle board (win grace) can react.
        self.tick(0.0)
        return phase

    # ------------------------------------------------------------------
    # Queries
    # ------------------------------------------------------------------

    @property
    def score(self) -> int:
        return self.scoring_system.state.score

    @property
    def phase(self) -> CascadePhase:
        return self.cascade_system.phase

    @property
    def session(self):
        return self.session_system.state

    def value_at(self, x: int, y: int) -> Optional[int]:
        return board_ops.get_value(self.world, x, y)

    def load_values(self, rows) -> None:
        """Overwrite the board with ``rows[y][x]``; None marks an empty cell."""
        board_ops.load_values(self.world, rows)

    def render(self) -> str:
        return board_ops.format_board(self.world)

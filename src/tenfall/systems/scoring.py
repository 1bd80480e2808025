import logging
import math

from esper import World

from tenfall.components.score_state import ScoreState
from tenfall.config import ScoringConfig
from tenfall.events.bus import (
    EventBus,
    EVENT_LINE_SOLVED,
    EVENT_MULTIPLIER_CHANGED,
    EVENT_SOLVE_SCORED,
    EVENT_TICK,
    EVENT_WIN_THRESHOLD_REACHED,
)
from tenfall.utils.state import get_or_create_score_state, session_running, timers_paused

logger = logging.getLogger(__name__)


def round_half_up(value: float) -> int:
    return int(math.floor(value + 0.5))


class ScoringSystem:
    """Streak and multiplier state machine fed by line solves.

    Solve 1 awards the base score. Solve 2 awards the base score and opens the
    multiplier window. Every later solve inside the window awards the
    multiplied base plus the whole seconds left on the timer, then raises the
    multiplier and refills the timer. The window drains on ticks while no
    cascade is running; a lone solve that is not followed up within the streak
    timeout is forgotten.
    """

    def __init__(self, world: World, event_bus: EventBus, config: ScoringConfig | None = None):
        self.world = world
        self.event_bus = event_bus
        self.config = config or ScoringConfig()
        get_or_create_score_state(world)
        self.event_bus.subscribe(EVENT_LINE_SOLVED, self.on_line_solved)
        self.event_bus.subscribe(EVENT_TICK, self.on_tick)

    @property
    def state(self) -> ScoreState:
        return get_or_create_score_state(self.world)

    def reset(self, config: ScoringConfig | None = None) -> None:
        if config is not None:
            self.config = config
        state = self.state
        state.score = 0
        state.solve_streak_count = 0
        state.multiplier = 1.0
        state.multiplier_timer = 0.0
        state.multiplier_active = False
        state.idle_since_last_solve = 0.0
        state.win_signalled = False
        self.event_bus.emit(EVENT_SOLVE_SCORED, total=0, delta=0)
        self._emit_multiplier(state)

    def on_line_solved(self, sender, **kwargs):
        self.register_solve()

    def on_tick(self, sender, **kwargs):
        if timers_paused(self.world) or not session_running(self.world):
            return
        self.advance(kwargs.get('dt', 0.0))

    def register_solve(self) -> int:
        """Apply one solve to the streak and return the points awarded."""
        cfg = self.config
        state = self.state
        state.solve_streak_count += 1
        state.idle_since_last_solve = 0.0

        if state.solve_streak_count == 1:
            award = cfg.base_score
        elif state.solve_streak_count == 2:
            award = cfg.base_score
            state.multiplier_active = True
            state.multiplier = cfg.starting_multiplier
            state.multiplier_timer = cfg.multiplier_duration
            self._emit_multiplier(state)
        else:
            bonus = int(math.floor(state.multiplier_timer))
            award = round_half_up(cfg.base_score * state.multiplier) + bonus
            state.multiplier += cfg.multiplier_increment
            state.multiplier_timer = cfg.multiplier_duration
            self._emit_multiplier(state)

        state.score += award
        logger.debug(
            "+%d (streak %d, x%.2f) total %d", award, state.solve_streak_count, state.multiplier, state.score
        )
        self.event_bus.emit(EVENT_SOLVE_SCORED, total=state.score, delta=award)
        if state.score >= cfg.win_score and not state.win_signalled:
            state.win_signalled = True
            self.event_bus.emit(EVENT_WIN_THRESHOLD_REACHED, score=state.score)
        return award

    def advance(self, dt: float) -> None:
        """Drain the multiplier window or age a pending single solve by ``dt`` seconds."""
        cfg = self.config
        state = self.state
        if state.multiplier_active:
            state.multiplier_timer -= cfg.drain_rate * dt
            if state.multiplier_timer <= 0:
                state.multiplier_timer = 0.0
                state.multiplier = 1.0
                state.multiplier_active = False
                state.solve_streak_count = 0
                logger.debug("Multiplier window expired")
            self._emit_multiplier(state)
            return
        if state.solve_streak_count > 0:
            state.idle_since_last_solve += dt
            if state.idle_since_last_solve >= cfg.streak_timeout:
                state.solve_streak_count = 0
                state.idle_since_last_solve = 0.0

    def _emit_multiplier(self, state: ScoreState) -> None:
        self.event_bus.emit(
            EVENT_MULTIPLIER_CHANGED,
            active=state.multiplier_active,
            multiplier=state.multiplier,
            timer=state.multiplier_timer,
        )

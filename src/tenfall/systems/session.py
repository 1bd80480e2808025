"""Session coordinator: difficulty selection, session clock and win/lose resolution."""
from __future__ import annotations

import logging

from esper import World

from tenfall.components.cascade_state import CascadePhase
from tenfall.components.session_state import SessionOutcome, SessionState
from tenfall.config import GameConfig
from tenfall.events.bus import (
    EventBus,
    EVENT_GAME_LOST,
    EVENT_GAME_WON,
    EVENT_SESSION_START_REQUEST,
    EVENT_SESSION_STARTED,
    EVENT_SESSION_TIMER_CHANGED,
    EVENT_TICK,
    EVENT_WIN_THRESHOLD_REACHED,
)
from tenfall.systems.board import BoardSystem
from tenfall.systems.cascade import CascadeSystem
from tenfall.systems.scoring import ScoringSystem
from tenfall.utils.state import get_or_create_session_state, timers_paused

logger = logging.getLogger(__name__)


class SessionSystem:
    """Starts sessions and ends them on the clock or after a reached win score."""

    def __init__(
        self,
        world: World,
        event_bus: EventBus,
        *,
        board_system: BoardSystem,
        cascade_system: CascadeSystem,
        scoring_system: ScoringSystem,
        config: GameConfig,
    ) -> None:
        self.world = world
        self.event_bus = event_bus
        self.board_system = board_system
        self.cascade_system = cascade_system
        self.scoring_system = scoring_system
        self.config = config
        get_or_create_session_state(world)

        self.event_bus.subscribe(EVENT_SESSION_START_REQUEST, self._on_start_request)
        self.event_bus.subscribe(EVENT_WIN_THRESHOLD_REACHED, self._on_win_threshold)
        self.event_bus.subscribe(EVENT_TICK, self._on_tick)

    @property
    def state(self) -> SessionState:
        return get_or_create_session_state(self.world)

    def start_session(self, difficulty: str | None = None) -> bool:
        """Build a fresh board for ``difficulty`` and start the clock.

        Rejected while a cascade is resolving or settling; a failed cascade
        does not block a restart.
        """
        phase = self.cascade_system.phase
        if phase not in (CascadePhase.IDLE, CascadePhase.ERROR):
            logger.info("Session start rejected: cascade %s", phase.name)
            return False
        name = difficulty or self.config.default_difficulty
        if name not in self.config.difficulties:
            logger.warning("Session start rejected: unknown difficulty %r", name)
            return False
        tier = self.config.difficulties[name]

        self.cascade_system.reset()
        self.board_system.rebuild(
            tier.width, tier.height, max_value=tier.max_value, spawn_weights=tier.spawn_weights
        )
        self.scoring_system.reset(self.config.scoring)

        state = self.state
        state.difficulty = name
        state.remaining = self.config.session_duration
        state.active = True
        state.outcome = None
        state.win_countdown = None
        logger.info("Session started: %s (%dx%d)", name, tier.width, tier.height)
        self.event_bus.emit(EVENT_SESSION_STARTED, difficulty=name, width=tier.width, height=tier.height)
        self.event_bus.emit(EVENT_SESSION_TIMER_CHANGED, remaining=state.remaining)
        # Matches present on the fresh board resolve (and score) straight away.
        self.cascade_system.start(reason="session_start")
        return True

    # ------------------------------------------------------------------
    # Event handlers
    # ------------------------------------------------------------------

    def _on_start_request(self, sender, **payload) -> None:
        self.start_session(payload.get("difficulty"))

    def _on_win_threshold(self, sender, **payload) -> None:
        state = self.state
        if not state.active or state.win_countdown is not None:
            return
        state.win_countdown = self.config.scoring.win_grace_period

    def _on_tick(self, sender, **payload) -> None:
        state = self.state
        if not state.active:
            return
        dt = payload.get("dt", 0.0)

        if state.win_countdown is not None:
            state.win_countdown = max(0.0, state.win_countdown - dt)
            if state.win_countdown <= 0 and self.cascade_system.is_idle():
                self._finish(SessionOutcome.WON)
                return

        if timers_paused(self.world):
            return
        state.remaining = max(0.0, state.remaining - dt)
        self.event_bus.emit(EVENT_SESSION_TIMER_CHANGED, remaining=state.remaining)
        if state.remaining <= 0:
            score = self.scoring_system.state.score
            won = score >= self.config.scoring.win_score
            self._finish(SessionOutcome.WON if won else SessionOutcome.LOST)

    def _finish(self, outcome: SessionOutcome) -> None:
        state = self.state
        state.active = False
        state.outcome = outcome
        state.win_countdown = None
        score = self.scoring_system.state.score
        logger.info("Session over: %s with %d points", outcome.name, score)
        if outcome is SessionOutcome.WON:
            self.event_bus.emit(EVENT_GAME_WON, score=score)
        else:
            self.event_bus.emit(EVENT_GAME_LOST, score=score)

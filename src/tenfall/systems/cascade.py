import logging
from typing import Callable, Optional

from esper import World

from tenfall.components.cascade_state import CascadePhase, CascadeState
from tenfall.constants import UNSOLVABLE_RESET_DELAY
from tenfall.events.bus import (
    EventBus,
    EVENT_BOARD_REGENERATED,
    EVENT_CASCADE_ENDED,
    EVENT_CASCADE_ERROR,
    EVENT_CASCADE_STARTED,
    EVENT_GRAVITY_APPLIED,
    EVENT_GRID_UNSOLVABLE,
    EVENT_LINE_CLEARED,
    EVENT_LINE_SOLVED,
    EVENT_PRESENTATION_HOLD,
    EVENT_REFILL_COMPLETED,
    EVENT_TICK,
    EVENT_TILE_SWAPPED,
)
from tenfall.exceptions import BoardNotFoundError
from tenfall.systems.board_ops import (
    apply_gravity,
    clear_cells,
    format_board,
    get_board,
    refill_empty_cells,
    respawn_full_board,
)
from tenfall.systems.match import MatchResult, scan_for_first_match
from tenfall.systems.solvability import has_valid_moves
from tenfall.utils.state import get_or_create_cascade_state

logger = logging.getLogger(__name__)

Detector = Callable[[World], Optional[MatchResult]]
ViabilityCheck = Callable[[World], bool]


class CascadeSystem:
    """Resolves matches one phase per step until the board is stable.

    Flow:
      - A swap (or session start) moves the phase from IDLE to DETECT.
      - DETECT asks the detector for a single line. A hit goes to CLEAR, which
        emits the cleared line and one solve, then DROP (gravity) and REFILL,
        and back to DETECT. No hit goes to SETTLING.
      - SETTLING returns to IDLE when the board is still viable. Otherwise the
        grid is reported unsolvable, UNSOLVABLE waits out the reset delay,
        the whole board is respawned and DETECT runs again.
    Swaps arriving while the phase is not IDLE are rejected by BoardSystem.
    """

    def __init__(
        self,
        world: World,
        event_bus: EventBus,
        *,
        detector: Optional[Detector] = scan_for_first_match,
        viability_check: ViabilityCheck = has_valid_moves,
        reset_delay: float = UNSOLVABLE_RESET_DELAY,
        step_on_tick: bool = True,
    ):
        self.world = world
        self.event_bus = event_bus
        self.detector = detector
        self.viability_check = viability_check
        self.reset_delay = reset_delay
        self._handlers = {
            CascadePhase.DETECT: self._detect,
            CascadePhase.CLEAR: self._clear,
            CascadePhase.DROP: self._drop,
            CascadePhase.REFILL: self._refill,
            CascadePhase.SETTLING: self._settle,
            CascadePhase.UNSOLVABLE: self._await_reset,
        }
        get_or_create_cascade_state(world)
        self.event_bus.subscribe(EVENT_TILE_SWAPPED, self.on_tile_swapped)
        self.event_bus.subscribe(EVENT_PRESENTATION_HOLD, self.on_presentation_hold)
        if step_on_tick:
            self.event_bus.subscribe(EVENT_TICK, self.on_tick)

    @property
    def state(self) -> CascadeState:
        return get_or_create_cascade_state(self.world)

    @property
    def phase(self) -> CascadePhase:
        return self.state.phase

    def is_idle(self) -> bool:
        return self.state.idle

    def start(self, reason: str = "swap") -> bool:
        """Begin resolving from IDLE; returns False when a cascade is already running."""
        state = self.state
        if not state.idle:
            return False
        state.depth = 0
        state.pending_match = None
        state.error_reason = None
        state.phase = CascadePhase.DETECT
        self.event_bus.emit(EVENT_CASCADE_STARTED, reason=reason)
        return True

    def reset(self) -> None:
        """Drop any in-flight or failed cascade and return to IDLE without events."""
        state = self.state
        state.phase = CascadePhase.IDLE
        state.depth = 0
        state.pending_match = None
        state.reset_countdown = 0.0
        state.error_reason = None

    def step(self, dt: float = 0.0) -> CascadePhase:
        """Run exactly one phase; IDLE and ERROR are no-ops and any phase failure moves to ERROR."""
        state = self.state
        handler = self._handlers.get(state.phase)
        if handler is None:
            return state.phase
        try:
            handler(state, dt)
        except BoardNotFoundError as exc:
            self._fail(state, str(exc))
        except Exception as exc:
            # Injected detector and viability callables may fail in arbitrary ways.
            logger.exception("Cascade phase %s failed", state.phase.name)
            self._fail(state, f"{type(exc).__name__}: {exc}")
        return state.phase

    def run_until_idle(self, max_steps: int = 10_000) -> CascadePhase:
        """Step without a host loop, skipping the unsolvable reset delay."""
        state = self.state
        for _ in range(max_steps):
            if state.phase in (CascadePhase.IDLE, CascadePhase.ERROR):
                break
            dt = state.reset_countdown if state.phase is CascadePhase.UNSOLVABLE else 0.0
            self.step(dt)
        else:
            logger.warning("Cascade still %s after %d steps", state.phase.name, max_steps)
        return state.phase

    # ------------------------------------------------------------------
    # Event handlers
    # ------------------------------------------------------------------

    def on_tile_swapped(self, sender, **kwargs):
        self.start(reason="swap")

    def on_tick(self, sender, **kwargs):
        self.step(kwargs.get('dt', 0.0))

    def on_presentation_hold(self, sender, **kwargs):
        self.state.presentation_hold = bool(kwargs.get('active', False))

    # ------------------------------------------------------------------
    # Phases
    # ------------------------------------------------------------------

    def _detect(self, state: CascadeState, dt: float) -> None:
        if self.detector is None:
            self._fail(state, "no match detector configured")
            return
        get_board(self.world)
        result = self.detector(self.world)
        if result is None:
            state.pending_match = None
            state.phase = CascadePhase.SETTLING
            return
        state.pending_match = result
        state.phase = CascadePhase.CLEAR

    def _clear(self, state: CascadeState, dt: float) -> None:
        result: MatchResult = state.pending_match
        positions = list(result.positions)
        self.event_bus.emit(EVENT_LINE_CLEARED, kind=result.kind, index=result.index, positions=positions)
        clear_cells(self.world, positions)
        state.depth += 1
        state.pending_match = None
        logger.debug("Solve %d: %s %d cleared (%d tiles)", state.depth, result.kind.value, result.index, len(positions))
        self.event_bus.emit(
            EVENT_LINE_SOLVED,
            kind=result.kind,
            index=result.index,
            positions=positions,
            depth=state.depth,
        )
        state.phase = CascadePhase.DROP

    def _drop(self, state: CascadeState, dt: float) -> None:
        get_board(self.world)
        moves = apply_gravity(self.world)
        self.event_bus.emit(EVENT_GRAVITY_APPLIED, moves=moves)
        state.phase = CascadePhase.REFILL

    def _refill(self, state: CascadeState, dt: float) -> None:
        new_tiles = refill_empty_cells(self.world)
        self.event_bus.emit(EVENT_REFILL_COMPLETED, new_tiles=new_tiles)
        state.phase = CascadePhase.DETECT

    def _settle(self, state: CascadeState, dt: float) -> None:
        get_board(self.world)
        if self.viability_check(self.world):
            state.phase = CascadePhase.IDLE
            logger.debug("Cascade complete after %d solve(s)\n%s", state.depth, format_board(self.world))
            self.event_bus.emit(EVENT_CASCADE_ENDED, depth=state.depth)
            return
        logger.info("Grid unsolvable, resetting in %.2fs", self.reset_delay)
        state.reset_countdown = self.reset_delay
        state.phase = CascadePhase.UNSOLVABLE
        self.event_bus.emit(EVENT_GRID_UNSOLVABLE)

    def _await_reset(self, state: CascadeState, dt: float) -> None:
        state.reset_countdown -= dt
        if state.reset_countdown > 0:
            return
        state.reset_countdown = 0.0
        positions = respawn_full_board(self.world)
        self.event_bus.emit(EVENT_BOARD_REGENERATED, positions=positions)
        state.phase = CascadePhase.DETECT

    def _fail(self, state: CascadeState, reason: str) -> None:
        logger.error("Cascade halted: %s", reason)
        state.phase = CascadePhase.ERROR
        state.error_reason = reason
        state.pending_match = None
        self.event_bus.emit(EVENT_CASCADE_ERROR, reason=reason)

from blinker import Signal
from typing import Dict

class EventBus:
    """Simple event bus leveraging blinker Signal objects."""
    def __init__(self):
        self._signals: Dict[str, Signal] = {}

    def subscribe(self, name: str, fn):
        sig = self._signals.setdefault(name, Signal(name))
        # Strong references so systems not kept in a variable still receive events.
        sig.connect(fn, weak=False)

    def unsubscribe(self, name: str, fn):
        sig = self._signals.get(name)
        if sig:
            sig.disconnect(fn)

    def emit(self, name: str, **payload):
        sig = self._signals.get(name)
        if sig:
            sig.send(self, **payload)


# ============================================================================
# SYSTEM & TIMING
# ============================================================================
EVENT_TICK = "tick"                                # payload: dt=float
EVENT_PRESENTATION_HOLD = "presentation_hold"      # payload: active=bool


# ============================================================================
# INPUT & INTERACTION
# ============================================================================
EVENT_TILE_CLICK = "tile_click"                    # payload: x, y
EVENT_TILE_SWIPE = "tile_swipe"                    # payload: x, y, direction=Direction
EVENT_TILE_SELECTED = "tile_selected"              # payload: x, y
EVENT_TILE_DESELECTED = "tile_deselected"          # payload: x, y, reason=str


# ============================================================================
# TILE & BOARD MECHANICS
# ============================================================================
EVENT_SWAP_REQUEST = "swap_request"                # payload: a=(x,y), b=(x,y)
EVENT_SWAP_REJECTED = "swap_rejected"              # payload: a=(x,y), b=(x,y), reason=str
EVENT_TILE_SWAPPED = "tile_swapped"                # payload: a=(x,y), b=(x,y)
EVENT_LINE_CLEARED = "line_cleared"                # payload: kind=LineKind, index=int, positions=[(x,y),...]
EVENT_LINE_SOLVED = "line_solved"                  # payload: kind=LineKind, index=int, positions=[(x,y),...], depth=int
EVENT_GRAVITY_APPLIED = "gravity_applied"          # payload: moves=[GravityMove,...]
EVENT_REFILL_COMPLETED = "refill_completed"        # payload: new_tiles=[(x,y),...]
EVENT_CASCADE_STARTED = "cascade_started"          # payload: reason=str
EVENT_CASCADE_ENDED = "cascade_ended"              # payload: depth=int
EVENT_CASCADE_ERROR = "cascade_error"              # payload: reason=str
EVENT_GRID_UNSOLVABLE = "grid_unsolvable"          # payload: None
EVENT_BOARD_REGENERATED = "board_regenerated"      # payload: positions=[(x,y),...]


# ============================================================================
# HINTS
# ============================================================================
EVENT_HINT_SHOWN = "hint_shown"                    # payload: hint=HintMove


# ============================================================================
# SCORING
# ============================================================================
EVENT_SOLVE_SCORED = "solve_scored"                # payload: total=int, delta=int
EVENT_MULTIPLIER_CHANGED = "multiplier_changed"    # payload: active=bool, multiplier=float, timer=float
EVENT_WIN_THRESHOLD_REACHED = "win_threshold_reached"  # payload: score=int


# ============================================================================
# SESSION FLOW
# ============================================================================
EVENT_SESSION_START_REQUEST = "session_start_request"  # payload: difficulty=str
EVENT_SESSION_STARTED = "session_started"              # payload: difficulty=str, width=int, height=int
EVENT_SESSION_TIMER_CHANGED = "session_timer_changed"  # payload: remaining=float
EVENT_GAME_WON = "game_won"                            # payload: score=int
EVENT_GAME_LOST = "game_lost"                          # payload: score=int

from __future__ import annotations

import logging
from dataclasses import dataclass
from enum import Enum
from typing import Dict

from esper import World

from tenfall.components.hint_state import HintState
from tenfall.constants import HINT_DELAY, HINT_REPEAT_INTERVAL, TARGET_SUM
from tenfall.events.bus import (
    EventBus,
    EVENT_HINT_SHOWN,
    EVENT_SESSION_STARTED,
    EVENT_TICK,
    EVENT_TILE_SELECTED,
    EVENT_TILE_SWAPPED,
)
from tenfall.systems.board_ops import Position, board_dimensions, value_map
from tenfall.utils.state import get_or_create_cascade_state, get_or_create_hint_state, session_running

logger = logging.getLogger(__name__)


class Direction(Enum):
    # Declaration order is the order hints are searched in.
    RIGHT = (1, 0)
    DOWN = (0, 1)
    LEFT = (-1, 0)
    UP = (0, -1)

    @property
    def dx(self) -> int:
        return self.value[0]

    @property
    def dy(self) -> int:
        return self.value[1]

    def step(self, pos: Position) -> Position:
        return pos[0] + self.dx, pos[1] + self.dy


@dataclass(frozen=True, slots=True)
class HintMove:
    """Swap the tile at ``origin`` with its neighbour in ``direction``."""
    origin: Position
    direction: Direction

    @property
    def target(self) -> Position:
        return self.direction.step(self.origin)


def would_create_match(
    values: Dict[Position, int],
    a: Position,
    b: Position,
    width: int,
    height: int,
    target: int = TARGET_SUM,
) -> bool:
    """Check the rows and columns through ``a`` and ``b`` as if the two values were swapped."""
    val_a = values[a]
    val_b = values[b]

    def value_after_swap(pos: Position) -> int:
        if pos == a:
            return val_b
        if pos == b:
            return val_a
        return values.get(pos, 0)

    rows = {a[1], b[1]}
    cols = {a[0], b[0]}
    for y in sorted(rows):
        if sum(value_after_swap((x, y)) for x in range(width)) == target:
            return True
    for x in sorted(cols):
        if sum(value_after_swap((x, y)) for y in range(height)) == target:
            return True
    return False


def find_hint(world: World, target: int = TARGET_SUM) -> HintMove | None:
    """First adjacent swap (row-major, right/down/left/up) that would complete a line."""
    dims = board_dimensions(world)
    if not dims:
        return None
    width, height = dims
    values = value_map(world)
    for y in range(height):
        for x in range(width):
            origin = (x, y)
            if origin not in values:
                continue
            for direction in Direction:
                neighbour = direction.step(origin)
                if not (0 <= neighbour[0] < width and 0 <= neighbour[1] < height):
                    continue
                if neighbour not in values:
                    continue
                if would_create_match(values, origin, neighbour, width, height, target):
                    return HintMove(origin=origin, direction=direction)
    return None


class HintSystem:
    """Shows a hint after the player has been idle for ``hint_delay`` seconds.

    The hint repeats every ``hint_repeat_interval`` seconds until the player
    swaps or selects a tile. Idle time only accumulates while the board is
    settled and the session is running.
    """

    def __init__(
        self,
        world: World,
        event_bus: EventBus,
        *,
        hint_delay: float = HINT_DELAY,
        repeat_interval: float = HINT_REPEAT_INTERVAL,
        target: int = TARGET_SUM,
    ):
        self.world = world
        self.event_bus = event_bus
        self.hint_delay = hint_delay
        self.repeat_interval = repeat_interval
        self.target = target
        get_or_create_hint_state(world)
        self.event_bus.subscribe(EVENT_TICK, self.on_tick)
        for name in (EVENT_TILE_SWAPPED, EVENT_TILE_SELECTED, EVENT_SESSION_STARTED):
            self.event_bus.subscribe(name, self.on_player_activity)

    @property
    def state(self) -> HintState:
        return get_or_create_hint_state(self.world)

    def request_hint(self) -> HintMove | None:
        """Hint for the current board; None while a cascade is running or when no swap helps."""
        if not get_or_create_cascade_state(self.world).idle:
            return None
        return find_hint(self.world, self.target)

    def on_player_activity(self, sender, **kwargs):
        state = self.state
        state.time_since_last_move = 0.0
        state.time_since_last_hint = 0.0
        state.hint_active = False
        state.current_hint = None

    def on_tick(self, sender, **kwargs):
        if not get_or_create_cascade_state(self.world).idle or not session_running(self.world):
            return
        dt = kwargs.get('dt', 0.0)
        state = self.state
        state.time_since_last_move += dt
        if state.time_since_last_move < self.hint_delay:
            return
        if state.hint_active:
            state.time_since_last_hint += dt
            if state.time_since_last_hint < self.repeat_interval:
                return
        self._show()

    def _show(self) -> None:
        state = self.state
        hint = self.request_hint()
        state.time_since_last_hint = 0.0
        state.hint_active = hint is not None
        state.current_hint = hint
        if hint is None:
            return
        logger.debug("Hint: %s -> %s", hint.origin, hint.direction.name)
        self.event_bus.emit(EVENT_HINT_SHOWN, hint=hint)

import logging
import random
from typing import Optional, Sequence, Tuple

from esper import World

from tenfall.components.board import Board
from tenfall.components.session_state import SessionState
from tenfall.config import DEFAULT_DIFFICULTIES
from tenfall.events.bus import (
    EventBus,
    EVENT_SWAP_REJECTED,
    EVENT_SWAP_REQUEST,
    EVENT_TILE_CLICK,
    EVENT_TILE_DESELECTED,
    EVENT_TILE_SELECTED,
    EVENT_TILE_SWAPPED,
    EVENT_TILE_SWIPE,
)
from tenfall.systems import board_ops
from tenfall.systems.hint import Direction
from tenfall.utils.state import get_or_create_cascade_state

logger = logging.getLogger(__name__)

Position = Tuple[int, int]

# Used when a board is built without a difficulty.
DEFAULT_WEIGHTS = DEFAULT_DIFFICULTIES["normal"].spawn_weights


class BoardSystem:
    """Owns the cell entities and turns player input into validated swaps."""

    def __init__(
        self,
        world: World,
        event_bus: EventBus,
        width: int = 5,
        height: int = 5,
        *,
        max_value: int = 6,
        spawn_weights: Sequence[float] = DEFAULT_WEIGHTS,
        rng: random.Random | None = None,
    ):
        self.world = world
        self.event_bus = event_bus
        self._rng = rng or board_ops.world_rng(world)
        self.selected: Optional[Position] = None
        self.board_entity = board_ops.build_board(
            world, width, height, max_value=max_value, spawn_weights=spawn_weights, rng=self._rng
        )
        self.event_bus.subscribe(EVENT_TILE_CLICK, self.on_tile_click)
        self.event_bus.subscribe(EVENT_TILE_SWIPE, self.on_tile_swipe)
        self.event_bus.subscribe(EVENT_SWAP_REQUEST, self.on_swap_request)

    @property
    def board(self) -> Board:
        return self.world.component_for_entity(self.board_entity, Board)

    def rebuild(self, width: int, height: int, *, max_value: int, spawn_weights: Sequence[float]) -> None:
        """Replace the grid with a freshly spawned one of the given size."""
        self.selected = None
        self.board_entity = board_ops.build_board(
            self.world, width, height, max_value=max_value, spawn_weights=spawn_weights, rng=self._rng
        )

    @staticmethod
    def is_adjacent(a: Position, b: Position) -> bool:
        ax, ay = a
        bx, by = b
        return (abs(ax - bx) == 1 and ay == by) or (abs(ay - by) == 1 and ax == bx)

    def validate_swap(self, a: Position, b: Position) -> Optional[str]:
        """Return the rejection reason for swapping a and b, or None when the swap is legal."""
        if not self._accepting_input():
            return "busy" if not get_or_create_cascade_state(self.world).idle else "inactive_session"
        if a == b:
            return "same_cell"
        if not (board_ops.in_bounds(self.world, a) and board_ops.in_bounds(self.world, b)):
            return "out_of_bounds"
        if not self.is_adjacent(a, b):
            return "not_adjacent"
        if board_ops.get_value(self.world, *a) is None or board_ops.get_value(self.world, *b) is None:
            return "empty_cell"
        return None

    def request_swap(self, a: Position, b: Position) -> bool:
        a = (int(a[0]), int(a[1]))
        b = (int(b[0]), int(b[1]))
        reason = self.validate_swap(a, b)
        if reason is not None:
            logger.debug("Swap %s <-> %s rejected: %s", a, b, reason)
            self.event_bus.emit(EVENT_SWAP_REJECTED, a=a, b=b, reason=reason)
            return False
        board_ops.swap_values(self.world, a, b)
        self._clear_selection(reason="swapped")
        self.event_bus.emit(EVENT_TILE_SWAPPED, a=a, b=b)
        return True

    def swipe(self, origin: Position, direction: Direction) -> bool:
        return self.request_swap(origin, direction.step(origin))

    def on_swap_request(self, sender, **kwargs):
        a = kwargs.get('a')
        b = kwargs.get('b')
        if a is None or b is None:
            return
        self.request_swap(a, b)

    def on_tile_swipe(self, sender, **kwargs):
        x = kwargs.get('x')
        y = kwargs.get('y')
        direction = kwargs.get('direction')
        if x is None or y is None or not isinstance(direction, Direction):
            return
        if not self._accepting_input():
            return
        self.swipe((x, y), direction)

    def on_tile_click(self, sender, **kwargs):
        x = kwargs.get('x')
        y = kwargs.get('y')
        if x is None or y is None:
            return
        if not self._accepting_input():
            return
        pos = (x, y)
        if board_ops.get_value(self.world, x, y) is None:
            return
        if self.selected is None:
            self.selected = pos
            self.event_bus.emit(EVENT_TILE_SELECTED, x=x, y=y)
        elif self.selected == pos:
            self._clear_selection(reason="toggled")
        elif self.is_adjacent(self.selected, pos):
            src = self.selected
            self.request_swap(src, pos)
        else:
            # Not adjacent: move the selection to the new tile
            self._clear_selection(reason="reselected")
            self.selected = pos
            self.event_bus.emit(EVENT_TILE_SELECTED, x=x, y=y)

    def _clear_selection(self, reason: str) -> None:
        prev = self.selected
        if prev is None:
            return
        self.selected = None
        self.event_bus.emit(EVENT_TILE_DESELECTED, x=prev[0], y=prev[1], reason=reason)

    def _accepting_input(self) -> bool:
        if not get_or_create_cascade_state(self.world).idle:
            return False
        for _, session in self.world.get_component(SessionState):
            return session.active
        return True

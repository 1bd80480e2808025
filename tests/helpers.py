from __future__ import annotations

import random
from typing import List, Optional, Sequence, Tuple

from tenfall.events.bus import EVENT_TICK, EventBus
from tenfall.systems.board import BoardSystem, DEFAULT_WEIGHTS
from tenfall.systems.board_ops import load_values
from tenfall.world import create_world

# Viable (1+1+2+3+3) but no row or column sums to ten, and no single swap helps.
STUCK_ROWS = [
    [3, 3, 3, 3, 3],
    [3, 3, 3, 3, 3],
    [3, 3, 3, 3, 3],
    [3, 3, 3, 3, 3],
    [1, 1, 1, 1, 2],
]


def make_board(
    rows: Optional[Sequence[Sequence[Optional[int]]]] = None,
    *,
    seed: int = 1234,
    max_value: int = 6,
    spawn_weights: Sequence[float] = DEFAULT_WEIGHTS,
):
    """Bus, world and BoardSystem over a seeded world, optionally loaded with ``rows[y][x]``."""
    bus = EventBus()
    world = create_world(bus, rng=random.Random(seed))
    height = len(rows) if rows else 5
    width = len(rows[0]) if rows else 5
    board = BoardSystem(world, bus, width, height, max_value=max_value, spawn_weights=spawn_weights)
    if rows:
        load_values(world, rows)
    return bus, world, board


def record(bus: EventBus, *names: str) -> List[Tuple[str, dict]]:
    """Collect (event name, payload) pairs for the given events in emission order."""
    seen: List[Tuple[str, dict]] = []
    for name in names:
        bus.subscribe(name, lambda sender, _name=name, **payload: seen.append((_name, payload)))
    return seen


def drive_ticks(bus: EventBus, count: int = 60, dt: float = 0.02) -> None:
    for _ in range(count):
        bus.emit(EVENT_TICK, dt=dt)

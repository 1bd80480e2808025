from __future__ import annotations

import logging
import random
from dataclasses import dataclass
from typing import Dict, Iterable, List, Optional, Sequence, Tuple

from esper import World

from tenfall.components.active_switch import ActiveSwitch
from tenfall.components.board import Board
from tenfall.components.board_position import BoardPosition
from tenfall.components.tile import TileValue
from tenfall.constants import DEFAULT_SPAWN_INDEX
from tenfall.exceptions import BoardNotFoundError

logger = logging.getLogger(__name__)

Position = Tuple[int, int]


@dataclass(slots=True)
class GravityMove:
    source: Position
    target: Position
    value: int


def world_rng(world: World) -> random.Random:
    candidate = getattr(world, "random", None)
    if isinstance(candidate, random.Random):
        return candidate
    return random.Random()


def get_board(world: World) -> Board:
    for _, board in world.get_component(Board):
        return board
    raise BoardNotFoundError("Board component not found")


def board_dimensions(world: World) -> Tuple[int, int] | None:
    for _, board in world.get_component(Board):
        return board.width, board.height
    return None


def in_bounds(world: World, pos: Position) -> bool:
    dims = board_dimensions(world)
    if not dims:
        return False
    width, height = dims
    x, y = pos
    return 0 <= x < width and 0 <= y < height


def position_index(world: World) -> Dict[Position, int]:
    """Map every cell coordinate to its entity."""
    return {(pos.x, pos.y): entity for entity, pos in world.get_component(BoardPosition)}


def get_entity_at(world: World, x: int, y: int) -> int | None:
    for entity, position in world.get_component(BoardPosition):
        if position.x == x and position.y == y:
            return entity
    return None


def build_board(
    world: World,
    width: int,
    height: int,
    *,
    max_value: int,
    spawn_weights: Sequence[float],
    rng: random.Random | None = None,
) -> int:
    """Create the Board entity and one cell entity per coordinate, every cell freshly spawned."""
    destroy_board(world)
    board_entity = world.create_entity(
        Board(width=width, height=height, max_value=max_value, spawn_weights=tuple(spawn_weights))
    )
    rng = rng or world_rng(world)
    for y in range(height):
        for x in range(width):
            value = min(spawn_value(spawn_weights, rng), max_value)
            world.create_entity(BoardPosition(x=x, y=y), TileValue(value=value), ActiveSwitch(active=True))
    logger.debug("Board built: %dx%d (values 0..%d)", width, height, max_value)
    return board_entity


def destroy_board(world: World) -> None:
    """Remove the Board entity and every cell entity."""
    doomed = [entity for entity, _ in world.get_component(BoardPosition)]
    doomed.extend(entity for entity, _ in world.get_component(Board))
    for entity in doomed:
        world.delete_entity(entity, immediate=True)


def get_value(world: World, x: int, y: int) -> Optional[int]:
    """Value at (x, y), or None for an empty or out-of-bounds cell."""
    entity = get_entity_at(world, x, y)
    if entity is None:
        return None
    if not world.component_for_entity(entity, ActiveSwitch).active:
        return None
    return world.component_for_entity(entity, TileValue).value


def set_value(world: World, x: int, y: int, value: Optional[int]) -> bool:
    """Place ``value`` at (x, y); ``None`` empties the cell. Returns False when out of bounds."""
    entity = get_entity_at(world, x, y)
    if entity is None:
        return False
    switch: ActiveSwitch = world.component_for_entity(entity, ActiveSwitch)
    if value is None:
        switch.active = False
        return True
    board = get_board(world)
    if not 0 <= value <= board.max_value:
        raise ValueError(f"Tile value {value} outside 0..{board.max_value}")
    world.component_for_entity(entity, TileValue).value = value
    switch.active = True
    return True


def load_values(world: World, rows: Sequence[Sequence[Optional[int]]]) -> None:
    """Overwrite the board from row-major data (``rows[y][x]``); None marks an empty cell."""
    width, height = board_dimensions(world) or (0, 0)
    if len(rows) != height or any(len(row) != width for row in rows):
        raise ValueError(f"Expected {height} rows of {width} values")
    for y, row in enumerate(rows):
        for x, value in enumerate(row):
            set_value(world, x, y, value)


def value_map(world: World) -> Dict[Position, int]:
    """Return mapping of occupied cell positions to their values."""
    mapping: Dict[Position, int] = {}
    for entity, position in world.get_component(BoardPosition):
        try:
            switch: ActiveSwitch = world.component_for_entity(entity, ActiveSwitch)
            if not switch.active:
                continue
            tile: TileValue = world.component_for_entity(entity, TileValue)
        except KeyError:
            continue
        mapping[(position.x, position.y)] = tile.value
    return mapping


def swap_values(world: World, a: Position, b: Position) -> bool:
    """Swap the values of two occupied cells."""
    ent_a = get_entity_at(world, a[0], a[1])
    ent_b = get_entity_at(world, b[0], b[1])
    if ent_a is None or ent_b is None:
        return False
    switch_a: ActiveSwitch = world.component_for_entity(ent_a, ActiveSwitch)
    switch_b: ActiveSwitch = world.component_for_entity(ent_b, ActiveSwitch)
    if not (switch_a.active and switch_b.active):
        return False
    tile_a: TileValue = world.component_for_entity(ent_a, TileValue)
    tile_b: TileValue = world.component_for_entity(ent_b, TileValue)
    tile_a.value, tile_b.value = tile_b.value, tile_a.value
    return True


def clear_cells(world: World, positions: Iterable[Position]) -> List[Position]:
    """Empty the given cells; returns the positions that actually held a tile."""
    index = position_index(world)
    cleared: List[Position] = []
    for pos in positions:
        entity = index.get(pos)
        if entity is None:
            continue
        switch: ActiveSwitch = world.component_for_entity(entity, ActiveSwitch)
        if not switch.active:
            continue
        switch.active = False
        cleared.append(pos)
    return cleared


def spawn_value(weights: Sequence[float], rng: random.Random | None = None) -> int:
    """Draw a tile value by cumulative-distribution sampling over ``weights``.

    The roll is uniform in [0, 1); the first index whose running total covers
    it wins. When rounding (or an all-zero table) leaves the roll uncovered the
    fixed default index is returned instead.
    """
    rng = rng or random.Random()
    roll = rng.random()
    cumulative = 0.0
    for index, weight in enumerate(weights):
        cumulative += weight
        if roll <= cumulative:
            return index
    if not weights:
        return DEFAULT_SPAWN_INDEX
    return min(DEFAULT_SPAWN_INDEX, len(weights) - 1)


def compute_gravity_moves(world: World) -> List[GravityMove]:
    """Plan the downward compaction of every column, bottom cells first."""
    dims = board_dimensions(world)
    if not dims:
        return []
    width, height = dims
    values = value_map(world)
    moves: List[GravityMove] = []
    for x in range(width):
        target_y = height - 1
        for y in range(height - 1, -1, -1):
            if (x, y) not in values:
                continue
            if y != target_y:
                moves.append(GravityMove(source=(x, y), target=(x, target_y), value=values[(x, y)]))
            target_y -= 1
    return moves


def apply_gravity_moves(world: World, moves: List[GravityMove]) -> None:
    index = position_index(world)
    for move in moves:
        src_entity = index.get(move.source)
        dst_entity = index.get(move.target)
        if src_entity is None or dst_entity is None:
            continue
        src_switch: ActiveSwitch = world.component_for_entity(src_entity, ActiveSwitch)
        dst_switch: ActiveSwitch = world.component_for_entity(dst_entity, ActiveSwitch)
        if not src_switch.active:
            continue
        src_tile: TileValue = world.component_for_entity(src_entity, TileValue)
        dst_tile: TileValue = world.component_for_entity(dst_entity, TileValue)
        dst_tile.value = src_tile.value
        dst_switch.active = True
        src_switch.active = False


def apply_gravity(world: World) -> List[GravityMove]:
    moves = compute_gravity_moves(world)
    if moves:
        apply_gravity_moves(world, moves)
    return moves


def refill_empty_cells(world: World, rng: random.Random | None = None) -> List[Position]:
    """Spawn values into empty cells, column by column, top to bottom."""
    board = get_board(world)
    rng = rng or world_rng(world)
    index = position_index(world)
    spawned: List[Position] = []
    for x in range(board.width):
        for y in range(board.height):
            entity = index.get((x, y))
            if entity is None:
                continue
            switch: ActiveSwitch = world.component_for_entity(entity, ActiveSwitch)
            if switch.active:
                continue
            tile: TileValue = world.component_for_entity(entity, TileValue)
            tile.value = min(spawn_value(board.spawn_weights, rng), board.max_value)
            switch.active = True
            spawned.append((x, y))
    return spawned


def respawn_full_board(world: World, rng: random.Random | None = None) -> List[Position]:
    """Replace every cell with a freshly spawned value."""
    board = get_board(world)
    rng = rng or world_rng(world)
    index = position_index(world)
    positions: List[Position] = []
    for y in range(board.height):
        for x in range(board.width):
            entity = index.get((x, y))
            if entity is None:
                continue
            tile: TileValue = world.component_for_entity(entity, TileValue)
            tile.value = min(spawn_value(board.spawn_weights, rng), board.max_value)
            world.component_for_entity(entity, ActiveSwitch).active = True
            positions.append((x, y))
    return positions


def format_board(world: World) -> str:
    """Render the grid as text, one row per line, ``X`` for empty cells."""
    dims = board_dimensions(world)
    if not dims:
        return ""
    width, height = dims
    values = value_map(world)
    lines = []
    for y in range(height):
        cells = [str(values[(x, y)]) if (x, y) in values else "X" for x in range(width)]
        lines.append(" ".join(cells))
    return "\n".join(lines)

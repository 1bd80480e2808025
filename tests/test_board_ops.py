import random

import pytest

from tenfall.components.board import Board
from tenfall.components.board_position import BoardPosition
from tenfall.exceptions import BoardNotFoundError
from tenfall.systems import board_ops
from tenfall.systems.board_ops import (
    apply_gravity,
    clear_cells,
    format_board,
    get_value,
    refill_empty_cells,
    respawn_full_board,
    spawn_value,
    value_map,
)
from tenfall.events.bus import EventBus
from tenfall.world import create_world
from tests.helpers import make_board


class FixedRolls(random.Random):
    """Random source returning a scripted sequence of rolls."""

    def __init__(self, rolls):
        super().__init__(0)
        self._rolls = list(rolls)

    def random(self):
        return self._rolls.pop(0)


def test_build_board_creates_one_entity_per_cell():
    _, world, board = make_board()
    positions = {(p.x, p.y) for _, p in world.get_component(BoardPosition)}
    assert positions == {(x, y) for x in range(5) for y in range(5)}
    assert len(value_map(world)) == 25
    assert all(0 <= v <= 6 for v in value_map(world).values())
    assert board.board.width == 5 and board.board.height == 5


def test_rebuilding_replaces_previous_cells():
    _, world, board = make_board()
    board.rebuild(6, 6, max_value=6, spawn_weights=(0.2, 0.3, 0.25, 0.13, 0.08, 0.02, 0.02))
    assert len(list(world.get_component(Board))) == 1
    assert len(list(world.get_component(BoardPosition))) == 36


def test_spawn_value_uses_cumulative_distribution():
    weights = (0.1, 0.2, 0.3, 0.4)
    rng = FixedRolls([0.05, 0.1, 0.25, 0.61, 0.99])
    assert [spawn_value(weights, rng) for _ in range(5)] == [0, 0, 1, 3, 3]


def test_spawn_value_falls_back_for_unusable_tables():
    rng = FixedRolls([0.5, 0.5, 0.5])
    assert spawn_value((0.0, 0.0, 0.0, 0.0), rng) == 2
    assert spawn_value((0.0, 0.0), rng) == 1
    assert spawn_value((), rng) == 2


def test_spawn_value_frequencies_follow_weights():
    rng = random.Random(99)
    weights = (0.5, 0.0, 0.5)
    counts = [0, 0, 0]
    for _ in range(2000):
        counts[spawn_value(weights, rng)] += 1
    assert counts[1] == 0
    assert 800 < counts[0] < 1200


def test_set_value_rejects_values_above_board_maximum():
    _, world, _ = make_board()
    with pytest.raises(ValueError):
        board_ops.set_value(world, 0, 0, 7)
    assert board_ops.set_value(world, 9, 9, 1) is False


def test_gravity_compacts_columns_preserving_order():
    rows = [
        [1, 0, 0, 0, 0],
        [2, 0, 0, 0, 0],
        [None, 0, 0, 0, 0],
        [3, 0, 0, 0, 0],
        [None, 0, 0, 0, 0],
    ]
    _, world, _ = make_board(rows)
    moves = apply_gravity(world)
    column = [get_value(world, 0, y) for y in range(5)]
    assert column == [None, None, 1, 2, 3]
    assert {(m.source, m.target, m.value) for m in moves} == {
        ((0, 3), (0, 4), 3),
        ((0, 1), (0, 3), 2),
        ((0, 0), (0, 2), 1),
    }


def test_gravity_without_gaps_moves_nothing():
    _, world, _ = make_board()
    before = value_map(world)
    assert apply_gravity(world) == []
    assert value_map(world) == before


def test_refill_fills_column_by_column_top_to_bottom():
    rows = [
        [None, None, 0, 0, 0],
        [None, 0, 0, 0, 0],
        [0, 0, 0, 0, 0],
        [0, 0, 0, 0, 0],
        [0, 0, 0, 0, 0],
    ]
    _, world, _ = make_board(rows)
    spawned = refill_empty_cells(world, random.Random(5))
    assert spawned == [(0, 0), (0, 1), (1, 0)]
    assert all(get_value(world, x, y) is not None for x, y in spawned)


def test_clear_and_respawn():
    _, world, _ = make_board()
    cleared = clear_cells(world, [(0, 0), (1, 0), (7, 7)])
    assert cleared == [(0, 0), (1, 0)]
    assert get_value(world, 0, 0) is None
    positions = respawn_full_board(world)
    assert len(positions) == 25
    assert len(value_map(world)) == 25


def test_format_board_marks_empty_cells():
    rows = [[1, 2, 3, 4, 5]] + [[0] * 5 for _ in range(4)]
    rows[1][0] = None
    _, world, _ = make_board(rows)
    lines = format_board(world).splitlines()
    assert lines[0] == "1 2 3 4 5"
    assert lines[1] == "X 0 0 0 0"


def test_board_lookup_without_board_raises():
    world = create_world(EventBus())
    with pytest.raises(BoardNotFoundError):
        board_ops.get_board(world)
    assert board_ops.board_dimensions(world) is None

import itertools
import random

from tenfall.systems.solvability import can_pick_sum, can_pick_sum_recursive, has_valid_moves
from tests.helpers import STUCK_ROWS, make_board


def brute_force(values, count, target):
    return any(sum(combo) == target for combo in itertools.combinations(values, count))


def test_all_sixes_board_is_unsolvable():
    _, world, _ = make_board([[6] * 5 for _ in range(5)])
    assert has_valid_moves(world) is False


def test_board_with_usable_multiset_is_solvable_even_without_a_hint():
    _, world, _ = make_board(STUCK_ROWS)
    assert has_valid_moves(world) is True


def test_count_matches_board_width():
    # Four values reach ten (4+3+2+1) but five cannot without a zero.
    rows = [[6] * 5 for _ in range(5)]
    rows[0][:4] = [4, 3, 2, 1]
    _, world, _ = make_board(rows)
    assert has_valid_moves(world) is False
    rows[1][0] = 0
    _, world, _ = make_board(rows)
    assert has_valid_moves(world) is True


def test_dynamic_programming_agrees_with_brute_force():
    rng = random.Random(2024)
    for _ in range(300):
        size = rng.randint(0, 12)
        values = [rng.randint(0, 6) for _ in range(size)]
        count = rng.randint(0, 6)
        expected = brute_force(values, count, 10)
        assert can_pick_sum(values, count, 10) is expected, (values, count)
        assert can_pick_sum_recursive(values, count, 10) is expected, (values, count)


def test_edge_counts():
    assert can_pick_sum([], 0, 0) is True
    assert can_pick_sum([], 0, 10) is False
    assert can_pick_sum([5, 5], 3, 10) is False
    assert can_pick_sum([10], 1, 10) is True

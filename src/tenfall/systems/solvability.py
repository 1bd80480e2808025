"""Board viability check.

A board counts as solvable when some ``width`` tile values taken from anywhere
on the board add up to the target. This is a necessary condition only: it does
not prove those tiles can be brought into one line with adjacent swaps.
"""
from __future__ import annotations

from typing import List, Sequence, Set

from esper import World

from tenfall.constants import TARGET_SUM
from tenfall.systems.board_ops import board_dimensions, value_map


def can_pick_sum(values: Sequence[int], count: int, target: int) -> bool:
    """True if exactly ``count`` of ``values`` sum to ``target``.

    Dynamic-programming table of reachable sums per pick count; sums above the
    target are dropped since tile values are never negative.
    """
    if count == 0:
        return target == 0
    if count > len(values) or target < 0:
        return False
    reachable: List[Set[int]] = [set() for _ in range(count + 1)]
    reachable[0].add(0)
    for seen, value in enumerate(values, start=1):
        for picked in range(min(seen, count), 0, -1):
            grown = {total + value for total in reachable[picked - 1] if total + value <= target}
            reachable[picked] |= grown
        if target in reachable[count]:
            return True
    return target in reachable[count]


def can_pick_sum_recursive(values: Sequence[int], count: int, target: int, start: int = 0) -> bool:
    """Choose-or-skip enumeration with the remaining-target and remaining-count prunes."""
    if count == 0 and target == 0:
        return True
    if count == 0 or target < 0 or start >= len(values):
        return False
    if len(values) - start < count:
        return False
    for i in range(start, len(values)):
        if can_pick_sum_recursive(values, count - 1, target - values[i], i + 1):
            return True
    return False


def has_valid_moves(world: World, target: int = TARGET_SUM) -> bool:
    dims = board_dimensions(world)
    if not dims:
        return False
    width, _ = dims
    values = list(value_map(world).values())
    return can_pick_sum(values, width, target)

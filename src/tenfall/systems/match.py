from __future__ import annotations

from dataclasses import dataclass
from enum import Enum
from typing import Dict, List, Tuple

from esper import World

from tenfall.constants import TARGET_SUM
from tenfall.systems.board_ops import Position, board_dimensions, value_map


class LineKind(Enum):
    ROW = "row"
    COLUMN = "column"


@dataclass(frozen=True, slots=True)
class MatchResult:
    """One line whose occupied values sum to the target."""
    kind: LineKind
    index: int
    positions: Tuple[Position, ...]
    total: int


def _row(values: Dict[Position, int], y: int, width: int) -> Tuple[Tuple[Position, ...], int]:
    cells = tuple((x, y) for x in range(width) if (x, y) in values)
    return cells, sum(values[pos] for pos in cells)


def _column(values: Dict[Position, int], x: int, height: int) -> Tuple[Tuple[Position, ...], int]:
    cells = tuple((x, y) for y in range(height) if (x, y) in values)
    return cells, sum(values[pos] for pos in cells)


def scan_for_first_match(world: World, target: int = TARGET_SUM) -> MatchResult | None:
    """Report a single matching line: rows top to bottom first, then columns left to right.

    Only the first hit is returned even when several lines match; the cascade
    rescans after every clear, so the others surface as separate solves.
    """
    dims = board_dimensions(world)
    if not dims:
        return None
    width, height = dims
    values = value_map(world)
    for y in range(height):
        cells, total = _row(values, y, width)
        if cells and total == target:
            return MatchResult(kind=LineKind.ROW, index=y, positions=cells, total=total)
    for x in range(width):
        cells, total = _column(values, x, height)
        if cells and total == target:
            return MatchResult(kind=LineKind.COLUMN, index=x, positions=cells, total=total)
    return None


def all_matches(world: World, target: int = TARGET_SUM) -> List[MatchResult]:
    """Every row and column currently summing to the target, unordered in meaning."""
    dims = board_dimensions(world)
    if not dims:
        return []
    width, height = dims
    values = value_map(world)
    matches: List[MatchResult] = []
    for y in range(height):
        cells, total = _row(values, y, width)
        if cells and total == target:
            matches.append(MatchResult(kind=LineKind.ROW, index=y, positions=cells, total=total))
    for x in range(width):
        cells, total = _column(values, x, height)
        if cells and total == target:
            matches.append(MatchResult(kind=LineKind.COLUMN, index=x, positions=cells, total=total))
    return matches


def line_sums(world: World) -> Dict[Tuple[LineKind, int], int]:
    """Sum of occupied values per line, keyed by (kind, index)."""
    dims = board_dimensions(world)
    if not dims:
        return {}
    width, height = dims
    values = value_map(world)
    sums: Dict[Tuple[LineKind, int], int] = {}
    for y in range(height):
        sums[(LineKind.ROW, y)] = _row(values, y, width)[1]
    for x in range(width):
        sums[(LineKind.COLUMN, x)] = _column(values, x, height)[1]
    return sums

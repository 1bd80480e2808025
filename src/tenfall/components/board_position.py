from dataclasses import dataclass

@dataclass(slots=True)
class BoardPosition:
    """Fixed grid coordinate of a cell entity (x = column, y = row, y=0 at the top)."""
    x: int
    y: int

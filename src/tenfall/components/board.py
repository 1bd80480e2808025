from dataclasses import dataclass, field
from typing import Tuple

@dataclass(slots=True)
class Board:
    width: int
    height: int
    max_value: int = 6
    # Probability per tile value, index == value.
    spawn_weights: Tuple[float, ...] = field(default_factory=tuple)

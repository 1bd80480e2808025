"""Session resource describing the clock and outcome of the current game."""
from dataclasses import dataclass
from enum import Enum, auto
from typing import Optional


class SessionOutcome(Enum):
    WON = auto()
    LOST = auto()


@dataclass(slots=True)
class SessionState:
    """Singleton component storing the session clock and result."""
    difficulty: str = "normal"
    remaining: float = 0.0
    active: bool = False
    outcome: Optional[SessionOutcome] = None
    # Seconds left before a reached win threshold is reported; None when no win is pending.
    win_countdown: Optional[float] = None

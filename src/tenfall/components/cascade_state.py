from dataclasses import dataclass
from enum import Enum, auto
from typing import Any, Optional


class CascadePhase(Enum):
    """Phases of the match cascade; one phase runs per step."""
    IDLE = auto()
    DETECT = auto()
    CLEAR = auto()
    DROP = auto()
    REFILL = auto()
    SETTLING = auto()
    UNSOLVABLE = auto()
    ERROR = auto()


@dataclass(slots=True)
class CascadeState:
    """Shared cascade progress, read by systems that must pause or reject input mid-cascade."""

    phase: CascadePhase = CascadePhase.IDLE
    depth: int = 0
    pending_match: Optional[Any] = None
    reset_countdown: float = 0.0
    error_reason: Optional[str] = None
    # Set by presentation collaborators while a solve reveal is playing.
    presentation_hold: bool = False

    @property
    def idle(self) -> bool:
        return self.phase is CascadePhase.IDLE

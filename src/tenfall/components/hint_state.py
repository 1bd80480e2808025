from dataclasses import dataclass
from typing import Any, Optional


@dataclass(slots=True)
class HintState:
    """Idle timers driving the automatic hint display."""

    time_since_last_move: float = 0.0
    time_since_last_hint: float = 0.0
    hint_active: bool = False
    current_hint: Optional[Any] = None

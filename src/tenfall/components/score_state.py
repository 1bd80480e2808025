from dataclasses import dataclass


@dataclass(slots=True)
class ScoreState:
    """Score, solve streak and multiplier window for the running session."""

    score: int = 0
    solve_streak_count: int = 0
    multiplier: float = 1.0
    multiplier_timer: float = 0.0
    multiplier_active: bool = False
    idle_since_last_solve: float = 0.0
    win_signalled: bool = False

import random

from tenfall.components.cascade_state import CascadePhase
from tenfall.events.bus import EVENT_HINT_SHOWN, EVENT_LINE_SOLVED, EVENT_SOLVE_SCORED
from tenfall.game import TenfallGame
from tenfall.systems.hint import Direction, HintMove
from tenfall.systems.match import all_matches
from tests.helpers import STUCK_ROWS, record

HINTABLE_ROWS = [
    [3, 3, 3, 3, 3],
    [3, 3, 3, 3, 3],
    [3, 3, 3, 3, 3],
    [3, 3, 3, 3, 6],
    [1, 1, 1, 1, 2],
]


def started_game(seed=11):
    game = TenfallGame(rng=random.Random(seed))
    assert game.start_new_session() is True
    assert game.settle() is CascadePhase.IDLE
    return game


def test_hint_swap_scores_a_solve():
    game = started_game()
    score_before = game.score
    solved = record(game.event_bus, EVENT_LINE_SOLVED)
    game.load_values(HINTABLE_ROWS)

    hint = game.request_hint()
    assert hint == HintMove(origin=(4, 3), direction=Direction.DOWN)
    assert game.swipe(hint.origin, hint.direction) is True
    assert game.phase is not CascadePhase.IDLE
    assert game.request_hint() is None

    game.settle()
    assert len(solved) >= 1
    assert game.score > score_before
    assert all_matches(game.world) == []


def test_cascade_advances_one_phase_per_tick():
    game = started_game()
    game.load_values(HINTABLE_ROWS)
    game.request_swap((4, 3), (4, 4))
    assert game.phase is CascadePhase.DETECT
    game.tick()
    assert game.phase is CascadePhase.CLEAR
    game.tick()
    assert game.phase is CascadePhase.DROP


def test_auto_hint_after_idle_delay():
    game = started_game()
    game.load_values(HINTABLE_ROWS)
    shown = record(game.event_bus, EVENT_HINT_SHOWN)
    for _ in range(9):
        game.tick(1.0)
    assert shown == []
    game.tick(1.5)
    assert len(shown) == 1


def test_render_and_value_lookup():
    game = started_game()
    game.load_values(STUCK_ROWS)
    assert game.value_at(4, 4) == 2
    assert game.render().splitlines()[-1] == "1 1 1 1 2"


def test_command_line_session_runs_to_an_outcome(tmp_path, capsys):
    import main

    config = tmp_path / "quick.yaml"
    config.write_text("session_duration: 5\n", encoding="utf-8")
    assert main.main(["--seed", "3", "--moves", "5", "--think-time", "0.5", "--config", str(config)]) == 0
    out = capsys.readouterr().out
    assert "points" in out


def test_command_line_rejects_bad_config(tmp_path):
    import main

    config = tmp_path / "bad.yaml"
    config.write_text("target_sum: 11\n", encoding="utf-8")
    assert main.main(["--config", str(config)]) == 2

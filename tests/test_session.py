import random

from tenfall.components.cascade_state import CascadePhase
from tenfall.components.session_state import SessionOutcome
from tenfall.config import GameConfig, ScoringConfig
from tenfall.events.bus import (
    EVENT_GAME_LOST,
    EVENT_GAME_WON,
    EVENT_SESSION_START_REQUEST,
    EVENT_SESSION_STARTED,
)
from tenfall.game import TenfallGame
from tests.helpers import record

# Swapping (4,3) with (4,4) completes row 4; nothing else lines up afterwards.
HINTABLE_ROWS = [
    [3, 3, 3, 3, 3],
    [3, 3, 3, 3, 3],
    [3, 3, 3, 3, 3],
    [3, 3, 3, 3, 6],
    [1, 1, 1, 1, 2],
]


def make_game(**scoring):
    config = GameConfig(session_duration=2.0, scoring=ScoringConfig(**scoring))
    return TenfallGame(config, rng=random.Random(321))


def test_start_session_builds_board_and_starts_clock():
    game = make_game()
    started = record(game.event_bus, EVENT_SESSION_STARTED)
    assert game.start_new_session("hard") is True
    assert started[0][1] == {"difficulty": "hard", "width": 6, "height": 6}
    assert game.session.active is True
    assert game.session.remaining == 2.0
    assert game.board_system.board.width == 6


def test_unknown_difficulty_is_rejected():
    game = make_game()
    assert game.start_new_session("nightmare") is False
    assert game.session.active is False


def test_start_rejected_while_cascade_running():
    game = make_game()
    game.cascade_system.start()
    assert game.phase is CascadePhase.DETECT
    assert game.start_new_session() is False


def test_session_start_request_event():
    game = make_game()
    game.event_bus.emit(EVENT_SESSION_START_REQUEST, difficulty="easy")
    assert game.session.active is True
    assert game.session.difficulty == "easy"
    assert game.board_system.board.max_value == 5


def test_clock_runs_out_below_win_score_loses():
    game = make_game(win_score=100_000)
    lost = record(game.event_bus, EVENT_GAME_LOST)
    game.start_new_session()
    game.settle()

    game.tick(1.5)
    assert game.session.active is True
    game.tick(1.0)
    assert game.session.active is False
    assert game.session.outcome is SessionOutcome.LOST
    assert lost == [(EVENT_GAME_LOST, {"score": game.score})]
    assert game.request_swap((0, 0), (1, 0)) is False


def test_clock_runs_out_at_win_score_wins():
    game = make_game(win_score=100_000)
    won = record(game.event_bus, EVENT_GAME_WON)
    game.start_new_session()
    game.settle()
    game.scoring_system.state.score = 100_000

    game.tick(2.5)
    assert game.session.outcome is SessionOutcome.WON
    assert len(won) == 1


def test_reaching_win_score_wins_after_grace_period():
    game = make_game(win_score=10, win_grace_period=0.5)
    won = record(game.event_bus, EVENT_GAME_WON)
    game.start_new_session()
    game.settle()
    game.load_values(HINTABLE_ROWS)

    assert game.request_swap((4, 3), (4, 4)) is True
    game.settle()
    assert game.score >= 10
    assert game.session.win_countdown is not None
    game.tick(0.3)
    assert won == []
    game.tick(0.3)
    assert game.session.outcome is SessionOutcome.WON
    assert len(won) == 1


def test_clock_pauses_while_cascade_in_flight():
    game = make_game()
    game.start_new_session()
    game.settle()
    remaining = game.session.remaining
    game.cascade_system.state.phase = CascadePhase.ERROR
    game.tick(1.0)
    assert game.session.remaining == remaining

    game.cascade_system.reset()
    game.set_presentation_hold(True)
    game.tick(1.0)
    assert game.session.remaining == remaining
    game.set_presentation_hold(False)
    game.tick(1.0)
    assert game.session.remaining == remaining - 1.0


def test_new_session_resets_score():
    game = make_game()
    game.start_new_session()
    game.settle()
    game.scoring_system.state.score = 55
    game.tick(5.0)
    assert game.start_new_session() is True
    assert game.score == 0
    assert game.session.outcome is None


def test_session_state_uses_slots():
    game = make_game()
    assert not hasattr(game.session, "__dict__")

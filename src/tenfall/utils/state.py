from esper import World

from tenfall.components.cascade_state import CascadeState
from tenfall.components.hint_state import HintState
from tenfall.components.score_state import ScoreState
from tenfall.components.session_state import SessionState


def get_or_create_cascade_state(world: World) -> CascadeState:
    """Return the shared CascadeState component, creating it if absent."""
    existing = list(world.get_component(CascadeState))
    if existing:
        return existing[0][1]
    world.create_entity(CascadeState())
    return list(world.get_component(CascadeState))[0][1]


def get_or_create_score_state(world: World) -> ScoreState:
    """Return the shared ScoreState component, creating it if absent."""
    existing = list(world.get_component(ScoreState))
    if existing:
        return existing[0][1]
    world.create_entity(ScoreState())
    return list(world.get_component(ScoreState))[0][1]


def get_or_create_session_state(world: World) -> SessionState:
    existing = list(world.get_component(SessionState))
    if existing:
        return existing[0][1]
    world.create_entity(SessionState())
    return list(world.get_component(SessionState))[0][1]


def get_or_create_hint_state(world: World) -> HintState:
    existing = list(world.get_component(HintState))
    if existing:
        return existing[0][1]
    world.create_entity(HintState())
    return list(world.get_component(HintState))[0][1]


def timers_paused(world: World) -> bool:
    """True while a cascade is in flight or presentation holds the clocks."""
    state = get_or_create_cascade_state(world)
    return not state.idle or state.presentation_hold


def session_running(world: World) -> bool:
    """False once a session exists and has ended; worlds without a session always run."""
    for _, session in world.get_component(SessionState):
        return session.active
    return True

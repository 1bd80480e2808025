import random

from esper import World

from tenfall.components.cascade_state import CascadeState
from tenfall.components.hint_state import HintState
from tenfall.components.score_state import ScoreState
from tenfall.events.bus import EventBus


def create_world(event_bus: EventBus, *, rng: random.Random | None = None) -> World:
    world = World()
    setattr(world, "random", rng or random.Random())

    # Shared resources read by several systems.
    state_entity = world.create_entity()
    world.add_component(state_entity, CascadeState())
    world.add_component(state_entity, ScoreState())
    world.add_component(state_entity, HintState())
    return world

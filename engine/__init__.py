"""
Waste engine core.

The small entity/component layer and event bus the battle core is
built on. Rendering, audio and input live with the presentation
layer, not here.

Quick Start:
    from engine.core import World, EventBus

    events = EventBus()
    world = World(events)
    monster = world.create_entity("Sparkit")
"""

__version__ = "0.1.0"

from engine.core import (
    Entity,
    Component,
    register_component,
    World,
    EventBus,
    Event,
    EngineEvent,
)

__all__ = [
    "Entity",
    "Component",
    "register_component",
    "World",
    "EventBus",
    "Event",
    "EngineEvent",
]

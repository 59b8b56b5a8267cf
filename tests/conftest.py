import json
import os
import sys
import pytest

# Ensure engine modules can be imported
sys.path.append(os.getcwd())


class ScriptedRng:
    """
    Stand-in for random.Random that replays scripted draws.

    choice() returns the next scripted value (which must be one of the
    options), or the first option once the script runs out. randint()
    returns the next scripted roll, or the top of the range once the
    script runs out, so critical hits never land unless scripted.
    """

    def __init__(self, choices=(), rolls=()):
        self.choices = list(choices)
        self.rolls = list(rolls)
        self.randint_calls = 0

    def choice(self, seq):
        options = list(seq)
        if self.choices:
            wanted = self.choices.pop(0)
            assert wanted in options, f"{wanted!r} not among {options!r}"
            return wanted
        return options[0]

    def randint(self, a, b):
        self.randint_calls += 1
        if self.rolls:
            return self.rolls.pop(0)
        return b


@pytest.fixture
def scripted_rng():
    """Factory for ScriptedRng."""
    return ScriptedRng

@pytest.fixture
def event_bus():
    """Fresh EventBus for each test."""
    from engine.core.events import EventBus
    return EventBus()

@pytest.fixture
def world(event_bus):
    """Fresh World for each test."""
    from engine.core.world import World
    return World(event_bus)

@pytest.fixture
def progress():
    """Fresh progression ledger for each test."""
    from waste.progression.ledger import GameProgress
    return GameProgress()

@pytest.fixture
def type_system():
    """The shipped default type chart."""
    from waste.battle.types import TypeSystem
    from waste.config import DEFAULT_DATA_PATH

    with open(DEFAULT_DATA_PATH / "database" / "type_charts" / "default.json", encoding="utf-8") as f:
        return TypeSystem.from_data(json.load(f))

@pytest.fixture
def sample_monster(world):
    """Level 1 earth monster (atk 12, def 5, 10 HP)."""
    from waste.components import Element
    from waste.world.monsters import create_monster

    return create_monster(world, "Stickdude", Element.EARTH, atk=12, defense=5)

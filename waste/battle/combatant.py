"""
Combatant stat bundle - a view over a monster entity's components.
"""

from __future__ import annotations

from dataclasses import dataclass

from engine.core import Entity
from waste.components import (
    Boss,
    Defense,
    Element,
    Elemental,
    Health,
    Level,
    Strength,
)


@dataclass
class MonsterStats:
    """
    Full stat bundle of one monster.

    Holds the entity's own component instances, not copies: leveling
    and damage mutate the components in place, so the ledger and the
    entity always agree.
    """
    entity_id: int
    name: str
    level: Level
    health: Health
    strength: Strength
    defense: Defense
    elemental: Elemental

    @classmethod
    def of(cls, entity: Entity) -> MonsterStats:
        """
        Bundle an entity's monster components.

        Raises:
            KeyError: If the entity is missing a stat component
        """
        return cls(
            entity_id=entity.id,
            name=entity.name,
            level=entity.get(Level),
            health=entity.get(Health),
            strength=entity.get(Strength),
            defense=entity.get(Defense),
            elemental=entity.get(Elemental),
        )

    @property
    def element(self) -> Element:
        return self.elemental.element

    @property
    def is_alive(self) -> bool:
        return self.health.is_alive

    @property
    def current_hp(self) -> int:
        return self.health.health

    @property
    def max_hp(self) -> int:
        return self.health.max_health


def is_boss(entity: Entity) -> bool:
    return entity.has(Boss)

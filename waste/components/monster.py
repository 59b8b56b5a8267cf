"""
Monster components - level, health, strength, defense, element.
"""

from __future__ import annotations

from enum import Enum

from pydantic import Field

from engine.core.component import Component, register_component


class Element(Enum):
    """Closed set of elemental types. Order defines type chart rows/columns."""
    FIRE = "fire"
    WATER = "water"
    GRASS = "grass"
    ELECTRIC = "electric"
    EARTH = "earth"

    @property
    def index(self) -> int:
        return list(Element).index(self)


@register_component
class Level(Component):
    level: int = Field(default=1, ge=1)


@register_component
class Health(Component):
    """
    Health points.

    Attributes:
        health: Current HP. May drop below zero until the defeat is
            processed; use display for anything shown to the player.
        max_health: Maximum HP
    """
    health: int = 10
    max_health: int = Field(default=10, ge=0)

    @property
    def is_alive(self) -> bool:
        return self.health > 0

    @property
    def display(self) -> int:
        """Health clamped for rendering."""
        return max(0, self.health)

    def take_damage(self, amount: int) -> None:
        self.health -= amount

    def heal(self, amount: int) -> int:
        """
        Heal up to max health.

        Returns:
            Actual amount healed
        """
        old = self.health
        self.health = min(self.health + amount, self.max_health)
        return max(0, self.health - old)


@register_component
class Strength(Component):
    """
    Offensive stats.

    Attributes:
        atk: Attack power
        crt: Critical chance (percentage points)
        crt_dmg: Integer damage multiplier on a critical hit
    """
    atk: int = 10
    crt: int = 0
    crt_dmg: int = Field(default=2, ge=1)


@register_component
class Defense(Component):
    """
    Defensive stats.

    Attributes:
        defense: Subtracted from incoming attack
        crt_res: Subtracted from the attacker's critical chance
    """
    defense: int = 5
    crt_res: int = 0


@register_component
class Elemental(Component):
    element: Element = Element.FIRE


@register_component
class Boss(Component):
    """Marks an enemy as a boss (double leveling and a quest NPC on defeat)."""
    pass

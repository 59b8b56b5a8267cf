"""
Monster entities - factories for the starter, wild enemies and bosses.
"""

from __future__ import annotations

import random
from typing import TYPE_CHECKING, Any, Optional

from engine.core import Entity, World
from waste.battle.combatant import MonsterStats
from waste.components import (
    Boss,
    Defense,
    Element,
    Elemental,
    Health,
    Level,
    Strength,
)
from waste.progression.leveling import (
    LEVEL_ATK_GAIN,
    LEVEL_CRT_GAIN,
    LEVEL_DEFENSE_GAIN,
    LEVEL_HEALTH_GAIN,
)

if TYPE_CHECKING:
    from waste.progression.ledger import GameProgress


# Used when no species were loaded from the database
DEFAULT_SPECIES: dict[str, dict[str, Any]] = {
    "stickdude": {
        "id": "stickdude",
        "name": "Stickdude",
        "element": "earth",
        "atk": 10,
        "crt": 5,
        "crt_dmg": 2,
        "defense": 5,
        "crt_res": 5,
    },
}

BOSS_HEALTH_MULTIPLIER = 2


def create_monster(
    world: World,
    name: str,
    element: Element,
    level: int = 1,
    health: Optional[int] = None,
    atk: int = 10,
    crt: int = 0,
    crt_dmg: int = 2,
    defense: int = 5,
    crt_res: int = 0,
    boss: bool = False,
) -> Entity:
    """
    Factory function to create a monster entity.

    Args:
        world: World to add the monster to
        name: Display name
        element: Elemental type
        level: Starting level
        health: Max (and current) health, level * 10 if omitted
        atk, crt, crt_dmg: Offensive stats
        defense, crt_res: Defensive stats
        boss: Attach the Boss marker

    Returns:
        The created monster entity
    """
    if health is None:
        health = level * LEVEL_HEALTH_GAIN

    monster = world.create_entity(name)
    monster.add(Level(level=level))
    monster.add(Health(health=health, max_health=health))
    monster.add(Strength(atk=atk, crt=crt, crt_dmg=crt_dmg))
    monster.add(Defense(defense=defense, crt_res=crt_res))
    monster.add(Elemental(element=element))

    if boss:
        monster.add(Boss())

    return monster


def _from_species(species: dict[str, Any], level: int, boss: bool) -> dict[str, Any]:
    """Stats for a species scaled to a level."""
    gained = level - 1
    health = level * LEVEL_HEALTH_GAIN
    atk = species.get("atk", 10) + LEVEL_ATK_GAIN * gained

    if boss:
        health *= BOSS_HEALTH_MULTIPLIER
        atk += atk // 2

    return {
        "name": species["name"],
        "element": Element(species["element"]),
        "level": level,
        "health": health,
        "atk": atk,
        "crt": species.get("crt", 0) + LEVEL_CRT_GAIN * gained,
        "crt_dmg": species.get("crt_dmg", 2),
        "defense": species.get("defense", 5) + LEVEL_DEFENSE_GAIN * gained,
        "crt_res": species.get("crt_res", 0),
        "boss": boss,
    }


def create_starter(
    world: World,
    progress: GameProgress,
    species: Optional[dict[str, Any]] = None,
) -> Entity:
    """
    Create the player's first monster and put it on the roster.

    Returns:
        The starter entity (roster ordinal 0 on a fresh playthrough)
    """
    monster = create_monster(world, **_from_species(species or DEFAULT_SPECIES["stickdude"], 1, False))
    progress.register_monster(monster, MonsterStats.of(monster))
    return monster


def spawn_enemy(
    world: World,
    progress: GameProgress,
    rng: random.Random | None = None,
    species_pool: Optional[dict[str, dict[str, Any]]] = None,
    boss: bool = False,
) -> Entity:
    """
    Create a wild enemy scaled to the playthrough's current level.

    Bosses get doubled health and half again the attack; both are
    erased if the boss is captured.

    Args:
        world: World to add the enemy to
        progress: Supplies current_level
        rng: Random source for the species pick
        species_pool: Species records to pick from (database species)
        boss: Spawn a boss

    Returns:
        The enemy entity (not yet engaged; see BattleSystem.start_battle)
    """
    rng = rng or random
    pool = species_pool or DEFAULT_SPECIES
    species = pool[rng.choice(sorted(pool))]
    return create_monster(world, **_from_species(species, progress.current_level, boss))

"""
World module - monster and NPC factories.
"""

from waste.world.monsters import create_monster, create_starter, spawn_enemy
from waste.world.npc import spawn_quest_npc, accept_quest_from, NPC_TAG

__all__ = [
    "create_monster",
    "create_starter",
    "spawn_enemy",
    "spawn_quest_npc",
    "accept_quest_from",
    "NPC_TAG",
]

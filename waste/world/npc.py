"""
NPC entity - quest givers spawned after a boss falls.
"""

from __future__ import annotations

from typing import TYPE_CHECKING, Optional

from engine.core import Entity, World
from waste.components import QuestGiver

if TYPE_CHECKING:
    from waste.progression.ledger import GameProgress
    from waste.progression.quests import Quest


NPC_TAG = "npc"


def spawn_quest_npc(world: World, quest: Quest, name: str = "Wanderer") -> Entity:
    """
    Factory function to create an NPC offering a quest.

    Placement and sprites are up to the presentation layer; it finds
    new NPCs through the "npc" tag or the ENTITY_CREATED event.

    Returns:
        The created NPC entity
    """
    npc = world.create_entity(name)
    npc.add_tag(NPC_TAG)
    npc.add(QuestGiver(quest=quest))
    return npc


def accept_quest_from(npc: Entity, progress: GameProgress) -> Optional[Quest]:
    """
    Move an NPC's quest into the player's quest log.

    Returns:
        The accepted quest, or None if the NPC has nothing to offer
    """
    giver = npc.try_get(QuestGiver)
    if giver is None or not giver.offered or giver.quest is None:
        return None

    if not progress.accept_quest(giver.quest):
        return None

    giver.offered = False
    return giver.quest

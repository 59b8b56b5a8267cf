"""
Progression module - roster, items, quests.

Provides:
- GameProgress ledger (roster, inventory, buffs, counters)
- Item and buff kinds
- Quest tracking and random quest generation
"""

from waste.progression.items import ItemKind, BuffKind
from waste.progression.quests import (
    QuestLog,
    Quest,
    QuestObjective,
    QuestReward,
    QuestStatus,
    random_quest,
)
from waste.progression.ledger import GameProgress

__all__ = [
    # Items
    "ItemKind",
    "BuffKind",
    # Quests
    "QuestLog",
    "Quest",
    "QuestObjective",
    "QuestReward",
    "QuestStatus",
    "random_quest",
    # Ledger
    "GameProgress",
]

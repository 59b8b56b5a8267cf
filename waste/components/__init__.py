"""
Waste components - data-only pydantic models attached to entities.
"""

from waste.components.monster import (
    Element,
    Level,
    Health,
    Strength,
    Defense,
    Elemental,
    Boss,
)
from waste.components.npc import QuestGiver

__all__ = [
    "Element",
    "Level",
    "Health",
    "Strength",
    "Defense",
    "Elemental",
    "Boss",
    "QuestGiver",
]

"""
NPC components.
"""

from __future__ import annotations

from typing import Any

from engine.core.component import Component, register_component


@register_component
class QuestGiver(Component):
    """
    An NPC offering a quest.

    Attributes:
        quest: The Quest on offer (waste.progression.quests.Quest)
        offered: False once the player has accepted it
    """
    quest: Any = None
    offered: bool = True

"""
Quest system - hunt objectives, rewards and the player's quest log.

Quests come from NPCs spawned after a boss falls. Each objective asks
the player to defeat a number of monsters of one element; defeating a
monster of that element advances every active quest that wants it.
"""

from __future__ import annotations

import copy
import itertools
import random
from dataclasses import dataclass, field
from enum import Enum, auto
from typing import Any, Optional

from waste.components import Element
from waste.progression.items import ItemKind


class QuestStatus(Enum):
    """Quest progress status."""
    OFFERED = auto()      # Carried by an NPC, not yet accepted
    ACTIVE = auto()       # In the player's log
    COMPLETED = auto()    # All objectives done, rewards granted


@dataclass
class QuestObjective:
    """Defeat target_count monsters of one element."""
    element: Element
    target_count: int = 1
    current_count: int = 0
    is_complete: bool = False

    @property
    def progress(self) -> float:
        """Get progress as a fraction."""
        if self.target_count <= 0:
            return 1.0
        return min(1.0, self.current_count / self.target_count)

    def update_progress(self, amount: int = 1) -> bool:
        """
        Update objective progress.

        Returns:
            True if objective became complete
        """
        if self.is_complete:
            return False

        self.current_count = min(self.current_count + amount, self.target_count)

        if self.current_count >= self.target_count:
            self.is_complete = True
            return True

        return False


@dataclass
class QuestReward:
    """Items granted on completion."""
    items: dict[ItemKind, int] = field(default_factory=dict)


@dataclass
class Quest:
    """A quest instance."""
    id: str
    name: str
    description: str = ""
    status: QuestStatus = QuestStatus.OFFERED
    objectives: list[QuestObjective] = field(default_factory=list)
    rewards: QuestReward = field(default_factory=QuestReward)

    @property
    def is_complete(self) -> bool:
        return all(obj.is_complete for obj in self.objectives)

    def get_current_objective(self) -> Optional[QuestObjective]:
        """Get the first incomplete objective."""
        for obj in self.objectives:
            if not obj.is_complete:
                return obj
        return None


class QuestLog:
    """
    The player's accepted quests.
    """

    def __init__(self):
        self._active: dict[str, Quest] = {}
        self._completed: dict[str, Quest] = {}

    def accept(self, quest: Quest) -> bool:
        """
        Start tracking a quest.

        Returns:
            False if the quest is already active or completed
        """
        if quest.id in self._active or quest.id in self._completed:
            return False

        quest.status = QuestStatus.ACTIVE
        self._active[quest.id] = quest
        return True

    def record_defeat(self, element: Element) -> list[Quest]:
        """
        Advance objectives targeting an element.

        Returns:
            Quests that completed because of this defeat
        """
        finished = []

        for quest in self._active.values():
            for obj in quest.objectives:
                if obj.element == element and not obj.is_complete:
                    obj.update_progress()
                    break
            if quest.is_complete:
                finished.append(quest)

        for quest in finished:
            quest.status = QuestStatus.COMPLETED
            del self._active[quest.id]
            self._completed[quest.id] = quest

        return finished

    def get_quest(self, quest_id: str) -> Optional[Quest]:
        return self._active.get(quest_id) or self._completed.get(quest_id)

    @property
    def active(self) -> list[Quest]:
        return list(self._active.values())

    @property
    def completed(self) -> list[Quest]:
        return list(self._completed.values())

    def clear(self) -> None:
        self._active.clear()
        self._completed.clear()


# Used when no quest templates were loaded from the database
DEFAULT_TEMPLATES: dict[str, dict[str, Any]] = {
    "cull": {
        "id": "cull",
        "name": "Cull the Herd",
        "description": "Thin out the monsters roaming the dunes.",
        "base_count": 2,
        "rewards": {"heal": 2},
    },
}

_quest_ids = itertools.count(1)


def random_quest(
    rng: random.Random | None = None,
    level: int = 1,
    templates: dict[str, dict[str, Any]] | None = None,
) -> Quest:
    """
    Build a fresh quest from a random template.

    The target element is random; the number of defeats grows by one
    every three levels.
    """
    rng = rng or random
    pool = templates or DEFAULT_TEMPLATES
    template = copy.deepcopy(pool[rng.choice(sorted(pool))])
    element = rng.choice(list(Element))

    objective = QuestObjective(
        element=element,
        target_count=template["base_count"] + max(0, level - 1) // 3,
    )
    rewards = QuestReward(items={
        ItemKind.from_name(name): count
        for name, count in template.get("rewards", {}).items()
    })

    return Quest(
        id=f"{template['id']}-{next(_quest_ids)}",
        name=f"{template['name']}: {element.value.title()}",
        description=template.get("description", ""),
        objectives=[objective],
        rewards=rewards,
    )

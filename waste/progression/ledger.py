"""
Progression ledger - the player's roster, items, buffs and counters.

One GameProgress lives for one playthrough. It is created when the
playthrough starts, passed explicitly to whatever needs it, and
reset() on teardown. Every mutation is applied immediately.
"""

from __future__ import annotations

import logging
from typing import Iterator, Optional

from engine.core import Entity
from waste.battle.combatant import MonsterStats
from waste.battle.errors import InsufficientInventory
from waste.components import Element
from waste.progression.items import BuffKind, ItemKind
from waste.progression.leveling import (
    LEVEL_ATK_GAIN,
    LEVEL_CRT_GAIN,
    LEVEL_DEFENSE_GAIN,
    LEVEL_HEALTH_GAIN,
)
from waste.progression.quests import Quest, QuestLog, QuestReward


logger = logging.getLogger(__name__)


class GameProgress:
    """
    Mutable progression state for one playthrough.

    Attributes:
        monster_id_entity: Roster ordinal -> monster. Insertion order
            is the cycling order.
        monster_entity_to_stats: Roster monster -> stat bundle
        enemy_stats: The current enemy -> stat bundle, present only
            while that monster is being fought
        num_living_monsters: Roster monsters with health > 0
        current_level: Drives enemy scaling, heal amount and capture size
        turns_left_of_buff: Remaining turns, indexed by BuffKind
        player_inventory: Item counts, indexed by ItemKind
        num_boss_defeated: Bosses beaten this playthrough
        battles_won: Victories this playthrough
        quests: The player's quest log
    """

    def __init__(self):
        self.monster_id_entity: dict[int, Entity] = {}
        self.monster_entity_to_stats: dict[Entity, MonsterStats] = {}
        self.enemy_stats: dict[Entity, MonsterStats] = {}
        self.num_living_monsters = 0
        self.current_level = 1
        self.turns_left_of_buff: list[int] = [0] * len(BuffKind)
        self.player_inventory: list[int] = [0] * len(ItemKind)
        self.num_boss_defeated = 0
        self.battles_won = 0
        self.quests = QuestLog()

    def reset(self) -> None:
        """Forget everything (teardown at the end of a playthrough)."""
        self.__init__()

    # Roster

    def register_monster(self, handle: Entity, stats: MonsterStats) -> int:
        """
        Add a monster to the roster.

        Returns:
            The monster's ordinal

        Raises:
            ValueError: If the monster is already on the roster
        """
        if handle in self.monster_entity_to_stats:
            raise ValueError(f"{handle.name} is already on the roster")

        ordinal = len(self.monster_id_entity)
        self.monster_id_entity[ordinal] = handle
        self.monster_entity_to_stats[handle] = stats
        if stats.is_alive:
            self.num_living_monsters += 1

        logger.debug(f"Registered {handle.name} as roster #{ordinal}")
        return ordinal

    def stats_of(self, handle: Entity) -> MonsterStats:
        """
        Raises:
            KeyError: If the monster is neither on the roster nor the current enemy
        """
        if handle in self.monster_entity_to_stats:
            return self.monster_entity_to_stats[handle]
        return self.enemy_stats[handle]

    def ordinal_of(self, handle: Entity) -> Optional[int]:
        for ordinal, entity in self.monster_id_entity.items():
            if entity == handle:
                return ordinal
        return None

    def is_party_monster(self, handle: Entity) -> bool:
        return handle in self.monster_entity_to_stats

    def first_monster(self) -> Optional[Entity]:
        """The roster's ordinal 0, if any."""
        return self.monster_id_entity.get(0)

    @property
    def roster_size(self) -> int:
        return len(self.monster_id_entity)

    def roster(self) -> Iterator[tuple[Entity, MonsterStats]]:
        """Iterate the roster in ordinal order."""
        for ordinal in sorted(self.monster_id_entity):
            handle = self.monster_id_entity[ordinal]
            yield handle, self.monster_entity_to_stats[handle]

    def living_party(self) -> list[Entity]:
        return [handle for handle, stats in self.roster() if stats.is_alive]

    def next_living(self, handle: Entity) -> Optional[Entity]:
        """
        Next living roster monster after handle, wrapping around.

        Returns:
            The first living monster found, or None if no other
            monster on the roster is alive
        """
        size = self.roster_size
        start = self.ordinal_of(handle)
        if start is None:
            start = -1

        for step in range(1, size + 1):
            candidate = self.monster_id_entity[(start + step) % size]
            if candidate == handle:
                continue
            if self.monster_entity_to_stats[candidate].is_alive:
                return candidate

        return None

    def level_up(self, handle: Entity, by: int = 1) -> None:
        """
        Raise a roster monster's level and stats, fully healing it.

        Raises:
            KeyError: If the monster is not on the roster
        """
        stats = self.monster_entity_to_stats[handle]

        stats.level.level += by
        stats.health.max_health += LEVEL_HEALTH_GAIN * by
        stats.health.health = stats.health.max_health
        stats.strength.atk += LEVEL_ATK_GAIN * by
        stats.strength.crt += LEVEL_CRT_GAIN * by
        stats.defense.defense += LEVEL_DEFENSE_GAIN * by

        logger.debug(f"{handle.name} reached level {stats.level.level}")

    def mark_fallen(self) -> None:
        """A roster monster's health dropped to zero or below."""
        self.num_living_monsters = max(0, self.num_living_monsters - 1)

    # Enemies

    def engage_enemy(self, handle: Entity, stats: MonsterStats) -> None:
        """
        Start tracking the monster being fought.

        Raises:
            ValueError: If the monster is on the roster
        """
        if handle in self.monster_entity_to_stats:
            raise ValueError(f"{handle.name} is a party monster and cannot be an enemy")
        self.enemy_stats[handle] = stats

    def release_enemy(self, handle: Entity) -> Optional[MonsterStats]:
        """Stop tracking an enemy without capturing it."""
        return self.enemy_stats.pop(handle, None)

    def capture_enemy(self, handle: Entity, health_per_level: int = LEVEL_HEALTH_GAIN) -> int:
        """
        Move a defeated enemy onto the roster.

        Its health and max health are reset to current_level *
        health_per_level, erasing any boss inflation.

        Returns:
            The captured monster's ordinal

        Raises:
            KeyError: If the monster is not the current enemy
        """
        stats = self.enemy_stats.pop(handle)
        size = self.current_level * health_per_level
        stats.health.max_health = size
        stats.health.health = size
        return self.register_monster(handle, stats)

    # Counters

    def win_battle(self) -> None:
        self.battles_won += 1
        self.current_level += 1

    def win_boss(self) -> None:
        self.num_boss_defeated += 1

    def is_game_won(self, bosses_to_win: int) -> bool:
        return self.num_boss_defeated >= bosses_to_win

    # Items and buffs

    def add_item(self, item: ItemKind, count: int = 1) -> None:
        self.player_inventory[item] += count

    def item_count(self, item: ItemKind) -> int:
        return self.player_inventory[item]

    def use_item(self, item: ItemKind) -> None:
        """
        Spend one item.

        Raises:
            InsufficientInventory: If none are left
        """
        if self.player_inventory[item] <= 0:
            raise InsufficientInventory(item)
        self.player_inventory[item] -= 1

    def heal_party(self, amount: int) -> list[Entity]:
        """
        Heal every roster monster, fallen ones included.

        Returns:
            Monsters brought back above zero health
        """
        revived = []
        for handle, stats in self.roster():
            was_fallen = not stats.is_alive
            stats.health.heal(amount)
            if was_fallen and stats.is_alive:
                self.num_living_monsters += 1
                revived.append(handle)
        return revived

    def activate_buff(self, buff: BuffKind, turns: int) -> None:
        self.turns_left_of_buff[buff] = turns

    def buff_active(self, buff: BuffKind) -> bool:
        return self.turns_left_of_buff[buff] > 0

    def consume_buff_turn(self, buff: BuffKind) -> bool:
        """
        Use up one turn of a buff.

        Returns:
            True if the buff was active for this turn
        """
        if self.turns_left_of_buff[buff] <= 0:
            return False
        self.turns_left_of_buff[buff] -= 1
        return True

    # Quests

    def accept_quest(self, quest: Quest) -> bool:
        return self.quests.accept(quest)

    def get_quest_rewards(self, element: Element) -> list[Quest]:
        """
        Credit a defeated monster's element to the quest log and pay out
        rewards for any quests it completed.

        Returns:
            Quests completed by this defeat
        """
        completed = self.quests.record_defeat(element)
        for quest in completed:
            self._grant(quest.rewards)
            logger.info(f"Quest complete: {quest.name}")
        return completed

    def _grant(self, reward: QuestReward) -> None:
        for item, count in reward.items.items():
            self.add_item(item, count)

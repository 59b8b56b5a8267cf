"""
Battle system - turn-based battle state machine.

One player action is processed per call to handle(). Each call runs
to completion: the enemy's action is chosen, damage is resolved and
applied, and any defeat, switch, capture, level up or boss reward is
written to GameProgress before the call returns.
"""

from __future__ import annotations

import logging
import random
from dataclasses import dataclass, field
from enum import Enum, auto
from typing import TYPE_CHECKING, Any, Optional

from engine.core import Entity, EventBus, World
from waste.battle.actions import (
    CombatAction,
    PlayerAction,
    choose_enemy_action,
    to_combat_action,
)
from waste.battle.combatant import MonsterStats, is_boss
from waste.battle.errors import (
    InsufficientInventory,
    MissingCombatant,
    NoCameraContext,
    NoCycleTarget,
)
from waste.battle.resolver import resolve_exchange
from waste.battle.types import TypeSystem
from waste.components import Boss
from waste.config import BattleConfig
from waste.progression.items import ITEM_BUFFS, BuffKind, ItemKind
from waste.progression.quests import Quest, random_quest
from waste.world.npc import spawn_quest_npc

if TYPE_CHECKING:
    from waste.progression.ledger import GameProgress


logger = logging.getLogger(__name__)


class BattlePhase(Enum):
    """State of the battle."""
    IDLE = auto()
    AWAITING_ACTION = auto()
    RESOLVING = auto()
    CONCLUDED = auto()


class BattleMode(Enum):
    """Who controls the enemy side."""
    SINGLE = auto()   # Against a wild monster, enemy action is random
    VERSUS = auto()   # Against another player, their action is supplied by the caller


class BattleResult(Enum):
    """What a call into the battle system amounted to."""
    CONTINUE = auto()
    VICTORY = auto()
    DEFEAT = auto()
    ABORTED = auto()
    FAILED = auto()
    IGNORED = auto()


class OuterState(Enum):
    """Game state the presentation layer should be in after a call."""
    BATTLE = auto()
    OVERWORLD = auto()
    CREDITS = auto()
    MULTIPLAYER_MENU = auto()


class BattleEvent(Enum):
    """Events published while a battle runs."""
    BATTLE_STARTED = auto()
    TURN_RESOLVED = auto()
    MONSTER_DEFEATED = auto()
    MONSTER_SWITCHED = auto()
    MONSTER_CAPTURED = auto()
    LEVEL_UP = auto()
    ITEM_USED = auto()
    BOSS_DEFEATED = auto()
    BATTLE_ENDED = auto()


@dataclass
class BattleSlot:
    """The two combatants: the player's active monster and the enemy."""
    player: Optional[Entity] = None
    enemy: Optional[Entity] = None


@dataclass
class BattleOutcome:
    """What changed during one call, for rendering."""
    action: Optional[PlayerAction] = None
    enemy_action: Optional[CombatAction] = None
    damage_to_enemy: int = 0
    damage_to_player: int = 0
    player_crit: bool = False
    enemy_crit: bool = False
    result: BattleResult = BattleResult.CONTINUE
    switched_to: Optional[Entity] = None
    captured: Optional[Entity] = None
    levels_gained: dict[int, int] = field(default_factory=dict)  # entity_id -> levels
    healed: int = 0
    revived: list[Entity] = field(default_factory=list)
    boss_defeated: bool = False
    npc: Optional[Entity] = None
    npc_quest: Optional[Quest] = None
    completed_quests: list[Quest] = field(default_factory=list)
    notice: str = ""
    next_state: OuterState = OuterState.BATTLE

    @property
    def concluded(self) -> bool:
        return self.result in (
            BattleResult.VICTORY,
            BattleResult.DEFEAT,
            BattleResult.ABORTED,
            BattleResult.FAILED,
        )

    @property
    def spawn_npc(self) -> bool:
        return self.npc_quest is not None


class BattleSystem:
    """
    Turn-based battle controller.

    Manages:
    - Battle start against one enemy
    - Simultaneous damage exchanges
    - Party switching on defeat and on request
    - Items and buffs
    - Capture, leveling and boss rewards on victory
    """

    def __init__(
        self,
        world: World,
        events: EventBus,
        progress: GameProgress,
        type_system: TypeSystem,
        config: Optional[BattleConfig] = None,
        rng: random.Random | None = None,
        mode: BattleMode = BattleMode.SINGLE,
        quest_templates: Optional[dict[str, dict[str, Any]]] = None,
    ):
        self.world = world
        self.events = events
        self.progress = progress
        self.type_system = type_system
        self.config = config or BattleConfig()
        self.rng = rng or random.Random()
        self.mode = mode
        self.quest_templates = quest_templates

        self.phase = BattlePhase.IDLE
        self.slot = BattleSlot()
        self._next_state = OuterState.OVERWORLD

    # Lifecycle

    def start_battle(self, enemy: Optional[Entity], camera: Any = None) -> BattleOutcome:
        """
        Start a battle against an enemy.

        The player's side is whoever is already in the slot, or roster
        ordinal 0 if the slot is empty. A missing combatant or camera
        concludes the battle at once and sends the game back to the
        overworld.

        Args:
            enemy: The monster to fight
            camera: The presentation layer's camera, checked only when
                config.require_camera is set
        """
        outcome = BattleOutcome()

        if self.phase != BattlePhase.IDLE:
            logger.warning(f"start_battle ignored, battle is {self.phase.name}")
            outcome.result = BattleResult.IGNORED
            outcome.next_state = self._current_outer_state()
            return outcome

        try:
            if self.config.require_camera and camera is None:
                raise NoCameraContext("no camera to stage the battle on")
            self._engage(enemy)
        except (MissingCombatant, NoCameraContext) as e:
            logger.error(f"Cannot start battle: {e}")
            self.slot.enemy = None
            self._conclude(outcome, BattleResult.FAILED)
            return outcome

        self.phase = BattlePhase.AWAITING_ACTION
        self.events.publish(
            BattleEvent.BATTLE_STARTED,
            player=self.slot.player,
            enemy=self.slot.enemy,
            boss=is_boss(self.slot.enemy),
        )
        logger.info(f"Battle started: {self.slot.player.name} vs {self.slot.enemy.name}")

        outcome.next_state = OuterState.BATTLE
        return outcome

    def _engage(self, enemy: Optional[Entity]) -> None:
        if enemy is None or not self.world.contains(enemy):
            raise MissingCombatant("no enemy to fight")

        player = self.slot.player
        if player is None or not self.progress.is_party_monster(player):
            player = self.progress.first_monster()
        if player is None:
            raise MissingCombatant("no party monster to fight with")

        try:
            self.progress.engage_enemy(enemy, MonsterStats.of(enemy))
        except (KeyError, ValueError) as e:
            raise MissingCombatant(f"{enemy.name} cannot fight: {e}") from e

        self.slot.player = player
        self.slot.enemy = enemy

    def end_battle(self) -> None:
        """
        Leave the battle screen.

        Called by the presentation layer once it has left the battle
        state. A battle still in progress is aborted first.
        """
        if self.phase == BattlePhase.AWAITING_ACTION:
            self._conclude(BattleOutcome(action=PlayerAction.ABORT), BattleResult.ABORTED, requip=False)

        self.world.flush()
        self.phase = BattlePhase.IDLE

    def teardown(self) -> None:
        """End of playthrough: forget the slot and all progression."""
        self.slot = BattleSlot()
        self.phase = BattlePhase.IDLE
        self.progress.reset()

    # Turn handling

    def handle(self, action: PlayerAction, opponent_action: Optional[CombatAction] = None) -> BattleOutcome:
        """
        Process one player action.

        Args:
            action: The player's choice this tick
            opponent_action: The remote side's action in a versus
                battle; ignored in single battles

        Returns:
            What happened, and which outer state to be in next
        """
        outcome = BattleOutcome(action=action)

        if self.phase != BattlePhase.AWAITING_ACTION:
            logger.warning(f"{action.name} ignored, no battle awaiting input ({self.phase.name})")
            outcome.result = BattleResult.IGNORED
            outcome.next_state = self._current_outer_state()
            return outcome

        self.phase = BattlePhase.RESOLVING
        try:
            self._dispatch(action, opponent_action, outcome)
        except MissingCombatant as e:
            logger.error(f"Battle abandoned: {e}")
            self._conclude(outcome, BattleResult.FAILED)
        except (InsufficientInventory, NoCycleTarget) as e:
            logger.debug(f"{action.name} did nothing: {e}")
            outcome.notice = str(e)

        if self.phase == BattlePhase.RESOLVING:
            self.phase = BattlePhase.AWAITING_ACTION

        outcome.next_state = self._current_outer_state()
        return outcome

    def _dispatch(
        self,
        action: PlayerAction,
        opponent_action: Optional[CombatAction],
        outcome: BattleOutcome,
    ) -> None:
        player, enemy = self._require_combatants()

        if not self.progress.stats_of(player).is_alive:
            # Already fell earlier and was counted when it did
            self._switch_or_end(player, outcome)
            return

        if action == PlayerAction.ABORT:
            self._conclude(outcome, BattleResult.ABORTED, requip=False)
        elif action == PlayerAction.CYCLE_MONSTER:
            self._cycle(player, outcome)
        elif action == PlayerAction.USE_HEAL_ITEM:
            self._use_heal_item(outcome)
        elif action == PlayerAction.USE_STRENGTH_BUFF:
            self._use_strength_buff(outcome)
        else:
            self._exchange(player, enemy, to_combat_action(action), opponent_action, outcome)

    def _require_combatants(self) -> tuple[Entity, Entity]:
        player, enemy = self.slot.player, self.slot.enemy

        if player is None or not self.progress.is_party_monster(player):
            raise MissingCombatant("no active player monster")
        if enemy is None or enemy not in self.progress.enemy_stats:
            raise MissingCombatant("no enemy present")

        return player, enemy

    def _exchange(
        self,
        player: Entity,
        enemy: Entity,
        player_action: CombatAction,
        opponent_action: Optional[CombatAction],
        outcome: BattleOutcome,
    ) -> None:
        """One simultaneous exchange of damage."""
        if self.mode == BattleMode.SINGLE:
            enemy_action = choose_enemy_action(self.rng)
        elif opponent_action is None:
            logger.error("Versus battle needs the opponent's action")
            outcome.result = BattleResult.IGNORED
            return
        else:
            enemy_action = opponent_action
        outcome.enemy_action = enemy_action

        player_stats = self.progress.stats_of(player)
        enemy_stats = self.progress.enemy_stats[enemy]

        bonus = 0
        if player_action != CombatAction.DEFEND and self.progress.buff_active(BuffKind.STRENGTH):
            self.progress.consume_buff_turn(BuffKind.STRENGTH)
            bonus = self.config.strength_buff_bonus

        player_stats.strength.atk += bonus
        try:
            result = resolve_exchange(
                player_stats, player_action, player_stats.element,
                enemy_stats, enemy_action, enemy_stats.element,
                self.type_system, self.rng, self.config.crit_roll_max,
            )
        finally:
            player_stats.strength.atk -= bonus

        enemy_stats.health.take_damage(result.damage_to_defender)
        player_stats.health.take_damage(result.damage_to_attacker)

        outcome.damage_to_enemy = result.damage_to_defender
        outcome.damage_to_player = result.damage_to_attacker
        outcome.player_crit = result.attacker_crit
        outcome.enemy_crit = result.defender_crit

        logger.debug(
            f"{player.name} {player_action.name} -> {result.damage_to_defender}, "
            f"{enemy.name} {enemy_action.name} -> {result.damage_to_attacker}"
        )
        self.events.publish(
            BattleEvent.TURN_RESOLVED,
            player=player,
            enemy=enemy,
            player_action=player_action,
            enemy_action=enemy_action,
            damage_to_enemy=result.damage_to_defender,
            damage_to_player=result.damage_to_attacker,
        )

        if not player_stats.is_alive:
            self.progress.mark_fallen()
            self.events.publish(BattleEvent.MONSTER_DEFEATED, monster=player, party=True)

        if not enemy_stats.is_alive:
            self._victory(enemy, enemy_stats, outcome)
        elif not player_stats.is_alive:
            self._switch_or_end(player, outcome)

    # Switching

    def _switch_or_end(self, fallen: Entity, outcome: BattleOutcome) -> None:
        replacement = self.progress.next_living(fallen)
        if replacement is None:
            logger.info(f"{fallen.name} fell and no party monster can fight on")
            self._conclude(outcome, BattleResult.DEFEAT)
        else:
            self._switch_to(replacement, outcome)

    def _cycle(self, current: Entity, outcome: BattleOutcome) -> None:
        replacement = self.progress.next_living(current)
        if replacement is None:
            raise NoCycleTarget("nothing to cycle to")
        self._switch_to(replacement, outcome)

    def _switch_to(self, monster: Entity, outcome: BattleOutcome) -> None:
        previous = self.slot.player
        self.slot.player = monster
        outcome.switched_to = monster
        self.events.publish(BattleEvent.MONSTER_SWITCHED, previous=previous, current=monster)

    # Items

    def _use_heal_item(self, outcome: BattleOutcome) -> None:
        self.progress.use_item(ItemKind.HEAL)

        amount = self.progress.current_level * self.config.heal_per_level
        outcome.revived = self.progress.heal_party(amount)
        outcome.healed = amount

        self.events.publish(BattleEvent.ITEM_USED, item=ItemKind.HEAL, amount=amount, revived=outcome.revived)

    def _use_strength_buff(self, outcome: BattleOutcome) -> None:
        self.progress.use_item(ItemKind.STRENGTH_BUFF)
        self.progress.activate_buff(ITEM_BUFFS[ItemKind.STRENGTH_BUFF], self.config.buff_turns)

        self.events.publish(BattleEvent.ITEM_USED, item=ItemKind.STRENGTH_BUFF, turns=self.config.buff_turns)

    # Victory

    def _victory(self, enemy: Entity, enemy_stats: MonsterStats, outcome: BattleOutcome) -> None:
        self.events.publish(BattleEvent.MONSTER_DEFEATED, monster=enemy, party=False)

        if self.mode != BattleMode.SINGLE:
            # The opponent's monster belongs to the other player
            self._conclude(outcome, BattleResult.VICTORY)
            return

        boss = is_boss(enemy)

        self.progress.capture_enemy(enemy, self.config.capture_health_per_level)
        outcome.captured = enemy
        self.events.publish(BattleEvent.MONSTER_CAPTURED, monster=enemy)
        logger.info(f"Captured {enemy.name}")

        outcome.completed_quests = self.progress.get_quest_rewards(enemy_stats.element)
        self._apply_level_ups(2 if boss else 1, outcome)
        self.progress.win_battle()

        if boss:
            self._boss_rewards(enemy, outcome)

        self._conclude(outcome, BattleResult.VICTORY)

    def _apply_level_ups(self, times: int, outcome: BattleOutcome) -> None:
        """Level every living party monster, one level per application."""
        for monster in self.progress.living_party():
            for _ in range(times):
                self.progress.level_up(monster, 1)
            outcome.levels_gained[monster.id] = times
            self.events.publish(
                BattleEvent.LEVEL_UP,
                monster=monster,
                levels=times,
                level=self.progress.stats_of(monster).level.level,
            )

    def _boss_rewards(self, boss: Entity, outcome: BattleOutcome) -> None:
        self.progress.win_boss()
        boss.remove(Boss)

        quest = random_quest(self.rng, self.progress.current_level, self.quest_templates)
        outcome.npc = spawn_quest_npc(self.world, quest)
        outcome.npc_quest = quest
        outcome.boss_defeated = True

        self.events.publish(BattleEvent.BOSS_DEFEATED, monster=boss, npc=outcome.npc, quest=quest)
        logger.info(
            f"Boss {boss.name} defeated ({self.progress.num_boss_defeated}"
            f"/{self.config.bosses_to_win}), quest offered: {quest.name}"
        )

    # Conclusion

    def _conclude(self, outcome: BattleOutcome, result: BattleResult, requip: bool = True) -> None:
        """
        End the battle.

        Releases an uncaptured enemy, puts roster ordinal 0 back in the
        player slot (unless requip is False) and picks the next outer
        state.
        """
        enemy = self.slot.enemy
        if enemy is not None and self.progress.release_enemy(enemy) is not None:
            self.world.destroy_entity(enemy)

        if requip:
            self.slot.player = self.progress.first_monster()
        self.slot.enemy = None

        if self.mode != BattleMode.SINGLE:
            self._next_state = OuterState.MULTIPLAYER_MENU
        elif result == BattleResult.VICTORY and self.progress.is_game_won(self.config.bosses_to_win):
            self._next_state = OuterState.CREDITS
        else:
            self._next_state = OuterState.OVERWORLD

        outcome.result = result
        self.phase = BattlePhase.CONCLUDED

        self.events.publish(BattleEvent.BATTLE_ENDED, result=result, next_state=self._next_state)
        logger.info(f"Battle ended: {result.name}, next {self._next_state.name}")

    def _current_outer_state(self) -> OuterState:
        if self.phase in (BattlePhase.AWAITING_ACTION, BattlePhase.RESOLVING):
            return OuterState.BATTLE
        if self.phase == BattlePhase.CONCLUDED:
            return self._next_state
        return OuterState.OVERWORLD

    # Queries

    @property
    def outer_state(self) -> OuterState:
        """Game state the presentation layer should currently be in."""
        return self._current_outer_state()

    @property
    def is_active(self) -> bool:
        return self.phase in (BattlePhase.AWAITING_ACTION, BattlePhase.RESOLVING)

    @property
    def player(self) -> Optional[Entity]:
        return self.slot.player

    @property
    def enemy(self) -> Optional[Entity]:
        return self.slot.enemy

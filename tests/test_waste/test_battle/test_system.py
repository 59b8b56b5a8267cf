import pytest
from engine.core.entity import Entity
from waste.battle.actions import CombatAction, PlayerAction
from waste.battle.combatant import MonsterStats
from waste.battle.system import (
    BattleEvent,
    BattleMode,
    BattlePhase,
    BattleResult,
    BattleSystem,
    OuterState,
)
from waste.components import Boss, Element, Health, QuestGiver, Strength
from waste.config import BattleConfig
from waste.progression.items import BuffKind, ItemKind
from waste.progression.quests import Quest, QuestObjective, QuestReward
from waste.world.monsters import create_monster


def add_party(world, progress, name="Hero", element=Element.EARTH, **stats):
    stats.setdefault("atk", 12)
    stats.setdefault("defense", 5)
    monster = create_monster(world, name, element, **stats)
    progress.register_monster(monster, MonsterStats.of(monster))
    return monster

def add_enemy(world, name="Wild", element=Element.WATER, **stats):
    stats.setdefault("atk", 5)
    stats.setdefault("defense", 5)
    stats.setdefault("health", 30)
    return create_monster(world, name, element, **stats)

@pytest.fixture
def make_battle(world, event_bus, progress, type_system, scripted_rng):
    def _make(choices=(), rolls=(), config=None, **kwargs):
        return BattleSystem(
            world, event_bus, progress, type_system,
            config=config or BattleConfig(),
            rng=scripted_rng(choices, rolls),
            **kwargs,
        )
    return _make

@pytest.fixture
def battle_events(event_bus):
    received = []
    for event_type in BattleEvent:
        event_bus.subscribe(event_type, lambda e: received.append(e), weak=False)
    return received


# Starting

def test_start_battle(world, progress, make_battle, battle_events):
    hero = add_party(world, progress)
    enemy = add_enemy(world)
    battle = make_battle()

    outcome = battle.start_battle(enemy)

    assert outcome.result == BattleResult.CONTINUE
    assert outcome.next_state == OuterState.BATTLE
    assert battle.phase == BattlePhase.AWAITING_ACTION
    assert battle.is_active
    assert battle.player == hero
    assert battle.enemy == enemy
    assert enemy in progress.enemy_stats
    assert [e.type for e in battle_events] == [BattleEvent.BATTLE_STARTED]

def test_start_battle_twice_is_ignored(world, progress, make_battle):
    add_party(world, progress)
    battle = make_battle()
    battle.start_battle(add_enemy(world))

    outcome = battle.start_battle(add_enemy(world))

    assert outcome.result == BattleResult.IGNORED
    assert outcome.next_state == OuterState.BATTLE
    assert len(progress.enemy_stats) == 1

def test_start_without_enemy_fails(world, progress, make_battle):
    add_party(world, progress)
    battle = make_battle()

    outcome = battle.start_battle(None)

    assert outcome.result == BattleResult.FAILED
    assert outcome.next_state == OuterState.OVERWORLD
    assert battle.phase == BattlePhase.CONCLUDED

def test_start_without_party_fails(world, make_battle, caplog):
    battle = make_battle()

    outcome = battle.start_battle(add_enemy(world))

    assert outcome.result == BattleResult.FAILED
    assert outcome.next_state == OuterState.OVERWORLD
    assert "Cannot start battle" in caplog.text

def test_start_with_enemy_outside_world_fails(world, progress, make_battle):
    add_party(world, progress)
    battle = make_battle()

    outcome = battle.start_battle(Entity("Ghost"))

    assert outcome.result == BattleResult.FAILED

def test_start_with_statless_enemy_fails(world, progress, make_battle):
    add_party(world, progress)
    battle = make_battle()

    outcome = battle.start_battle(world.create_entity("Rock"))

    assert outcome.result == BattleResult.FAILED
    assert progress.enemy_stats == {}

def test_party_monster_cannot_be_the_enemy(world, progress, make_battle):
    hero = add_party(world, progress)
    battle = make_battle()

    outcome = battle.start_battle(hero)

    assert outcome.result == BattleResult.FAILED
    assert world.contains(hero)

def test_camera_required(world, progress, make_battle):
    add_party(world, progress)
    battle = make_battle(config=BattleConfig(require_camera=True))

    outcome = battle.start_battle(add_enemy(world))
    assert outcome.result == BattleResult.FAILED
    assert outcome.next_state == OuterState.OVERWORLD

    battle.end_battle()
    outcome = battle.start_battle(add_enemy(world), camera=object())
    assert outcome.next_state == OuterState.BATTLE


# Exchanges

def test_attack_into_defend(world, progress, make_battle):
    add_party(world, progress, atk=12, defense=5, crt=0)
    enemy = add_enemy(world, defense=7, crt_res=0)
    battle = make_battle(choices=[CombatAction.DEFEND])
    battle.start_battle(enemy)

    outcome = battle.handle(PlayerAction.ATTACK)

    assert outcome.enemy_action == CombatAction.DEFEND
    assert (outcome.damage_to_enemy, outcome.damage_to_player) == (0, 0)
    assert outcome.result == BattleResult.CONTINUE
    assert outcome.next_state == OuterState.BATTLE
    assert battle.phase == BattlePhase.AWAITING_ACTION

def test_attack_applies_damage(world, progress, make_battle, battle_events):
    hero = add_party(world, progress, atk=12, defense=5)
    enemy = add_enemy(world, atk=8, defense=5, health=20)
    battle = make_battle(choices=[CombatAction.ATTACK])
    battle.start_battle(enemy)

    outcome = battle.handle(PlayerAction.ATTACK)

    assert outcome.damage_to_enemy == 7
    assert outcome.damage_to_player == 3
    assert enemy.get(Health).health == 13
    assert hero.get(Health).health == 7

    turn = [e for e in battle_events if e.type == BattleEvent.TURN_RESOLVED]
    assert len(turn) == 1
    assert turn[0]["damage_to_enemy"] == 7

def test_elemental_attack_uses_type_chart(world, progress, make_battle):
    add_party(world, progress, element=Element.FIRE, atk=12)
    enemy = add_enemy(world, element=Element.GRASS)
    battle = make_battle(choices=[CombatAction.ATTACK])
    battle.start_battle(enemy)

    outcome = battle.handle(PlayerAction.ELEMENTAL_ATTACK)

    assert outcome.damage_to_enemy == 14

def test_player_crit_is_reported(world, progress, make_battle):
    add_party(world, progress, atk=12, crt=50)
    enemy = add_enemy(world)
    battle = make_battle(choices=[CombatAction.ATTACK], rolls=[0])
    battle.start_battle(enemy)

    outcome = battle.handle(PlayerAction.ATTACK)

    assert outcome.player_crit
    assert not outcome.enemy_crit
    assert outcome.damage_to_enemy == 14

def test_player_defend(world, progress, make_battle):
    hero = add_party(world, progress)
    enemy = add_enemy(world, atk=50)
    battle = make_battle(choices=[CombatAction.ATTACK])
    battle.start_battle(enemy)

    outcome = battle.handle(PlayerAction.DEFEND)

    assert (outcome.damage_to_enemy, outcome.damage_to_player) == (0, 0)
    assert hero.get(Health).health == 10


# Victory

def test_defeating_wild_enemy_captures_it(world, progress, make_battle):
    hero = add_party(world, progress)
    enemy = add_enemy(world, health=5)
    battle = make_battle(choices=[CombatAction.ATTACK])
    battle.start_battle(enemy)

    outcome = battle.handle(PlayerAction.ATTACK)

    assert outcome.result == BattleResult.VICTORY
    assert outcome.next_state == OuterState.OVERWORLD
    assert outcome.captured == enemy
    assert not outcome.boss_defeated
    assert not outcome.spawn_npc
    assert progress.roster_size == 2
    assert progress.num_boss_defeated == 0
    assert progress.battles_won == 1
    assert progress.current_level == 2
    assert progress.enemy_stats == {}
    assert outcome.levels_gained == {hero.id: 1, enemy.id: 1}
    assert list(world.get_entities_with_tag("npc")) == []

    battle.end_battle()
    assert world.contains(enemy)
    assert battle.phase == BattlePhase.IDLE

def test_both_monsters_fall_in_one_exchange(world, progress, make_battle, battle_events):
    hero = add_party(world, progress, health=5)
    enemy = add_enemy(world, atk=20, health=5)
    battle = make_battle(choices=[CombatAction.ATTACK])
    battle.start_battle(enemy)

    outcome = battle.handle(PlayerAction.ATTACK)

    assert outcome.result == BattleResult.VICTORY
    assert outcome.captured == enemy
    assert hero.get(Health).health <= 0
    # Only the newly captured monster is standing
    assert progress.roster_size == 2
    assert progress.num_living_monsters == 1
    assert hero.id not in outcome.levels_gained
    assert BattleEvent.MONSTER_DEFEATED in [e.type for e in battle_events]

    assert progress.heal_party(40) == [hero]
    assert progress.num_living_monsters == 2

def test_captured_monster_is_resized(world, progress, make_battle):
    add_party(world, progress)
    enemy = add_enemy(world, health=5, atk=5)
    enemy.get(Health).max_health = 80
    progress.current_level = 3
    battle = make_battle(choices=[CombatAction.ATTACK])
    battle.start_battle(enemy)

    battle.handle(PlayerAction.ATTACK)

    # Clamped to 3 * 10, then one level up adds 10
    stats = progress.stats_of(enemy)
    assert stats.max_hp == 40
    assert stats.current_hp == 40

def test_defeating_boss(world, progress, make_battle, battle_events):
    hero = add_party(world, progress, atk=12, defense=5, crt=0)
    boss = add_enemy(world, "Warlord", health=5, boss=True)
    battle = make_battle(choices=[CombatAction.ATTACK])
    battle.start_battle(boss)

    outcome = battle.handle(PlayerAction.ATTACK)

    assert outcome.result == BattleResult.VICTORY
    assert outcome.captured == boss
    assert outcome.boss_defeated
    assert outcome.spawn_npc
    assert progress.num_boss_defeated == 1
    assert progress.roster_size == 2
    assert not boss.has(Boss)

    # Two separate level ups for every living party monster
    assert outcome.levels_gained == {hero.id: 2, boss.id: 2}
    hero_stats = progress.stats_of(hero)
    assert hero_stats.level.level == 3
    assert hero_stats.max_hp == 30
    assert hero_stats.current_hp == 30
    assert hero.get(Strength).atk == 16
    assert progress.stats_of(boss).max_hp == 30

    npc = outcome.npc
    assert npc.has_tag("npc")
    assert npc.get(QuestGiver).quest is outcome.npc_quest
    assert outcome.npc_quest.objectives[0].element == Element.FIRE

    types = [e.type for e in battle_events]
    assert types == [
        BattleEvent.BATTLE_STARTED,
        BattleEvent.TURN_RESOLVED,
        BattleEvent.MONSTER_DEFEATED,
        BattleEvent.MONSTER_CAPTURED,
        BattleEvent.LEVEL_UP,
        BattleEvent.LEVEL_UP,
        BattleEvent.BOSS_DEFEATED,
        BattleEvent.BATTLE_ENDED,
    ]

def test_last_boss_rolls_credits(world, progress, make_battle):
    add_party(world, progress)
    progress.num_boss_defeated = 4
    battle = make_battle(choices=[CombatAction.ATTACK])
    battle.start_battle(add_enemy(world, health=5, boss=True))

    outcome = battle.handle(PlayerAction.ATTACK)

    assert outcome.result == BattleResult.VICTORY
    assert outcome.next_state == OuterState.CREDITS
    assert progress.is_game_won(5)

def test_victory_completes_quests(world, progress, make_battle):
    add_party(world, progress)
    quest = Quest(
        id="hunt",
        name="Hunt",
        objectives=[QuestObjective(element=Element.WATER)],
        rewards=QuestReward(items={ItemKind.HEAL: 2}),
    )
    progress.accept_quest(quest)
    battle = make_battle(choices=[CombatAction.ATTACK])
    battle.start_battle(add_enemy(world, element=Element.WATER, health=5))

    outcome = battle.handle(PlayerAction.ATTACK)

    assert outcome.completed_quests == [quest]
    assert progress.item_count(ItemKind.HEAL) == 2

def test_slot_reequips_first_monster(world, progress, make_battle):
    hero = add_party(world, progress)
    sidekick = add_party(world, progress, "Sidekick")
    battle = make_battle(choices=[CombatAction.ATTACK])
    battle.start_battle(add_enemy(world, health=5))

    battle.handle(PlayerAction.CYCLE_MONSTER)
    assert battle.player == sidekick

    battle.handle(PlayerAction.ATTACK)
    assert battle.player == hero


# Defeat

def test_fallen_monster_cycles_to_next(world, progress, make_battle, battle_events):
    hero = add_party(world, progress, atk=1, defense=0, health=5)
    sidekick = add_party(world, progress, "Sidekick")
    enemy = add_enemy(world, atk=20, defense=50, health=100)
    battle = make_battle(choices=[CombatAction.ATTACK])
    battle.start_battle(enemy)

    outcome = battle.handle(PlayerAction.ATTACK)

    assert outcome.result == BattleResult.CONTINUE
    assert outcome.switched_to == sidekick
    assert battle.player == sidekick
    assert progress.num_living_monsters == 1
    assert not progress.stats_of(hero).is_alive

    types = [e.type for e in battle_events]
    assert BattleEvent.MONSTER_DEFEATED in types
    assert BattleEvent.MONSTER_SWITCHED in types

def test_last_monster_falling_ends_in_defeat(world, progress, make_battle):
    hero = add_party(world, progress, atk=1, defense=0, health=5)
    enemy = add_enemy(world, atk=20, defense=50, health=100)
    battle = make_battle(choices=[CombatAction.ATTACK])
    battle.start_battle(enemy)

    outcome = battle.handle(PlayerAction.ATTACK)

    assert outcome.result == BattleResult.DEFEAT
    assert outcome.next_state == OuterState.OVERWORLD
    assert outcome.damage_to_player == 20
    assert progress.num_living_monsters == 0
    assert progress.roster_size == 1
    assert progress.stats_of(hero).level.level == 1
    assert battle.player == hero
    assert battle.enemy is None
    assert world.is_pending_destroy(enemy)

    battle.end_battle()
    assert not world.contains(enemy)

def test_pre_turn_check_switches_dead_monster(world, progress, make_battle):
    hero = add_party(world, progress)
    sidekick = add_party(world, progress, "Sidekick")
    enemy = add_enemy(world)
    battle = make_battle()
    battle.start_battle(enemy)
    hero.get(Health).health = 0

    outcome = battle.handle(PlayerAction.ATTACK)

    assert outcome.switched_to == sidekick
    assert outcome.enemy_action is None
    assert enemy.get(Health).health == 30
    # Counted when it fell, not again here
    assert progress.num_living_monsters == 2

def test_pre_turn_check_without_replacement_is_defeat(world, progress, make_battle):
    hero = add_party(world, progress)
    battle = make_battle()
    battle.start_battle(add_enemy(world))
    hero.get(Health).health = -3

    outcome = battle.handle(PlayerAction.USE_HEAL_ITEM)

    assert outcome.result == BattleResult.DEFEAT


# Abort and cycling

def test_abort(world, progress, make_battle):
    add_party(world, progress)
    sidekick = add_party(world, progress, "Sidekick")
    enemy = add_enemy(world)
    battle = make_battle()
    battle.start_battle(enemy)
    battle.handle(PlayerAction.CYCLE_MONSTER)

    outcome = battle.handle(PlayerAction.ABORT)

    assert outcome.result == BattleResult.ABORTED
    assert outcome.next_state == OuterState.OVERWORLD
    assert outcome.captured is None
    assert progress.enemy_stats == {}
    assert progress.roster_size == 2
    assert progress.current_level == 1
    assert battle.player == sidekick
    assert world.is_pending_destroy(enemy)

def test_actions_after_conclusion_are_ignored(world, progress, make_battle):
    add_party(world, progress)
    battle = make_battle()
    battle.start_battle(add_enemy(world))
    battle.handle(PlayerAction.ABORT)

    outcome = battle.handle(PlayerAction.ATTACK)

    assert outcome.result == BattleResult.IGNORED
    assert outcome.next_state == OuterState.OVERWORLD

def test_handle_without_battle_is_ignored(make_battle):
    outcome = make_battle().handle(PlayerAction.ATTACK)

    assert outcome.result == BattleResult.IGNORED
    assert outcome.next_state == OuterState.OVERWORLD

def test_cycle_with_nobody_to_cycle_to(world, progress, make_battle):
    hero = add_party(world, progress)
    fallen = add_party(world, progress, "Fallen")
    fallen.get(Health).health = 0
    progress.mark_fallen()
    battle = make_battle()
    battle.start_battle(add_enemy(world))

    outcome = battle.handle(PlayerAction.CYCLE_MONSTER)

    assert outcome.notice == "nothing to cycle to"
    assert outcome.result == BattleResult.CONTINUE
    assert outcome.switched_to is None
    assert battle.player == hero
    assert battle.phase == BattlePhase.AWAITING_ACTION

def test_cycle_wraps_around(world, progress, make_battle):
    hero = add_party(world, progress)
    sidekick = add_party(world, progress, "Sidekick")
    battle = make_battle()
    battle.start_battle(add_enemy(world))

    assert battle.handle(PlayerAction.CYCLE_MONSTER).switched_to == sidekick
    assert battle.handle(PlayerAction.CYCLE_MONSTER).switched_to == hero


# Items

def test_heal_item_without_stock(world, progress, make_battle):
    add_party(world, progress)
    battle = make_battle()
    battle.start_battle(add_enemy(world))

    outcome = battle.handle(PlayerAction.USE_HEAL_ITEM)

    assert outcome.notice == "No heal items left"
    assert outcome.result == BattleResult.CONTINUE
    assert battle.phase == BattlePhase.AWAITING_ACTION

def test_heal_item_revives_fallen(world, progress, make_battle):
    hero = add_party(world, progress)
    fallen = add_party(world, progress, "Fallen")
    fallen.get(Health).health = -2
    progress.mark_fallen()
    progress.add_item(ItemKind.HEAL)
    battle = make_battle()
    battle.start_battle(add_enemy(world))

    outcome = battle.handle(PlayerAction.USE_HEAL_ITEM)

    assert outcome.healed == 3
    assert outcome.revived == [fallen]
    assert outcome.enemy_action is None
    assert fallen.get(Health).health == 1
    assert hero.get(Health).health == 10
    assert progress.num_living_monsters == 2
    assert progress.item_count(ItemKind.HEAL) == 0

def test_heal_scales_with_level(world, progress, make_battle):
    hero = add_party(world, progress, health=40)
    hero.get(Health).health = 1
    progress.current_level = 4
    progress.add_item(ItemKind.HEAL)
    battle = make_battle()
    battle.start_battle(add_enemy(world))

    battle.handle(PlayerAction.USE_HEAL_ITEM)

    assert hero.get(Health).health == 13

def test_strength_buff(world, progress, make_battle):
    hero = add_party(world, progress, atk=12)
    enemy = add_enemy(world)
    progress.add_item(ItemKind.STRENGTH_BUFF)
    battle = make_battle(choices=[CombatAction.ATTACK])
    battle.start_battle(enemy)

    outcome = battle.handle(PlayerAction.USE_STRENGTH_BUFF)
    assert outcome.enemy_action is None
    assert progress.turns_left_of_buff[BuffKind.STRENGTH] == 5
    assert progress.item_count(ItemKind.STRENGTH_BUFF) == 0

    outcome = battle.handle(PlayerAction.ATTACK)
    assert outcome.damage_to_enemy == 12
    assert hero.get(Strength).atk == 12
    assert progress.turns_left_of_buff[BuffKind.STRENGTH] == 4

def test_strength_buff_without_stock(world, progress, make_battle):
    add_party(world, progress)
    battle = make_battle()
    battle.start_battle(add_enemy(world))

    outcome = battle.handle(PlayerAction.USE_STRENGTH_BUFF)

    assert outcome.notice == "No strength_buff items left"
    assert not progress.buff_active(BuffKind.STRENGTH)

def test_defend_keeps_buff_charge(world, progress, make_battle):
    add_party(world, progress)
    progress.activate_buff(BuffKind.STRENGTH, 5)
    battle = make_battle(choices=[CombatAction.ATTACK])
    battle.start_battle(add_enemy(world))

    battle.handle(PlayerAction.DEFEND)

    assert progress.turns_left_of_buff[BuffKind.STRENGTH] == 5


# Failures mid-battle

def test_missing_enemy_mid_battle(world, progress, make_battle, caplog):
    add_party(world, progress)
    battle = make_battle()
    battle.start_battle(add_enemy(world))
    battle.slot.enemy = None

    outcome = battle.handle(PlayerAction.ATTACK)

    assert outcome.result == BattleResult.FAILED
    assert outcome.next_state == OuterState.OVERWORLD
    assert "Battle abandoned" in caplog.text


# Versus battles

def test_versus_victory_does_not_capture(world, progress, make_battle):
    hero = add_party(world, progress)
    enemy = add_enemy(world, health=5)
    battle = make_battle(mode=BattleMode.VERSUS)
    battle.start_battle(enemy)

    outcome = battle.handle(PlayerAction.ATTACK, CombatAction.ATTACK)

    assert outcome.result == BattleResult.VICTORY
    assert outcome.next_state == OuterState.MULTIPLAYER_MENU
    assert outcome.enemy_action == CombatAction.ATTACK
    assert outcome.captured is None
    assert progress.roster_size == 1
    assert progress.battles_won == 0
    assert progress.stats_of(hero).level.level == 1

def test_versus_uses_opponent_action(world, progress, make_battle):
    add_party(world, progress)
    battle = make_battle(mode=BattleMode.VERSUS)
    battle.start_battle(add_enemy(world))

    outcome = battle.handle(PlayerAction.ATTACK, CombatAction.DEFEND)

    assert outcome.enemy_action == CombatAction.DEFEND
    assert outcome.damage_to_enemy == 0

def test_versus_without_opponent_action_is_ignored(world, progress, make_battle):
    add_party(world, progress)
    battle = make_battle(mode=BattleMode.VERSUS)
    battle.start_battle(add_enemy(world))

    outcome = battle.handle(PlayerAction.ATTACK)

    assert outcome.result == BattleResult.IGNORED
    assert outcome.next_state == OuterState.BATTLE
    assert battle.phase == BattlePhase.AWAITING_ACTION


# Lifecycle

def test_end_battle_aborts_active_battle(world, progress, make_battle):
    add_party(world, progress)
    enemy = add_enemy(world)
    battle = make_battle()
    battle.start_battle(enemy)

    battle.end_battle()

    assert battle.phase == BattlePhase.IDLE
    assert not world.contains(enemy)
    assert battle.start_battle(add_enemy(world)).next_state == OuterState.BATTLE

def test_teardown(world, progress, make_battle):
    add_party(world, progress)
    battle = make_battle()
    battle.start_battle(add_enemy(world))

    battle.teardown()

    assert battle.phase == BattlePhase.IDLE
    assert battle.player is None
    assert progress.roster_size == 0
    assert progress.current_level == 1

"""
Turn resolver - one simultaneous exchange of damage.

Both combatants act in the same exchange; there is no initiative.
The resolver is stateless: temporary buffs are applied by the caller
around the call.
"""

from __future__ import annotations

import math
import random
from dataclasses import dataclass

from waste.battle.actions import CombatAction
from waste.battle.combatant import MonsterStats
from waste.battle.types import TypeSystem
from waste.components import Element

CRIT_ROLL_MAX = 100


@dataclass(frozen=True)
class ExchangeResult:
    """Damage dealt in both directions of one exchange."""
    damage_to_defender: int = 0
    damage_to_attacker: int = 0
    attacker_crit: bool = False
    defender_crit: bool = False


def _strike(
    acting: MonsterStats,
    action: CombatAction,
    acting_type: Element,
    target: MonsterStats,
    target_type: Element,
    type_table: TypeSystem,
    rng,
    roll_max: int,
) -> tuple[int, bool]:
    """Damage from one side onto the other, and whether it crit."""
    damage = max(0, acting.strength.atk - target.defense.defense)

    is_crit = False
    if acting.strength.crt > target.defense.crt_res:
        crit_chance = acting.strength.crt - target.defense.crt_res
        if rng.randint(0, roll_max) <= crit_chance:
            damage *= acting.strength.crt_dmg
            is_crit = True

    if action == CombatAction.ELEMENTAL:
        damage = math.trunc(damage * type_table.effectiveness(acting_type, target_type))

    return damage, is_crit


def resolve_exchange(
    attacker_stats: MonsterStats,
    attacker_action: CombatAction,
    attacker_type: Element,
    defender_stats: MonsterStats,
    defender_action: CombatAction,
    defender_type: Element,
    type_table: TypeSystem,
    rng: random.Random | None = None,
    roll_max: int = CRIT_ROLL_MAX,
) -> ExchangeResult:
    """
    Resolve one exchange, reporting critical hits as well as damage.

    A DEFEND from either side cancels all damage this exchange and
    draws no random numbers. Otherwise the attacker's critical roll is
    drawn before the defender's, and each roll is only drawn when that
    side's crit exceeds the other's crit resistance.
    """
    if CombatAction.DEFEND in (attacker_action, defender_action):
        return ExchangeResult()

    rng = rng or random

    to_defender, attacker_crit = _strike(
        attacker_stats, attacker_action, attacker_type,
        defender_stats, defender_type, type_table, rng, roll_max,
    )
    to_attacker, defender_crit = _strike(
        defender_stats, defender_action, defender_type,
        attacker_stats, attacker_type, type_table, rng, roll_max,
    )

    return ExchangeResult(
        damage_to_defender=to_defender,
        damage_to_attacker=to_attacker,
        attacker_crit=attacker_crit,
        defender_crit=defender_crit,
    )


def resolve_turn(
    attacker_stats: MonsterStats,
    attacker_action: CombatAction,
    attacker_type: Element,
    defender_stats: MonsterStats,
    defender_action: CombatAction,
    defender_type: Element,
    type_table: TypeSystem,
    rng: random.Random | None = None,
) -> tuple[int, int]:
    """
    Resolve one exchange.

    Returns:
        (damage_to_defender, damage_to_attacker)
    """
    result = resolve_exchange(
        attacker_stats, attacker_action, attacker_type,
        defender_stats, defender_action, defender_type,
        type_table, rng,
    )
    return result.damage_to_defender, result.damage_to_attacker

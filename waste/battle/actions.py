"""
Battle actions - what the player and the enemy can do in one tick.
"""

from __future__ import annotations

import random
from enum import Enum, auto


class PlayerAction(Enum):
    """Player input, one per tick."""
    ATTACK = auto()
    ELEMENTAL_ATTACK = auto()
    DEFEND = auto()
    ABORT = auto()
    CYCLE_MONSTER = auto()
    USE_HEAL_ITEM = auto()
    USE_STRENGTH_BUFF = auto()


class CombatAction(Enum):
    """What a combatant does in a damage exchange."""
    ATTACK = auto()
    DEFEND = auto()
    ELEMENTAL = auto()
    SPECIAL = auto()


# The enemy picks uniformly from every combat action.
# SPECIAL is reported but currently resolves like ATTACK.
EnemyAction = CombatAction

ENEMY_ACTIONS: tuple[CombatAction, ...] = tuple(CombatAction)


_EXCHANGE_ACTIONS = {
    PlayerAction.ATTACK: CombatAction.ATTACK,
    PlayerAction.ELEMENTAL_ATTACK: CombatAction.ELEMENTAL,
    PlayerAction.DEFEND: CombatAction.DEFEND,
}


def to_combat_action(action: PlayerAction) -> CombatAction | None:
    """Combat action for a player action, or None if it doesn't trigger an exchange."""
    return _EXCHANGE_ACTIONS.get(action)


def choose_enemy_action(rng: random.Random | None = None) -> CombatAction:
    """Pick the enemy's action uniformly at random."""
    return (rng or random).choice(ENEMY_ACTIONS)

"""
Battle module - turn-based monster battles.

Provides:
- Elemental type chart
- Player and enemy actions
- Simultaneous damage resolution
- Battle state machine (capture, leveling, boss rewards)
"""

from waste.battle.types import TypeSystem
from waste.battle.actions import (
    PlayerAction,
    CombatAction,
    EnemyAction,
    choose_enemy_action,
)
from waste.battle.combatant import MonsterStats, is_boss
from waste.battle.errors import (
    BattleError,
    MissingCombatant,
    NoCameraContext,
    InsufficientInventory,
    NoCycleTarget,
)
from waste.battle.resolver import ExchangeResult, resolve_exchange, resolve_turn
from waste.battle.system import (
    BattleSystem,
    BattlePhase,
    BattleMode,
    BattleResult,
    BattleEvent,
    BattleSlot,
    BattleOutcome,
    OuterState,
)

__all__ = [
    # Types
    "TypeSystem",
    # Actions
    "PlayerAction",
    "CombatAction",
    "EnemyAction",
    "choose_enemy_action",
    # Combatants
    "MonsterStats",
    "is_boss",
    # Errors
    "BattleError",
    "MissingCombatant",
    "NoCameraContext",
    "InsufficientInventory",
    "NoCycleTarget",
    # Resolver
    "ExchangeResult",
    "resolve_exchange",
    "resolve_turn",
    # System
    "BattleSystem",
    "BattlePhase",
    "BattleMode",
    "BattleResult",
    "BattleEvent",
    "BattleSlot",
    "BattleOutcome",
    "OuterState",
]

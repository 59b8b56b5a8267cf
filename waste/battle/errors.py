"""
Battle errors.

None of these escape BattleSystem: missing combatants and a missing
camera end the battle and send the game back to the overworld, and
the rest are reported to the player as notices.
"""

from __future__ import annotations


class BattleError(Exception):
    """Base class for battle core errors."""


class MissingCombatant(BattleError):
    """No active player monster or no enemy to fight."""


class NoCameraContext(BattleError):
    """The presentation layer has no camera to stage the battle on."""


class InsufficientInventory(BattleError):
    """An item was used with none left."""

    def __init__(self, item):
        super().__init__(f"No {item.name.lower()} items left")
        self.item = item


class NoCycleTarget(BattleError):
    """No other living monster to switch to."""

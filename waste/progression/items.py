"""
Inventory item and buff kinds.

Both enums double as indices into the fixed-size inventory and buff
arrays kept by GameProgress.
"""

from __future__ import annotations

from enum import IntEnum


class ItemKind(IntEnum):
    """Consumable items the player can carry."""
    HEAL = 0
    STRENGTH_BUFF = 1

    @classmethod
    def from_name(cls, name: str) -> ItemKind:
        """Look up by data-file name, e.g. "strength_buff"."""
        return cls[name.upper()]


class BuffKind(IntEnum):
    """Timed buffs on the player's side."""
    STRENGTH = 0


# Which buff an item activates
ITEM_BUFFS: dict[ItemKind, BuffKind] = {
    ItemKind.STRENGTH_BUFF: BuffKind.STRENGTH,
}

"""
Waste game core.

Provides the battle and progression rules built on top of the engine:
- Components (data-only, Pydantic models)
- Battle (type chart, turn resolver, battle state machine)
- Progression (roster ledger, items, quests)
- World (monster and NPC factories)
"""

__version__ = "0.1.0"

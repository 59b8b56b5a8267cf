"""
Stat gains per level.

Shared by the ledger (leveling roster monsters) and the monster
factories (scaling wild enemies to the current level).
"""

LEVEL_HEALTH_GAIN = 10
LEVEL_ATK_GAIN = 2
LEVEL_CRT_GAIN = 5
LEVEL_DEFENSE_GAIN = 1

"""
Battle and progression tuning.
"""

from __future__ import annotations

from pathlib import Path


DEFAULT_DATA_PATH = Path(__file__).parent / "data"


class BattleConfig:
    """Configuration for the battle core."""

    def __init__(
        self,
        heal_per_level: int = 3,
        buff_turns: int = 5,
        strength_buff_bonus: int = 5,
        capture_health_per_level: int = 10,
        crit_roll_max: int = 100,
        bosses_to_win: int = 5,
        require_camera: bool = False,
        data_path: Path | str = DEFAULT_DATA_PATH,
    ):
        self.heal_per_level = heal_per_level
        self.buff_turns = buff_turns
        self.strength_buff_bonus = strength_buff_bonus
        self.capture_health_per_level = capture_health_per_level
        self.crit_roll_max = crit_roll_max
        self.bosses_to_win = bosses_to_win
        self.require_camera = require_camera
        self.data_path = Path(data_path)

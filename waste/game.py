"""
Playthrough wiring.

A Playthrough owns everything one run of the game needs: the world,
the event bus, the static data, the progression ledger and the battle
system. The presentation layer creates one at "new game", drives it
with encounter() and BattleSystem.handle(), and calls teardown() when
the run is over.

Usage:
    game = Playthrough()
    game.start()

    outcome = game.encounter()
    while outcome.next_state == OuterState.BATTLE:
        outcome = game.battle.handle(read_player_action())
    game.battle.end_battle()
"""

from __future__ import annotations

import logging
import random
from typing import Any, Optional

from engine.core import Entity, EventBus, World
from engine.resources import Database
from waste.battle.system import (
    BattleMode,
    BattleOutcome,
    BattlePhase,
    BattleResult,
    BattleSystem,
)
from waste.battle.types import TypeSystem
from waste.config import BattleConfig
from waste.progression.ledger import GameProgress
from waste.world.monsters import create_starter, spawn_enemy


logger = logging.getLogger(__name__)


class Playthrough:
    """
    One run of the game, from starter monster to credits.

    Attributes:
        config: Battle tuning
        events: Event bus shared by the world and the battle system
        world: Every monster and NPC entity of the run
        database: Static data (type charts, species, quest templates)
        type_system: The loaded type chart
        progress: The progression ledger
        battle: The battle state machine
    """

    def __init__(
        self,
        config: Optional[BattleConfig] = None,
        rng: random.Random | None = None,
        mode: BattleMode = BattleMode.SINGLE,
        database: Optional[Database] = None,
    ):
        self.config = config or BattleConfig()
        self.rng = rng or random.Random()

        self.events = EventBus()
        self.world = World(self.events)

        if database is None:
            database = Database(self.config.data_path)
            database.load_all()
        self.database = database

        self.type_system = self._load_type_system()
        self.progress = GameProgress()
        self.battle = BattleSystem(
            self.world,
            self.events,
            self.progress,
            self.type_system,
            config=self.config,
            rng=self.rng,
            mode=mode,
            quest_templates=self.database.quests or None,
        )

    def _load_type_system(self) -> TypeSystem:
        record = self.database.get_type_chart()
        if record is None:
            logger.warning("No type chart loaded, every matchup is neutral")
            return TypeSystem.neutral()
        return TypeSystem.from_data(record)

    @property
    def species(self) -> dict[str, dict[str, Any]]:
        return self.database.species

    def start(self, species_id: Optional[str] = None) -> Entity:
        """
        Create the starter monster.

        Args:
            species_id: Database species for the starter, the built-in
                starter if omitted or unknown
        """
        species = self.database.get_species(species_id) if species_id else None
        starter = create_starter(self.world, self.progress, species)
        logger.info(f"New playthrough with {starter.name}")
        return starter

    def encounter(self, boss: bool = False, camera: Any = None) -> BattleOutcome:
        """
        Spawn a wild enemy scaled to the current level and fight it.

        Nothing is spawned while another battle has not been ended.
        """
        if self.battle.phase != BattlePhase.IDLE:
            logger.warning(f"encounter ignored, battle is {self.battle.phase.name}")
            return BattleOutcome(result=BattleResult.IGNORED, next_state=self.battle.outer_state)

        enemy = spawn_enemy(
            self.world,
            self.progress,
            rng=self.rng,
            species_pool=self.species or None,
            boss=boss,
        )
        return self.battle.start_battle(enemy, camera)

    def teardown(self) -> None:
        """End of the run: forget progression and drop every entity."""
        self.battle.teardown()
        self.world.clear()

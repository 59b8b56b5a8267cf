"""
Game Database.

Handles loading and validation of static game data: type charts,
monster species and quest templates.

Layout under the data path:
    schemas/<name>.schema.json
    database/<category>/*.json   (a record or a list of records, keyed by "id")
"""

import json
import logging
from pathlib import Path
from typing import Any

import jsonschema


class Database:
    """
    Central storage for static game data.

    Records that fail schema validation are logged and skipped; a
    category without a schema is not loaded at all.
    """

    CATEGORIES = {
        "type_charts": "type_chart.schema.json",
        "species": "species.schema.json",
        "quests": "quest.schema.json",
    }

    def __init__(self, data_path: Path | str):
        self._data_path = Path(data_path)
        self._schemas: dict[str, Any] = {}

        self.type_charts: dict[str, Any] = {}
        self.species: dict[str, Any] = {}
        self.quests: dict[str, Any] = {}

        self.logger = logging.getLogger(__name__)

    def load_all(self) -> None:
        """Load all data from disk."""
        self._load_schemas()

        for folder, schema_name in self.CATEGORIES.items():
            setattr(self, folder, self._load_category(folder, schema_name))

        self.logger.info(
            f"Loaded {len(self.type_charts)} type charts, "
            f"{len(self.species)} species, "
            f"{len(self.quests)} quest templates."
        )

    def _load_schemas(self) -> None:
        schema_dir = self._data_path / "schemas"
        if not schema_dir.exists():
            self.logger.warning(f"Schema directory not found: {schema_dir}")
            return

        for schema_file in schema_dir.glob("*.schema.json"):
            try:
                with open(schema_file, 'r', encoding='utf-8') as f:
                    self._schemas[schema_file.name] = json.load(f)
            except (OSError, json.JSONDecodeError) as e:
                self.logger.error(f"Failed to load schema {schema_file}: {e}")

    def _load_category(self, folder: str, schema_name: str) -> dict[str, Any]:
        """Load all JSON files in a category folder."""
        category_dir = self._data_path / "database" / folder
        data_store: dict[str, Any] = {}

        if not category_dir.exists():
            self.logger.warning(f"Data directory not found: {category_dir}")
            return data_store

        schema = self._schemas.get(schema_name)
        if not schema:
            self.logger.warning(f"No schema found for {folder} ({schema_name})")
            return data_store

        for file_path in sorted(category_dir.glob("*.json")):
            try:
                with open(file_path, 'r', encoding='utf-8') as f:
                    data = json.load(f)
            except (OSError, json.JSONDecodeError) as e:
                self.logger.error(f"Failed to load {file_path}: {e}")
                continue

            records = data if isinstance(data, list) else [data]
            for record in records:
                try:
                    jsonschema.validate(instance=record, schema=schema)
                except jsonschema.ValidationError as e:
                    self.logger.error(f"Validation error in {file_path}: {e.message}")
                    continue
                data_store[record['id']] = record

        return data_store

    def get_type_chart(self, chart_id: str = "default") -> dict[str, Any] | None:
        return self.type_charts.get(chart_id)

    def get_species(self, species_id: str) -> dict[str, Any] | None:
        return self.species.get(species_id)

"""
Type effectiveness table.

A square matrix of multipliers indexed by [attacker element][defender
element]. The matrix need not be symmetric: fire beating grass says
nothing about how grass fares against fire.
"""

from __future__ import annotations

from typing import Any

from pydantic import BaseModel, ConfigDict, field_validator

from waste.components.monster import Element


class TypeSystem(BaseModel):
    """
    Immutable elemental effectiveness table.

    Rows and columns follow the declaration order of Element. The
    table is validated total and non-negative on construction and
    is frozen afterwards, so it can be shared freely.
    """

    model_config = ConfigDict(frozen=True)

    modifiers: tuple[tuple[float, ...], ...]

    @field_validator("modifiers")
    @classmethod
    def _check_square(cls, value: tuple[tuple[float, ...], ...]):
        size = len(Element)
        if len(value) != size:
            raise ValueError(f"type chart needs {size} rows, got {len(value)}")
        for row in value:
            if len(row) != size:
                raise ValueError(f"type chart rows need {size} entries, got {len(row)}")
            if any(m < 0 for m in row):
                raise ValueError("type chart multipliers must be >= 0")
        return value

    def effectiveness(self, attacker: Element, defender: Element) -> float:
        """Multiplier applied to an elemental attack from attacker onto defender."""
        return self.modifiers[attacker.index][defender.index]

    @classmethod
    def neutral(cls) -> TypeSystem:
        """Table where every matchup is 1.0."""
        size = len(Element)
        return cls(modifiers=tuple((1.0,) * size for _ in range(size)))

    @classmethod
    def from_data(cls, record: dict[str, Any]) -> TypeSystem:
        """
        Build from a type chart database record.

        The record may list its elements in any order; rows and columns
        are rearranged into Element order.

        Raises:
            ValueError: If the record's elements don't match Element exactly
        """
        names = [name.lower() for name in record["elements"]]
        expected = {e.value for e in Element}
        if set(names) != expected or len(names) != len(expected):
            raise ValueError(
                f"type chart {record.get('id', '?')!r} must cover exactly {sorted(expected)}"
            )

        rows = record["modifiers"]
        if len(rows) != len(names) or any(len(row) != len(names) for row in rows):
            raise ValueError(f"type chart {record.get('id', '?')!r} is not square")

        position = {name: i for i, name in enumerate(names)}
        order = [position[e.value] for e in Element]
        return cls(modifiers=tuple(
            tuple(float(rows[r][c]) for c in order)
            for r in order
        ))

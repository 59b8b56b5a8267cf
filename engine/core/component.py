"""
Component base class for data-only components.

Components are pure data containers. Monster stats, markers and
quest givers are all components attached to an Entity; the battle
and progression code reads and mutates them in place.

Usage:
    class Health(Component):
        health: int
        max_health: int = Field(ge=0)
"""

from __future__ import annotations

from typing import ClassVar

from pydantic import BaseModel, ConfigDict


class Component(BaseModel):
    """
    Base class for all components.

    Pydantic gives us validation on construction and on assignment,
    so a stat can never be set to a value of the wrong type.
    """

    model_config = ConfigDict(
        arbitrary_types_allowed=True,
        validate_assignment=True,
        extra='forbid',
    )

    _type_name: ClassVar[str] = ""

    # Owning entity id (set by Entity.add)
    _entity_id: int | None = None

    @classmethod
    def get_type_name(cls) -> str:
        """Get the component type name."""
        return cls._type_name or cls.__name__

    @property
    def entity_id(self) -> int | None:
        """Id of the entity this component is attached to."""
        return self._entity_id

    def clone(self) -> Component:
        """Create a deep copy of this component."""
        return self.model_copy(deep=True)


_component_registry: dict[str, type[Component]] = {}


def register_component(cls: type[Component]) -> type[Component]:
    """
    Decorator to register a component type by name.

    Usage:
        @register_component
        class Level(Component):
            level: int = 1
    """
    _component_registry[cls.get_type_name()] = cls
    return cls


def get_component_type(type_name: str) -> type[Component] | None:
    """Get component class by type name."""
    return _component_registry.get(type_name)

"""
Entity class - a handle that owns components.

Monsters and NPCs are entities. The battle core never looks at an
entity's identity beyond its id; everything it needs lives in the
attached components.

Usage:
    monster = Entity("Sparkit")
    monster.add(Health(health=10, max_health=10))

    health = monster.get(Health)
    if monster.has(Boss):
        ...
"""

from __future__ import annotations

from typing import TypeVar, Iterator, Any
import itertools

from engine.core.component import Component


C = TypeVar('C', bound=Component)


class Entity:
    """
    A container for components, identified by a unique integer id.

    Entities hash and compare by id, so they are safe to use as
    dictionary keys in the progression ledger.
    """

    _id_counter = itertools.count(1)

    def __init__(self, name: str = ""):
        self._id = next(Entity._id_counter)
        self._name = name or f"Entity_{self._id}"
        self._components: dict[type[Component], Component] = {}
        self._tags: set[str] = set()
        self._world = None  # Set by World when added

    @property
    def id(self) -> int:
        """Unique entity identifier."""
        return self._id

    @property
    def name(self) -> str:
        """Entity name (for logs and display)."""
        return self._name

    @name.setter
    def name(self, value: str) -> None:
        self._name = value

    @property
    def world(self) -> Any:
        """The World this entity belongs to."""
        return self._world

    def add(self, component: C) -> C:
        """
        Add a component to this entity.

        Raises:
            ValueError: If entity already has this component type
        """
        comp_type = type(component)

        if comp_type in self._components:
            raise ValueError(
                f"Entity {self._name} already has component {comp_type.__name__}"
            )

        component._entity_id = self._id
        self._components[comp_type] = component

        if self._world:
            self._world._on_component_added(self, component)

        return component

    def remove(self, component_type: type[C]) -> C | None:
        """
        Remove a component from this entity.

        Returns:
            The removed component, or None if not found
        """
        component = self._components.pop(component_type, None)

        if component is not None:
            component._entity_id = None
            if self._world:
                self._world._on_component_removed(self, component)

        return component

    def get(self, component_type: type[C]) -> C:
        """
        Get a component by type.

        Raises:
            KeyError: If component not found
        """
        if component_type not in self._components:
            raise KeyError(
                f"Entity {self._name} does not have component {component_type.__name__}"
            )
        return self._components[component_type]  # type: ignore

    def try_get(self, component_type: type[C]) -> C | None:
        """Get a component by type, or None if missing."""
        return self._components.get(component_type)  # type: ignore

    def has(self, *component_types: type[Component]) -> bool:
        """Check if entity has all specified component types."""
        return all(ct in self._components for ct in component_types)

    @property
    def components(self) -> Iterator[Component]:
        """Iterate over all components."""
        return iter(self._components.values())

    # Tags

    def add_tag(self, tag: str) -> None:
        """Add a tag to this entity."""
        self._tags.add(tag)
        if self._world:
            self._world._index_tag(self, tag)

    def remove_tag(self, tag: str) -> None:
        """Remove a tag from this entity."""
        self._tags.discard(tag)
        if self._world:
            self._world._unindex_tag(self, tag)

    def has_tag(self, tag: str) -> bool:
        return tag in self._tags

    @property
    def tags(self) -> frozenset[str]:
        return frozenset(self._tags)

    def __repr__(self) -> str:
        components = ", ".join(c.__name__ for c in self._components.keys())
        return f"Entity({self._name}, id={self._id}, components=[{components}])"

    def __hash__(self) -> int:
        return hash(self._id)

    def __eq__(self, other: object) -> bool:
        if isinstance(other, Entity):
            return self._id == other._id
        return False

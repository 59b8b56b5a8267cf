"""
World container for entities.

The World holds every monster and NPC entity of a playthrough and
keeps component/tag indices for queries. Destruction is deferred:
destroy_entity() marks an entity and flush() removes it, so an
entity can be released in the middle of a battle turn without
invalidating references still held by the turn.

Usage:
    world = World()
    monster = world.create_entity("Sparkit")
    monster.add(Level(level=1))

    for npc in world.get_entities_with_tag("npc"):
        ...

    world.flush()
"""

from __future__ import annotations

from typing import Iterator, TypeVar

from engine.core.entity import Entity
from engine.core.component import Component
from engine.core.events import EventBus, EngineEvent


C = TypeVar('C', bound=Component)


class World:
    """
    Container for entities.

    Provides:
    - Entity management (create, destroy, query)
    - Component and tag indices for fast entity queries
    - Event bus integration
    """

    def __init__(self, event_bus: EventBus | None = None):
        self.event_bus = event_bus or EventBus()

        self._entities: dict[int, Entity] = {}
        self._entities_to_destroy: list[int] = []

        # component_type -> entity ids
        self._component_index: dict[type[Component], set[int]] = {}
        # tag -> entity ids
        self._tag_index: dict[str, set[int]] = {}

    # Entity Management

    def create_entity(self, name: str = "") -> Entity:
        """Create a new entity in this world."""
        entity = Entity(name)
        self._add_entity(entity)
        return entity

    def add_entity(self, entity: Entity) -> Entity:
        """
        Add an existing entity to this world.

        Raises:
            ValueError: If the entity is already in the world
        """
        if entity.id in self._entities:
            raise ValueError(f"Entity {entity.id} already in world")

        self._add_entity(entity)
        return entity

    def _add_entity(self, entity: Entity) -> None:
        entity._world = self
        self._entities[entity.id] = entity

        for component in entity.components:
            self._index_component(entity, type(component))

        for tag in entity.tags:
            self._index_tag(entity, tag)

        self.event_bus.publish(EngineEvent.ENTITY_CREATED, entity=entity)

    def destroy_entity(self, entity: Entity | int) -> None:
        """
        Mark an entity for destruction.

        The entity is removed on the next flush().
        """
        entity_id = entity.id if isinstance(entity, Entity) else entity

        if entity_id not in self._entities:
            return

        if entity_id not in self._entities_to_destroy:
            self._entities_to_destroy.append(entity_id)

    def is_pending_destroy(self, entity: Entity) -> bool:
        return entity.id in self._entities_to_destroy

    def flush(self) -> None:
        """Remove entities marked for destruction."""
        for entity_id in self._entities_to_destroy:
            entity = self._entities.pop(entity_id, None)
            if entity is None:
                continue

            for component in entity.components:
                self._unindex_component(entity, type(component))

            for tag in entity.tags:
                self._unindex_tag(entity, tag)

            entity._world = None

            self.event_bus.publish(EngineEvent.ENTITY_DESTROYED, entity=entity)

        self._entities_to_destroy.clear()

    def get_entity(self, entity_id: int) -> Entity | None:
        """Get entity by ID."""
        return self._entities.get(entity_id)

    def contains(self, entity: Entity) -> bool:
        return entity.id in self._entities

    @property
    def entities(self) -> Iterator[Entity]:
        """Iterate over all entities."""
        return iter(self._entities.values())

    @property
    def entity_count(self) -> int:
        return len(self._entities)

    # Component indexing

    def _index_component(self, entity: Entity, component_type: type[Component]) -> None:
        self._component_index.setdefault(component_type, set()).add(entity.id)

    def _unindex_component(self, entity: Entity, component_type: type[Component]) -> None:
        if component_type in self._component_index:
            self._component_index[component_type].discard(entity.id)

    def _on_component_added(self, entity: Entity, component: Component) -> None:
        self._index_component(entity, type(component))
        self.event_bus.publish(
            EngineEvent.COMPONENT_ADDED,
            entity=entity,
            component=component
        )

    def _on_component_removed(self, entity: Entity, component: Component) -> None:
        self._unindex_component(entity, type(component))
        self.event_bus.publish(
            EngineEvent.COMPONENT_REMOVED,
            entity=entity,
            component=component
        )

    # Tag indexing

    def _index_tag(self, entity: Entity, tag: str) -> None:
        self._tag_index.setdefault(tag, set()).add(entity.id)

    def _unindex_tag(self, entity: Entity, tag: str) -> None:
        if tag in self._tag_index:
            self._tag_index[tag].discard(entity.id)

    # Queries

    def get_entities_with(self, *component_types: type[Component]) -> Iterator[Entity]:
        """
        Get all entities that have ALL specified components.

        Args:
            *component_types: Component types to match

        Returns:
            Iterator of matching entities, ordered by entity id
        """
        if not component_types:
            return iter([])

        candidate_ids: set[int] | None = None
        for comp_type in component_types:
            ids = self._component_index.get(comp_type)
            if not ids:
                return iter([])
            candidate_ids = set(ids) if candidate_ids is None else candidate_ids & ids

        return iter([
            self._entities[entity_id]
            for entity_id in sorted(candidate_ids or ())
            if entity_id in self._entities
        ])

    def get_entities_with_tag(self, tag: str) -> Iterator[Entity]:
        """Get all entities with a specific tag."""
        ids = self._tag_index.get(tag, set())
        return iter([
            self._entities[entity_id]
            for entity_id in sorted(ids)
            if entity_id in self._entities
        ])

    def clear(self) -> None:
        """Remove all entities."""
        for entity_id in list(self._entities.keys()):
            self.destroy_entity(entity_id)
        self.flush()

        self._component_index.clear()
        self._tag_index.clear()

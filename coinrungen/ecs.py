"""A small entity-component-system with dense component storage."""

from __future__ import annotations

from collections import deque
from typing import Any, Generic, TypeVar

MAX_ENTITIES = 1000
MAX_COMPONENTS = 16

Entity = int
Signature = int

T = TypeVar("T")
S = TypeVar("S", bound="System")


class ECSError(Exception):
    """Raised when the entity-component-system is used inconsistently."""


def _check_entity(entity: Entity) -> None:
    if not 0 <= entity < MAX_ENTITIES:
        raise ECSError(f"entity {entity} is out of range")


class EntityManager:
    """Hands out entity handles and stores their component signatures."""

    def __init__(self) -> None:
        self._available: deque[Entity] = deque(range(MAX_ENTITIES))
        self._in_use: set[Entity] = set()
        self._signatures: list[Signature] = [0] * MAX_ENTITIES

    def create_entity(self) -> Entity:
        if not self._available:
            raise ECSError("too many living entities")
        entity = self._available.popleft()
        self._in_use.add(entity)
        return entity

    def destroy_entity(self, entity: Entity) -> None:
        _check_entity(entity)
        if entity not in self._in_use:
            raise ECSError(f"entity {entity} is not in use")
        self._signatures[entity] = 0
        self._in_use.remove(entity)
        self._available.append(entity)

    def set_signature(self, entity: Entity, signature: Signature) -> None:
        _check_entity(entity)
        self._signatures[entity] = signature

    def get_signature(self, entity: Entity) -> Signature:
        _check_entity(entity)
        return self._signatures[entity]

    def in_use(self, entity: Entity) -> bool:
        return entity in self._in_use

    @property
    def num_living_entities(self) -> int:
        return len(self._in_use)

    def clear_entities(self) -> None:
        self._in_use.clear()
        self._available = deque(range(MAX_ENTITIES))
        self._signatures = [0] * MAX_ENTITIES


class ComponentArray(Generic[T]):
    """Densely packed components of one type, indexed by entity."""

    def __init__(self) -> None:
        self._components: list[T] = []
        self._entities: list[Entity] = []
        self._entity_to_index: dict[Entity, int] = {}

    def insert(self, entity: Entity, component: T) -> None:
        if entity in self._entity_to_index:
            raise ECSError(f"entity {entity} already has this component")
        if len(self._components) >= MAX_ENTITIES:
            raise ECSError("component array is full")
        self._entity_to_index[entity] = len(self._components)
        self._components.append(component)
        self._entities.append(entity)

    def remove(self, entity: Entity) -> None:
        try:
            index = self._entity_to_index.pop(entity)
        except KeyError:
            raise ECSError(f"entity {entity} has no such component") from None
        last_component = self._components.pop()
        last_entity = self._entities.pop()
        if index < len(self._components):
            self._components[index] = last_component
            self._entities[index] = last_entity
            self._entity_to_index[last_entity] = index

    def get(self, entity: Entity) -> T:
        try:
            return self._components[self._entity_to_index[entity]]
        except KeyError:
            raise ECSError(f"entity {entity} has no such component") from None

    def entity_destroyed(self, entity: Entity) -> None:
        if entity in self._entity_to_index:
            self.remove(entity)

    def clear_entities(self) -> None:
        self._components.clear()
        self._entities.clear()
        self._entity_to_index.clear()

    def __len__(self) -> int:
        return len(self._components)

    def __contains__(self, entity: object) -> bool:
        return entity in self._entity_to_index


class ComponentManager:
    """Keeps one component array per registered component class."""

    def __init__(self) -> None:
        self._types: dict[type, int] = {}
        self._arrays: dict[type, ComponentArray[Any]] = {}

    def _array(self, component_class: type) -> ComponentArray[Any]:
        try:
            return self._arrays[component_class]
        except KeyError:
            raise ECSError(f"component {component_class.__name__} is not registered") from None

    def register_component(self, component_class: type) -> None:
        if component_class in self._types:
            raise ECSError(f"component {component_class.__name__} is already registered")
        if len(self._types) >= MAX_COMPONENTS:
            raise ECSError("too many component types")
        self._types[component_class] = len(self._types)
        self._arrays[component_class] = ComponentArray()

    def get_component_type(self, component_class: type) -> int:
        try:
            return self._types[component_class]
        except KeyError:
            raise ECSError(f"component {component_class.__name__} is not registered") from None

    def add_component(self, entity: Entity, component: Any) -> None:
        self._array(type(component)).insert(entity, component)

    def remove_component(self, entity: Entity, component_class: type) -> None:
        self._array(component_class).remove(entity)

    def get_component(self, entity: Entity, component_class: type[T]) -> T:
        return self._array(component_class).get(entity)

    def entity_destroyed(self, entity: Entity) -> None:
        for array in self._arrays.values():
            array.entity_destroyed(entity)

    def clear_entities(self) -> None:
        for array in self._arrays.values():
            array.clear_entities()


class System:
    """Base for systems: holds the entities whose signature matches."""

    def __init__(self) -> None:
        self.entities: set[Entity] = set()


class SystemManager:
    """Tracks systems and which entities each one operates on."""

    def __init__(self) -> None:
        self._systems: dict[type, System] = {}
        self._signatures: dict[type, Signature] = {}

    def register_system(self, system: S) -> S:
        system_class = type(system)
        if system_class in self._systems:
            raise ECSError(f"system {system_class.__name__} is already registered")
        self._systems[system_class] = system
        return system

    def set_signature(self, system_class: type, signature: Signature) -> None:
        if system_class not in self._systems:
            raise ECSError(f"system {system_class.__name__} is not registered")
        self._signatures[system_class] = signature

    def get_system(self, system_class: type[S]) -> S:
        try:
            return self._systems[system_class]  # type: ignore[return-value]
        except KeyError:
            raise ECSError(f"system {system_class.__name__} is not registered") from None

    def entity_destroyed(self, entity: Entity) -> None:
        for system in self._systems.values():
            system.entities.discard(entity)

    def clear_entities(self) -> None:
        for system in self._systems.values():
            system.entities.clear()

    def entity_signature_changed(self, entity: Entity, signature: Signature) -> None:
        for system_class, system in self._systems.items():
            required = self._signatures.get(system_class, 0)
            if signature & required == required:
                system.entities.add(entity)
            else:
                system.entities.discard(entity)


class Coordinator:
    """Single entry point tying entities, components and systems together."""

    def __init__(self) -> None:
        self.entity_manager = EntityManager()
        self.component_manager = ComponentManager()
        self.system_manager = SystemManager()

    def create_entity(self) -> Entity:
        return self.entity_manager.create_entity()

    def destroy_entity(self, entity: Entity) -> None:
        self.entity_manager.destroy_entity(entity)
        self.component_manager.entity_destroyed(entity)
        self.system_manager.entity_destroyed(entity)

    def clear_entities(self) -> None:
        self.entity_manager.clear_entities()
        self.component_manager.clear_entities()
        self.system_manager.clear_entities()

    def register_component(self, component_class: type) -> None:
        self.component_manager.register_component(component_class)

    def add_component(self, entity: Entity, component: Any) -> None:
        self.component_manager.add_component(entity, component)
        bit = 1 << self.component_manager.get_component_type(type(component))
        signature = self.entity_manager.get_signature(entity) | bit
        self.entity_manager.set_signature(entity, signature)
        self.system_manager.entity_signature_changed(entity, signature)

    def remove_component(self, entity: Entity, component_class: type) -> None:
        self.component_manager.remove_component(entity, component_class)
        bit = 1 << self.component_manager.get_component_type(component_class)
        signature = self.entity_manager.get_signature(entity) & ~bit
        self.entity_manager.set_signature(entity, signature)
        self.system_manager.entity_signature_changed(entity, signature)

    def get_component(self, entity: Entity, component_class: type[T]) -> T:
        return self.component_manager.get_component(entity, component_class)

    def has_component(self, entity: Entity, component_class: type) -> bool:
        bit = 1 << self.component_manager.get_component_type(component_class)
        return bool(self.entity_manager.get_signature(entity) & bit)

    def get_component_type(self, component_class: type) -> int:
        return self.component_manager.get_component_type(component_class)

    def register_system(self, system: S) -> S:
        return self.system_manager.register_system(system)

    def set_system_signature(self, system_class: type, signature: Signature) -> None:
        self.system_manager.set_signature(system_class, signature)

    def get_system(self, system_class: type[S]) -> S:
        return self.system_manager.get_system(system_class)
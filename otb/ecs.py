"""Entities, components and the world that runs systems over them."""

from __future__ import annotations

import time
from typing import Callable, Dict, Iterator, List, Optional, Type, TypeVar

from otb.value_storage import Value, ValueStorageError

ENTITIES_FIELD = "entities"
COMPONENTS_FIELD = "components"
NAME_FIELD = "name"


class Component:
    """Base of all components; ``entity`` is set when it is attached."""

    entity: Optional["Entity"] = None

    def serialize(self) -> Value:
        raise TypeError(f"{type(self).__name__} cannot be serialized")


C = TypeVar("C", bound=Component)
FixedSystem = Callable[["World"], None]
NormalSystem = Callable[["World", float], None]
Deserializer = Callable[[Value], Component]

_deserializers: Dict[str, Deserializer] = {}
_type_names: Dict[type, str] = {}


def register_component_type(name: str, component_type: Type[Component]) -> None:
    """Make a component type known by name for saving and loading."""
    deserializer = getattr(component_type, "deserialize", None)
    if not callable(deserializer):
        raise TypeError(f"{component_type.__name__} has no deserialize method")
    _deserializers.setdefault(name, deserializer)
    _type_names.setdefault(component_type, name)


def component_type_name(component: Component) -> str:
    """The registered name of a component's type."""
    try:
        return _type_names[type(component)]
    except KeyError:
        raise KeyError(f"component type {type(component).__name__} is not registered") from None


def deserialize_component(type_name: str, data: Value) -> Component:
    """Build a component of a registered type from stored data."""
    try:
        deserializer = _deserializers[type_name]
    except KeyError:
        raise KeyError(f"unknown component type {type_name!r}") from None
    return deserializer(data)


def _require_dict(data: Value, what: str) -> dict:
    if not isinstance(data, dict):
        raise ValueStorageError(f"{what} must be a dictionary, got {type(data).__name__}")
    return data


class Entity:
    """A named holder of at most one component of each type."""

    def __init__(self, world: World) -> None:
        self.world = world
        self.name = ""
        self._components: Dict[type, Component] = {}

    def __repr__(self) -> str:
        names = ", ".join(t.__name__ for t in self._components)
        return f"Entity(name={self.name!r}, components=[{names}])"

    def add_component(self, component: C) -> C:
        """Attach a component; an entity holds only one of each type."""
        component_type = type(component)
        if component_type in self._components:
            raise ValueError(f"entity already has a {component_type.__name__}")
        self._components[component_type] = component
        component.entity = self
        self.world._register_component(component)
        return component

    def has_component(self, component_type: Type[Component]) -> bool:
        return component_type in self._components

    def get_component(self, component_type: Type[C]) -> Optional[C]:
        return self._components.get(component_type)  # type: ignore[return-value]

    def serialize(self) -> dict:
        return {
            NAME_FIELD: self.name,
            COMPONENTS_FIELD: {
                component_type_name(component): component.serialize()
                for component in self._components.values()
            },
        }

    def deserialize(self, data: Value) -> None:
        """Take the name and add the components described by stored data."""
        fields = _require_dict(data, "an entity")
        name = fields[NAME_FIELD]
        if not isinstance(name, str):
            raise ValueStorageError("an entity name must be a plain value")
        self.name = name
        descriptors = _require_dict(fields[COMPONENTS_FIELD], "entity components")
        for type_name, descriptor in descriptors.items():
            self.add_component(deserialize_component(type_name, descriptor))


class World:
    """Entities plus the fixed-step and per-frame systems that update them."""

    def __init__(
        self,
        clock: Callable[[], float] = time.perf_counter,
        fixed_frame_time: float = 1 / 60,
        max_fixed_frames: int = 2,
    ) -> None:
        self.fixed_frame_time = fixed_frame_time
        self.max_fixed_frames = max_fixed_frames
        self._clock = clock
        self._accumulated_time = 0.0
        self._entities: List[Entity] = []
        self._components: Dict[type, List[Component]] = {}
        self._fixed_systems: List[FixedSystem] = []
        self._normal_systems: List[NormalSystem] = []
        self.add_entity()
        self._previous_update_time = clock()

    def update(self) -> None:
        """Run as many fixed steps as time allows, then one normal step."""
        now = self._clock()
        frame_time = now - self._previous_update_time
        self._previous_update_time = now

        self._accumulated_time += frame_time
        steps = 0
        while self._accumulated_time > 0 and steps < self.max_fixed_frames:
            self.fixed_update()
            self._accumulated_time -= self.fixed_frame_time
            steps += 1
        self.normal_update(frame_time)

    def fixed_update(self) -> None:
        for system in self._fixed_systems:
            system(self)

    def normal_update(self, dt: float) -> None:
        for system in self._normal_systems:
            system(self, dt)

    def world_entity(self) -> Entity:
        """The first entity, which holds world-wide components."""
        return self._entities[0]

    def add_entity(self) -> Entity:
        entity = Entity(self)
        self._entities.append(entity)
        return entity

    def add_fixed_system(self, system: FixedSystem) -> None:
        self._fixed_systems.append(system)

    def add_normal_system(self, system: NormalSystem) -> None:
        self._normal_systems.append(system)

    def components(self, component_type: Type[C]) -> Iterator[C]:
        """Every component of exactly this type, including ones added while iterating."""
        return iter(self._components.get(component_type, []))  # type: ignore[arg-type]

    def _register_component(self, component: Component) -> None:
        self._components.setdefault(type(component), []).append(component)

    def serialize(self) -> dict:
        return {ENTITIES_FIELD: [entity.serialize() for entity in self._entities]}

    def deserialize(self, data: Value) -> None:
        """Fill the world entity and add further entities from stored data."""
        fields = _require_dict(data, "a world")
        entities = fields[ENTITIES_FIELD]
        if not isinstance(entities, list):
            raise ValueStorageError("world entities must be an array")
        if not entities:
            raise ValueStorageError("a world needs at least the world entity")
        first, *rest = entities
        self.world_entity().deserialize(first)
        for entity_data in rest:
            self.add_entity().deserialize(entity_data)
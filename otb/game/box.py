"""Pushable boxes: gravity, landing, and chains of boxes pushed by the character."""

from __future__ import annotations

import enum
from dataclasses import dataclass, field
from typing import List, Optional, Tuple, Type, TypeVar

from otb.components import TransformComponent, VelocityComponent
from otb.ecs import Component, Entity, World
from otb.game.character_component import CharacterComponent
from otb.geometry import (
    Transform,
    Vector3,
    has_intersection_ranges,
    is_point_inside_range_safe,
)
from otb.model import ModelComponent
from otb.serialization import deserialize_float, serialize_float
from otb.value_storage import Value, ValueStorageError

EPS = 0.00001
DEBUG_CUBE_ASSET = "/cube.glb"

TYPE_FIELD = "type"
GRAVITY_FIELD = "gravity"
AIR_DRAG_COEFFICIENT_FIELD = "air_drag_coefficient"

C = TypeVar("C", bound=Component)


class BoxType(enum.Enum):
    STATIC = "STATIC"
    DYNAMIC = "DYNAMIC"


@dataclass(eq=False)
class BoxComponent(Component):
    type: BoxType = BoxType.STATIC

    def serialize(self) -> dict:
        return {TYPE_FIELD: self.type.value}

    @classmethod
    def deserialize(cls, data: Value) -> BoxComponent:
        if not isinstance(data, dict):
            raise ValueStorageError("a box must be a dictionary")
        name = data[TYPE_FIELD]
        if not isinstance(name, str):
            raise ValueStorageError("a box type must be a plain value")
        try:
            box_type = BoxType(name)
        except ValueError:
            raise ValueStorageError(f"unknown box type {name!r}") from None
        return cls(type=box_type)


@dataclass
class ChainEntry:
    """One entity in a push chain and how far it is to move this step."""

    entity: Entity
    displacement: Vector3
    transform_component: TransformComponent
    parent_index: Optional[int]
    filtered: bool = False


@dataclass(eq=False)
class BoxSingleComponent(Component):
    """World-wide box settings and the push chain of the current step."""

    gravity: float = 9.8
    # With no other forces, after one second velocity is multiplied by this.
    air_drag_coefficient: float = 0.8
    chain: List[ChainEntry] = field(default_factory=list, repr=False)
    attached_components: List[BoxComponent] = field(default_factory=list, repr=False)

    def serialize(self) -> dict:
        return {
            GRAVITY_FIELD: serialize_float(self.gravity),
            AIR_DRAG_COEFFICIENT_FIELD: serialize_float(self.air_drag_coefficient),
        }

    @classmethod
    def deserialize(cls, data: Value) -> BoxSingleComponent:
        if not isinstance(data, dict):
            raise ValueStorageError("box settings must be a dictionary")
        return cls(
            gravity=deserialize_float(data[GRAVITY_FIELD]),
            air_drag_coefficient=deserialize_float(data[AIR_DRAG_COEFFICIENT_FIELD]),
        )

    def request_one_frame_attachment(self, box: BoxComponent) -> None:
        """Make a box move along with the character for the next step."""
        self.attached_components.append(box)


def _require(entity: Optional[Entity], component_type: Type[C]) -> C:
    component = entity.get_component(component_type) if entity is not None else None
    if component is None:
        raise ValueError(f"entity {entity!r} has no {component_type.__name__}")
    return component


def _settings(world: World) -> BoxSingleComponent:
    return _require(world.world_entity(), BoxSingleComponent)


def _bounds(transform: Transform) -> Tuple[Vector3, Vector3]:
    half = transform.scale / 2.0
    return transform.translation - half, transform.translation + half


def _sign(value: float) -> int:
    if -EPS < value < EPS:
        return 0
    return -1 if value < 0 else 1


def create_components(world: World) -> None:
    """Give every box a model and a velocity if it lacks them."""
    for box in world.components(BoxComponent):
        entity = box.entity
        if not entity.has_component(ModelComponent):
            entity.add_component(ModelComponent(DEBUG_CUBE_ASSET))
        if not entity.has_component(VelocityComponent):
            entity.add_component(VelocityComponent())


def update_from_velocity(world: World) -> None:
    """Apply gravity and drag to dynamic boxes and land them on what is below."""
    settings = _settings(world)
    dt = world.fixed_frame_time
    gravity = Vector3(0.0, -settings.gravity * dt, 0.0)
    velocity_multiplier = settings.air_drag_coefficient ** dt

    for box in world.components(BoxComponent):
        if box.type is not BoxType.DYNAMIC:
            continue
        velocity = _require(box.entity, VelocityComponent)
        velocity.velocity = velocity.velocity + gravity

        transform = _require(box.entity, TransformComponent).transform
        box_min, box_max = _bounds(transform)

        max_collided_y: Optional[float] = None
        for other in world.components(BoxComponent):
            other_min, other_max = _bounds(_require(other.entity, TransformComponent).transform)
            x_intersect = has_intersection_ranges((box_min.x, box_max.x), (other_min.x, other_max.x))
            z_intersect = has_intersection_ranges((box_min.z, box_max.z), (other_min.z, other_max.z))
            if not (x_intersect and z_intersect):
                continue
            y_movement = (box_min.y, box_min.y + velocity.velocity.y * dt)
            if not has_intersection_ranges(y_movement, (other_max.y, other_max.y)):
                continue
            if max_collided_y is None or other_max.y > max_collided_y:
                max_collided_y = other_max.y

        if max_collided_y is not None:
            transform.translation.y = max_collided_y + transform.scale.y / 2.0 + EPS
            velocity.velocity.y = 0.0
        transform.translation = transform.translation + velocity.velocity * dt
        velocity.velocity = velocity.velocity * velocity_multiplier


def find_collision_chain(world: World) -> None:
    """Collect the character and every box its horizontal movement pushes."""
    settings = _settings(world)
    character = next(world.components(CharacterComponent), None)
    if character is None:
        raise ValueError("the world has no character")

    character_velocity = _require(character.entity, VelocityComponent).velocity
    displacement = character_velocity * world.fixed_frame_time
    displacement.y = 0.0  # gravity is handled separately
    chain = settings.chain
    chain.append(
        ChainEntry(
            entity=character.entity,
            displacement=displacement,
            transform_component=_require(character.entity, TransformComponent),
            parent_index=None,
        )
    )

    for attached in settings.attached_components:
        chain.append(
            ChainEntry(
                entity=attached.entity,
                displacement=Vector3(*chain[0].displacement),
                transform_component=_require(attached.entity, TransformComponent),
                parent_index=0,
            )
        )
    settings.attached_components.clear()

    # The chain grows while it is swept; newly added entries are swept too.
    for index, last in enumerate(chain):
        transform = last.transform_component.transform
        x_sign = _sign(last.displacement.x)
        z_sign = _sign(last.displacement.z)
        x_from = transform.translation.x + x_sign * transform.scale.x / 2.0
        z_from = transform.translation.z + z_sign * transform.scale.z / 2.0
        x_to = x_from + last.displacement.x
        z_to = z_from + last.displacement.z
        box_min, box_max = _bounds(transform)

        for candidate in world.components(BoxComponent):
            if candidate.entity is last.entity:
                continue
            candidate_transform = _require(candidate.entity, TransformComponent)
            candidate_min, candidate_max = _bounds(candidate_transform.transform)
            if candidate_min.y >= box_max.y or candidate_max.y <= box_min.y:
                continue

            edge_x = candidate_min.x if x_sign > 0 else candidate_max.x
            edge_z = candidate_min.z if z_sign > 0 else candidate_max.z

            problematic_x = is_point_inside_range_safe((x_from, x_to), edge_x) and has_intersection_ranges(
                (box_min.z, box_max.z), (candidate_min.z, candidate_max.z)
            )
            problematic_z = is_point_inside_range_safe((z_from, z_to), edge_z) and has_intersection_ranges(
                (box_min.x, box_max.x), (candidate_min.x, candidate_max.x)
            )
            if not (problematic_x or problematic_z):
                continue

            displacement_x = (x_to - edge_x) + x_sign * EPS if problematic_x else 0.0
            displacement_z = (z_to - edge_z) + z_sign * EPS if problematic_z else 0.0
            chain.append(
                ChainEntry(
                    entity=candidate.entity,
                    displacement=Vector3(displacement_x, 0.0, displacement_z),
                    transform_component=candidate_transform,
                    parent_index=index,
                )
            )


def push_back_chain(world: World) -> None:
    """Stop the chain at static boxes, pushing their parents back and blocking the character."""
    settings = _settings(world)
    chain = settings.chain
    if not chain:
        raise ValueError("the push chain is empty")

    chain[0].displacement = Vector3()  # the character moves by its velocity
    if len(chain) <= 1:
        return

    block_x = False
    block_z = False
    for entry in chain:
        if entry.parent_index is not None and chain[entry.parent_index].filtered:
            entry.filtered = True
            continue

        if _require(entry.entity, BoxComponent).type is BoxType.STATIC:
            parent = entry.parent_index
            while parent is not None:
                chain[parent].displacement = chain[parent].displacement - entry.displacement
                parent = chain[parent].parent_index
            block_x = block_x or entry.displacement.x != 0
            block_z = block_z or entry.displacement.z != 0
            entry.displacement = Vector3()
            entry.filtered = True

    character_velocity = _require(chain[0].entity, VelocityComponent)
    if block_x:
        character_velocity.velocity.x = 0.0
    if block_z:
        character_velocity.velocity.z = 0.0


def update_chain(world: World) -> None:
    """Move every chain entry by its displacement and empty the chain."""
    settings = _settings(world)
    for entry in settings.chain:
        transform = _require(entry.entity, TransformComponent).transform
        transform.translation = transform.translation + entry.displacement
    settings.chain.clear()
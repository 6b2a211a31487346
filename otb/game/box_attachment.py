"""The ability that lets the character grab the box it is facing."""

from __future__ import annotations

from dataclasses import dataclass
from typing import Optional, Type, TypeVar

from otb.components import TransformComponent
from otb.ecs import Component, Entity, World
from otb.game.box import BoxComponent, BoxSingleComponent
from otb.game.character_component import CharacterComponent
from otb.game.input_receiver import ActionNames, InputReceiverComponent
from otb.geometry import Ray, Vector3, ray_box_collision

C = TypeVar("C", bound=Component)


@dataclass(eq=False)
class BoxAttachmentAbilityComponent(Component):
    """Whether the ability button was held last step, and the grabbed box."""

    prev_frame_button_active: bool = False
    attached_box: Optional[BoxComponent] = None


def _require(entity: Optional[Entity], component_type: Type[C]) -> C:
    component = entity.get_component(component_type) if entity is not None else None
    if component is None:
        raise ValueError(f"entity {entity!r} has no {component_type.__name__}")
    return component


def process_ability_activation(world: World) -> None:
    """On a fresh press, release the held box or grab the nearest one ahead."""
    character = next(world.components(CharacterComponent), None)
    if character is None:
        raise ValueError("the world has no character")
    entity = character.entity
    receiver = _require(entity, InputReceiverComponent)

    ability = entity.get_component(BoxAttachmentAbilityComponent)
    if ability is None:
        ability = entity.add_component(BoxAttachmentAbilityComponent())

    if ActionNames.ABILITY_1 not in receiver.extra_actions:
        ability.prev_frame_button_active = False
        return
    if ability.prev_frame_button_active:
        return
    ability.prev_frame_button_active = True

    if ability.attached_box is not None:
        ability.attached_box = None
        return

    transform = _require(entity, TransformComponent).transform
    look_ray = Ray(
        position=Vector3(*transform.translation),
        direction=Vector3(1.0, 0.0, 0.0).rotate(transform.rotation),
    )

    best_box: Optional[BoxComponent] = None
    best_distance = 0.0
    for box in world.components(BoxComponent):
        if box.entity is entity:
            continue
        bounds = _require(box.entity, TransformComponent).transform.box()
        collision = ray_box_collision(look_ray, bounds)
        if not collision.hit:
            continue
        if best_box is None or best_distance > collision.distance:
            best_box = box
            best_distance = collision.distance

    if best_box is not None:
        ability.attached_box = best_box


def process_ability(world: World) -> None:
    """Ask the box system to carry every grabbed box along this step."""
    settings = world.world_entity().get_component(BoxSingleComponent)
    for ability in world.components(BoxAttachmentAbilityComponent):
        if ability.attached_box is None:
            continue
        if settings is None:
            raise ValueError("the world entity has no BoxSingleComponent")
        settings.request_one_frame_attachment(ability.attached_box)
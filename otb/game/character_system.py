"""Camera following and the movement state machine of the player character."""

from __future__ import annotations

from typing import Optional, Type, TypeVar

from otb.components import CameraComponent, TransformComponent, VelocityComponent
from otb.ecs import Component, Entity, World
from otb.game.character_component import CharacterComponent, MovementState
from otb.game.input_receiver import ActionNames, InputReceiverComponent
from otb.geometry import Vector3
from otb.model import ModelComponent

JUMP_SPEED = 10.0
GLOBAL_ANIMATION_SPEED = 60.0

WAKING_UP_ANIMATION = "WakingUp"
IDLE_ANIMATION = "Idle"
JUMP_ANIMATION = "Jump"
JUMP_ANIMATION_DELAY = 25 / 60
FLYING_ANIMATION = "Flying"
WALKING_ANIMATION = "WalkingCycle"
WALKING_SPEED = 3.36408
WALKING_ANIM_EPS = 0.7

C = TypeVar("C", bound=Component)


def _require(entity: Optional[Entity], component_type: Type[C]) -> C:
    component = entity.get_component(component_type) if entity is not None else None
    if component is None:
        raise ValueError(f"entity {entity!r} has no {component_type.__name__}")
    return component


def character_follow_camera(world: World, dt: float) -> None:
    """Move the world camera halfway towards its spot behind the character."""
    characters = list(world.components(CharacterComponent))
    if len(characters) != 1:
        raise ValueError(f"expected exactly one character, found {len(characters)}")
    character = characters[0]

    transform = _require(character.entity, TransformComponent).transform
    camera = _require(world.world_entity(), CameraComponent).camera

    desired = (
        transform.translation
        + Vector3(-1.0, 0.0, 0.0).rotate(transform.rotation) * character.camera_follow_distance
        + Vector3(0.0, character.camera_follow_offset, 0.0)
    )
    camera.position = (camera.position + desired) / 2.0
    camera.target = Vector3(*transform.translation)


def _update_grounded(
    character: CharacterComponent,
    model: ModelComponent,
    velocity: VelocityComponent,
    receiver: InputReceiverComponent,
    transform_component: TransformComponent,
) -> None:
    if ActionNames.JUMP in receiver.extra_actions:
        character.movement_state = MovementState.PREPARING_JUMP
        character.extra_jump_delay = JUMP_ANIMATION_DELAY
        model.request_animation(FLYING_ANIMATION, True)
        model.animation_speed = GLOBAL_ANIMATION_SPEED
        return

    forward = Vector3(1.0, 0.0, 0.0).rotate(transform_component.transform.rotation)
    forward_speed = forward.dot(velocity.velocity)
    if abs(forward_speed) < WALKING_ANIM_EPS:
        model.request_animation(IDLE_ANIMATION, True)
        model.animation_speed = GLOBAL_ANIMATION_SPEED
    else:
        model.request_animation(WALKING_ANIMATION, True)
        model.animation_speed = forward_speed * GLOBAL_ANIMATION_SPEED / WALKING_SPEED


def update_state(world: World) -> None:
    """Advance each character's jump state and pick its animation."""
    for character in world.components(CharacterComponent):
        entity = character.entity
        model = _require(entity, ModelComponent)
        velocity = _require(entity, VelocityComponent)
        receiver = _require(entity, InputReceiverComponent)
        transform_component = _require(entity, TransformComponent)

        playing = model.playing_animation()
        if playing == "":
            model.request_animation(WAKING_UP_ANIMATION, False)
            model.animation_speed = GLOBAL_ANIMATION_SPEED
        elif playing == WAKING_UP_ANIMATION:
            model.request_animation(IDLE_ANIMATION, True)

        state = character.movement_state
        if state is MovementState.GROUNDED:
            _update_grounded(character, model, velocity, receiver, transform_component)
        elif state is MovementState.PREPARING_JUMP:
            if model.playing_animation() == JUMP_ANIMATION:
                if character.extra_jump_delay > 0:
                    character.extra_jump_delay -= world.fixed_frame_time
                else:
                    character.movement_state = MovementState.FLYING
                    character.extra_jump_delay = -1.0
                    velocity.velocity.y = JUMP_SPEED
        elif state is MovementState.FLYING:
            if velocity.velocity.y == 0:
                character.movement_state = MovementState.LANDING
                model.request_animation(IDLE_ANIMATION, True)
        elif state is MovementState.LANDING:
            if model.playing_animation() == IDLE_ANIMATION:
                character.movement_state = MovementState.GROUNDED
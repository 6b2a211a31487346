"""Turning pressed keys into character input, actions and movement."""

from __future__ import annotations

import enum
import math
from typing import Iterable, List, Optional, Tuple, Type, TypeVar

from otb.components import TransformComponent, VelocityComponent
from otb.ecs import Component, Entity, World
from otb.game.character_component import CharacterComponent
from otb.game.input_receiver import ActionNames, InputReceiverComponent
from otb.geometry import Quaternion, Vector3

ROTATION_SPEED = 5.0
MOVEMENT_SPEED = 10.0

C = TypeVar("C", bound=Component)


class Key(enum.Enum):
    W = enum.auto()
    S = enum.auto()
    A = enum.auto()
    D = enum.auto()
    SPACE = enum.auto()
    ONE = enum.auto()


def _require(entity: Optional[Entity], component_type: Type[C]) -> C:
    component = entity.get_component(component_type) if entity is not None else None
    if component is None:
        raise ValueError(f"entity {entity!r} has no {component_type.__name__}")
    return component


def _normalize(x: float, y: float) -> Tuple[float, float]:
    length = math.hypot(x, y)
    if length == 0:
        return (0.0, 0.0)
    return (x / length, y / length)


def clear_input(world: World) -> None:
    """Forget the actions fired during the previous step."""
    for receiver in world.components(InputReceiverComponent):
        receiver.extra_actions.clear()


def collect_input(world: World, pressed_keys: Iterable[Key]) -> None:
    """Set movement and rotation from the held keys and queue their actions."""
    keys = set(pressed_keys)

    forward = 0.0
    rotation = 0.0
    if Key.W in keys:
        forward += 1.0
    if Key.S in keys:
        forward -= 1.0
    if Key.D in keys:
        rotation -= ROTATION_SPEED
    if Key.A in keys:
        rotation += ROTATION_SPEED
    movement = _normalize(forward, 0.0)

    actions: List[Tuple[str, float]] = []
    if Key.SPACE in keys:
        actions.append((ActionNames.JUMP, 0.0))
    if Key.ONE in keys:
        actions.append((ActionNames.ABILITY_1, 0.0))

    for receiver in world.components(InputReceiverComponent):
        receiver.analog_input = movement
        receiver.rotation_input = rotation
        for action, delay in actions:
            receiver.action_queue.request(action, delay)


def update_action_queue(world: World) -> None:
    """Fire the queued actions that fall within this step."""
    for receiver in world.components(InputReceiverComponent):
        delays = receiver.action_queue.delays
        remaining = world.fixed_frame_time
        while delays and remaining > 0 and delays[0][1] < remaining:
            action, delay = delays.pop(0)
            receiver.extra_actions.add(action)
            remaining -= delay
        if delays:
            action, delay = delays[0]
            delays[0] = (action, delay - remaining)


def apply_input(world: World) -> None:
    """Accelerate and turn every character according to its input."""
    dt = world.fixed_frame_time
    for receiver in world.components(InputReceiverComponent):
        entity = receiver.entity
        if entity is None or entity.get_component(CharacterComponent) is None:
            continue

        velocity = entity.get_component(VelocityComponent)
        if velocity is None:
            velocity = entity.add_component(VelocityComponent(apply_gravity=True))
        transform = _require(entity, TransformComponent).transform

        move_x, move_z = receiver.analog_input
        oriented = Vector3(move_x, 0.0, move_z).rotate(transform.rotation)
        velocity.velocity = velocity.velocity + oriented * (dt * MOVEMENT_SPEED)

        added = Quaternion.from_axis_angle(Vector3(0.0, 1.0, 0.0), receiver.rotation_input * dt)
        transform.rotation = transform.rotation * added
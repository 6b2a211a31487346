"""Core components: camera, transform, velocity and collision."""

from __future__ import annotations

import enum
from dataclasses import dataclass, field
from typing import Callable

from otb.ecs import Component
from otb.geometry import Ray, RayCollision, Transform, Vector3
from otb.serialization import (
    deserialize_float,
    deserialize_transform,
    deserialize_vector3,
    serialize_float,
    serialize_int,
    serialize_transform,
    serialize_vector3,
)
from otb.value_storage import Value, ValueStorageError

POSITION_FIELD = "position"
TARGET_FIELD = "target"
UP_FIELD = "up"
FOVY_FIELD = "fovy"
PROJECTION_FIELD = "projection"


class CameraProjection(enum.IntEnum):
    PERSPECTIVE = 0
    ORTHOGRAPHIC = 1


@dataclass
class Camera:
    """A 3D camera looking from ``position`` at ``target``."""

    position: Vector3 = field(default_factory=lambda: Vector3(5.0, 5.0, 5.0))
    target: Vector3 = field(default_factory=lambda: Vector3(0.0, 2.0, 0.0))
    up: Vector3 = field(default_factory=lambda: Vector3(0.0, 1.0, 0.0))
    fovy: float = 90.0
    projection: CameraProjection = CameraProjection.PERSPECTIVE


@dataclass(eq=False)
class CameraComponent(Component):
    camera: Camera = field(default_factory=Camera)

    def serialize(self) -> dict:
        return {
            POSITION_FIELD: serialize_vector3(self.camera.position),
            TARGET_FIELD: serialize_vector3(self.camera.target),
            UP_FIELD: serialize_vector3(self.camera.up),
            FOVY_FIELD: serialize_float(self.camera.fovy),
            PROJECTION_FIELD: serialize_int(int(self.camera.projection)),
        }

    @classmethod
    def deserialize(cls, data: Value) -> CameraComponent:
        if not isinstance(data, dict):
            raise ValueStorageError("a camera must be a dictionary")
        camera = Camera(
            position=deserialize_vector3(data[POSITION_FIELD]),
            target=deserialize_vector3(data[TARGET_FIELD]),
            up=deserialize_vector3(data[UP_FIELD]),
            fovy=deserialize_float(data[FOVY_FIELD]),
            projection=CameraProjection(int(deserialize_float(data[PROJECTION_FIELD]))),
        )
        return cls(camera=camera)


@dataclass(eq=False)
class TransformComponent(Component):
    transform: Transform = field(default_factory=Transform)

    def serialize(self) -> dict:
        return serialize_transform(self.transform)

    @classmethod
    def deserialize(cls, data: Value) -> TransformComponent:
        return cls(transform=deserialize_transform(data))


@dataclass(eq=False)
class VelocityComponent(Component):
    velocity: Vector3 = field(default_factory=Vector3)
    apply_gravity: bool = False


@dataclass(eq=False)
class CollisionComponent(Component):
    """A collider given as a ray test and a callback run on each hit."""

    test_fn: Callable[[Ray], RayCollision]
    callback_fn: Callable[[Vector3], None]
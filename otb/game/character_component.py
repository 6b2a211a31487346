"""The player character's settings and movement state."""

from __future__ import annotations

import enum
from dataclasses import dataclass

from otb.ecs import Component
from otb.serialization import deserialize_float, serialize_float
from otb.value_storage import Value, ValueStorageError

CAMERA_FOLLOW_DISTANCE_FIELD = "camera_follow_distance"
CAMERA_FOLLOW_OFFSET_FIELD = "camera_follow_offset"


class MovementState(enum.Enum):
    GROUNDED = enum.auto()
    PREPARING_JUMP = enum.auto()
    FLYING = enum.auto()
    LANDING = enum.auto()


@dataclass(eq=False)
class CharacterComponent(Component):
    """Camera-follow settings plus the runtime jump state of a character."""

    camera_follow_distance: float = 0.0
    camera_follow_offset: float = 0.0
    movement_state: MovementState = MovementState.GROUNDED
    extra_jump_delay: float = 0.0

    def serialize(self) -> dict:
        return {
            CAMERA_FOLLOW_DISTANCE_FIELD: serialize_float(self.camera_follow_distance),
            CAMERA_FOLLOW_OFFSET_FIELD: serialize_float(self.camera_follow_offset),
        }

    @classmethod
    def deserialize(cls, data: Value) -> CharacterComponent:
        if not isinstance(data, dict):
            raise ValueStorageError("a character must be a dictionary")
        return cls(
            camera_follow_distance=deserialize_float(data[CAMERA_FOLLOW_DISTANCE_FIELD]),
            camera_follow_offset=deserialize_float(data[CAMERA_FOLLOW_OFFSET_FIELD]),
        )
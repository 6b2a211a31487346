"""Conversions between numbers, vectors, transforms and stored values."""

from __future__ import annotations

import math
import re

from otb.geometry import Quaternion, Transform, Vector3
from otb.value_storage import Value, ValueStorageError

TRANSLATION_FIELD = "translation"
ROTATION_FIELD = "rotation"
SCALE_FIELD = "scale"

_INT_MIN = -(2**31)
_INT_MAX = 2**31 - 1
_FLOAT_MAX = 3.4028234663852886e38

_INT_PREFIX = re.compile(r"\s*([+-]?\d+)")
_FLOAT_PREFIX = re.compile(
    r"\s*([+-]?(?:(?:\d+\.?\d*|\.\d+)(?:[eE][+-]?\d+)?|inf(?:inity)?|nan))",
    re.IGNORECASE,
)


def _require_text(data: Value) -> str:
    if not isinstance(data, str):
        raise ValueStorageError(f"expected a plain value, got {type(data).__name__}")
    return data


def _require_dict(data: Value) -> dict:
    if not isinstance(data, dict):
        raise ValueStorageError(f"expected a dictionary, got {type(data).__name__}")
    return data


def serialize_int(value: int) -> str:
    return str(int(value))


def serialize_float(value: float) -> str:
    """Fixed notation with six decimals."""
    return f"{value:f}"


def serialize_vector3(value: Vector3) -> str:
    """Three space-separated numbers with six significant digits."""
    return f"{value.x:g} {value.y:g} {value.z:g}"


def serialize_transform(transform: Transform) -> dict:
    """A dictionary with translation, rotation as Euler angles, and scale."""
    return {
        TRANSLATION_FIELD: serialize_vector3(transform.translation),
        ROTATION_FIELD: serialize_vector3(transform.rotation.to_euler()),
        SCALE_FIELD: serialize_vector3(transform.scale),
    }


def deserialize_int(data: Value) -> int:
    """The integer at the start of the text; trailing characters are ignored."""
    text = _require_text(data)
    match = _INT_PREFIX.match(text)
    if match is None:
        raise ValueError(f"no integer in {text!r}")
    result = int(match.group(1))
    if not _INT_MIN <= result <= _INT_MAX:
        raise ValueError(f"integer out of range: {text!r}")
    return result


def deserialize_float(data: Value) -> float:
    """The number at the start of the text; trailing characters are ignored."""
    text = _require_text(data)
    match = _FLOAT_PREFIX.match(text)
    if match is None:
        raise ValueError(f"no number in {text!r}")
    result = float(match.group(1))
    if math.isfinite(result) and abs(result) > _FLOAT_MAX:
        raise ValueError(f"number out of range: {text!r}")
    return result


def deserialize_vector3(data: Value) -> Vector3:
    """Three whitespace-separated numbers."""
    tokens = _require_text(data).split()
    if len(tokens) < 3:
        raise ValueError(f"expected three numbers in {data!r}")
    try:
        x, y, z = (float(token) for token in tokens[:3])
    except ValueError as exc:
        raise ValueError(f"expected three numbers in {data!r}") from exc
    return Vector3(x, y, z)


def deserialize_transform(data: Value) -> Transform:
    """A transform from a dictionary of translation, Euler rotation and scale."""
    fields = _require_dict(data)
    euler = deserialize_vector3(fields[ROTATION_FIELD])
    return Transform(
        translation=deserialize_vector3(fields[TRANSLATION_FIELD]),
        rotation=Quaternion.from_euler(euler.x, euler.y, euler.z),
        scale=deserialize_vector3(fields[SCALE_FIELD]),
    )
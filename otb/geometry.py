"""Vectors, quaternions, transforms and the range and ray tests built on them."""

from __future__ import annotations

import math
from dataclasses import dataclass, field
from typing import Iterator, Tuple, Union

EPSILON = 0.000001

Number = Union[int, float]
Range = Tuple[float, float]
Matrix = Tuple[
    Tuple[float, float, float, float],
    Tuple[float, float, float, float],
    Tuple[float, float, float, float],
    Tuple[float, float, float, float],
]


def _float_equals(a: float, b: float) -> bool:
    return abs(a - b) <= EPSILON * max(1.0, abs(a), abs(b))


@dataclass
class Vector3:
    """A mutable three-component vector."""

    x: float = 0.0
    y: float = 0.0
    z: float = 0.0

    def __iter__(self) -> Iterator[float]:
        yield self.x
        yield self.y
        yield self.z

    def __add__(self, other: Vector3) -> Vector3:
        if not isinstance(other, Vector3):
            return NotImplemented
        return Vector3(self.x + other.x, self.y + other.y, self.z + other.z)

    def __sub__(self, other: Vector3) -> Vector3:
        if not isinstance(other, Vector3):
            return NotImplemented
        return Vector3(self.x - other.x, self.y - other.y, self.z - other.z)

    def __neg__(self) -> Vector3:
        return Vector3(-self.x, -self.y, -self.z)

    def __mul__(self, other: Union[Vector3, Number]) -> Vector3:
        """Component-wise product with a vector, or scaling by a number."""
        if isinstance(other, Vector3):
            return Vector3(self.x * other.x, self.y * other.y, self.z * other.z)
        if isinstance(other, (int, float)):
            return Vector3(self.x * other, self.y * other, self.z * other)
        return NotImplemented

    def __rmul__(self, other: Number) -> Vector3:
        if isinstance(other, (int, float)):
            return Vector3(self.x * other, self.y * other, self.z * other)
        return NotImplemented

    def __truediv__(self, other: Union[Vector3, Number]) -> Vector3:
        """Component-wise quotient with a vector, or division by a number."""
        if isinstance(other, Vector3):
            return Vector3(self.x / other.x, self.y / other.y, self.z / other.z)
        if isinstance(other, (int, float)):
            return Vector3(self.x / other, self.y / other, self.z / other)
        return NotImplemented

    def length(self) -> float:
        return math.sqrt(self.dot(self))

    def dot(self, other: Vector3) -> float:
        return self.x * other.x + self.y * other.y + self.z * other.z

    def normalized(self) -> Vector3:
        """The unit vector in this direction; a zero vector stays zero."""
        length = self.length()
        if length == 0:
            return Vector3(self.x, self.y, self.z)
        return self / length

    def project(self, onto: Vector3) -> Vector3:
        """The projection of this vector onto another."""
        magnitude = self.dot(onto) / onto.dot(onto)
        return onto * magnitude

    def rotate(self, rotation: Quaternion) -> Vector3:
        """This vector rotated by a unit quaternion."""
        qx, qy, qz, qw = rotation.x, rotation.y, rotation.z, rotation.w
        x, y, z = self.x, self.y, self.z
        return Vector3(
            x * (qx * qx + qw * qw - qy * qy - qz * qz)
            + y * (2 * qx * qy - 2 * qw * qz)
            + z * (2 * qx * qz + 2 * qw * qy),
            x * (2 * qw * qz + 2 * qx * qy)
            + y * (qw * qw - qx * qx + qy * qy - qz * qz)
            + z * (-2 * qw * qx + 2 * qy * qz),
            x * (-2 * qw * qy + 2 * qx * qz)
            + y * (2 * qw * qx + 2 * qy * qz)
            + z * (qw * qw - qx * qx - qy * qy + qz * qz),
        )

    def is_close(self, other: Vector3) -> bool:
        return all(_float_equals(a, b) for a, b in zip(self, other))


@dataclass(frozen=True)
class Quaternion:
    """A rotation quaternion; the default value is the identity."""

    x: float = 0.0
    y: float = 0.0
    z: float = 0.0
    w: float = 1.0

    def __iter__(self) -> Iterator[float]:
        yield self.x
        yield self.y
        yield self.z
        yield self.w

    @classmethod
    def identity(cls) -> Quaternion:
        return cls(0.0, 0.0, 0.0, 1.0)

    @classmethod
    def from_euler(cls, pitch: float, yaw: float, roll: float) -> Quaternion:
        """Rotation from angles about the x, y and z axes, in radians."""
        x0, x1 = math.cos(pitch * 0.5), math.sin(pitch * 0.5)
        y0, y1 = math.cos(yaw * 0.5), math.sin(yaw * 0.5)
        z0, z1 = math.cos(roll * 0.5), math.sin(roll * 0.5)
        return cls(
            x1 * y0 * z0 - x0 * y1 * z1,
            x0 * y1 * z0 + x1 * y0 * z1,
            x0 * y0 * z1 - x1 * y1 * z0,
            x0 * y0 * z0 + x1 * y1 * z1,
        )

    def to_euler(self) -> Vector3:
        """Angles about the x, y and z axes, in radians."""
        x, y, z, w = self.x, self.y, self.z, self.w
        roll = math.atan2(2.0 * (w * x + y * z), 1.0 - 2.0 * (x * x + y * y))
        sin_pitch = min(1.0, max(-1.0, 2.0 * (w * y - z * x)))
        pitch = math.asin(sin_pitch)
        yaw = math.atan2(2.0 * (w * z + x * y), 1.0 - 2.0 * (y * y + z * z))
        return Vector3(roll, pitch, yaw)

    @classmethod
    def from_axis_angle(cls, axis: Vector3, angle: float) -> Quaternion:
        """Rotation by an angle in radians about an axis; a zero axis gives the identity."""
        if axis.length() == 0:
            return cls.identity()
        half = angle * 0.5
        unit = axis.normalized()
        sin_half = math.sin(half)
        return cls(unit.x * sin_half, unit.y * sin_half, unit.z * sin_half, math.cos(half)).normalized()

    def to_axis_angle(self) -> tuple[Vector3, float]:
        """The rotation axis and the angle in radians."""
        q = self.normalized() if abs(self.w) > 1.0 else self
        angle = 2.0 * math.acos(q.w)
        den = math.sqrt(1.0 - q.w * q.w)
        if den > EPSILON:
            axis = Vector3(q.x / den, q.y / den, q.z / den)
        else:
            axis = Vector3(1.0, 0.0, 0.0)
        return axis, angle

    def length(self) -> float:
        return math.sqrt(self.x * self.x + self.y * self.y + self.z * self.z + self.w * self.w)

    def normalized(self) -> Quaternion:
        length = self.length() or 1.0
        return Quaternion(self.x / length, self.y / length, self.z / length, self.w / length)

    def invert(self) -> Quaternion:
        length_sq = self.x * self.x + self.y * self.y + self.z * self.z + self.w * self.w
        if length_sq == 0:
            return self
        inv = 1.0 / length_sq
        return Quaternion(-self.x * inv, -self.y * inv, -self.z * inv, self.w * inv)

    def __mul__(self, other: Quaternion) -> Quaternion:
        if not isinstance(other, Quaternion):
            return NotImplemented
        ax, ay, az, aw = self
        bx, by, bz, bw = other
        return Quaternion(
            ax * bw + aw * bx + ay * bz - az * by,
            ay * bw + aw * by + az * bx - ax * bz,
            az * bw + aw * bz + ax * by - ay * bx,
            aw * bw - ax * bx - ay * by - az * bz,
        )

    def is_close(self, other: Quaternion) -> bool:
        return all(_float_equals(a, b) for a, b in zip(self, other))


@dataclass
class BoundingBox:
    min: Vector3
    max: Vector3


@dataclass
class Ray:
    position: Vector3
    direction: Vector3


@dataclass
class RayCollision:
    hit: bool = False
    distance: float = 0.0
    point: Vector3 = field(default_factory=Vector3)
    normal: Vector3 = field(default_factory=Vector3)


@dataclass
class Transform:
    """Translation, rotation and scale of an object."""

    translation: Vector3 = field(default_factory=Vector3)
    rotation: Quaternion = field(default_factory=Quaternion.identity)
    scale: Vector3 = field(default_factory=lambda: Vector3(1.0, 1.0, 1.0))

    def matrix(self) -> Matrix:
        """The 4x4 row-major matrix of this transform."""
        x = Vector3(self.scale.x, 0.0, 0.0).rotate(self.rotation)
        y = Vector3(0.0, self.scale.y, 0.0).rotate(self.rotation)
        z = Vector3(0.0, 0.0, self.scale.z).rotate(self.rotation)
        t = self.translation
        return (
            (x.x, y.x, z.x, t.x),
            (x.y, y.y, z.y, t.y),
            (x.z, y.z, z.z, t.z),
            (0.0, 0.0, 0.0, 1.0),
        )

    def apply(self, point: Vector3) -> Vector3:
        return self.translation + (point * self.scale).rotate(self.rotation)

    def apply_inverse(self, point: Vector3) -> Vector3:
        return (point - self.translation).rotate(self.rotation.invert()) / self.scale

    def box(self) -> BoundingBox:
        """The axis-aligned box of an unrotated transform."""
        if not self.rotation.is_close(Quaternion.identity()):
            raise ValueError("a bounding box needs an unrotated transform")
        half = self.scale / 2.0
        return BoundingBox(self.translation - half, self.translation + half)


def _reciprocal(value: float) -> float:
    if value == 0:
        return math.copysign(math.inf, value)
    return 1.0 / value


def _fmin(a: float, b: float) -> float:
    if math.isnan(a):
        return b
    if math.isnan(b):
        return a
    return min(a, b)


def _fmax(a: float, b: float) -> float:
    if math.isnan(a):
        return b
    if math.isnan(b):
        return a
    return max(a, b)


def _truncate(value: float) -> float:
    return float(int(value)) if math.isfinite(value) else 0.0


def ray_box_collision(ray: Ray, box: BoundingBox) -> RayCollision:
    """Where a ray meets an axis-aligned box, if it does."""
    pos = ray.position
    inside = all(lo < p < hi for p, lo, hi in zip(pos, box.min, box.max))
    direction = -ray.direction if inside else ray.direction

    inv = Vector3(_reciprocal(direction.x), _reciprocal(direction.y), _reciprocal(direction.z))
    near = (box.min - pos) * inv
    far = (box.max - pos) * inv
    t_enter = _fmax(_fmax(_fmin(near.x, far.x), _fmin(near.y, far.y)), _fmin(near.z, far.z))
    t_exit = _fmin(_fmin(_fmax(near.x, far.x), _fmax(near.y, far.y)), _fmax(near.z, far.z))

    hit = not (t_exit < 0 or t_enter > t_exit)
    distance = t_enter
    point = pos + direction * distance

    center = (box.min + box.max) * 0.5
    scaled = (point - center) * 2.01 / (box.max - box.min)
    normal = Vector3(_truncate(scaled.x), _truncate(scaled.y), _truncate(scaled.z)).normalized()

    if inside:
        distance = -distance
        normal = -normal
    return RayCollision(hit=hit, distance=distance, point=point, normal=normal)


def is_inside_ranges(inner: Range, outer: Range) -> bool:
    return inner[0] >= outer[0] and inner[1] <= outer[1]


def has_intersection_ranges(left: Range, right: Range) -> bool:
    if is_inside_ranges(left, right) or is_inside_ranges(right, left):
        return True
    if left[0] < right[0]:
        return left[1] >= right[0]
    return right[1] >= left[0]


def is_point_inside_range(range_: Range, point: float) -> bool:
    return range_[0] < point < range_[1]


def is_point_inside_range_safe(range_: Range, point: float) -> bool:
    """Like is_point_inside_range, but the range ends may come in either order."""
    low, high = range_
    if low > high:
        low, high = high, low
    return is_point_inside_range((low, high), point)
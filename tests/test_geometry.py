import math

import pytest

from otb.geometry import (
    BoundingBox,
    Quaternion,
    Ray,
    Transform,
    Vector3,
    has_intersection_ranges,
    is_inside_ranges,
    is_point_inside_range,
    is_point_inside_range_safe,
    ray_box_collision,
)


def test_vector_arithmetic_is_component_wise():
    a = Vector3(1.0, 2.0, 3.0)
    b = Vector3(4.0, 5.0, 6.0)
    assert (a + b) - b == a
    assert a * b == Vector3(a.x * b.x, a.y * b.y, a.z * b.z)
    assert (a * b) / b == a
    assert 2 * a == a * 2
    assert (a * 2) / 2 == a


def test_length_and_dot_agree():
    v = Vector3(3.0, -4.0, 12.0)
    assert v.length() == pytest.approx(math.sqrt(v.dot(v)))
    assert v.normalized().length() == pytest.approx(1.0)


def test_project_leaves_orthogonal_remainder():
    v = Vector3(2.0, 3.0, -1.0)
    onto = Vector3(1.0, 1.0, 0.5)
    proj = v.project(onto)
    assert (v - proj).dot(onto) == pytest.approx(0.0, abs=1e-9)
    cross_len = Vector3(
        proj.y * onto.z - proj.z * onto.y,
        proj.z * onto.x - proj.x * onto.z,
        proj.x * onto.y - proj.y * onto.x,
    ).length()
    assert cross_len == pytest.approx(0.0, abs=1e-9)


def test_rotate_by_identity_keeps_vector():
    v = Vector3(1.5, -2.0, 0.25)
    assert tuple(v.rotate(Quaternion.identity())) == pytest.approx(tuple(v))


def test_quarter_turn_about_y():
    q = Quaternion.from_axis_angle(Vector3(0.0, 1.0, 0.0), math.pi / 2)
    assert tuple(Vector3(1.0, 0.0, 0.0).rotate(q)) == pytest.approx((0.0, 0.0, -1.0), abs=1e-9)


def test_rotation_preserves_length_and_inverts():
    q = Quaternion.from_euler(0.3, -0.7, 1.1)
    v = Vector3(1.0, 2.0, 3.0)
    rotated = v.rotate(q)
    assert rotated.length() == pytest.approx(v.length())
    assert tuple(rotated.rotate(q.invert())) == pytest.approx(tuple(v))


def test_quaternion_times_inverse_is_identity():
    q = Quaternion.from_euler(0.4, 0.1, -0.9)
    assert (q * q.invert()).is_close(Quaternion.identity())


def test_euler_round_trip():
    angles = (0.2, -0.4, 0.6)
    assert tuple(Quaternion.from_euler(*angles).to_euler()) == pytest.approx(angles)


def test_axis_angle_round_trip():
    axis = Vector3(1.0, 2.0, 2.0)
    angle = 1.2
    got_axis, got_angle = Quaternion.from_axis_angle(axis, angle).to_axis_angle()
    assert got_angle == pytest.approx(angle)
    assert tuple(got_axis) == pytest.approx(tuple(axis.normalized()))


def test_zero_axis_gives_identity():
    assert Quaternion.from_axis_angle(Vector3(), 1.0) == Quaternion.identity()


def test_composed_rotation_matches_sequential_rotation():
    a = Quaternion.from_euler(0.1, 0.5, 0.0)
    b = Quaternion.from_euler(0.0, -0.3, 0.8)
    v = Vector3(0.5, -1.0, 2.0)
    assert tuple(v.rotate(a * b)) == pytest.approx(tuple(v.rotate(b).rotate(a)))


def test_transform_apply_and_inverse_round_trip():
    t = Transform(Vector3(1.0, -2.0, 3.0), Quaternion.from_euler(0.3, 0.2, 0.1), Vector3(2.0, 0.5, 1.5))
    p = Vector3(0.7, 0.8, -0.9)
    assert tuple(t.apply_inverse(t.apply(p))) == pytest.approx(tuple(p))


def test_matrix_matches_apply():
    t = Transform(Vector3(1.0, 2.0, 3.0), Quaternion.from_euler(0.5, -0.2, 0.9), Vector3(1.0, 2.0, 3.0))
    p = Vector3(-1.0, 0.5, 2.0)
    m = t.matrix()
    homogeneous = (p.x, p.y, p.z, 1.0)
    result = [sum(a * b for a, b in zip(row, homogeneous)) for row in m[:3]]
    assert result == pytest.approx(tuple(t.apply(p)))
    assert m[3] == (0, 0, 0, 1)


def test_box_spans_scale_around_translation():
    t = Transform(Vector3(1.0, 2.0, 3.0), Quaternion.identity(), Vector3(2.0, 4.0, 6.0))
    box = t.box()
    assert (box.min + box.max) / 2 == t.translation
    assert box.max - box.min == t.scale


def test_box_of_rotated_transform_is_rejected():
    t = Transform(rotation=Quaternion.from_euler(0.0, 0.5, 0.0))
    with pytest.raises(ValueError):
        t.box()


def test_ray_hits_box_face():
    box = BoundingBox(Vector3(-0.5, -0.5, -0.5), Vector3(0.5, 0.5, 0.5))
    ray = Ray(Vector3(-5.0, 0.0, 0.0), Vector3(1.0, 0.0, 0.0))
    hit = ray_box_collision(ray, box)
    assert hit.hit
    assert hit.distance == pytest.approx(box.min.x - ray.position.x)
    assert hit.point.x == pytest.approx(box.min.x)
    assert tuple(hit.normal) == pytest.approx((-1.0, 0.0, 0.0))


def test_ray_pointing_away_misses():
    box = BoundingBox(Vector3(-0.5, -0.5, -0.5), Vector3(0.5, 0.5, 0.5))
    ray = Ray(Vector3(-5.0, 0.0, 0.0), Vector3(-1.0, 0.0, 0.0))
    assert not ray_box_collision(ray, box).hit


def test_ray_passing_beside_box_misses():
    box = BoundingBox(Vector3(-0.5, -0.5, -0.5), Vector3(0.5, 0.5, 0.5))
    ray = Ray(Vector3(-5.0, 3.0, 0.0), Vector3(1.0, 0.0, 0.0))
    assert not ray_box_collision(ray, box).hit


def test_range_containment():
    assert is_inside_ranges((1.0, 2.0), (0.0, 3.0))
    assert not is_inside_ranges((0.0, 3.0), (1.0, 2.0))


@pytest.mark.parametrize(
    "left, right",
    [((0.0, 1.0), (0.5, 2.0)), ((0.5, 2.0), (0.0, 1.0)), ((0.0, 1.0), (1.0, 2.0)), ((0.0, 5.0), (1.0, 2.0))],
)
def test_intersecting_ranges(left, right):
    assert has_intersection_ranges(left, right)
    assert has_intersection_ranges(right, left)


def test_disjoint_ranges():
    assert not has_intersection_ranges((0.0, 1.0), (1.5, 2.0))
    assert not has_intersection_ranges((1.5, 2.0), (0.0, 1.0))


def test_point_inside_range_is_strict():
    assert is_point_inside_range((0.0, 1.0), 0.5)
    assert not is_point_inside_range((0.0, 1.0), 1.0)
    assert not is_point_inside_range((1.0, 0.0), 0.5)


def test_safe_point_test_accepts_reversed_range():
    assert is_point_inside_range_safe((1.0, 0.0), 0.5)
    assert is_point_inside_range_safe((0.0, 1.0), 0.5)
    assert not is_point_inside_range_safe((1.0, 0.0), 1.0)
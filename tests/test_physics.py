import pytest

from otb.components import CollisionComponent, TransformComponent, VelocityComponent
from otb.ecs import World
from otb.geometry import RayCollision, Transform, Vector3
from otb.physics import COLLISION_OFFSET, VELOCITY_DAMPING, update_physics

DT = 0.1


def make_world():
    return World(clock=lambda: 0.0, fixed_frame_time=DT)


def add_mover(world, translation, velocity, gravity=False):
    entity = world.add_entity()
    transform = entity.add_component(TransformComponent(Transform(translation=translation)))
    moving = entity.add_component(VelocityComponent(velocity=velocity, apply_gravity=gravity))
    return transform, moving


def floor_test(ray):
    if ray.direction.y >= 0 or ray.position.y <= 0:
        return RayCollision()
    distance = ray.position.y / -ray.direction.y
    return RayCollision(
        hit=True,
        distance=distance,
        point=ray.position + ray.direction * distance,
        normal=Vector3(0.0, 1.0, 0.0),
    )


def test_free_motion_is_damped():
    world = make_world()
    _, moving = add_mover(world, Vector3(), Vector3(1.0, 0.0, 0.0))
    update_physics(world)
    assert moving.velocity.x == pytest.approx(VELOCITY_DAMPING)
    assert moving.velocity.y == 0.0


def test_translation_follows_new_velocity():
    world = make_world()
    transform, moving = add_mover(world, Vector3(2.0, 3.0, 4.0), Vector3(1.0, -2.0, 0.5))
    update_physics(world)
    expected = Vector3(2.0, 3.0, 4.0) + moving.velocity * DT
    assert transform.transform.translation.is_close(expected)


def test_gravity_only_changes_vertical_velocity():
    world = make_world()
    _, falling = add_mover(world, Vector3(0.0, 5.0, 0.0), Vector3(1.0, 0.0, 0.0), gravity=True)
    _, floating = add_mover(world, Vector3(10.0, 5.0, 0.0), Vector3(1.0, 0.0, 0.0))
    update_physics(world)
    assert falling.velocity.y < 0
    assert floating.velocity.y == 0.0
    assert falling.velocity.x == pytest.approx(floating.velocity.x)


def test_floor_stops_fall():
    world = make_world()
    hits = []
    world.add_entity().add_component(CollisionComponent(test_fn=floor_test, callback_fn=hits.append))
    transform, moving = add_mover(world, Vector3(0.0, 1.0, 0.0), Vector3(0.0, -20.0, 0.0))
    update_physics(world)
    assert len(hits) == 1
    assert hits[0].y == pytest.approx(0.0)
    assert moving.velocity.y == pytest.approx(0.0)
    assert transform.transform.translation.y == pytest.approx(COLLISION_OFFSET)


def test_diverging_velocity_raises():
    world = make_world()

    def wall_test(ray):
        return RayCollision(hit=True, distance=0.5, point=Vector3(), normal=Vector3(1.0, 0.0, 0.0))

    world.add_entity().add_component(CollisionComponent(test_fn=wall_test, callback_fn=lambda p: None))
    add_mover(world, Vector3(0.0, 100.0, 0.0), Vector3(0.0, -2000.0, 0.0))
    with pytest.raises(RuntimeError):
        update_physics(world)


def test_mover_without_transform_raises():
    world = make_world()
    world.add_entity().add_component(VelocityComponent(velocity=Vector3(1.0, 0.0, 0.0)))
    with pytest.raises(ValueError):
        update_physics(world)
"""Velocity integration with ray-tested collisions."""

from __future__ import annotations

from otb.components import CollisionComponent, TransformComponent, VelocityComponent
from otb.ecs import World
from otb.geometry import Ray, Vector3

VELOCITY_DAMPING = 0.95
GRAVITY = 9.8
COLLISION_OFFSET = 0.001
MIN_VERTICAL_VELOCITY = -100.0


def _movement_ray(origin: Vector3, target: Vector3) -> tuple[Ray, float]:
    offset = target - origin
    distance = offset.length()
    direction = offset * (1.0 / distance) if distance > 0 else Vector3()
    return Ray(position=Vector3(*origin), direction=direction), distance


def update_physics(world: World) -> None:
    """Move every entity with a velocity, sliding along whatever it hits."""
    dt = world.fixed_frame_time
    for moving in world.components(VelocityComponent):
        entity = moving.entity
        transform_component = entity.get_component(TransformComponent) if entity else None
        if transform_component is None:
            raise ValueError("a moving entity needs a TransformComponent")
        origin = transform_component.transform.translation

        velocity = Vector3(*moving.velocity)
        if moving.apply_gravity:
            velocity.y -= GRAVITY * dt
        velocity = velocity * VELOCITY_DAMPING

        target = origin + velocity * dt
        ray, distance = _movement_ray(origin, target)

        has_collision = True
        while has_collision:
            has_collision = False
            for collider in world.components(CollisionComponent):
                collision = collider.test_fn(ray)
                if not (collision.hit and collision.distance < distance):
                    continue
                collider.callback_fn(collision.point)
                post_hit_rate = 1 - collision.distance / distance
                target = collision.point + collision.normal * COLLISION_OFFSET
                velocity = velocity - velocity.project(collision.normal)
                target = target + velocity * post_hit_rate * dt
                if velocity.y < MIN_VERTICAL_VELOCITY:
                    raise RuntimeError(f"vertical velocity diverged to {velocity.y}")
                has_collision = True
                ray, distance = _movement_ray(origin, target)

        transform_component.transform.translation = target
        moving.velocity = velocity
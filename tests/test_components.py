import pytest

from otb.components import (
    Camera,
    CameraComponent,
    CameraProjection,
    CollisionComponent,
    TransformComponent,
    VelocityComponent,
)
from otb.ecs import World, register_component_type
from otb.geometry import Quaternion, Ray, RayCollision, Transform, Vector3
from otb.value_storage import ValueStorageError, dumps, loads

register_component_type("CameraComponent", CameraComponent)
register_component_type("TransformComponent", TransformComponent)


def _through_document(value):
    return loads(dumps({"value": value}))["value"]


def test_camera_defaults():
    camera = CameraComponent().camera
    assert camera.position == Vector3(5.0, 5.0, 5.0)
    assert camera.target == Vector3(0.0, 2.0, 0.0)
    assert camera.up == Vector3(0.0, 1.0, 0.0)
    assert camera.fovy == 90.0
    assert camera.projection is CameraProjection.PERSPECTIVE


def test_camera_serialize_fields():
    data = CameraComponent().serialize()
    assert set(data) == {"position", "target", "up", "fovy", "projection"}
    assert data["projection"] == "0"


def test_camera_round_trip():
    original = CameraComponent(
        camera=Camera(
            position=Vector3(1.0, 2.0, 3.0),
            fovy=45.0,
            projection=CameraProjection.ORTHOGRAPHIC,
        )
    )
    restored = CameraComponent.deserialize(_through_document(original.serialize()))
    assert restored.camera == original.camera


def test_camera_deserialize_requires_dict():
    with pytest.raises(ValueStorageError):
        CameraComponent.deserialize("1 2 3")


def test_transform_round_trip():
    rotation = Quaternion.from_euler(0.3, 0.2, 0.1)
    original = TransformComponent(
        transform=Transform(Vector3(1.5, -2.0, 4.0), rotation, Vector3(1.0, 2.0, 0.5))
    )
    restored = TransformComponent.deserialize(_through_document(original.serialize()))
    assert restored.transform.translation == original.transform.translation
    assert restored.transform.scale == original.transform.scale
    assert list(restored.transform.rotation) == pytest.approx(list(rotation), abs=1e-5)


def test_transform_deserialize_requires_dict():
    with pytest.raises(ValueStorageError):
        TransformComponent.deserialize("0 0 0")


def test_velocity_defaults_are_independent():
    first = VelocityComponent()
    second = VelocityComponent()
    first.velocity.x = 3.0
    assert second.velocity == Vector3()
    assert first.apply_gravity is False


def test_velocity_is_not_serializable():
    with pytest.raises(TypeError):
        VelocityComponent().serialize()


def test_collision_component_calls_through():
    hits = []
    expected = RayCollision(hit=True, distance=2.0)
    collider = CollisionComponent(test_fn=lambda ray: expected, callback_fn=hits.append)
    ray = Ray(Vector3(), Vector3(1.0, 0.0, 0.0))
    assert collider.test_fn(ray) is expected
    collider.callback_fn(Vector3(2.0, 0.0, 0.0))
    assert hits == [Vector3(2.0, 0.0, 0.0)]


def test_components_round_trip_in_world():
    world = World()
    world.world_entity().add_component(CameraComponent())
    entity = world.add_entity()
    entity.add_component(TransformComponent(transform=Transform(Vector3(1.0, 0.0, 0.0))))
    data = world.serialize()
    assert "CameraComponent" in data["entities"][0]["components"]

    restored = World()
    restored.deserialize(loads(dumps(data)))
    camera = restored.world_entity().get_component(CameraComponent)
    assert camera.camera == Camera()
    transforms = list(restored.components(TransformComponent))
    assert [t.transform.translation for t in transforms] == [Vector3(1.0, 0.0, 0.0)]
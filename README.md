# otb

`otb` is a compact entity-component-system engine for a box-pushing
puzzle game. A character walks around a level, pushes chains of boxes,
jumps, and can grab a box so that it is dragged along. The world
simulation, the level file format, the animation graph and the box
physics all run in plain Python with no dependencies beyond the
standard library.

## The level format

Levels and animation graphs are stored as indented text. Every line
holds one of three tags: `!<DICT>`, `!<ARRAY>` or `!<VALUE> text`.
Nesting is two spaces per level, dictionary entries are written as
`key: value`, and lines starting with `//` are comments. The root of a
document is always a dictionary:

```
!<DICT>
  entities: !<ARRAY>
    !<DICT>
      name: !<VALUE> world
      components: !<DICT>
        BoxSingleComponent: !<DICT>
          gravity: !<VALUE> 9.800000
          air_drag_coefficient: !<VALUE> 0.800000
```

`otb.value_storage` reads and writes it:

```python
from otb.value_storage import loads, dumps, load, save, ValueStorageError

data = loads(text)          # nested dicts, lists and strings
text = dumps(data)          # the root must be a dict
level = load("Lvl1.vs")
save(level, "copy.vs")
```

Malformed documents, and values that cannot be stored, raise
`ValueStorageError` (a subclass of `ValueError`).

`otb.serialization` converts engine values to stored values and back:
`serialize_int`, `serialize_float`, `serialize_vector3`,
`serialize_transform` and the matching `deserialize_*` functions.
Transforms are stored as a dictionary of `translation`, `rotation`
(Euler angles in radians) and `scale`.

## Geometry

`otb.geometry` provides `Vector3`, `Quaternion`, `Transform`,
`BoundingBox`, `Ray` and `RayCollision`, together with
`ray_box_collision` and the range helpers `is_inside_ranges`,
`has_intersection_ranges`, `is_point_inside_range` and
`is_point_inside_range_safe`.

```python
from otb.geometry import Vector3, Quaternion, Transform

t = Transform(Vector3(1, 0, 0), Quaternion.identity(), Vector3(2, 2, 2))
t.apply(Vector3(1, 1, 1))    # Vector3(3, 2, 2)
t.box()                      # BoundingBox from (0, -1, -1) to (2, 1, 1)
```

`Transform.box()` raises `ValueError` for a rotated transform.

## The world

A `World` (in `otb.ecs`) holds entities, and each entity holds at most
one component of each type; adding a second one raises `ValueError`.
The first entity, returned by `world.world_entity()`, carries
world-wide components. Systems are plain callables:

- Fixed systems take `(world)` and run at a fixed time step.
  `fixed_frame_time` sets the step and `max_fixed_frames` caps how many
  steps one `update()` may run.
- Normal systems take `(world, dt)` and run once per `update()`.

```python
from otb.ecs import World
from otb.components import TransformComponent, VelocityComponent
from otb.physics import update_physics

world = World(fixed_frame_time=1 / 60, max_fixed_frames=2)

entity = world.add_entity()
entity.add_component(TransformComponent())
entity.add_component(VelocityComponent(apply_gravity=True))

world.add_fixed_system(update_physics)
world.update()

for velocity in world.components(VelocityComponent):
    print(velocity.velocity)
```

`World` also takes a `clock` callable (seconds, `time.perf_counter` by
default), which makes stepping reproducible in tests.

A component type must be registered with `register_component_type`
before worlds holding it can be serialized or deserialized.
`register_core_components()` in `otb.model` registers the camera, model
and transform components; `register_game_components()` in
`otb.game.world_creator` registers the box, character and input
components.

## Models and animation

`otb.model.ModelAsset` holds a model's animation clips (name and
keyframe count) and an `AnimationGraph` built from a `.ag` document,
with a shortest-path table between animations. Given only a path, it
reads the clips from a `.gltf` or `.glb` file below the assets
directory and the graph from the sibling `.ag` file. The assets
directory is taken from the `OTB_ASSETS_DIRECTORY` environment variable
and defaults to `assets`. Assets are shared through
`otb.assets.get_asset` while something holds them.

`ModelComponent.request_animation(name, looping)` starts an animation or
heads for it through the graph, and `update_animations(world, dt)`
advances animation clocks and transitions.

## Running the game simulation

`otb.game.world_creator.create_world(level_path, pressed_keys)` loads a
level and installs every game system in order: input, box attachment,
box chains, box gravity, character state, then animation and camera
following. `pressed_keys` is a callable returning the
`otb.game.input_system.Key` values held in the current step, so any
window or input library can drive the game:

```python
from otb.game.input_system import Key
from otb.game.world_creator import create_world

held = set()
world = create_world("assets/Lvl1.vs", lambda: held)

held.add(Key.W)
world.update()
```

Without `level_path`, `create_world` loads `/Lvl1.vs` from the assets
directory.

## What this package does not do

There is no window, no rendering and no keyboard handling, and the
package installs no command. Cameras are kept as data that a renderer
may read, and model files are read only for their animation clips;
meshes are not loaded or drawn. Input arrives only through the
`pressed_keys` callable.
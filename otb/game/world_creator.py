"""Building the game world from a level file with all of its systems."""

from __future__ import annotations

from typing import Callable, Iterable, Optional, Union
from pathlib import Path

from otb import value_storage
from otb.assets import asset_file_path
from otb.ecs import World, register_component_type
from otb.game.box import (
    BoxComponent,
    BoxSingleComponent,
    create_components,
    find_collision_chain,
    push_back_chain,
    update_chain,
    update_from_velocity,
)
from otb.game.box_attachment import process_ability, process_ability_activation
from otb.game.character_component import CharacterComponent
from otb.game.character_system import character_follow_camera, update_state
from otb.game.input_receiver import InputReceiverComponent
from otb.game.input_system import (
    Key,
    apply_input,
    clear_input,
    collect_input,
    update_action_queue,
)
from otb.model import register_core_components, update_animations

DEFAULT_LEVEL = "/Lvl1.vs"
FIXED_FRAME_TIME = 1 / 60
MAX_FIXED_FRAMES = 2

KeySource = Callable[[], Iterable[Key]]


def register_game_components() -> None:
    """Register the game's component types for saving and loading."""
    register_component_type("BoxComponent", BoxComponent)
    register_component_type("BoxSingleComponent", BoxSingleComponent)
    register_component_type("CharacterComponent", CharacterComponent)
    register_component_type("InputReceiverComponent", InputReceiverComponent)


def create_world(
    level_path: Optional[Union[str, Path]] = None,
    pressed_keys: Optional[KeySource] = None,
) -> World:
    """Load a level and install the game's fixed and per-frame systems.

    ``pressed_keys`` is called once per fixed step for the keys held down.
    """
    register_core_components()
    register_game_components()

    if level_path is None:
        level_path = asset_file_path(DEFAULT_LEVEL)
    keys: KeySource = pressed_keys if pressed_keys is not None else (lambda: ())

    world = World(fixed_frame_time=FIXED_FRAME_TIME, max_fixed_frames=MAX_FIXED_FRAMES)
    world.deserialize(value_storage.load(level_path))

    world.add_fixed_system(create_components)

    world.add_fixed_system(clear_input)
    world.add_fixed_system(lambda w: collect_input(w, keys()))
    world.add_fixed_system(update_action_queue)
    world.add_fixed_system(apply_input)

    world.add_fixed_system(process_ability_activation)
    world.add_fixed_system(process_ability)

    world.add_fixed_system(find_collision_chain)
    world.add_fixed_system(push_back_chain)
    world.add_fixed_system(update_chain)

    world.add_fixed_system(update_from_velocity)

    world.add_fixed_system(update_state)

    world.add_normal_system(update_animations)
    world.add_normal_system(character_follow_camera)

    return world
"""Model assets, their animation graphs, and animated model components."""

from __future__ import annotations

import json
import logging
import struct
import sys
from dataclasses import dataclass, field
from pathlib import Path
from typing import Dict, List, Mapping, Optional, Sequence, Union

from otb import value_storage
from otb.assets import AssetBase, asset_file_path, get_asset, sibling_asset
from otb.components import CameraComponent, TransformComponent
from otb.ecs import Component, World, register_component_type
from otb.geometry import Transform
from otb.serialization import deserialize_float, deserialize_transform
from otb.value_storage import Value, ValueStorageError

logger = logging.getLogger(__name__)

PATH_FIELD = "path"
MODEL_SPACE_COLLIDER_FIELD = "model_space_collider"
GRAPH_EXTENSION = ".ag"

UNREACHABLE = sys.maxsize
DEFAULT_ANIMATION_SPEED = 60.0

_GLB_MAGIC = b"glTF"
_GLB_JSON_CHUNK = 0x4E4F534A
_GLTF_FRAME_MS = 17
_GLTF_SUFFIXES = {".glb", ".gltf"}


@dataclass(frozen=True)
class AnimationClip:
    """A named animation and the number of keyframes it spans."""

    name: str
    keyframe_count: int


@dataclass(frozen=True)
class Transition:
    """A direct edge to ``target``; a negative time waits for the clip to end."""

    target: int
    transition_time: float


@dataclass(frozen=True)
class DirectionEntry:
    """The first transition on the shortest path, and that path's length."""

    transition: Optional[Transition]
    path_length: int


@dataclass
class AnimationGraph:
    animation_transitions: List[List[Transition]] = field(default_factory=list)
    directions: List[List[DirectionEntry]] = field(default_factory=list)

    @classmethod
    def from_value_storage(cls, animation_lookup: Mapping[str, int], data: Value) -> AnimationGraph:
        """Build the graph and its shortest-path table from stored transitions."""
        if not isinstance(data, dict):
            raise ValueStorageError("an animation graph must be a dictionary")
        count = max(animation_lookup.values(), default=-1) + 1

        def index_of(name: str) -> int:
            try:
                return animation_lookup[name]
            except KeyError:
                raise ValueStorageError(f"unknown animation {name!r} in graph") from None

        transitions: List[List[Transition]] = [[] for _ in range(count)]
        for source, edges in data.items():
            if not isinstance(edges, dict):
                raise ValueStorageError(f"transitions of {source!r} must be a dictionary")
            transitions[index_of(source)].extend(
                Transition(index_of(target), deserialize_float(blend))
                for target, blend in edges.items()
            )

        directions = [
            [DirectionEntry(None, 0 if i == j else UNREACHABLE) for j in range(count)]
            for i in range(count)
        ]
        for row, edges in zip(directions, transitions):
            for transition in edges:
                row[transition.target] = DirectionEntry(transition, 1)

        for k in range(count):
            for i in range(count):
                if i == k:
                    continue
                for j in range(count):
                    if j == k or j == i:
                        continue
                    candidate = directions[i][k].path_length + directions[k][j].path_length
                    if directions[i][j].path_length > candidate:
                        directions[i][j] = DirectionEntry(directions[i][k].transition, candidate)

        return cls(animation_transitions=transitions, directions=directions)


def _read_gltf_document(path: Path) -> dict:
    raw = path.read_bytes()
    if raw[:4] == _GLB_MAGIC:
        if len(raw) < 20:
            raise ValueError(f"{path}: truncated binary glTF")
        chunk_length, chunk_type = struct.unpack_from("<II", raw, 12)
        if chunk_type != _GLB_JSON_CHUNK:
            raise ValueError(f"{path}: first chunk is not JSON")
        raw = raw[20:20 + chunk_length]
    return json.loads(raw.decode("utf-8"))


def _load_clips(file_path: str) -> List[AnimationClip]:
    path = Path(file_path)
    if path.suffix.lower() not in _GLTF_SUFFIXES:
        return []
    try:
        document = _read_gltf_document(path)
    except FileNotFoundError:
        logger.warning("model file %s not found", path)
        return []

    accessors = document.get("accessors", [])
    clips = []
    for animation in document.get("animations", []):
        samplers = animation.get("samplers", [])
        duration = 0.0
        for channel in animation.get("channels", []):
            sampler = samplers[channel["sampler"]]
            maxima = accessors[sampler["input"]].get("max") or [0.0]
            duration = max(duration, float(maxima[0]))
        frames = int(duration * 1000.0 / _GLTF_FRAME_MS) + 1
        clips.append(AnimationClip(animation.get("name", ""), frames))
    return clips


class ModelAsset(AssetBase):
    """A model's animations, their name lookup and the graph linking them.

    Without explicit ``animations`` the clips are read from the glTF file of
    the asset, and the graph from the sibling ``.ag`` document.
    """

    def __init__(
        self,
        path: str,
        animations: Optional[Sequence[AnimationClip]] = None,
        graph_data: Optional[Value] = None,
    ) -> None:
        super().__init__(path)
        if animations is None:
            animations = _load_clips(asset_file_path(path))
            if animations and graph_data is None:
                graph_data = value_storage.load(asset_file_path(sibling_asset(path, GRAPH_EXTENSION)))

        self.animations: List[AnimationClip] = list(animations)
        self.animation_names: List[str] = [clip.name for clip in self.animations]
        self.animation_lookup: Dict[str, int] = {}
        for index, name in enumerate(self.animation_names):
            self.animation_lookup.setdefault(name, index)

        if graph_data is None:
            self.anim_graph = AnimationGraph()
        else:
            self.anim_graph = AnimationGraph.from_value_storage(self.animation_lookup, graph_data)

    @property
    def animation_count(self) -> int:
        return len(self.animations)


class ModelComponent(Component):
    """Plays a model asset's animations, moving through its graph on request."""

    def __init__(self, asset: Union[ModelAsset, str]) -> None:
        if isinstance(asset, str):
            asset = get_asset(ModelAsset, asset)
        self.asset = asset
        self.model_space_collider = Transform()
        self.animation_speed = 0.0
        self.playing_transition: Optional[Transition] = None
        self.transition_time = 0.0
        self.playing_animation_index: Optional[int] = None
        self.animation_time = 0.0
        self.looping_requested = False
        self.request_animation_index: Optional[int] = None

    def serialize(self) -> Value:
        return self.asset.path

    @classmethod
    def deserialize(cls, data: Value) -> ModelComponent:
        if isinstance(data, str):
            return cls(data)
        if isinstance(data, dict):
            path = data[PATH_FIELD]
            if not isinstance(path, str):
                raise ValueStorageError("a model path must be a plain value")
            result = cls(path)
            result.model_space_collider = deserialize_transform(data[MODEL_SPACE_COLLIDER_FIELD])
            return result
        raise ValueStorageError("a model must be a path or a dictionary")

    def request_animation(self, animation_name: str, looping: bool) -> None:
        """Start an animation, or head for it through the animation graph."""
        lookup = self.asset.animation_lookup
        if animation_name not in lookup:
            raise KeyError(f"model {self.asset.path!r} has no animation {animation_name!r}")
        target = lookup[animation_name]
        if not self.asset.anim_graph.animation_transitions or self.playing_animation_index is None:
            self.playing_animation_index = target
        else:
            if self.request_animation_index != target:
                entry = self.asset.anim_graph.directions[self.playing_animation_index][target]
                self.playing_transition = entry.transition
                self.transition_time = 0.0
            self.request_animation_index = target
        self.looping_requested = looping

    def playing_animation(self) -> str:
        """The name of the playing animation, or an empty string."""
        if self.playing_animation_index is None:
            return ""
        return self.asset.animation_names[self.playing_animation_index]


def _start_next_transition(model: ModelComponent) -> None:
    model.playing_animation_index = model.playing_transition.target
    model.animation_time = 0.0
    model.playing_transition = None
    model.transition_time = 0.0
    if model.playing_animation_index != model.request_animation_index:
        row = model.asset.anim_graph.directions[model.playing_animation_index]
        model.playing_transition = row[model.request_animation_index].transition


def update_animations(world: World, dt: float) -> None:
    """Advance animation clocks and follow pending transitions.

    A component that is blending stops the pass over the remaining ones.
    """
    for model in world.components(ModelComponent):
        if model.playing_animation_index is None:
            continue

        transition = model.playing_transition
        if transition is not None and transition.transition_time > 0:
            model.transition_time += dt
            if model.transition_time > transition.transition_time:
                _start_next_transition(model)
            return
        if transition is not None and transition.transition_time == 0:
            raise ValueError("a transition must have a positive or negative blend time")

        clip = model.asset.animations[model.playing_animation_index]
        at_request = model.playing_animation_index == model.request_animation_index
        speed = model.animation_speed if at_request else DEFAULT_ANIMATION_SPEED
        model.animation_time += speed * dt
        if model.animation_time >= clip.keyframe_count or model.animation_time < 0:
            if transition is not None:
                _start_next_transition(model)
                return
            if model.looping_requested:
                if model.animation_time < 0:
                    model.animation_time += clip.keyframe_count
                else:
                    model.animation_time -= clip.keyframe_count
            else:
                model.animation_time = 0.0
                model.playing_animation_index = None


def register_core_components() -> None:
    """Register the core component types for saving and loading."""
    register_component_type("CameraComponent", CameraComponent)
    register_component_type("ModelComponent", ModelComponent)
    register_component_type("TransformComponent", TransformComponent)
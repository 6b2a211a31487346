"""Per-entity input state and the queue of delayed actions."""

from __future__ import annotations

from dataclasses import dataclass, field
from typing import List, Set, Tuple

from otb.ecs import Component
from otb.value_storage import Value

RUNTIME_MARKER = "RUNTIME"


class ActionNames:
    """Names of the discrete actions an input receiver can get."""

    JUMP = "jump"
    ABILITY_1 = "ability_1"


@dataclass
class ActionQueue:
    """Pending actions, each stored with its delay after the one before it."""

    delays: List[Tuple[str, float]] = field(default_factory=list)

    def request(self, action: str, delay: float) -> None:
        """Queue an action to fire ``delay`` seconds from now."""
        elapsed = 0.0
        index = 0
        while index < len(self.delays) and delay > elapsed:
            elapsed += self.delays[index][1]
            index += 1
        inserted = delay - elapsed
        self.delays.insert(index, (action, inserted))
        if index + 1 < len(self.delays):
            name, following = self.delays[index + 1]
            self.delays[index + 1] = (name, following - inserted)


@dataclass(eq=False)
class InputReceiverComponent(Component):
    """Movement, rotation and action input collected for an entity."""

    analog_input: Tuple[float, float] = (0.0, 0.0)
    rotation_input: float = 0.0
    action_queue: ActionQueue = field(default_factory=ActionQueue)
    extra_actions: Set[str] = field(default_factory=set)

    def serialize(self) -> Value:
        return RUNTIME_MARKER

    @classmethod
    def deserialize(cls, data: Value) -> InputReceiverComponent:
        """A fresh receiver; input state is never stored."""
        return cls()
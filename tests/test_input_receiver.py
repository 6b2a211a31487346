from itertools import accumulate

import pytest

from otb.game.input_receiver import ActionNames, ActionQueue, InputReceiverComponent


def absolute_times(queue):
    names = [name for name, _ in queue.delays]
    times = accumulate(delay for _, delay in queue.delays)
    return dict(zip(names, times))


def test_serialize_is_runtime_marker():
    assert InputReceiverComponent().serialize() == "RUNTIME"


def test_deserialize_gives_fresh_receiver():
    component = InputReceiverComponent.deserialize("RUNTIME")
    assert component.action_queue.delays == []
    assert component.extra_actions == set()
    assert component.analog_input == (0.0, 0.0)


def test_deserialize_ignores_data():
    component = InputReceiverComponent.deserialize({"anything": "x"})
    assert component.rotation_input == 0.0


def test_request_on_empty_queue():
    queue = ActionQueue()
    queue.request(ActionNames.JUMP, 0.0)
    assert queue.delays == [("jump", 0.0)]


def test_zero_delays_go_to_the_front():
    queue = ActionQueue()
    queue.request("a", 0.0)
    queue.request("b", 0.0)
    assert queue.delays == [("b", 0.0), ("a", 0.0)]


@pytest.mark.parametrize(
    "requests",
    [
        [("a", 0.5), ("b", 1.0)],
        [("a", 1.0), ("b", 0.5)],
        [("a", 1.0), ("b", 0.5), ("c", 2.0)],
        [("a", 0.5), ("b", 1.0), ("c", 0.5), ("d", 0.25)],
        [("a", 0.0), ("b", 0.25), ("c", 0.0)],
    ],
)
def test_requested_times_are_kept(requests):
    queue = ActionQueue()
    for name, delay in requests:
        queue.request(name, delay)
    assert len(queue.delays) == len(requests)
    assert absolute_times(queue) == pytest.approx(dict(requests))


def test_action_names_are_queued_by_name():
    queue = ActionQueue()
    queue.request(ActionNames.ABILITY_1, 0.25)
    assert queue.delays == [(ActionNames.ABILITY_1, 0.25)]
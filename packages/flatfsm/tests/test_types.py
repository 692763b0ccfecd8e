"""Tests for Event, MachineState and event coercion."""
from enum import Enum

import pytest

from flatfsm import DefinitionError, Event, FSMError, LifecycleError, MachineState, SnapshotError
from flatfsm.types import to_event


class Kind(Enum):
    GO = "go"


def test_event_defaults():
    event = Event("GO")
    assert event.type == "GO"
    assert dict(event.data) == {}


def test_event_is_frozen():
    event = Event("GO")
    with pytest.raises(AttributeError):
        event.type = "STOP"


def test_event_data_is_copied():
    payload = {"n": 1}
    event = Event("GO", payload)
    payload["n"] = 2
    assert event.data["n"] == 1


def test_event_equality():
    assert Event("GO", {"n": 1}) == Event("GO", {"n": 1})
    assert Event("GO", {"n": 1}) != Event("GO", {"n": 2})


def test_event_hashable_by_type():
    assert hash(Event("GO", {"n": 1})) == hash(Event("GO", {"n": 2}))


def test_to_event_from_string():
    assert to_event("GO") == Event("GO")


def test_to_event_from_enum():
    assert to_event(Kind.GO).type is Kind.GO


def test_to_event_from_mapping():
    event = to_event({"type": "GO", "speed": 3})
    assert event.type == "GO"
    assert dict(event.data) == {"speed": 3}


def test_to_event_merges_keyword_payload():
    event = to_event({"type": "GO", "speed": 3}, speed=4, lane=1)
    assert dict(event.data) == {"speed": 4, "lane": 1}
    event = to_event(Event("GO", {"speed": 3}), lane=1)
    assert dict(event.data) == {"speed": 3, "lane": 1}


def test_to_event_passes_event_through():
    event = Event("GO")
    assert to_event(event) is event


def test_to_event_rejects_other_types():
    with pytest.raises(TypeError):
        to_event(3.5)
    with pytest.raises(TypeError):
        to_event({"speed": 3})


def test_machine_state_matches():
    state = MachineState("pending")
    assert state.matches("pending")
    assert not state.matches("resolved")


def test_error_hierarchy():
    assert issubclass(DefinitionError, FSMError)
    assert issubclass(LifecycleError, FSMError)
    assert issubclass(SnapshotError, FSMError)
    assert issubclass(DefinitionError, ValueError)
    assert issubclass(LifecycleError, RuntimeError)

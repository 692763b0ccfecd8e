"""Shared value types and errors for flatfsm."""
from __future__ import annotations

from dataclasses import dataclass, field
from enum import Enum
from types import MappingProxyType
from typing import Any, Callable, Hashable, Mapping, Union

StateId = Hashable
EventType = Hashable


class FSMError(Exception):
    """Base class for flatfsm errors."""


class DefinitionError(FSMError, ValueError):
    """Raised when a machine definition references undeclared states."""


class LifecycleError(FSMError, RuntimeError):
    """Raised on interpreter misuse when strict lifecycle checks are on."""


class SnapshotError(FSMError):
    """Raised on restore failures (version mismatch, unknown machine or state)."""


class InterpreterStatus(Enum):
    NOT_STARTED = "not_started"
    RUNNING = "running"
    STOPPED = "stopped"


@dataclass(frozen=True)
class Event:
    """An event sent to a machine. ``data`` is a read-only payload."""

    type: EventType
    data: Mapping[str, Any] = field(default_factory=dict, hash=False)

    def __post_init__(self) -> None:
        object.__setattr__(self, "data", MappingProxyType(dict(self.data)))


@dataclass(frozen=True)
class MachineState:
    """State of one machine instance, as handed to transition listeners.

    ``event`` is the event that produced this state (``None`` on initial
    entry), ``previous`` the value before it. ``changed`` is False when the
    event matched no transition. ``done`` is True once ``value`` is final.
    """

    value: StateId
    event: Event | None = None
    previous: StateId | None = None
    changed: bool = True
    done: bool = False

    def matches(self, value: StateId) -> bool:
        return self.value == value


EventLike = Union[Event, EventType, Mapping[str, Any]]
Listener = Callable[[MachineState], None]


def to_event(event: EventLike, **data: Any) -> Event:
    """Coerce an ``Event``, a bare event type or a ``{"type": ...}`` mapping.

    Keyword arguments are merged into the payload.
    """
    if isinstance(event, Event):
        if not data:
            return event
        return Event(event.type, {**event.data, **data})
    if isinstance(event, Mapping):
        if "type" not in event:
            raise TypeError(f"Event mapping has no 'type' key: {dict(event)!r}")
        payload = {k: v for k, v in event.items() if k != "type"}
        payload.update(data)
        return Event(event["type"], payload)
    if isinstance(event, (str, Enum)):
        return Event(event, data)
    raise TypeError(f"Cannot interpret {event!r} as an event")

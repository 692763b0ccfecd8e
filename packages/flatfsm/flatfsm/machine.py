"""Machine definitions: validated, immutable transition tables."""
from __future__ import annotations

from dataclasses import dataclass, field
from types import MappingProxyType
from typing import Any, Iterator, Mapping

from flatfsm.types import (
    DefinitionError,
    EventLike,
    EventType,
    MachineState,
    StateId,
    to_event,
)

_STATE_TYPES = ("atomic", "final")


@dataclass(frozen=True)
class StateNode:
    """One declared state. ``on`` maps event types to target states."""

    name: StateId
    on: Mapping[EventType, StateId] = field(default_factory=dict)
    final: bool = False

    def __post_init__(self) -> None:
        object.__setattr__(self, "on", MappingProxyType(dict(self.on)))


class Machine:
    """Immutable machine definition. Safe to share between interpreters.

    Build one with :func:`create_machine`. The constructor validates that
    ``initial`` and every transition target are declared states, and that
    final states declare no outgoing transitions.
    """

    def __init__(
        self,
        id: str,
        initial: StateId,
        states: Mapping[StateId, StateNode],
    ) -> None:
        self._id = id
        self._initial = initial
        self._states: Mapping[StateId, StateNode] = MappingProxyType(dict(states))
        self._validate()

    @property
    def id(self) -> str:
        return self._id

    @property
    def initial(self) -> StateId:
        return self._initial

    @property
    def states(self) -> Mapping[StateId, StateNode]:
        return self._states

    @property
    def initial_state(self) -> MachineState:
        """The state entered when an interpreter starts."""
        return MachineState(
            value=self._initial,
            changed=True,
            done=self._states[self._initial].final,
        )

    def __contains__(self, state: object) -> bool:
        return state in self._states

    def __iter__(self) -> Iterator[StateId]:
        return iter(self._states)

    def __repr__(self) -> str:
        return f"Machine(id={self._id!r}, initial={self._initial!r}, states={list(self._states)!r})"

    # --- Lookup ---

    def state_names(self) -> list[StateId]:
        """List declared states in declaration order."""
        return list(self._states)

    def transition_for(self, state: StateId, event_type: EventType) -> StateId | None:
        """Target state for ``event_type`` in ``state``, or None if unmatched."""
        node = self._states.get(state)
        if node is None:
            return None
        return node.on.get(event_type)

    def is_final(self, state: StateId) -> bool:
        """Is ``state`` a final state? Raises KeyError if undeclared."""
        return self._states[state].final

    def events_for(self, state: StateId) -> list[EventType]:
        """Event types that trigger a transition out of ``state``."""
        return list(self._states[state].on)

    def transition(self, state: MachineState | StateId, event: EventLike) -> MachineState:
        """Compute the state reached from ``state`` on ``event``. Pure.

        Unmatched events (including any event at a final state) return the
        same value with ``changed`` set to False.
        """
        value = state.value if isinstance(state, MachineState) else state
        if value not in self._states:
            raise KeyError(value)
        evt = to_event(event)
        target = self.transition_for(value, evt.type)
        if target is None:
            return MachineState(
                value=value,
                event=evt,
                previous=value,
                changed=False,
                done=self._states[value].final,
            )
        return MachineState(
            value=target,
            event=evt,
            previous=value,
            changed=True,
            done=self._states[target].final,
        )

    # --- Validation ---

    def _validate(self) -> None:
        if not self._states:
            raise DefinitionError(f"Machine '{self._id}' declares no states")
        if self._initial not in self._states:
            raise DefinitionError(
                f"Machine '{self._id}': initial state {self._initial!r} is not declared"
            )
        for name, node in self._states.items():
            if node.name != name:
                raise DefinitionError(
                    f"State key {name!r} does not match node name {node.name!r}"
                )
            if node.final and node.on:
                raise DefinitionError(
                    f"Final state {name!r} declares transitions on {list(node.on)!r}"
                )
            for event_type, target in node.on.items():
                if target not in self._states:
                    raise DefinitionError(
                        f"State {name!r} transitions on {event_type!r} "
                        f"to undeclared state {target!r}"
                    )


def create_machine(config: Mapping[str, Any]) -> Machine:
    """Build a :class:`Machine` from a declarative config mapping.

    Example::

        create_machine({
            "id": "promise",
            "initial": "pending",
            "states": {
                "pending": {"on": {"RESOLVE": {"target": "resolved"},
                                   "REJECT": "rejected"}},
                "resolved": {"type": "final"},
                "rejected": {"type": "final"},
            },
        })

    Raises DefinitionError if the config is malformed or references an
    undeclared state.
    """
    if "initial" not in config:
        raise DefinitionError("Machine config has no 'initial' state")
    machine_id = config.get("id", "(machine)")
    raw_states = config.get("states") or {}
    if not isinstance(raw_states, Mapping):
        raise DefinitionError(
            f"Machine '{machine_id}': 'states' must be a mapping, got {type(raw_states).__name__}"
        )
    states = {
        name: _parse_state(machine_id, name, spec or {})
        for name, spec in raw_states.items()
    }
    return Machine(id=machine_id, initial=config["initial"], states=states)


def _parse_state(machine_id: str, name: StateId, spec: Mapping[str, Any]) -> StateNode:
    if not isinstance(spec, Mapping):
        raise DefinitionError(
            f"Machine '{machine_id}': state {name!r} must be a mapping, got {type(spec).__name__}"
        )
    state_type = spec.get("type", "atomic")
    if state_type not in _STATE_TYPES:
        raise DefinitionError(
            f"Machine '{machine_id}': state {name!r} has unsupported type {state_type!r}"
        )
    raw_on = spec.get("on") or {}
    if not isinstance(raw_on, Mapping):
        raise DefinitionError(
            f"Machine '{machine_id}': 'on' of state {name!r} must be a mapping, "
            f"got {type(raw_on).__name__}"
        )
    on: dict[EventType, StateId] = {}
    for event_type, target in raw_on.items():
        on[event_type] = _parse_target(machine_id, name, event_type, target)
    return StateNode(name=name, on=on, final=state_type == "final")


def _parse_target(
    machine_id: str, name: StateId, event_type: EventType, target: Any,
) -> StateId:
    """Accept ``"resolved"`` or ``{"target": "resolved"}``."""
    if isinstance(target, Mapping):
        if "target" not in target:
            raise DefinitionError(
                f"Machine '{machine_id}': transition {name!r} --{event_type!r}--> has no target"
            )
        return target["target"]
    return target

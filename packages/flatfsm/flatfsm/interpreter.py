"""Interpreter - runs one instance of a machine definition."""
from __future__ import annotations

import logging
from collections import deque
from typing import Any

from flatfsm.config import InterpreterConfig
from flatfsm.machine import Machine
from flatfsm.types import (
    Event,
    EventLike,
    InterpreterStatus,
    LifecycleError,
    Listener,
    MachineState,
    SnapshotError,
    StateId,
    to_event,
)

logger = logging.getLogger(__name__)

_SNAPSHOT_VERSION = 1


class Interpreter:
    """Holds the current state of one machine instance and dispatches events.

    Lifecycle is ``NOT_STARTED -> RUNNING -> STOPPED``. Entering a final
    state or calling :meth:`stop` ends the run; a stopped interpreter is
    not restartable.

    Listeners are called synchronously, in registration order, after the
    state has been updated. Exceptions raised by a listener propagate out
    of :meth:`start` / :meth:`send` unchanged.

    Events sent from inside a listener are queued and processed in order
    once every listener has seen the current transition.
    """

    def __init__(self, machine: Machine, config: InterpreterConfig | None = None) -> None:
        self._machine = machine
        self._config = config or InterpreterConfig()
        self._state: MachineState | None = None
        self._status = InterpreterStatus.NOT_STARTED
        self._listeners: list[Listener] = []
        self._done_listeners: list[Listener] = []
        self._pending: deque[Event] = deque()
        self._processing = False

    @property
    def machine(self) -> Machine:
        return self._machine

    @property
    def config(self) -> InterpreterConfig:
        return self._config

    @property
    def status(self) -> InterpreterStatus:
        return self._status

    @property
    def state(self) -> MachineState | None:
        """Current state, or None before start."""
        return self._state

    @property
    def current_state(self) -> StateId | None:
        return self._state.value if self._state is not None else None

    @property
    def done(self) -> bool:
        """Has the machine reached a final state?"""
        return self._state is not None and self._state.done

    # --- Listeners ---

    def on_transition(self, listener: Listener) -> Interpreter:
        """Register a transition listener. Returns self for chaining.

        A listener added after start only receives later transitions,
        unless ``replay_on_subscribe`` is set, in which case it is called
        once with the current state right away.
        """
        self._listeners.append(listener)
        if self._config.replay_on_subscribe and self._state is not None:
            listener(self._state)
        return self

    def on_done(self, listener: Listener) -> Interpreter:
        """Register a listener called once when a final state is entered."""
        self._done_listeners.append(listener)
        if self._config.replay_on_subscribe and self.done:
            listener(self._state)
        return self

    def off(self, listener: Listener) -> Interpreter:
        """Remove a transition or done listener. Unknown listeners are ignored."""
        for listeners in (self._listeners, self._done_listeners):
            try:
                listeners.remove(listener)
            except ValueError:
                pass
        return self

    # --- Lifecycle ---

    def start(self) -> Interpreter:
        """Enter the initial state and notify listeners.

        Calling start on an interpreter that already started (or stopped)
        does nothing, or raises LifecycleError in strict mode.
        """
        if self._status is not InterpreterStatus.NOT_STARTED:
            if self._config.strict:
                raise LifecycleError(
                    f"Interpreter for '{self._machine.id}' is {self._status.value}; "
                    "create a new interpreter to restart"
                )
            return self
        self._status = InterpreterStatus.RUNNING
        logger.debug("machine %s started in %r", self._machine.id, self._machine.initial)
        self._processing = True
        try:
            self._enter(self._machine.initial_state)
            self._drain()
        finally:
            self._processing = False
            self._pending.clear()
        return self

    def send(self, event: EventLike, **data: Any) -> None:
        """Dispatch an event to the running machine.

        Events that match no transition, and events sent after the machine
        stopped, are dropped without error. Called from a listener, the
        event is queued until the current notification round completes.
        """
        evt = to_event(event, **data)
        if self._status is not InterpreterStatus.RUNNING:
            if self._status is InterpreterStatus.NOT_STARTED and self._config.strict:
                raise LifecycleError(
                    f"Event {evt.type!r} sent to '{self._machine.id}' before start()"
                )
            logger.debug(
                "machine %s is %s; dropping event %r",
                self._machine.id, self._status.value, evt.type,
            )
            return
        if self._processing:
            logger.debug("machine %s: queueing event %r", self._machine.id, evt.type)
            self._pending.append(evt)
            return
        self._processing = True
        try:
            self._step(evt)
            self._drain()
        finally:
            self._processing = False
            self._pending.clear()

    def stop(self) -> None:
        """Stop the interpreter. Idempotent; listeners are not notified."""
        if self._status is not InterpreterStatus.STOPPED:
            logger.debug("machine %s stopped", self._machine.id)
        self._status = InterpreterStatus.STOPPED

    def can(self, event: EventLike) -> bool:
        """Would ``event`` cause a transition right now?"""
        if self._status is not InterpreterStatus.RUNNING:
            return False
        evt = to_event(event)
        return self._machine.transition_for(self._state.value, evt.type) is not None

    def _step(self, evt: Event) -> None:
        next_state = self._machine.transition(self._state, evt)
        if not next_state.changed:
            logger.debug(
                "machine %s: no transition from %r on %r",
                self._machine.id, next_state.value, evt.type,
            )
            return
        logger.debug(
            "machine %s: %r --%r--> %r",
            self._machine.id, next_state.previous, evt.type, next_state.value,
        )
        self._enter(next_state)

    def _drain(self) -> None:
        # Queued events are dropped once the machine stops.
        while self._pending and self._status is InterpreterStatus.RUNNING:
            self._step(self._pending.popleft())

    def _enter(self, state: MachineState) -> None:
        self._state = state
        try:
            for listener in tuple(self._listeners):
                listener(state)
        finally:
            if state.done:
                self._status = InterpreterStatus.STOPPED
        if state.done:
            logger.debug("machine %s done in %r", self._machine.id, state.value)
            for listener in tuple(self._done_listeners):
                listener(state)

    # --- Serialization ---

    def snapshot(self) -> dict[str, Any]:
        """Serialize the instance state. JSON-compatible for string state ids."""
        state = self._state
        return {
            "version": _SNAPSHOT_VERSION,
            "machine": self._machine.id,
            "status": self._status.value,
            "value": state.value if state is not None else None,
            "previous": state.previous if state is not None else None,
        }

    def restore(self, data: dict[str, Any]) -> None:
        """Resume a snapshotted instance. Listeners are not notified.

        Only valid before start. Raises SnapshotError when the payload does
        not belong to this machine.
        """
        if self._status is not InterpreterStatus.NOT_STARTED:
            raise LifecycleError(
                f"Cannot restore into an interpreter that is {self._status.value}"
            )
        version = data.get("version")
        if version != _SNAPSHOT_VERSION:
            raise SnapshotError(
                f"Unsupported snapshot version {version!r}, expected {_SNAPSHOT_VERSION}"
            )
        machine_id = data.get("machine")
        if machine_id != self._machine.id:
            raise SnapshotError(
                f"Snapshot is for machine {machine_id!r}, interpreter runs {self._machine.id!r}"
            )
        try:
            status = InterpreterStatus(data["status"])
        except (KeyError, ValueError) as exc:
            raise SnapshotError(f"Invalid snapshot status {data.get('status')!r}") from exc
        if status is InterpreterStatus.NOT_STARTED:
            return
        value = data.get("value")
        if value is None and status is InterpreterStatus.STOPPED:
            # Stopped before it ever started.
            self._status = status
            return
        previous = data.get("previous")
        self._check_declared(value)
        if previous is not None:
            self._check_declared(previous)
        done = self._machine.is_final(value)
        self._state = MachineState(
            value=value,
            previous=previous,
            changed=False,
            done=done,
        )
        self._status = InterpreterStatus.STOPPED if done else status

    def _check_declared(self, value: Any) -> None:
        try:
            declared = value in self._machine
        except TypeError as exc:
            raise SnapshotError(f"Snapshot state {value!r} is not a valid state id") from exc
        if not declared:
            raise SnapshotError(f"Snapshot state {value!r} is not declared")


def interpret(machine: Machine, config: InterpreterConfig | None = None) -> Interpreter:
    """Bind a new, not yet started interpreter to ``machine``."""
    return Interpreter(machine, config)

"""flatfsm - A small, embeddable interpreter for flat finite state machines."""
from __future__ import annotations

from flatfsm.config import InterpreterConfig
from flatfsm.interpreter import Interpreter, interpret
from flatfsm.logs import configure_logging, log_transitions
from flatfsm.machine import Machine, StateNode, create_machine
from flatfsm.types import (
    DefinitionError,
    Event,
    FSMError,
    InterpreterStatus,
    LifecycleError,
    MachineState,
    SnapshotError,
)

__all__ = [
    "create_machine",
    "interpret",
    "Machine",
    "StateNode",
    "Interpreter",
    "InterpreterConfig",
    "InterpreterStatus",
    "MachineState",
    "Event",
    "FSMError",
    "DefinitionError",
    "LifecycleError",
    "SnapshotError",
    "configure_logging",
    "log_transitions",
]

"""Interpreter configuration dataclass."""
from __future__ import annotations

from dataclasses import dataclass


@dataclass(frozen=True)
class InterpreterConfig:
    """Immutable options for an :class:`~flatfsm.interpreter.Interpreter`.

    Attributes:
        replay_on_subscribe: Listeners registered after ``start()`` are
            called once with the current state on registration. Off by
            default: late listeners only see future transitions.
        strict: Raise LifecycleError on ``start()`` of an already started
            interpreter and on ``send()`` before ``start()``. Off by
            default: both are silent no-ops.
    """

    replay_on_subscribe: bool = False
    strict: bool = False

"""Logging helpers: console setup and a transition-logging listener."""
from __future__ import annotations

import logging

from flatfsm.types import Listener, MachineState

_DEFAULT_FORMAT = "%(asctime)s | %(levelname)-8s | %(name)s | %(message)s"
_DEFAULT_DATEFMT = "%Y-%m-%d %H:%M:%S"


def configure_logging(level: str | int = "INFO", fmt: str | None = None) -> None:
    """Route log records to the console with a pipe-separated format."""
    if isinstance(level, str):
        level = getattr(logging, level.upper(), logging.INFO)
    handler = logging.StreamHandler()
    handler.setLevel(level)
    handler.setFormatter(logging.Formatter(fmt=fmt or _DEFAULT_FORMAT, datefmt=_DEFAULT_DATEFMT))
    logging.basicConfig(level=level, handlers=[handler], force=True)


def log_transitions(
    logger: logging.Logger | None = None,
    level: int = logging.INFO,
) -> Listener:
    """Return a listener that logs every state the machine enters.

    Register it explicitly; the interpreter itself does no I/O::

        interpret(machine).on_transition(log_transitions()).start()
    """
    log = logger or logging.getLogger("flatfsm.transitions")

    def listener(state: MachineState) -> None:
        if state.event is None:
            log.log(level, "%s", state.value)
        else:
            log.log(level, "%s (on %s)", state.value, state.event.type)

    return listener

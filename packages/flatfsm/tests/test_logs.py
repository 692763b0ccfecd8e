"""Tests for logging helpers and interpreter debug logging."""
import logging

from flatfsm import configure_logging, create_machine, interpret, log_transitions


def make_promise():
    return create_machine({
        "id": "promise",
        "initial": "pending",
        "states": {
            "pending": {"on": {"RESOLVE": "resolved", "REJECT": "rejected"}},
            "resolved": {"type": "final"},
            "rejected": {"type": "final"},
        },
    })


def test_log_transitions_logs_each_state(caplog):
    caplog.set_level(logging.INFO, logger="flatfsm.transitions")
    service = interpret(make_promise()).on_transition(log_transitions())

    service.start()
    service.send("RESOLVE")

    messages = [r.getMessage() for r in caplog.records if r.name == "flatfsm.transitions"]
    assert messages == ["pending", "resolved (on RESOLVE)"]


def test_log_transitions_custom_logger_and_level(caplog):
    log = logging.getLogger("test.custom")
    caplog.set_level(logging.WARNING, logger="test.custom")
    interpret(make_promise()).on_transition(log_transitions(log, logging.WARNING)).start()

    records = [r for r in caplog.records if r.name == "test.custom"]
    assert len(records) == 1
    assert records[0].levelno == logging.WARNING
    assert records[0].getMessage() == "pending"


def test_interpreter_logs_dropped_events_at_debug(caplog):
    caplog.set_level(logging.DEBUG, logger="flatfsm.interpreter")
    service = interpret(make_promise()).start()

    service.send("CANCEL")

    assert any("no transition" in r.getMessage() for r in caplog.records)


def test_interpreter_logs_nothing_above_debug(caplog):
    caplog.set_level(logging.INFO, logger="flatfsm.interpreter")
    service = interpret(make_promise()).start()
    service.send("RESOLVE")
    service.send("REJECT")
    service.stop()
    assert [r for r in caplog.records if r.name == "flatfsm.interpreter"] == []


def test_configure_logging_installs_console_handler(monkeypatch):
    calls = []
    monkeypatch.setattr(logging, "basicConfig", lambda **kw: calls.append(kw))

    configure_logging("debug")

    assert len(calls) == 1
    assert calls[0]["level"] == logging.DEBUG
    assert calls[0]["force"] is True
    (handler,) = calls[0]["handlers"]
    assert isinstance(handler, logging.StreamHandler)
    assert handler.formatter._fmt == "%(asctime)s | %(levelname)-8s | %(name)s | %(message)s"


def test_configure_logging_unknown_level_defaults_to_info(monkeypatch):
    calls = []
    monkeypatch.setattr(logging, "basicConfig", lambda **kw: calls.append(kw))

    configure_logging("verbose")

    assert calls[0]["level"] == logging.INFO


def test_configure_logging_accepts_int_level_and_format(monkeypatch):
    calls = []
    monkeypatch.setattr(logging, "basicConfig", lambda **kw: calls.append(kw))

    configure_logging(logging.WARNING, fmt="%(message)s")

    assert calls[0]["level"] == logging.WARNING
    assert calls[0]["handlers"][0].formatter._fmt == "%(message)s"

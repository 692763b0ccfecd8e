"""Promise -- the smallest useful flatfsm program.

Demonstrates:
- Declaring a machine with one pending state and two final states
- Registering a logging listener explicitly
- Starting the interpreter and sending an event
- Events sent after a final state are ignored

Run: python -m examples.promise
"""

from flatfsm import configure_logging, create_machine, interpret, log_transitions

promise_machine = create_machine({
    "id": "promise",
    "initial": "pending",
    "states": {
        "pending": {
            "on": {
                "RESOLVE": {"target": "resolved"},
                "REJECT": {"target": "rejected"},
            },
        },
        "resolved": {"type": "final"},
        "rejected": {"type": "final"},
    },
})


def main() -> None:
    configure_logging("INFO")

    service = interpret(promise_machine).on_transition(log_transitions())

    # Start the service
    service.start()
    # => pending

    service.send({"type": "RESOLVE"})
    # => resolved

    # Already final: nothing happens.
    service.send("REJECT")

    print(f"\nDone. status={service.status.value} state={service.current_state}")


if __name__ == "__main__":
    main()

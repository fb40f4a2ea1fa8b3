"""Keypad lock -- a small machine mixing instant and slow states.

Demonstrates:
- Describing states as a tree with literal, pattern and predicate matchers
- Synchronous bookkeeping actions next to a slow action on a worker thread
- Inputs typed while the slow action runs being buffered and replayed in order
- Reading results back through a store slice

Run: python -m examples.keypad
"""
from __future__ import annotations

import re
import threading
import time
from concurrent.futures import ThreadPoolExecutor
from dataclasses import dataclass

from easy_fsm import FSM, ActionContext, StateSpec, Store, Transitioned, deferred


@dataclass(frozen=True)
class Log:
    line: str


def log_reducer(lines: tuple[str, ...], event: object) -> tuple[str, ...]:
    if isinstance(event, Log):
        return lines + (event.line,)
    return lines


def main() -> None:
    print("=== Keypad ===\n")
    pool = ThreadPoolExecutor(max_workers=1)
    finished = threading.Event()

    def say(text: str):
        def action(ctx: ActionContext) -> None:
            ctx.dispatch(Log(f"{ctx.path:<16} <- {ctx.input!r}: {text}"))
        return action

    def check_code(ctx: ActionContext):
        def verify() -> None:
            time.sleep(0.2)
            ctx.dispatch(Log(f"{ctx.path:<16} <- {ctx.input!r}: code checked"))
        return deferred(pool.submit(verify))

    description = [
        StateSpec("locked", say("waiting for a code"), children=[
            StateSpec("checking", check_code, accepts=re.compile(r"^\d{4}$"), next="open"),
            StateSpec("ignored", say("not a code"), next="locked"),
        ]),
        StateSpec("open", say("door open"), children=[
            StateSpec("closing", say("closing"), accepts="close", next="locked"),
            StateSpec("alarm", say("ALARM"), accepts=lambda key: key == "force"),
        ]),
    ]

    store = Store()
    store.add_slice("log", log_reducer, ())
    store.register(FSM("door", description))
    store.subscribe(
        lambda event, s: finished.set()
        if isinstance(event, Transitioned) and event.next_path == "END" else None
    )

    # The first input is consumed by START -> locked; the code is typed
    # together with the next keys, which wait behind the slow check.
    for key in ("wake", "1234", "ping", "close", "abc", "9999", "x", "force", "x"):
        store.submit("door", key)

    finished.wait(timeout=5)
    pool.shutdown()
    for line in store.get_state()["log"]:
        print(f"  {line}")
    print(f"\nDone. Machine at {store.state('door').current_path}.")


if __name__ == "__main__":
    main()

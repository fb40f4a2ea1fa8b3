"""In-memory host that keeps runtime state and routes events to machines."""
from __future__ import annotations

import logging
import threading
from collections import deque
from types import MappingProxyType
from typing import Any, Callable, Mapping

from easy_fsm.errors import UnknownMachineError
from easy_fsm.events import HandleInput, Transitioned
from easy_fsm.machine import FSM, is_machine_event
from easy_fsm.runtime import MachineState

logger = logging.getLogger(__name__)

Reducer = Callable[[Any, Any], Any]
Listener = Callable[[Any, "Store"], None]


class Store:
    """Holds every registered machine's MachineState plus optional app slices.

    All work happens under one re-entrant lock, so a settle arriving from a
    worker thread cannot interleave with buffering a new input. Machine
    events are reduced as soon as they are dispatched. ``HandleInput`` is
    queued and processed in order; an input replayed from a machine's buffer
    jumps to the front of that queue. An input dispatched from inside an
    action therefore runs after the current cycle, never alongside it.
    """

    def __init__(self, log: logging.Logger | None = None) -> None:
        self._log = log if log is not None else logger
        self._machines: dict[str, FSM] = {}
        self._reducers: dict[str, Reducer] = {}
        self._states: dict[str, Any] = {}
        self._listeners: list[Listener] = []
        self._queue: deque[tuple[str, Any]] = deque()
        self._lock = threading.RLock()
        self._draining = False

    # --- Registration ---

    def register(self, machine: FSM) -> None:
        """Add *machine* with a fresh runtime state."""
        with self._lock:
            self._claim(machine.key)
            self._machines[machine.key] = machine
            self._states[machine.key] = machine.create_empty()

    def add_slice(self, name: str, reducer: Reducer, initial: Any) -> None:
        """Keep an app-level value updated by ``reducer(value, event)``."""
        with self._lock:
            self._claim(name)
            self._reducers[name] = reducer
            self._states[name] = initial

    def subscribe(self, listener: Listener) -> None:
        """Call ``listener(event, store)`` after every reduced event."""
        self._listeners.append(listener)

    def unsubscribe(self, listener: Listener) -> None:
        try:
            self._listeners.remove(listener)
        except ValueError:
            pass

    def _claim(self, name: str) -> None:
        if name in self._states:
            raise ValueError(f"Store key {name!r} is already in use")

    # --- Reading ---

    def machine(self, key: str) -> FSM:
        try:
            return self._machines[key]
        except KeyError:
            raise UnknownMachineError(key) from None

    def state(self, key: str) -> MachineState:
        """Current runtime state of machine *key*."""
        with self._lock:
            self.machine(key)
            return self._states[key]

    def get_state(self) -> Mapping[str, Any]:
        """Read-only snapshot of every machine state and slice."""
        with self._lock:
            return MappingProxyType(dict(self._states))

    # --- Writing ---

    def submit(self, key: str, input: Any) -> None:
        """Send *input* to machine *key*."""
        self.dispatch(HandleInput(key, input))

    def dispatch(self, event: Any) -> None:
        """Apply *event*, then process queued inputs unless already doing so.

        A failing input is logged and does not stop the queue: later inputs,
        including the failing machine's buffered ones, are still processed.
        The first error is then re-raised to the caller that ran the queue.
        """
        with self._lock:
            if isinstance(event, HandleInput):
                self.machine(event.key)
                self._queue.append((event.key, event.input))
            else:
                self._apply(event)
            self._drain()

    def _apply(self, event: Any) -> None:
        for name, reducer in self._reducers.items():
            self._states[name] = reducer(self._states[name], event)

        machine = self._machines.get(getattr(event, "key", None))
        if machine is not None and is_machine_event(event):
            self._states[machine.key] = machine.reduce(self._states[machine.key], event)
        self._notify(event)

        if machine is not None and isinstance(event, Transitioned):
            self._resume_buffer(machine)

    def _drain(self) -> None:
        if self._draining:
            return
        self._draining = True
        first_error: Exception | None = None
        try:
            while self._queue:
                key, next_input = self._queue.popleft()
                machine = self._machines[key]
                try:
                    machine.accept_input(
                        self._states[key], next_input, self.get_state, self.dispatch,
                    )
                except Exception as exc:
                    self._log.exception("State machine %r failed on input %r", key, next_input)
                    if first_error is None:
                        first_error = exc
                    self._resume_buffer(machine)
        finally:
            self._draining = False
        if first_error is not None:
            raise first_error

    def _resume_buffer(self, machine: FSM) -> None:
        # The oldest buffered input runs before anything submitted later.
        replay, next_input = machine.next_buffered(self._states[machine.key], self._apply)
        if replay:
            self._queue.appendleft((machine.key, next_input))

    def _notify(self, event: Any) -> None:
        for listener in list(self._listeners):
            try:
                listener(event, self)
            except Exception:
                self._log.exception("Store listener failed on %r", event)

"""Per-machine runtime state and its reducer."""
from __future__ import annotations

from dataclasses import dataclass, replace
from typing import Any

from easy_fsm.events import BufferUpdated, Transitioned, Transitioning
from easy_fsm.types import END, START


@dataclass(frozen=True, slots=True)
class MachineState:
    """Where a machine is, whether an action is in flight, and what is queued.

    ``input_buffer`` is oldest-first.
    """

    current_path: str = START
    transitioning: bool = False
    input_buffer: tuple[Any, ...] = ()

    @property
    def finished(self) -> bool:
        return self.current_path == END


def create_empty() -> MachineState:
    """Runtime state for a fresh session: at START, idle, nothing buffered."""
    return MachineState()


def reduce_machine(state: MachineState, event: Any) -> MachineState:
    """Return the state after *event*. Unrelated events return *state* unchanged."""
    if isinstance(event, Transitioned):
        return replace(state, current_path=event.next_path, transitioning=False)
    if isinstance(event, Transitioning):
        return replace(state, transitioning=True)
    if isinstance(event, BufferUpdated):
        return replace(state, input_buffer=tuple(event.buffer))
    return state

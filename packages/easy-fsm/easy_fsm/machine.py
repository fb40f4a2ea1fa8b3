"""FSM - a keyed machine with input buffering while actions are in flight."""
from __future__ import annotations

import logging
from dataclasses import dataclass
from typing import Any

from easy_fsm.config import FSMConfig
from easy_fsm.engine import Outcome, TransitionEngine
from easy_fsm.errors import BufferOverflowError
from easy_fsm.events import BufferUpdated, Transitioned, Transitioning
from easy_fsm.index import Description, StateIndex, build_index
from easy_fsm.runtime import MachineState, create_empty, reduce_machine
from easy_fsm.types import Dispatch, GetState

logger = logging.getLogger(__name__)


@dataclass(frozen=True, slots=True)
class Buffered:
    """The input was queued behind an in-flight action."""

    position: int


class FSM:
    """A finite state machine built from a tree description.

    The machine owns only its immutable index. Runtime state lives with the
    host, which passes it in and applies the events the machine dispatches
    through ``reduce``. Inputs that arrive while ``transitioning`` is set
    are appended to the buffer; after each settle the host asks
    ``next_buffered`` for the oldest one and replays it.
    """

    def __init__(
        self,
        key: str,
        description: Description,
        config: FSMConfig | None = None,
        log: logging.Logger | None = None,
    ) -> None:
        self.key = key
        self.config = config if config is not None else FSMConfig()
        self._log = log if log is not None else logger
        self.index: StateIndex = build_index(description)
        self.engine = TransitionEngine(key, self.index, self.config, self._log)

    def __repr__(self) -> str:
        return f"FSM(key={self.key!r}, states={len(self.index) - 2})"

    def create_empty(self) -> MachineState:
        return create_empty()

    def owns(self, event: Any) -> bool:
        """True if *event* is addressed to this machine."""
        return getattr(event, "key", None) == self.key

    def reduce(self, state: MachineState, event: Any) -> MachineState:
        if not self.owns(event):
            return state
        return reduce_machine(state, event)

    def accept_input(
        self,
        state: MachineState,
        input: Any,
        get_state: GetState,
        dispatch: Dispatch,
    ) -> Outcome | Buffered:
        """Feed *input* to the machine, or buffer it if an action is pending."""
        if state.transitioning:
            limit = self.config.max_buffer
            if limit and len(state.input_buffer) >= limit:
                raise BufferOverflowError(
                    f"Machine {self.key!r} already holds {limit} buffered inputs"
                )
            buffer = state.input_buffer + (input,)
            self._log.debug("%s: buffered %r (%d waiting)", self.key, input, len(buffer))
            dispatch(BufferUpdated(self.key, buffer))
            return Buffered(len(buffer) - 1)
        return self.engine.handle_input(state, input, get_state, dispatch)

    def next_buffered(self, state: MachineState, dispatch: Dispatch) -> tuple[bool, Any]:
        """Pop the oldest buffered input after a settle.

        Returns ``(True, input)`` and dispatches the shortened buffer, or
        ``(False, None)`` when there is nothing to replay: the buffer is
        empty, an action is still in flight, or the machine reached END.
        """
        if state.transitioning or not state.input_buffer:
            return False, None
        if state.finished:
            self._log.warning(
                "State machine %r reached END with %d unprocessed buffered inputs",
                self.key, len(state.input_buffer),
            )
            return False, None
        next_input, rest = state.input_buffer[0], state.input_buffer[1:]
        dispatch(BufferUpdated(self.key, rest))
        return True, next_input


def is_machine_event(event: Any) -> bool:
    return isinstance(event, (Transitioned, Transitioning, BufferUpdated))

"""Transition engine - runs one input cycle against the index.

The engine holds no runtime state. It reads the ``MachineState`` it is
handed, runs at most one action, and reports the result both as a return
value and as events passed to the host's ``dispatch``:

* a synchronous action (returning ``None`` or ``Immediate``) produces a
  single ``Transitioned`` before ``handle_input`` returns;
* a ``Deferred`` action produces ``Transitioning`` immediately and exactly
  one ``Transitioned`` when its handle completes, success or failure.
"""
from __future__ import annotations

import asyncio
import concurrent.futures
import logging
from dataclasses import dataclass
from functools import partial
from typing import Any

from easy_fsm.config import FSMConfig
from easy_fsm.errors import InvalidActionResultError, NonexistentStateError, NoSuccessorError
from easy_fsm.events import Transitioned, Transitioning
from easy_fsm.index import StateIndex
from easy_fsm.resolver import resolve_successor
from easy_fsm.runtime import MachineState
from easy_fsm.types import END, ActionContext, Deferred, Dispatch, GetState, Immediate, Node

logger = logging.getLogger(__name__)


@dataclass(frozen=True, slots=True)
class Settled:
    """The transition completed during the call."""

    path: str


@dataclass(frozen=True, slots=True)
class Pending:
    """An action toward *path* is still running."""

    path: str


@dataclass(frozen=True, slots=True)
class Discarded:
    """The machine is at END; the input was dropped."""

    path: str = END


Outcome = Settled | Pending | Discarded


class TransitionEngine:
    """Per-machine transition algorithm over an immutable StateIndex."""

    def __init__(
        self,
        key: str,
        index: StateIndex,
        config: FSMConfig | None = None,
        log: logging.Logger | None = None,
    ) -> None:
        self.key = key
        self.index = index
        self.config = config if config is not None else FSMConfig()
        self._log = log if log is not None else logger

    def handle_input(
        self,
        state: MachineState,
        input: Any,
        get_state: GetState,
        dispatch: Dispatch,
    ) -> Outcome:
        """Process one input from *state*.

        Raises NonexistentStateError if the current path is not indexed,
        NoSuccessorError if children exist but none accepts *input*, and
        InvalidActionResultError for a malformed action return. In every
        raising case no event has been dispatched.
        """
        node = self.index.get(state.current_path)
        if node is None:
            raise NonexistentStateError(self.key, state.current_path)

        if node.full_name == END:
            self._log.warning(
                "State machine %r is in the END state and is not processing inputs; dropped %r",
                self.key, input,
            )
            return Discarded()

        if node.is_terminal:
            return self._settle_now(END, dispatch)

        if node.next is not None and node.next not in self.index:
            self._log.warning(
                "State machine %r: %r points at invalid state %r; moving to END",
                self.key, node.full_name, node.next,
            )
            return self._settle_now(END, dispatch)

        successor = resolve_successor(self.index, node, input)
        if successor is None:
            raise NoSuccessorError(node.full_name, input)

        if successor.action is None:
            # Synthetic target (next="END" or next="START").
            return self._settle_now(successor.full_name, dispatch)

        ctx = ActionContext(
            key=self.key,
            path=successor.full_name,
            input=input,
            get_state=get_state,
            dispatch=dispatch,
        )
        result = successor.action(ctx)

        if result is None or isinstance(result, Immediate):
            return self._settle_now(successor.full_name, dispatch)

        if not isinstance(result, Deferred):
            raise InvalidActionResultError(
                f"Action for {successor.full_name!r} must return None, Immediate or "
                f"Deferred, got {type(result).__name__}"
            )
        add_done_callback = getattr(result.handle, "add_done_callback", None)
        if not callable(add_done_callback):
            raise InvalidActionResultError(
                f"Deferred handle from {successor.full_name!r} does not support add_done_callback"
            )

        # Transitioning must be recorded before the callback is attached:
        # an already-complete handle runs it immediately.
        dispatch(Transitioning(self.key, successor.full_name))
        self._log.debug("%s: %s -> %s pending", self.key, node.full_name, successor.full_name)
        add_done_callback(partial(self._on_done, successor, dispatch))
        return Pending(successor.full_name)

    def _settle_now(self, path: str, dispatch: Dispatch) -> Settled:
        self._log.debug("%s: settled at %s", self.key, path)
        dispatch(Transitioned(self.key, path))
        return Settled(path)

    def _on_done(self, successor: Node, dispatch: Dispatch, handle: Any) -> None:
        error = _failure_of(handle)
        if error is None:
            self._log.debug("%s: settled at %s", self.key, successor.full_name)
            dispatch(Transitioned(self.key, successor.full_name))
            return

        self._log.error(
            "State machine %r: action for %r failed",
            self.key, successor.full_name, exc_info=error,
        )
        target = successor.on_error or self.config.error_path or successor.full_name
        if target not in self.index:
            self._log.warning(
                "State machine %r: failure path %r is not a state; moving to END",
                self.key, target,
            )
            target = END
        dispatch(Transitioned(self.key, target, error=error))


def _failure_of(handle: Any) -> BaseException | None:
    """Return the exception a completed handle finished with, if any."""
    exception = getattr(handle, "exception", None)
    if not callable(exception):
        return None
    try:
        return exception()
    except (concurrent.futures.CancelledError, asyncio.CancelledError) as exc:
        return exc

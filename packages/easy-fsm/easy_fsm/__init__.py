"""easy-fsm - Declarative tree-described finite state machines with async actions."""
from __future__ import annotations

from easy_fsm.config import FSMConfig
from easy_fsm.engine import Discarded, Outcome, Pending, Settled, TransitionEngine
from easy_fsm.errors import (
    BufferOverflowError,
    ConfigurationError,
    DuplicateStateError,
    FSMError,
    FSMUsageError,
    InvalidActionResultError,
    InvalidStateNameError,
    NonexistentStateError,
    NoSuccessorError,
    UnknownMachineError,
)
from easy_fsm.events import BufferUpdated, HandleInput, Transitioned, Transitioning, handle_input
from easy_fsm.index import StateIndex, build_index
from easy_fsm.machine import FSM, Buffered
from easy_fsm.matchers import accepts
from easy_fsm.resolver import find_matching_child, resolve_successor
from easy_fsm.runtime import MachineState, create_empty, reduce_machine
from easy_fsm.store import Store
from easy_fsm.types import (
    END,
    IMMEDIATE,
    START,
    ActionContext,
    Deferred,
    Immediate,
    Node,
    States,
    StateSpec,
    deferred,
)

__all__ = [
    "ActionContext",
    "Buffered",
    "BufferOverflowError",
    "BufferUpdated",
    "ConfigurationError",
    "Deferred",
    "Discarded",
    "DuplicateStateError",
    "END",
    "FSM",
    "FSMConfig",
    "FSMError",
    "FSMUsageError",
    "HandleInput",
    "IMMEDIATE",
    "Immediate",
    "InvalidActionResultError",
    "InvalidStateNameError",
    "MachineState",
    "Node",
    "NonexistentStateError",
    "NoSuccessorError",
    "Outcome",
    "Pending",
    "START",
    "Settled",
    "StateIndex",
    "StateSpec",
    "States",
    "Store",
    "TransitionEngine",
    "Transitioned",
    "Transitioning",
    "UnknownMachineError",
    "accepts",
    "build_index",
    "create_empty",
    "deferred",
    "find_matching_child",
    "handle_input",
    "reduce_machine",
    "resolve_successor",
]

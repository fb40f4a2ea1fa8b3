"""Tests for FSM buffering, replay and reduction."""
import logging
from concurrent.futures import Future

import pytest

from easy_fsm import (
    END,
    FSM,
    START,
    Buffered,
    BufferOverflowError,
    BufferUpdated,
    Deferred,
    FSMConfig,
    HandleInput,
    MachineState,
    Pending,
    StateSpec,
    Transitioned,
    Transitioning,
    create_empty,
    reduce_machine,
)


class Recorder:
    """Stands in for the host's dispatch."""
    def __init__(self):
        self.events = []

    def __call__(self, event):
        self.events.append(event)


def get_state():
    return {}


class TestReducer:
    """Pure runtime-state reduction."""

    def test_create_empty(self):
        """Fresh state is at START, idle, with an empty buffer."""
        state = create_empty()
        assert state == MachineState(current_path=START, transitioning=False, input_buffer=())

    def test_transitioning_sets_flag(self):
        """Transitioning sets the flag without moving."""
        state = reduce_machine(create_empty(), Transitioning("m", "a"))
        assert state.transitioning
        assert state.current_path == START

    def test_transitioned_moves_and_clears_flag(self):
        """Transitioned moves to the new path and clears the flag."""
        state = MachineState(current_path="a", transitioning=True)
        state = reduce_machine(state, Transitioned("m", "b"))
        assert state == MachineState(current_path="b", transitioning=False)

    def test_buffer_updated_replaces_buffer(self):
        """BufferUpdated replaces the buffer wholesale."""
        state = reduce_machine(create_empty(), BufferUpdated("m", ("x", "y")))
        assert state.input_buffer == ("x", "y")

    def test_unrelated_event_is_identity(self):
        """Unknown events return the same state object."""
        state = create_empty()
        assert reduce_machine(state, object()) is state

    def test_machine_ignores_other_keys(self):
        """A machine ignores events addressed to other keys."""
        machine = FSM("m", [StateSpec("a", lambda ctx: None)])
        state = machine.create_empty()
        assert machine.reduce(state, Transitioned("other", "a")) is state
        assert machine.reduce(state, Transitioned("m", "a")).current_path == "a"

    def test_finished_at_end(self):
        """finished is True only at END."""
        assert MachineState(current_path=END).finished
        assert not create_empty().finished


class TestAcceptInput:
    """Routing between the engine and the buffer."""

    def test_idle_machine_runs_engine(self):
        """An idle machine hands the input to the engine."""
        future = Future()
        machine = FSM("m", [StateSpec("a", lambda ctx: Deferred(future))])
        dispatch = Recorder()
        outcome = machine.accept_input(machine.create_empty(), "x", get_state, dispatch)
        assert outcome == Pending("a")
        assert dispatch.events == [Transitioning("m", "a")]

    def test_transitioning_machine_buffers_in_arrival_order(self):
        """A busy machine appends the input after older ones."""
        calls = []
        machine = FSM("m", [StateSpec("a", lambda ctx: calls.append(ctx.input))])
        dispatch = Recorder()
        state = MachineState(current_path="a", transitioning=True, input_buffer=("first",))

        outcome = machine.accept_input(state, "second", get_state, dispatch)

        assert outcome == Buffered(1)
        assert dispatch.events == [BufferUpdated("m", ("first", "second"))]
        assert calls == []

    def test_buffer_limit(self):
        """Input beyond max_buffer raises BufferOverflowError."""
        machine = FSM("m", [StateSpec("a", lambda ctx: None)], FSMConfig(max_buffer=2))
        state = MachineState(current_path="a", transitioning=True, input_buffer=("1", "2"))
        with pytest.raises(BufferOverflowError):
            machine.accept_input(state, "3", get_state, Recorder())

    def test_negative_buffer_limit_rejected(self):
        """FSMConfig refuses a negative max_buffer."""
        with pytest.raises(ValueError):
            FSMConfig(max_buffer=-1)


class TestNextBuffered:
    """Picking the input to replay after a settle."""

    def test_pops_oldest_first(self):
        """The oldest input is returned and the rest dispatched."""
        machine = FSM("m", [StateSpec("a", lambda ctx: None)])
        dispatch = Recorder()
        state = MachineState(current_path="a", input_buffer=("x", "y", "z"))

        assert machine.next_buffered(state, dispatch) == (True, "x")
        assert dispatch.events == [BufferUpdated("m", ("y", "z"))]

    def test_empty_buffer(self):
        """Nothing to replay and nothing dispatched."""
        machine = FSM("m", [StateSpec("a", lambda ctx: None)])
        dispatch = Recorder()
        assert machine.next_buffered(MachineState(current_path="a"), dispatch) == (False, None)
        assert dispatch.events == []

    def test_nothing_replayed_while_transitioning(self):
        """No replay while an action is still in flight."""
        machine = FSM("m", [StateSpec("a", lambda ctx: None)])
        state = MachineState(current_path="a", transitioning=True, input_buffer=("x",))
        assert machine.next_buffered(state, Recorder()) == (False, None)

    def test_buffer_left_alone_at_end(self, caplog):
        """At END the buffer is kept and a warning logged."""
        machine = FSM("m", [StateSpec("a", lambda ctx: None)])
        dispatch = Recorder()
        state = MachineState(current_path=END, input_buffer=("x",))
        with caplog.at_level(logging.WARNING):
            assert machine.next_buffered(state, dispatch) == (False, None)
        assert dispatch.events == []
        assert "1 unprocessed" in caplog.text


class TestConstruction:
    """FSM construction and key ownership."""

    def test_index_built_at_construction(self):
        """The index exists as soon as the machine is built."""
        machine = FSM("m", [StateSpec("a", lambda ctx: None, children=[
            StateSpec("b", lambda ctx: None),
        ])])
        assert set(machine.index) == {START, END, "a", "a.b"}

    def test_owns_by_key(self):
        """owns() matches on the event key only."""
        machine = FSM("m", [])
        assert machine.owns(HandleInput("m", "x"))
        assert not machine.owns(HandleInput("n", "x"))
        assert not machine.owns(object())

    def test_explicit_logger_receives_diagnostics(self, caplog):
        """Diagnostics go to the logger passed in."""
        log = logging.getLogger("tests.custom")
        machine = FSM("m", [], log=log)
        with caplog.at_level(logging.WARNING, logger="tests.custom"):
            machine.accept_input(MachineState(current_path=END), "x", get_state, Recorder())
        assert any(r.name == "tests.custom" for r in caplog.records)

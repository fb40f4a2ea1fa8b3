"""Exception hierarchy for easy-fsm."""
from __future__ import annotations


class FSMError(Exception):
    """Base class for every error raised by easy-fsm."""


class ConfigurationError(FSMError):
    """Raised when a state description or action is malformed."""


class DuplicateStateError(ConfigurationError):
    """Raised when two nodes resolve to the same full name."""

    def __init__(self, full_name: str) -> None:
        self.full_name = full_name
        super().__init__(f"Duplicate state name: {full_name!r}")


class InvalidStateNameError(ConfigurationError):
    """Raised for empty names, dotted names or names shadowing START/END."""


class InvalidActionResultError(ConfigurationError):
    """Raised when an action returns something other than None, Immediate or Deferred."""


class FSMUsageError(FSMError):
    """Raised when a machine is driven in a way its description does not allow."""


class UnknownMachineError(FSMUsageError, KeyError):
    """Raised when an input targets a key with no registered machine."""

    def __init__(self, key: str) -> None:
        self.key = key
        super().__init__(f"Attempting to read the value of nonexistent state machine: {key!r}")

    def __str__(self) -> str:
        return str(self.args[0])


class NonexistentStateError(FSMUsageError):
    """Raised when the current path does not resolve to an indexed node."""

    def __init__(self, key: str, path: str) -> None:
        self.key = key
        self.path = path
        super().__init__(f"Machine {key!r} is in nonexistent state {path!r}")


class NoSuccessorError(FSMUsageError):
    """Raised when no child of a non-terminal state accepts the input."""

    def __init__(self, path: str, input: object) -> None:
        self.path = path
        self.input = input
        super().__init__(f"Could not find a valid successor of {path!r} for input: {input!r}")


class BufferOverflowError(FSMUsageError):
    """Raised when an input arrives while the buffer is at ``max_buffer``."""

"""Events exchanged between machines and their host."""
from __future__ import annotations

from dataclasses import dataclass
from typing import Any


@dataclass(frozen=True, slots=True)
class HandleInput:
    """Request to feed *input* to the machine registered under *key*."""

    key: str
    input: Any


@dataclass(frozen=True, slots=True)
class Transitioning:
    """An asynchronous action toward *path* is in flight."""

    key: str
    path: str


@dataclass(frozen=True, slots=True)
class Transitioned:
    """A transition settled; *error* is set when a deferred action failed."""

    key: str
    next_path: str
    error: BaseException | None = None


@dataclass(frozen=True, slots=True)
class BufferUpdated:
    """The machine's pending input buffer was replaced by *buffer*."""

    key: str
    buffer: tuple[Any, ...]


MachineEvent = Transitioning | Transitioned | BufferUpdated


def handle_input(key: str, input: Any) -> HandleInput:
    """Create the event that sends *input* to machine *key*."""
    return HandleInput(key=key, input=input)

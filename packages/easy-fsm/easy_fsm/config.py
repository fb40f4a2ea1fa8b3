"""FSM configuration dataclass."""
from __future__ import annotations

from dataclasses import dataclass


@dataclass(frozen=True)
class FSMConfig:
    """Immutable per-machine configuration.

    Attributes:
        max_buffer: Maximum inputs held while an action is in flight.
            0 means unbounded.
        error_path: State a failed deferred action settles into when the
            failing node declares no ``on_error`` of its own. None keeps the
            successor path, treating failure like success.
    """

    max_buffer: int = 0
    error_path: str | None = None

    def __post_init__(self) -> None:
        if self.max_buffer < 0:
            raise ValueError(f"max_buffer must be >= 0, got {self.max_buffer}")

"""Shared constants, description nodes and action result types."""
from __future__ import annotations

import re
from dataclasses import dataclass, field
from typing import Any, Callable, Mapping, Sequence, Union

from easy_fsm.errors import ConfigurationError, InvalidActionResultError

START = "START"
END = "END"


class States:
    """Names of the two synthetic states present in every machine."""

    START = START
    END = END


Input = Any

# Absent (None) means wildcard.
Matcher = Union[str, bytes, int, float, re.Pattern[str], Callable[[Any], Any], None]

# (event) -> None
Dispatch = Callable[[Any], None]
# () -> read-only mapping of host state
GetState = Callable[[], Mapping[str, Any]]


@dataclass(frozen=True, slots=True)
class ActionContext:
    """Everything an action may see while running.

    ``get_state`` and ``dispatch`` are the host's capability pair; ``input``
    is the token that selected this state.
    """

    key: str
    path: str
    input: Input
    get_state: GetState
    dispatch: Dispatch


@dataclass(frozen=True, slots=True)
class Immediate:
    """Action finished synchronously; the transition settles at once."""


@dataclass(frozen=True, slots=True)
class Deferred:
    """Action started work that completes later.

    ``handle`` must expose ``add_done_callback(fn)`` the way
    ``concurrent.futures.Future`` and ``asyncio.Future`` do.
    """

    handle: Any


IMMEDIATE = Immediate()

ActionResult = Union[Immediate, Deferred, None]
Action = Callable[[ActionContext], ActionResult]


def deferred(handle: Any) -> Deferred:
    """Wrap a completion handle, checking it can take a done callback."""
    if not callable(getattr(handle, "add_done_callback", None)):
        raise InvalidActionResultError(
            f"Deferred handle must support add_done_callback, got {type(handle).__name__}"
        )
    return Deferred(handle)


@dataclass(frozen=True)
class StateSpec:
    """One node of a caller-supplied state description.

    ``children`` are tried in declared order; ``next`` is a dot-qualified
    path that overrides them. ``on_error`` names the state a failed deferred
    action settles into.
    """

    name: str
    action: Action
    accepts: Matcher = None
    children: Sequence[StateSpec] = ()
    next: str | None = None
    on_error: str | None = None

    @classmethod
    def from_mapping(cls, data: Mapping[str, Any]) -> StateSpec:
        """Build a spec (recursively) from the plain-dict form."""
        unknown = set(data) - {"name", "action", "accepts", "children", "next", "on_error"}
        if unknown:
            raise ConfigurationError(f"Unknown state fields: {sorted(unknown)}")
        if "name" not in data or "action" not in data:
            raise ConfigurationError("State description needs 'name' and 'action'")
        return cls(
            name=data["name"],
            action=data["action"],
            accepts=data.get("accepts"),
            children=tuple(as_spec(child) for child in data.get("children") or ()),
            next=data.get("next"),
            on_error=data.get("on_error"),
        )


def as_spec(node: StateSpec | Mapping[str, Any]) -> StateSpec:
    if isinstance(node, StateSpec):
        return node
    if isinstance(node, Mapping):
        return StateSpec.from_mapping(node)
    raise ConfigurationError(f"Expected StateSpec or mapping, got {type(node).__name__}")


@dataclass(frozen=True, slots=True)
class Node:
    """An indexed state. Children are referenced by full name."""

    name: str
    full_name: str
    action: Action | None = None
    accepts: Matcher = None
    children: tuple[str, ...] = field(default_factory=tuple)
    next: str | None = None
    on_error: str | None = None

    @property
    def is_terminal(self) -> bool:
        """True when the node declares neither ``next`` nor children."""
        return self.next is None and not self.children

"""Tree indexer - flattens a state description into a path-keyed table."""
from __future__ import annotations

from types import MappingProxyType
from typing import Any, Iterator, Mapping, Sequence

from easy_fsm.errors import ConfigurationError, DuplicateStateError, InvalidStateNameError
from easy_fsm.matchers import validate_matcher
from easy_fsm.types import END, START, Node, StateSpec, as_spec

Description = Sequence["StateSpec | Mapping[str, Any]"]


class StateIndex(Mapping[str, Node]):
    """Read-only mapping from full name to Node.

    Always contains the synthetic ``START`` (whose children are the
    top-level states) and ``END`` (no successors).
    """

    def __init__(self, nodes: dict[str, Node]) -> None:
        self._nodes = MappingProxyType(nodes)

    def __getitem__(self, path: str) -> Node:
        return self._nodes[path]

    def __iter__(self) -> Iterator[str]:
        return iter(self._nodes)

    def __len__(self) -> int:
        return len(self._nodes)

    def __repr__(self) -> str:
        return f"StateIndex({list(self._nodes)!r})"

    @property
    def start(self) -> Node:
        return self._nodes[START]

    @property
    def end(self) -> Node:
        return self._nodes[END]

    @property
    def top_level(self) -> tuple[Node, ...]:
        return self.children_of(self.start)

    def children_of(self, node: Node) -> tuple[Node, ...]:
        """Children of *node* in declared (precedence) order."""
        return tuple(self._nodes[path] for path in node.children)

    def paths(self) -> list[str]:
        """All full names, synthetic states included, in index order."""
        return list(self._nodes)


def build_index(description: Description) -> StateIndex:
    """Compile *description* into a StateIndex.

    Walks depth-first, composing each node's full name from its ancestors.
    The description itself is never modified. Raises ConfigurationError
    (or a subclass) on duplicate full names and malformed nodes.
    """
    nodes: dict[str, Node] = {}
    top_level = [as_spec(spec) for spec in description]
    nodes[START] = Node(name=START, full_name=START)
    nodes[END] = Node(name=END, full_name=END)

    top_names = tuple(_index_node(nodes, None, spec) for spec in top_level)
    nodes[START] = Node(name=START, full_name=START, children=top_names)
    return StateIndex(nodes)


def _index_node(nodes: dict[str, Node], prefix: str | None, spec: StateSpec) -> str:
    _validate_spec(spec, prefix)
    full_name = f"{prefix}.{spec.name}" if prefix else spec.name
    if full_name in nodes:
        raise DuplicateStateError(full_name)
    # Pre-order: a parent precedes its children in the index.
    nodes[full_name] = Node(name=spec.name, full_name=full_name)
    children = tuple(_index_node(nodes, full_name, as_spec(child)) for child in spec.children)
    nodes[full_name] = Node(
        name=spec.name,
        full_name=full_name,
        action=spec.action,
        accepts=spec.accepts,
        children=children,
        next=spec.next,
        on_error=spec.on_error,
    )
    return full_name


def _validate_spec(spec: StateSpec, prefix: str | None) -> None:
    where = f" under {prefix!r}" if prefix else ""
    if not isinstance(spec.name, str) or not spec.name:
        raise InvalidStateNameError(f"State name must be a non-empty string{where}")
    if "." in spec.name:
        raise InvalidStateNameError(f"State name {spec.name!r}{where} must not contain '.'")
    if prefix is None and spec.name in (START, END):
        raise InvalidStateNameError(f"Top-level state may not be named {spec.name!r}")
    if not callable(spec.action):
        raise ConfigurationError(f"State {spec.name!r}{where} has no callable action")
    validate_matcher(spec.accepts)
    for ref in (spec.next, spec.on_error):
        if ref is not None and (not isinstance(ref, str) or not ref):
            raise ConfigurationError(f"State {spec.name!r}{where} has an invalid path reference {ref!r}")

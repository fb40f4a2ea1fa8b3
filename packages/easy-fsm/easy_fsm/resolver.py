"""Successor resolution for a single input."""
from __future__ import annotations

from typing import Any

from easy_fsm.index import StateIndex
from easy_fsm.matchers import accepts
from easy_fsm.types import Node


def find_matching_child(index: StateIndex, node: Node, input: Any) -> Node | None:
    """Return the first child of *node* whose matcher accepts *input*.

    Later siblings are never evaluated once one matches.
    """
    for path in node.children:
        child = index[path]
        if accepts(child.accepts, input):
            return child
    return None


def resolve_successor(index: StateIndex, node: Node, input: Any) -> Node | None:
    """Pick the successor of *node* for *input*.

    An explicit ``next`` wins over children and is looked up directly;
    ``None`` is returned if it is dangling, if nothing matches, or if the
    node has no successors at all. The engine tells these cases apart.
    """
    if node.next is not None:
        return index.get(node.next)
    if node.children:
        return find_matching_child(index, node, input)
    return None

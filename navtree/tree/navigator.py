"""Lookup and splice primitives over a forest of nodes.

Ids are always compared as text, so ``7`` and ``"7"`` name the same node.
Every walk uses an explicit stack; deep trees never hit the recursion limit.
"""

from collections import deque
from collections.abc import Iterator
from dataclasses import dataclass
from typing import Any

from navtree.models import ROOT_ID, Node


@dataclass
class ParentContext:
    """Where a node lives: its owning sibling list and position in it."""

    siblings: list[Node]
    index: int
    parent: Node | None = None  # None for top-level nodes

    @property
    def node(self) -> Node:
        return self.siblings[self.index]


def same_id(a: str | int | None, b: str | int | None) -> bool:
    return str(a) == str(b)


def is_root(parent_id: str | int | None) -> bool:
    """True for every spelling of the root sentinel (None, "", 0, "0")."""
    return parent_id is None or str(parent_id) in ("", ROOT_ID)


def parent_key(parent_id: str | int | None) -> str:
    """Canonical text form of a parent reference, for comparisons."""
    return ROOT_ID if is_root(parent_id) else str(parent_id)


def _walk(forest: list[Node]) -> Iterator[ParentContext]:
    """Depth-first pre-order walk yielding each node's context."""
    stack: list[tuple[list[Node], int, Node | None]] = [(forest, 0, None)]
    while stack:
        siblings, index, parent = stack.pop()
        if index >= len(siblings):
            continue
        node = siblings[index]
        # Resume this level after the current node's subtree
        stack.append((siblings, index + 1, parent))
        if node.children:
            stack.append((node.children, 0, node))
        yield ParentContext(siblings=siblings, index=index, parent=parent)


def iter_nodes(forest: list[Node]) -> Iterator[Node]:
    for ctx in _walk(forest):
        yield ctx.node


def iter_subtree(node: Node) -> Iterator[Node]:
    """Breadth-first over ``node`` and all of its descendants."""
    queue = deque([node])
    while queue:
        current = queue.popleft()
        yield current
        queue.extend(current.children)


def find_parent_context(forest: list[Node], node_id: str | int) -> ParentContext | None:
    for ctx in _walk(forest):
        if same_id(ctx.node.id, node_id):
            return ctx
    return None


def find_by_id(forest: list[Node], node_id: str | int) -> Node | None:
    ctx = find_parent_context(forest, node_id)
    return ctx.node if ctx else None


def update_in_place(
    forest: list[Node], node_id: str | int, patch: dict[str, Any]
) -> Node | None:
    """Shallow-merge ``patch`` into the matching node's fields."""
    node = find_by_id(forest, node_id)
    if node is None:
        return None
    for field, value in patch.items():
        setattr(node, field, value)
    return node


def remove_by_id(forest: list[Node], node_id: str | int) -> Node | None:
    """Detach a node (with its subtree) and return it."""
    ctx = find_parent_context(forest, node_id)
    if ctx is None:
        return None
    return ctx.siblings.pop(ctx.index)


def insert_under_parent(forest: list[Node], parent_id: str | int | None, node: Node) -> bool:
    if is_root(parent_id):
        forest.append(node)
        return True
    parent = find_by_id(forest, parent_id)
    if parent is None:
        return False
    parent.children.append(node)
    return True


def delete_subtree(forest: list[Node], node_id: str | int) -> bool:
    """Splice out a node; its owned descendants go with it."""
    return remove_by_id(forest, node_id) is not None

"""Cycle prevention for reparenting moves."""

import logging

from navtree.models import ROOT_ID, Node
from navtree.tree.navigator import (
    find_parent_context,
    insert_under_parent,
    is_root,
    same_id,
)

logger = logging.getLogger(__name__)


def is_descendant(candidate_ancestor: Node, target_id: str | int) -> bool:
    """True if ``target_id`` names a node strictly below ``candidate_ancestor``."""
    stack = list(candidate_ancestor.children)
    while stack:
        node = stack.pop()
        if same_id(node.id, target_id):
            return True
        stack.extend(node.children)
    return False


def can_move(node: Node, new_parent_id: str | int | None) -> bool:
    """Reject self-parenting and parenting under one's own descendant."""
    if is_root(new_parent_id):
        return True
    if same_id(new_parent_id, node.id):
        return False
    return not is_descendant(node, new_parent_id)


def move_node(
    forest: list[Node], node_id: str | int, new_parent_id: str | int | None
) -> Node | None:
    """Move a node and its subtree under ``new_parent_id``.

    Returns the moved node, or None if the node is missing, the move would
    create a cycle, or the new parent does not resolve. On None the forest
    is exactly as it was, including the node's original position.
    """
    ctx = find_parent_context(forest, node_id)
    if ctx is None:
        return None
    node = ctx.siblings.pop(ctx.index)

    if not can_move(node, new_parent_id) or not insert_under_parent(forest, new_parent_id, node):
        ctx.siblings.insert(ctx.index, node)
        logger.debug("Rejected move of %s under %s", node_id, new_parent_id)
        return None

    node.parent_id = ROOT_ID if is_root(new_parent_id) else new_parent_id
    return node

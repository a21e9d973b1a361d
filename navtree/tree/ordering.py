"""Sibling ordering by weight.

Weights in a sibling list are kept dense: after ``normalize`` they are
exactly 1..N in display order. An explicit target weight is honored in two
steps: ``reorder_for_inserted_weight`` opens (or claims) the slot, then
``normalize`` restores density.
"""

from navtree.models import Node
from navtree.tree.navigator import same_id


def _weight(node: Node) -> int:
    return node.weight or 0


def _others(siblings: list[Node], exclude_id: str | int | None) -> list[Node]:
    if exclude_id is None:
        return list(siblings)
    return [n for n in siblings if not same_id(n.id, exclude_id)]


def normalize(siblings: list[Node], exclude_id: str | int | None = None) -> None:
    """Renumber siblings 1..N by ascending weight, in place.

    The sort is stable, so equal weights keep their list order. The list
    itself is re-sorted by the new weights. A node named by ``exclude_id``
    keeps its current weight.
    """
    for weight, node in enumerate(sorted(_others(siblings, exclude_id), key=_weight), start=1):
        node.weight = weight
    siblings.sort(key=_weight)


def reorder_for_inserted_weight(
    siblings: list[Node],
    desired_weight: int,
    exclude_id: str | int | None = None,
) -> int:
    """Shift sibling weights so a node can take ``desired_weight``.

    Returns the weight the in-flight node should be given. Asking for the
    current maximum claims that position: the other siblings step down by
    one and the new node sorts after all of them.
    """
    others = _others(siblings, exclude_id)
    max_weight = max((_weight(n) for n in others), default=0)

    if desired_weight == max_weight:
        for node in others:
            if _weight(node) > 0:
                node.weight = _weight(node) - 1
        return max_weight

    for node in others:
        if _weight(node) >= desired_weight:
            node.weight = _weight(node) + 1
    return desired_weight


def sort_tree(forest: list[Node]) -> None:
    """Normalize every sibling list of the forest (read-time ordering)."""
    stack = [forest]
    while stack:
        siblings = stack.pop()
        normalize(siblings)
        stack.extend(n.children for n in siblings if n.children)

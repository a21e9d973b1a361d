"""Tree service: load, edit and store the navigation tree snapshot.

Every mutation reads the full forest, applies one edit plus weight
normalization, and writes the full forest back. Structural errors are
raised before anything is written.
"""

import asyncio
import logging
from pathlib import Path
from uuid import uuid4

import yaml

from navtree.models import ROOT_ID, Node, utc_now
from navtree.store.snapshot import SnapshotStore
from navtree.tree.cleanup import ContentCleaner, NullContentCleaner, cleanup_subtree
from navtree.tree.guard import can_move, move_node
from navtree.tree.navigator import (
    find_by_id,
    find_parent_context,
    insert_under_parent,
    is_root,
    iter_nodes,
    parent_key,
    same_id,
    update_in_place,
)
from navtree.tree.ordering import normalize, reorder_for_inserted_weight, sort_tree
from navtree.tree.schemas import (
    CreateNodeRequest,
    KindOption,
    KindTaxonomyResponse,
    PatchNodeRequest,
    TreeStats,
)

logger = logging.getLogger(__name__)

_KINDS_PATH = Path(__file__).parent.parent / "node_kinds.yml"

DEFAULT_DELETE_TIMEOUT = 60.0


class TreeService:
    """Coordinates the snapshot store with the tree editing primitives."""

    def __init__(
        self,
        store: SnapshotStore,
        cleaner: ContentCleaner | None = None,
        delete_timeout: float = DEFAULT_DELETE_TIMEOUT,
    ) -> None:
        self._store = store
        self._cleaner = cleaner or NullContentCleaner()
        self._delete_timeout = delete_timeout

    # -- Reads --

    async def list_tree(self) -> list[Node]:
        """The whole forest, every sibling list ordered by weight."""
        forest = await self._store.load()
        sort_tree(forest)
        return forest

    async def get_node(self, node_id: str | int) -> Node:
        forest = await self.list_tree()
        node = find_by_id(forest, node_id)
        if node is None:
            raise NodeNotFoundError(node_id)
        return node

    async def get_stats(self) -> TreeStats:
        """Count nodes and how many of them carry content."""
        forest = await self._store.load()
        total = with_content = length = 0
        for node in iter_nodes(forest):
            total += 1
            if node.content:
                with_content += 1
                length += len(node.content)
        return TreeStats(
            total_nodes=total,
            content_nodes=with_content,
            total_content_length=length,
            content_coverage=round(with_content / total * 100) if total else 0,
        )

    def get_kind_taxonomy(self) -> KindTaxonomyResponse:
        """Node kinds and display-visibility codes, with their labels."""
        if not _KINDS_PATH.exists():
            return KindTaxonomyResponse()
        with open(_KINDS_PATH, encoding="utf-8") as f:
            data = yaml.safe_load(f) or {}
        return KindTaxonomyResponse(
            kinds=[KindOption(**k) for k in data.get("kinds", [])],
            show_types=[KindOption(**s) for s in data.get("show_types", [])],
        )

    # -- Mutations --

    async def add_node(
        self, request: CreateNodeRequest, parent_id: str | int | None = None
    ) -> Node:
        """Insert a node under ``parent_id`` (or the payload's parent, or root).

        Returns the inserted node carrying its final, normalized weight.
        """
        forest = await self._store.load()
        if parent_id is None:
            parent_id = request.parent_id

        if not is_root(parent_id) and find_by_id(forest, parent_id) is None:
            raise ParentNotFoundError(parent_id)

        if request.id is not None and find_by_id(forest, request.id) is not None:
            raise DuplicateNodeError(request.id)

        now = utc_now()
        node = Node(
            **request.model_dump(exclude={"id", "parent_id", "description"}),
            id=request.id if request.id is not None else str(uuid4()),
            parent_id=ROOT_ID if is_root(parent_id) else parent_id,
            created_at=now,
            updated_at=now,
        )

        insert_under_parent(forest, parent_id, node)
        siblings = self._siblings_of(forest, node.id)
        if node.weight:
            node.weight = reorder_for_inserted_weight(siblings, node.weight, exclude_id=node.id)
        normalize(siblings)

        await self._store.store(forest)
        logger.info("Added node %s under %s at weight %d", node.id, node.parent_id, node.weight)
        return node

    async def update_node(self, node_id: str | int, request: PatchNodeRequest) -> Node:
        """Apply the fields set on ``request`` to a node.

        Handles reparenting (with cycle checks), id rename with relinking of
        the direct children, and repositioning by weight.
        """
        forest = await self._store.load()
        node = find_by_id(forest, node_id)
        if node is None:
            raise NodeNotFoundError(node_id)

        patch = request.to_patch()
        patch["updated_at"] = utc_now()
        new_id = patch.pop("id", None)
        weight = patch.pop("weight", None)

        if "parent_id" in patch:
            new_parent_id = patch.pop("parent_id")
            if parent_key(new_parent_id) != parent_key(node.parent_id):
                self._move(forest, node, new_parent_id)

        update_in_place(forest, node.id, patch)

        if new_id is not None and not same_id(new_id, node.id):
            if find_by_id(forest, new_id) is not None:
                raise DuplicateNodeError(new_id)
            old_id = node.id
            cascade_id_rename(node, new_id)
            logger.info("Renamed node %s to %s", old_id, new_id)

        siblings = self._siblings_of(forest, node.id)
        if weight is not None:
            node.weight = reorder_for_inserted_weight(siblings, weight, exclude_id=node.id)
        normalize(siblings)

        await self._store.store(forest)
        return node

    async def delete_node(self, node_id: str | int) -> bool:
        """Delete a node and its entire subtree.

        The load, content cleanup and structural splice must finish within
        the delete timeout; on timeout the pending work is cancelled, nothing
        is written, and OperationTimeoutError is raised. The final store runs
        after the timeout block and is not bounded by it.
        """
        try:
            async with asyncio.timeout(self._delete_timeout):
                forest = await self._excise(node_id)
        except TimeoutError as e:
            logger.warning(
                "Delete of node %s exceeded %.1fs, nothing written",
                node_id, self._delete_timeout,
            )
            raise OperationTimeoutError(node_id, self._delete_timeout) from e

        await self._store.store(forest)
        return True

    async def _excise(self, node_id: str | int) -> list[Node]:
        forest = await self._store.load()
        ctx = find_parent_context(forest, node_id)
        if ctx is None:
            raise NodeNotFoundError(node_id)

        failed = await cleanup_subtree(self._cleaner, ctx.node)
        if failed:
            logger.warning("Content cleanup failed for %d node(s) under %s", failed, node_id)

        removed = ctx.siblings.pop(ctx.index)
        normalize(ctx.siblings)
        logger.info("Deleted node %s and its subtree", removed.id)
        return forest

    # -- Helpers --

    @staticmethod
    def _move(forest: list[Node], node: Node, new_parent_id: str | int | None) -> None:
        if not is_root(new_parent_id) and find_by_id(forest, new_parent_id) is None:
            raise ParentNotFoundError(new_parent_id)
        if not can_move(node, new_parent_id):
            raise InvalidMoveError(node.id, new_parent_id)

        old_parent_id = node.parent_id
        old_ctx = find_parent_context(forest, node.id)
        if move_node(forest, node.id, new_parent_id) is None:
            raise InvalidMoveError(node.id, new_parent_id)
        # Close the gap left behind
        normalize(old_ctx.siblings)
        logger.info("Moved node %s from %s to %s", node.id, old_parent_id, node.parent_id)

    @staticmethod
    def _siblings_of(forest: list[Node], node_id: str | int) -> list[Node]:
        ctx = find_parent_context(forest, node_id)
        if ctx is None:
            raise NodeNotFoundError(node_id)
        return ctx.siblings


def cascade_id_rename(node: Node, new_id: str | int) -> None:
    """Give ``node`` a new id and relink its direct children to it.

    Deeper descendants point at their own parent, whose id is unchanged,
    so only one level needs relinking.
    """
    old_id = node.id
    node.id = new_id
    for child in node.children:
        if same_id(child.parent_id, old_id):
            child.parent_id = new_id


class NodeNotFoundError(Exception):
    def __init__(self, node_id: str | int) -> None:
        self.node_id = node_id
        super().__init__(f"Node not found: {node_id}")


class ParentNotFoundError(Exception):
    def __init__(self, parent_id: str | int) -> None:
        self.parent_id = parent_id
        super().__init__(f"Parent node not found: {parent_id}")


class InvalidMoveError(Exception):
    def __init__(self, node_id: str | int, parent_id: str | int | None) -> None:
        self.node_id = node_id
        self.parent_id = parent_id
        super().__init__(f"Cannot move node {node_id} under itself or its descendant {parent_id}")


class DuplicateNodeError(Exception):
    def __init__(self, node_id: str | int) -> None:
        self.node_id = node_id
        super().__init__(f"Node id already in use: {node_id}")


class OperationTimeoutError(Exception):
    def __init__(self, node_id: str | int, timeout: float) -> None:
        self.node_id = node_id
        self.timeout = timeout
        super().__init__(f"Deleting node {node_id} timed out after {timeout}s")

"""Per-node content cleanup run before a subtree is deleted.

Node content lives inline in the snapshot, so the default cleaner has
nothing to do. Deployments that keep page content in a separate store
plug in their own ``ContentCleaner``.
"""

import asyncio
import logging
from abc import ABC, abstractmethod

from navtree.models import Node

logger = logging.getLogger(__name__)


class ContentCleaner(ABC):
    """Abstract interface for removing a node's externally stored content."""

    @abstractmethod
    async def cleanup(self, node: Node) -> None:
        """Remove whatever content belongs to ``node``. May raise."""
        ...


class NullContentCleaner(ContentCleaner):
    async def cleanup(self, node: Node) -> None:
        return None


async def cleanup_subtree(cleaner: ContentCleaner, root: Node) -> int:
    """Run ``cleaner`` on every node of the subtree, one level at a time.

    Nodes within a level are cleaned concurrently with no ordering
    guarantee. Failures are logged and skipped. Returns the number of
    nodes whose cleanup failed.
    """
    failed = 0
    level = [root]
    while level:
        results = await asyncio.gather(
            *(cleaner.cleanup(node) for node in level), return_exceptions=True
        )
        for node, result in zip(level, results):
            if isinstance(result, Exception):
                failed += 1
                logger.error(
                    "Content cleanup failed for node %s", node.id, exc_info=result
                )
        level = [child for node in level for child in node.children]
    return failed

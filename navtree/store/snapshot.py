"""Whole-forest snapshot persistence.

The tree is stored as one JSON array under a fixed key. Every load returns
a fresh in-memory forest and every store replaces the snapshot in full.
"""

import asyncio
import json
import logging
import os
import tempfile
from abc import ABC, abstractmethod
from pathlib import Path

import aiosqlite
from pydantic import ValidationError

from navtree.db.connection import Database
from navtree.models import Node

logger = logging.getLogger(__name__)

DEFAULT_SNAPSHOT_KEY = "treeData"


class SnapshotStore(ABC):
    """Loads and stores the full forest as a single document."""

    @abstractmethod
    async def load(self) -> list[Node]:
        """Return the stored forest, or an empty list if nothing is stored."""
        ...

    @abstractmethod
    async def store(self, forest: list[Node]) -> None:
        """Replace the stored forest atomically."""
        ...


def dump_forest(forest: list[Node]) -> str:
    """Encode the forest as a JSON array without recursing through the models.

    Each node is dumped without its children, which are attached by hand
    from an explicit stack; only the JSON encoder itself bounds the depth.
    """
    items: list[dict] = []
    stack = [(node, items) for node in reversed(forest)]
    while stack:
        node, target = stack.pop()
        item = node.model_dump(mode="json", exclude={"children"})
        item["children"] = []
        target.append(item)
        stack.extend((child, item["children"]) for child in reversed(node.children))
    try:
        return json.dumps(items, ensure_ascii=False)
    except RecursionError as e:
        raise PersistenceError("Tree is too deep to encode as JSON") from e


def parse_forest(raw: str | None) -> list[Node]:
    """Decode a snapshot document. Empty or missing documents are an empty forest."""
    if not raw:
        return []
    try:
        data = json.loads(raw)
    except (ValueError, RecursionError) as e:
        raise PersistenceError(f"Snapshot is not valid JSON: {e}") from e
    if not isinstance(data, list):
        raise PersistenceError(
            f"Snapshot must be a JSON array, got {type(data).__name__}"
        )

    forest: list[Node] = []
    stack = [(item, forest) for item in reversed(data)]
    while stack:
        item, target = stack.pop()
        if not isinstance(item, dict):
            raise PersistenceError(f"Snapshot node must be an object, got {type(item).__name__}")
        fields = dict(item)
        children = fields.pop("children", None) or []
        if not isinstance(children, list):
            raise PersistenceError(f"Children of node {fields.get('id')} must be an array")
        try:
            node = Node.model_validate(fields)
        except ValidationError as e:
            raise PersistenceError(f"Snapshot contains an invalid node: {e}") from e
        target.append(node)
        stack.extend((child, node.children) for child in reversed(children))
    return forest


class SqliteSnapshotStore(SnapshotStore):
    """Snapshot kept as one row of the ``snapshots`` table."""

    def __init__(self, db: Database, key: str = DEFAULT_SNAPSHOT_KEY) -> None:
        self._db = db
        self._key = key

    async def load(self) -> list[Node]:
        try:
            document = await self._db.read_snapshot(self._key)
        except aiosqlite.Error as e:
            logger.error("Failed to read snapshot %s: %s", self._key, e)
            raise PersistenceError(f"Failed to read snapshot {self._key}: {e}") from e
        return parse_forest(document)

    async def store(self, forest: list[Node]) -> None:
        document = dump_forest(forest)
        try:
            await self._db.write_snapshot(self._key, document)
        except aiosqlite.Error as e:
            logger.error("Failed to write snapshot %s: %s", self._key, e)
            raise PersistenceError(f"Failed to write snapshot {self._key}: {e}") from e


class JsonFileSnapshotStore(SnapshotStore):
    """Snapshot kept as a JSON file, replaced by atomic rename on write."""

    def __init__(self, path: str | Path) -> None:
        self._path = Path(path)

    @property
    def path(self) -> Path:
        return self._path

    async def load(self) -> list[Node]:
        return parse_forest(await asyncio.to_thread(self._read))

    async def store(self, forest: list[Node]) -> None:
        await asyncio.to_thread(self._write, dump_forest(forest))

    def _read(self) -> str | None:
        try:
            return self._path.read_text(encoding="utf-8")
        except FileNotFoundError:
            return None
        except (OSError, UnicodeDecodeError) as e:
            logger.error("Failed to read snapshot file %s: %s", self._path, e)
            raise PersistenceError(f"Failed to read {self._path}: {e}") from e

    def _write(self, document: str) -> None:
        try:
            self._path.parent.mkdir(parents=True, exist_ok=True)
            fd, tmp_name = tempfile.mkstemp(
                suffix=".json", prefix=f".{self._path.stem}-", dir=self._path.parent
            )
        except OSError as e:
            logger.error("Failed to write snapshot file %s: %s", self._path, e)
            raise PersistenceError(f"Failed to write {self._path}: {e}") from e

        tmp_path = Path(tmp_name)
        try:
            with os.fdopen(fd, "w", encoding="utf-8") as f:
                f.write(document)
            tmp_path.replace(self._path)
        except OSError as e:
            tmp_path.unlink(missing_ok=True)
            logger.error("Failed to write snapshot file %s: %s", self._path, e)
            raise PersistenceError(f"Failed to write {self._path}: {e}") from e


class PersistenceError(Exception):
    pass

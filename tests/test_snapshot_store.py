"""Contract tests for the snapshot stores (SQLite row and JSON file)."""

import json

import pytest

from navtree.store.snapshot import (
    JsonFileSnapshotStore,
    PersistenceError,
    SqliteSnapshotStore,
)
from tests.fixtures import all_ids, make_chain, make_node, make_sample_forest


class TestSqliteSnapshotStore:
    async def test_empty_load(self, store):
        assert await store.load() == []

    async def test_roundtrip_keeps_structure(self, store):
        forest = make_sample_forest()
        await store.store(forest)
        loaded = await store.load()
        assert loaded == forest
        assert all_ids(loaded) == {"1", "a", "a1", "b", "2"}

    async def test_store_replaces_previous_snapshot(self, store, db):
        await store.store(make_sample_forest())
        await store.store([make_node("only")])
        assert all_ids(await store.load()) == {"only"}
        assert await db.snapshot_keys() == ["treeData"]

    async def test_keys_are_independent(self, db):
        first = SqliteSnapshotStore(db, key="first")
        second = SqliteSnapshotStore(db, key="second")
        await first.store([make_node("x")])
        assert await second.load() == []

    async def test_deep_chain_roundtrip(self, store):
        chain_ids = [f"n{i}" for i in range(320)]
        await store.store([make_chain(*chain_ids)])
        node = (await store.load())[0]
        depth = 1
        while node.children:
            assert node.children[0].parent_id == node.id
            node = node.children[0]
            depth += 1
        assert depth == 320
        assert node.id == "n319"

    async def test_numeric_ids_survive(self, store):
        await store.store([make_node(7, children=[make_node(8, parent_id=7)])])
        loaded = await store.load()
        assert loaded[0].id == 7
        assert loaded[0].children[0].parent_id == 7

    async def test_corrupt_document(self, store, db):
        await db.write_snapshot("treeData", "{not json")
        with pytest.raises(PersistenceError):
            await store.load()

    async def test_non_array_document(self, store, db):
        await db.write_snapshot("treeData", '{"id": 1}')
        with pytest.raises(PersistenceError):
            await store.load()


class TestJsonFileSnapshotStore:
    async def test_missing_file_is_empty(self, tmp_path):
        store = JsonFileSnapshotStore(tmp_path / "treeData.json")
        assert await store.load() == []

    async def test_roundtrip(self, tmp_path):
        store = JsonFileSnapshotStore(tmp_path / "data" / "treeData.json")
        forest = make_sample_forest()
        await store.store(forest)
        assert await store.load() == forest

    async def test_file_is_plain_json_array(self, tmp_path):
        path = tmp_path / "treeData.json"
        await JsonFileSnapshotStore(path).store([make_node("x", name="Intro")])
        data = json.loads(path.read_text(encoding="utf-8"))
        assert isinstance(data, list)
        assert data[0]["name"] == "Intro"
        assert data[0]["children"] == []

    async def test_no_temp_files_left_behind(self, tmp_path):
        store = JsonFileSnapshotStore(tmp_path / "treeData.json")
        await store.store(make_sample_forest())
        await store.store([make_node("x")])
        assert [p.name for p in tmp_path.iterdir()] == ["treeData.json"]

    async def test_invalid_node_in_file(self, tmp_path):
        path = tmp_path / "treeData.json"
        path.write_text('[{"id": 1}]', encoding="utf-8")
        with pytest.raises(PersistenceError):
            await JsonFileSnapshotStore(path).load()

    async def test_undecodable_file(self, tmp_path):
        path = tmp_path / "treeData.json"
        path.write_bytes(b"\xff\xfe[]")
        with pytest.raises(PersistenceError) as exc_info:
            await JsonFileSnapshotStore(path).load()
        assert isinstance(exc_info.value.__cause__, UnicodeDecodeError)

    async def test_children_must_be_array(self, tmp_path):
        path = tmp_path / "treeData.json"
        path.write_text('[{"id": 1, "name": "x", "children": "a"}]', encoding="utf-8")
        with pytest.raises(PersistenceError):
            await JsonFileSnapshotStore(path).load()

"""Shared pytest fixtures for navtree tests."""

import pytest
from httpx import ASGITransport, AsyncClient

from navtree.db.connection import Database
from navtree.main import app
from navtree.store.snapshot import SqliteSnapshotStore
from navtree.tree.router import get_tree_service
from navtree.tree.service import TreeService


@pytest.fixture
async def db():
    """In-memory database for tests."""
    database = await Database.connect(":memory:")
    yield database
    await database.close()


@pytest.fixture
async def store(db):
    """Snapshot store backed by in-memory database."""
    return SqliteSnapshotStore(db)


@pytest.fixture
async def service(store):
    return TreeService(store)


@pytest.fixture
async def client(service):
    """Async test client with the in-memory store wired into the app."""
    app.dependency_overrides[get_tree_service] = lambda: service
    async with AsyncClient(
        transport=ASGITransport(app=app),
        base_url="http://test",
    ) as client:
        yield client
    app.dependency_overrides.clear()

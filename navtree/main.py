"""navtree FastAPI application entry point."""

import logging
import os
from collections.abc import AsyncIterator
from contextlib import asynccontextmanager
from pathlib import Path

from dotenv import load_dotenv
from fastapi import FastAPI
from fastapi.middleware.cors import CORSMiddleware

from navtree import __version__
from navtree.db.connection import Database
from navtree.store.snapshot import (
    DEFAULT_SNAPSHOT_KEY,
    JsonFileSnapshotStore,
    SnapshotStore,
    SqliteSnapshotStore,
)
from navtree.tree.router import get_tree_service
from navtree.tree.router import router as tree_router
from navtree.tree.service import DEFAULT_DELETE_TIMEOUT, TreeService

logger = logging.getLogger(__name__)

# Load .env from the project root before anything reads the environment
load_dotenv(Path(__file__).resolve().parent.parent / ".env")


@asynccontextmanager
async def lifespan(app: FastAPI) -> AsyncIterator[None]:
    """Open the snapshot store and wire the tree service."""
    db: Database | None = None
    backend = os.environ.get("NAVTREE_STORE", "sqlite")

    store: SnapshotStore
    if backend == "json":
        store = JsonFileSnapshotStore(
            os.environ.get("NAVTREE_JSON_PATH", "data/treeData.json")
        )
    else:
        db = await Database.connect(os.environ.get("NAVTREE_DB_PATH", "navtree.db"))
        store = SqliteSnapshotStore(
            db, key=os.environ.get("NAVTREE_SNAPSHOT_KEY", DEFAULT_SNAPSHOT_KEY)
        )
    logger.info("Using %s snapshot store", backend)

    delete_timeout = float(
        os.environ.get("NAVTREE_DELETE_TIMEOUT", DEFAULT_DELETE_TIMEOUT)
    )
    service = TreeService(store, delete_timeout=delete_timeout)
    app.dependency_overrides[get_tree_service] = lambda: service

    yield

    if db is not None:
        await db.close()


app = FastAPI(
    title="navtree",
    description="Ordered, weighted navigation tree for help-site content",
    version=__version__,
    lifespan=lifespan,
)

app.add_middleware(
    CORSMiddleware,
    allow_origins=os.environ.get("NAVTREE_CORS_ORIGINS", "http://localhost:9000").split(","),
    allow_credentials=True,
    allow_methods=["*"],
    allow_headers=["*"],
)

app.include_router(tree_router)


@app.get("/api/health")
async def health() -> dict:
    return {"status": "ok", "version": __version__}

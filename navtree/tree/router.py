"""FastAPI routes for navigation tree reads and node CRUD."""

from fastapi import APIRouter, Depends, HTTPException, status

from navtree.models import Node
from navtree.store.snapshot import PersistenceError
from navtree.tree.schemas import (
    CreateNodeRequest,
    DeleteNodeResponse,
    KindTaxonomyResponse,
    PatchNodeRequest,
    TreeStats,
)
from navtree.tree.service import (
    DuplicateNodeError,
    InvalidMoveError,
    NodeNotFoundError,
    OperationTimeoutError,
    ParentNotFoundError,
    TreeService,
)

router = APIRouter(prefix="/api/tree", tags=["tree"])


def get_tree_service() -> TreeService:
    """Dependency placeholder, replaced at app startup."""
    raise RuntimeError("TreeService not initialized")


@router.get("")
async def list_tree(
    service: TreeService = Depends(get_tree_service),
) -> list[Node]:
    try:
        return await service.list_tree()
    except PersistenceError as e:
        raise HTTPException(status_code=500, detail=str(e))


@router.get("/stats")
async def get_stats(
    service: TreeService = Depends(get_tree_service),
) -> TreeStats:
    try:
        return await service.get_stats()
    except PersistenceError as e:
        raise HTTPException(status_code=500, detail=str(e))


@router.get("/kinds")
async def get_kinds(
    service: TreeService = Depends(get_tree_service),
) -> KindTaxonomyResponse:
    return service.get_kind_taxonomy()


@router.get("/{node_id}")
async def get_node(
    node_id: str,
    service: TreeService = Depends(get_tree_service),
) -> Node:
    try:
        return await service.get_node(node_id)
    except NodeNotFoundError:
        raise HTTPException(status_code=404, detail=f"Node not found: {node_id}")
    except PersistenceError as e:
        raise HTTPException(status_code=500, detail=str(e))


@router.post("", status_code=status.HTTP_201_CREATED)
async def add_node(
    request: CreateNodeRequest,
    parent_id: str | None = None,
    service: TreeService = Depends(get_tree_service),
) -> Node:
    try:
        return await service.add_node(request, parent_id)
    except ParentNotFoundError as e:
        raise HTTPException(status_code=404, detail=str(e))
    except DuplicateNodeError as e:
        raise HTTPException(status_code=409, detail=str(e))
    except PersistenceError as e:
        raise HTTPException(status_code=500, detail=str(e))


@router.patch("/{node_id}")
async def update_node(
    node_id: str,
    request: PatchNodeRequest,
    service: TreeService = Depends(get_tree_service),
) -> Node:
    try:
        return await service.update_node(node_id, request)
    except NodeNotFoundError:
        raise HTTPException(status_code=404, detail=f"Node not found: {node_id}")
    except ParentNotFoundError as e:
        raise HTTPException(status_code=404, detail=str(e))
    except InvalidMoveError as e:
        raise HTTPException(status_code=400, detail=str(e))
    except DuplicateNodeError as e:
        raise HTTPException(status_code=409, detail=str(e))
    except PersistenceError as e:
        raise HTTPException(status_code=500, detail=str(e))


@router.delete("/{node_id}")
async def delete_node(
    node_id: str,
    service: TreeService = Depends(get_tree_service),
) -> DeleteNodeResponse:
    try:
        success = await service.delete_node(node_id)
    except NodeNotFoundError:
        raise HTTPException(status_code=404, detail=f"Node not found: {node_id}")
    except OperationTimeoutError as e:
        raise HTTPException(status_code=408, detail=str(e))
    except PersistenceError as e:
        raise HTTPException(status_code=500, detail=str(e))
    return DeleteNodeResponse(success=success, node_id=node_id)

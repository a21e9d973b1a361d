"""Shared test helpers: node builders and API shortcuts."""

from typing import Any

from httpx import AsyncClient

from navtree.models import ROOT_ID, Node
from navtree.tree.navigator import iter_nodes


def make_node(
    node_id: str | int,
    parent_id: str | int = ROOT_ID,
    weight: int = 0,
    children: list[Node] | None = None,
    **overrides: Any,
) -> Node:
    """Build a node; ``name`` defaults to ``Node <id>``."""
    overrides.setdefault("name", f"Node {node_id}")
    return Node(
        id=node_id,
        parent_id=parent_id,
        weight=weight,
        children=children or [],
        **overrides,
    )


def make_chain(*ids: str, parent_id: str = ROOT_ID) -> Node:
    """A single path ``ids[0] > ids[1] > ...``; returns the top node."""
    top: Node | None = None
    current: Node | None = None
    for node_id in ids:
        node = make_node(node_id, parent_id=current.id if current else parent_id, weight=1)
        if current is None:
            top = node
        else:
            current.children.append(node)
        current = node
    assert top is not None
    return top


def make_sample_forest() -> list[Node]:
    """Two roots; the first has children a and b, and a has a child a1.

    1
    ├── a
    │   └── a1
    └── b
    2
    """
    return [
        make_node("1", weight=1, children=[
            make_node("a", parent_id="1", weight=1, children=[
                make_node("a1", parent_id="a", weight=1),
            ]),
            make_node("b", parent_id="1", weight=2),
        ]),
        make_node("2", weight=2),
    ]


def weights(siblings: list[Node]) -> dict[str, int]:
    return {str(n.id): n.weight for n in siblings}


def ids(siblings: list[Node]) -> list[str]:
    return [str(n.id) for n in siblings]


def all_ids(forest: list[Node]) -> set[str]:
    return {str(n.id) for n in iter_nodes(forest)}


# -- API-level helpers --


async def create_test_node(
    client: AsyncClient,
    name: str = "Test Node",
    parent_id: str | None = None,
    **body: Any,
) -> dict:
    """Create a node via the API and return the response JSON."""
    params = {"parent_id": parent_id} if parent_id is not None else None
    resp = await client.post("/api/tree", json={"name": name, **body}, params=params)
    assert resp.status_code == 201, resp.text
    return resp.json()

"""Canonical node model for the navigation tree.

Defined once here, referenced everywhere else. A node owns its children;
moving or deleting a node always carries its whole subtree with it.
"""

from datetime import UTC, datetime
from typing import Literal

from pydantic import BaseModel, Field

# Reserved parent id for top-level nodes.
ROOT_ID = "0"

NodeKind = Literal["container", "page"]


def utc_now() -> str:
    return datetime.now(UTC).isoformat()


class Node(BaseModel):
    id: str | int
    parent_id: str | int = ROOT_ID
    name: str
    kind: NodeKind = "container"
    weight: int = Field(default=0, ge=0)
    content: str = ""
    children: list["Node"] = Field(default_factory=list)

    # Passthrough metadata, carried as-is
    path: str = ""
    icon: str = ""
    show_type: int = 1  # 0 hidden, 1 shown, 9 admin-only
    permissions: list[str] = Field(default_factory=list)
    create_user_id: int = 0
    update_user_id: int = 0
    created_at: str = Field(default_factory=utc_now)
    updated_at: str = Field(default_factory=utc_now)

"""Request and response schemas for tree endpoints."""

from pydantic import BaseModel, Field, field_validator, model_validator

from navtree.models import ROOT_ID, NodeKind

# -- Requests --


class CreateNodeRequest(BaseModel):
    """Body of a node insert. ``label`` is accepted in place of ``name``."""

    name: str
    id: str | int | None = None
    parent_id: str | int | None = None
    kind: NodeKind = "container"
    weight: int = Field(default=0, ge=0)
    content: str = ""
    # Pages may send their body as ``description``; it becomes ``content``
    description: str | None = None
    path: str = ""
    icon: str = ""
    show_type: int = 1
    permissions: list[str] = Field(default_factory=list)
    create_user_id: int = 0
    update_user_id: int = 0

    @model_validator(mode="before")
    @classmethod
    def label_as_name(cls, data):
        if isinstance(data, dict) and not data.get("name") and data.get("label"):
            data = {**data, "name": str(data["label"])}
        return data

    @field_validator("id")
    @classmethod
    def id_not_root(cls, value: str | int | None) -> str | int | None:
        if value is not None and str(value) in ("", ROOT_ID):
            raise ValueError(f"id {value!r} is reserved for the tree root")
        return value

    @field_validator("name")
    @classmethod
    def name_not_blank(cls, value: str | None) -> str | None:
        if value is not None and not value.strip():
            raise ValueError("name must be a non-empty string")
        return value

    @model_validator(mode="after")
    def description_as_content(self):
        if self.kind == "page" and self.description is not None:
            self.content = self.description
        return self


class PatchNodeRequest(BaseModel):
    """Fields to update on a node. Only fields present in the request body are changed."""

    id: str | int | None = None
    parent_id: str | int | None = None
    name: str | None = None
    kind: NodeKind | None = None
    weight: int | None = Field(default=None, ge=0)
    content: str | None = None
    description: str | None = None
    path: str | None = None
    icon: str | None = None
    show_type: int | None = None
    permissions: list[str] | None = None
    update_user_id: int | None = None

    @field_validator("id")
    @classmethod
    def id_not_root(cls, value: str | int | None) -> str | int | None:
        if value is not None and str(value) in ("", ROOT_ID):
            raise ValueError(f"id {value!r} is reserved for the tree root")
        return value

    @field_validator("name")
    @classmethod
    def name_not_blank(cls, value: str | None) -> str | None:
        if value is not None and not value.strip():
            raise ValueError("name must be a non-empty string")
        return value

    def to_patch(self) -> dict:
        """The explicitly set fields, with ``description`` folded into ``content``."""
        patch = {name: getattr(self, name) for name in self.model_fields_set}
        description = patch.pop("description", None)
        if description is not None and self.kind == "page":
            patch["content"] = description
        # None only has a meaning for parent_id (root); drop it elsewhere
        return {k: v for k, v in patch.items() if v is not None or k == "parent_id"}


# -- Responses --


class TreeStats(BaseModel):
    total_nodes: int
    content_nodes: int
    total_content_length: int
    content_coverage: int  # percent, rounded


class KindOption(BaseModel):
    code: str | int
    name: str


class KindTaxonomyResponse(BaseModel):
    kinds: list[KindOption] = Field(default_factory=list)
    show_types: list[KindOption] = Field(default_factory=list)


class DeleteNodeResponse(BaseModel):
    success: bool
    node_id: str

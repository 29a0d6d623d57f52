from datetime import datetime
from pydantic import BaseModel, Field

from models.enums import FolderType


class FolderCreate(BaseModel):
    name: str = Field(min_length=1, max_length=255)
    type: FolderType = FolderType.PROJECT
    parent_id: str | None = Field(default=None, alias="parentId")

    model_config = {"populate_by_name": True}


class FolderUpdate(BaseModel):
    """Rename and/or reparent. An explicit ``parentId: null`` moves to the root."""
    name: str | None = Field(default=None, min_length=1, max_length=255)
    parent_id: str | None = Field(default=None, alias="parentId")

    model_config = {"populate_by_name": True}

    @property
    def moves(self) -> bool:
        return "parent_id" in self.model_fields_set


class FolderCounts(BaseModel):
    assets: int = 0
    deliveries: int = 0


class FolderResponse(BaseModel):
    id: str
    name: str
    type: FolderType
    project_id: str = Field(alias="projectId")
    parent_id: str | None = Field(default=None, alias="parentId")
    created_at: datetime | None = Field(default=None, alias="createdAt")
    updated_at: datetime | None = Field(default=None, alias="updatedAt")
    counts: FolderCounts = Field(default_factory=FolderCounts)
    aggregate_counts: FolderCounts = Field(default_factory=FolderCounts, alias="aggregateCounts")

    model_config = {
        "from_attributes": True,
        "populate_by_name": True,
    }


class FolderNode(FolderResponse):
    children: list["FolderNode"] = Field(default_factory=list)

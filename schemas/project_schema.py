from datetime import datetime
from pydantic import BaseModel, Field


class ProjectCreate(BaseModel):
    """Admin/staff payload for creating a project on behalf of a client."""
    title: str | None = Field(default=None, max_length=255)
    description: str | None = None
    client_id: str = Field(alias="clientId")
    staff_ids: list[str] = Field(default_factory=list, alias="staffIds")

    model_config = {"populate_by_name": True}


class ProjectResponse(BaseModel):
    id: str
    title: str | None = None
    description: str | None = None
    status: str
    client_id: str = Field(alias="clientId")
    created_by_id: str | None = Field(default=None, alias="createdById")
    staff_ids: list[str] = Field(default_factory=list, alias="staffIds")
    created_at: datetime | None = Field(default=None, alias="createdAt")
    updated_at: datetime | None = Field(default=None, alias="updatedAt")

    model_config = {
        "from_attributes": True,
        "populate_by_name": True,
    }

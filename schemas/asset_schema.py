from datetime import datetime
from pydantic import BaseModel, Field


class StoredFileResponse(BaseModel):
    id: str
    key: str
    filename: str
    content_type: str = Field(alias="contentType")
    size_bytes: int = Field(alias="sizeBytes")
    project_id: str = Field(alias="projectId")
    folder_id: str | None = Field(default=None, alias="folderId")
    uploaded_by_id: str = Field(alias="uploadedById")
    created_at: datetime | None = Field(default=None, alias="createdAt")

    model_config = {
        "from_attributes": True,
        "populate_by_name": True,
    }


class AssetResponse(StoredFileResponse):
    type: str


class DeliveryResponse(StoredFileResponse):
    pass


class FileMove(BaseModel):
    """Move an asset or delivery; ``folderId: null`` detaches it to the project root."""
    folder_id: str | None = Field(default=None, alias="folderId")

    model_config = {"populate_by_name": True}

from pydantic import BaseModel, Field


class UploadInitRequest(BaseModel):
    filename: str = Field(min_length=1, max_length=512)
    content_type: str = Field(default="application/octet-stream", alias="contentType")
    size_bytes: int = Field(gt=0, alias="sizeBytes")
    folder_id: str | None = Field(default=None, alias="folderId")

    model_config = {"populate_by_name": True}


class UploadInitResponse(BaseModel):
    upload_id: str = Field(alias="uploadId")
    key: str
    part_size: int = Field(alias="partSize")
    presigned_part_urls: list[str] = Field(alias="presignedPartUrls")
    complete_url: str = Field(alias="completeUrl")
    abort_url: str = Field(alias="abortUrl")
    folder_id: str | None = Field(default=None, alias="folderId")
    type: str | None = None

    model_config = {"populate_by_name": True}


class CompletedPart(BaseModel):
    etag: str = Field(alias="ETag", min_length=1)
    part_number: int = Field(alias="PartNumber", ge=1, le=10000)

    model_config = {"populate_by_name": True}


class UploadCompleteRequest(BaseModel):
    key: str
    upload_id: str = Field(alias="uploadId")
    parts: list[CompletedPart] = Field(min_length=1)
    filename: str = Field(min_length=1, max_length=512)
    content_type: str = Field(default="application/octet-stream", alias="contentType")
    size_bytes: int = Field(gt=0, alias="sizeBytes")
    folder_id: str | None = Field(default=None, alias="folderId")

    model_config = {"populate_by_name": True}


class UploadCompleteResponse(BaseModel):
    ok: bool = True
    location: str | None = None
    id: str


class UploadAbortRequest(BaseModel):
    key: str
    upload_id: str = Field(alias="uploadId")

    model_config = {"populate_by_name": True}


class RelayResponse(BaseModel):
    etag: str


class SweepResponse(BaseModel):
    expired: int
    failed: int

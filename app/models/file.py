# app/models/file.py
from enum import Enum

from pydantic import BaseModel, ConfigDict, Field


class Category(str, Enum):
    IMAGE = "image"
    VIDEO = "video"
    AUDIO = "audio"
    TEXT = "text"
    CODE = "code"
    PDF = "pdf"
    ARCHIVE = "archive"
    DOCUMENT = "document"
    UNKNOWN = "unknown"


class FileRecord(BaseModel):
    """One stored file, rebuilt from the filesystem on every listing."""

    # JSON keys are the ones the browser client reads
    model_config = ConfigDict(populate_by_name=True)

    display_name: str = Field(alias="name")           # name shown to the user
    storage_id: str = Field(alias="path")             # <uuid>_<sanitized name> on disk
    size_bytes: int = Field(alias="size")
    category: Category = Field(alias="file_type")
    previewable: bool = Field(alias="can_preview")


class FileListResponse(BaseModel):
    files: list[FileRecord]


class UploadResponse(BaseModel):
    success: bool
    message: str
    files: list[FileRecord] = []


class ApiResponse(BaseModel):
    success: bool
    message: str


class PreviewResponse(BaseModel):
    content: str | None = None
    error: str | None = None
    file_type: Category | None = None
    filename: str | None = None

"""
Pydantic schemas for media endpoints and the upload-completion event.
"""

from __future__ import annotations

from typing import Any

from pydantic import BaseModel, ConfigDict, Field


class _CamelModel(BaseModel):
    model_config = ConfigDict(populate_by_name=True)


class BulkImage(_CamelModel):
    image_name: str | None = Field(default=None, alias="imageName")
    public_url: str | None = Field(default=None, alias="publicUrl")


class BulkUploadRequest(_CamelModel):
    folder_name: str = Field(..., alias="folderName", min_length=1, max_length=500)
    images: list[BulkImage]


class UploadedImage(_CamelModel):
    original_url: str = Field(..., alias="originalUrl")
    file_url: str = Field(..., alias="fileUrl")
    file_name: str = Field(..., alias="fileName")
    media_id: str = Field(..., alias="mediaId")


class BulkUploadResponse(_CamelModel):
    success: bool = True
    uploaded: list[UploadedImage]


class FileUploadedEvent(BaseModel):
    """
    Completion event from the media service. Both parts are optional: events
    for imports without context still arrive and are ignored.
    """

    context: dict[str, Any] | None = None
    file_info: dict[str, Any] | None = Field(default=None, alias="fileInfo")

    model_config = ConfigDict(populate_by_name=True)

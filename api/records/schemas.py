"""
Item update request/response models.
"""

from __future__ import annotations

from typing import Any

from pydantic import BaseModel, ConfigDict, Field


class ItemUpdatesRequest(BaseModel):
    """
    Body shared by `/updateItemField` and `/uploadImageToItem`.
    """

    model_config = ConfigDict(populate_by_name=True)

    collection_name: str = Field(..., alias="collectionName", min_length=1, max_length=200)
    item_id: str = Field(..., alias="itemId", min_length=1, max_length=200)
    updates: dict[str, Any]


class SuccessResponse(BaseModel):
    success: bool = True


class ItemResponse(BaseModel):
    item: dict[str, Any]
    references: dict[str, list[str]]

"""
Item field update endpoints.
"""

from __future__ import annotations

from fastapi import APIRouter, Depends

from auth import dependencies as auth_dependencies
from core.errors import handler_boundary

from . import schemas, service

router = APIRouter(dependencies=[Depends(auth_dependencies.require_authorized)])


@router.post("/updateItemField")
async def update_item_field(request: schemas.ItemUpdatesRequest) -> schemas.SuccessResponse:
    """
    Merge `updates` into an item. Prefixed keys (`date_`, `safebool_`, `refs_`,
    `image_`) are coerced or deferred; other keys are stored as given.
    """
    with handler_boundary(
        "update_item_field_failed",
        collection=request.collection_name,
        item_id=request.item_id,
    ):
        await service.update_item_fields(request.collection_name, request.item_id, request.updates)
    return schemas.SuccessResponse()


@router.get("/items/{collection_name}/{item_id}")
async def get_item(collection_name: str, item_id: str) -> schemas.ItemResponse:
    with handler_boundary("get_item_failed", collection=collection_name, item_id=item_id):
        row = await service.get_item_with_references(collection_name, item_id)
    return schemas.ItemResponse(**row)

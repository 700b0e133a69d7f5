"""
Item update orchestration.

Flow for one request:
1) parse `updates` into typed field updates (rejects bad dates/ref lists)
2) load the item and persist the merged field data in one write
3) replace each `refs_` field, one write per field
4) issue media imports for `image_` fields; write-back happens on the
   upload-completion event
"""

from __future__ import annotations

import logging
from typing import Any

from fastapi import HTTPException, status

from media import service as media_service

from . import fields, repository

logger = logging.getLogger(__name__)

ITEM_NOT_FOUND = "Item not found."


def parse_updates_or_400(updates: dict[str, Any]) -> list[fields.FieldUpdate]:
    try:
        return fields.parse_updates(updates)
    except fields.FieldUpdateError as exc:
        raise HTTPException(status_code=status.HTTP_400_BAD_REQUEST, detail=str(exc)) from exc


async def load_item(collection_name: str, item_id: str) -> dict[str, Any]:
    item = await repository.get_item(collection_name, item_id)
    if item is None:
        raise HTTPException(status_code=status.HTTP_400_BAD_REQUEST, detail=ITEM_NOT_FOUND)
    return item


async def update_item_fields(collection_name: str, item_id: str, updates: dict[str, Any]) -> None:
    parsed = parse_updates_or_400(updates)
    existing = await load_item(collection_name, item_id)

    result = fields.merge_updates(existing, parsed)
    # The stored id always wins over a stray `_id` in the payload.
    result.record["_id"] = existing["_id"]

    if await repository.update_item(collection_name, result.record) is None:
        raise HTTPException(status_code=status.HTTP_400_BAD_REQUEST, detail=ITEM_NOT_FOUND)

    for ref in result.references:
        await repository.replace_references(collection_name, item_id, ref.field, ref.ids)
        logger.info(
            "references_replaced collection=%s item_id=%s field=%s count=%s",
            collection_name,
            item_id,
            ref.field,
            len(ref.ids),
        )

    for image in result.images:
        await media_service.import_image_for_field(
            collection_name,
            item_id,
            field_name=image.field,
            url=image.url,
        )


async def get_item_with_references(collection_name: str, item_id: str) -> dict[str, Any]:
    item = await load_item(collection_name, item_id)
    references = await repository.list_references(collection_name, item_id)
    return {"item": item, "references": references}

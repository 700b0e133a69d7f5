"""
Upload-completion event handling.

The media service calls back once per finished import. Imports issued with an
`ImportContext` get their file URL written onto the target item field.

Runs as a background task: it should never raise to the request path, so all
failures are logged and dropped. Delivery is at most once; a repeated event
simply overwrites the field again (last write wins).
"""

from __future__ import annotations

import logging
from typing import Any

from records import repository as records_repository

logger = logging.getLogger(__name__)


def _str_or_none(value: Any) -> str | None:
    if value is None:
        return None
    text = str(value).strip()
    return text or None


async def on_file_uploaded(context: dict[str, Any] | None, file_info: dict[str, Any] | None) -> bool:
    """
    Returns True when the item field was written.
    """
    context = context or {}
    file_info = file_info or {}

    collection_name = _str_or_none(context.get("collectionName"))
    item_id = _str_or_none(context.get("itemId"))
    field_name = _str_or_none(context.get("fieldName"))
    file_url = _str_or_none(file_info.get("fileUrl"))

    if not (collection_name and item_id and field_name and file_url):
        logger.info(
            "file_uploaded_skipped reason=missing_context_or_file_url context=%s file_info=%s",
            context,
            file_info,
        )
        return False

    try:
        item = await records_repository.get_item(collection_name, item_id)
        if item is None:
            logger.error(
                "file_uploaded_write_failed reason=item_not_found collection=%s item_id=%s field=%s",
                collection_name,
                item_id,
                field_name,
            )
            return False

        item[field_name] = file_url
        if await records_repository.update_item(collection_name, item) is None:
            logger.error(
                "file_uploaded_write_failed reason=item_gone collection=%s item_id=%s field=%s",
                collection_name,
                item_id,
                field_name,
            )
            return False
    except Exception:
        logger.exception(
            "file_uploaded_write_failed collection=%s item_id=%s field=%s",
            collection_name,
            item_id,
            field_name,
        )
        return False

    logger.info(
        "file_uploaded_field_set collection=%s item_id=%s field=%s file_url=%s",
        collection_name,
        item_id,
        field_name,
        file_url,
    )
    return True

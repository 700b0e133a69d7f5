"""
Media import logic.

Two entry points:
- bulk import of public URLs into a media folder (no item binding)
- import of one image per `image_<field>` key, carrying an import context so
  the completion event can write the file URL back onto the item
"""

from __future__ import annotations

import logging
import time
from dataclasses import dataclass
from typing import Any, Iterable
from urllib.parse import urlsplit

from fastapi import HTTPException, status

from core import media
from records import fields

from . import schemas

logger = logging.getLogger(__name__)

DEFAULT_MIME_TYPE = "image/jpeg"

MIME_TYPES = {
    "jpg": "image/jpeg",
    "jpeg": "image/jpeg",
    "png": "image/png",
    "webp": "image/webp",
    "gif": "image/gif",
}


@dataclass(frozen=True)
class ImportContext:
    collection_name: str
    item_id: str
    field_name: str

    def as_payload(self) -> dict[str, str]:
        return {
            "collectionName": self.collection_name,
            "itemId": self.item_id,
            "fieldName": self.field_name,
        }


def mime_type_for(file_name: str) -> str:
    """
    MIME type from the file extension; unknown or missing extensions are JPEG.
    """
    ext = (file_name or "").rsplit(".", 1)[-1].lower()
    return MIME_TYPES.get(ext, DEFAULT_MIME_TYPE)


def _fallback_file_name() -> str:
    return f"image-{int(time.time() * 1000)}.jpg"


def file_name_from_url(url: str) -> str:
    # Query strings and fragments are not part of the name.
    return urlsplit(url).path.split("/")[-1]


def resolve_file_name(url: str, image_name: str | None = None) -> str:
    """
    Prefer the given name, then the URL's last path segment, then a
    timestamped default.
    """
    if image_name:
        return image_name
    return file_name_from_url(url) or _fallback_file_name()


def folder_path(folder_name: str) -> str:
    return "/" + folder_name.strip("/")


async def bulk_upload(folder_name: str, images: Iterable[schemas.BulkImage]) -> list[schemas.UploadedImage]:
    """
    Import each image in order. Entries without `publicUrl` are skipped; any
    other failure aborts the whole batch.
    """
    target = folder_path(folder_name)
    uploaded: list[schemas.UploadedImage] = []

    for index, image in enumerate(images):
        if not image.public_url:
            logger.warning("bulk_upload_skipped index=%s reason=missing_public_url", index)
            continue

        file_name = resolve_file_name(image.public_url, image.image_name)
        imported = await media.import_file(
            target,
            image.public_url,
            mime_type=mime_type_for(file_name),
        )
        uploaded.append(
            schemas.UploadedImage(
                original_url=image.public_url,
                file_url=imported.file_url,
                file_name=imported.file_name,
                media_id=imported.media_id,
            )
        )

    logger.info("bulk_upload_complete folder=%s uploaded=%s", target, len(uploaded))
    return uploaded


async def import_image_for_field(
    collection_name: str,
    item_id: str,
    *,
    field_name: str,
    url: str,
) -> media.ImportedFile:
    """
    Start an import whose completion event will set `field_name` on the item.

    Returns as soon as the import is issued; the item is not touched here.
    """
    file_name = resolve_file_name(url)
    context = ImportContext(collection_name, item_id, field_name)
    imported = await media.import_file(
        folder_path(collection_name),
        url,
        mime_type=mime_type_for(file_name),
        context=context.as_payload(),
    )
    logger.info(
        "field_import_issued collection=%s item_id=%s field=%s media_id=%s",
        collection_name,
        item_id,
        field_name,
        imported.media_id,
    )
    return imported


async def upload_images_to_item(collection_name: str, item_id: str, updates: dict[str, Any]) -> int:
    """
    Issue one import per `image_<field>` key; other keys are ignored. All URLs
    are validated before the first import is issued.
    Returns the number of imports issued.
    """
    try:
        images = fields.parse_image_updates(updates)
    except fields.FieldUpdateError as exc:
        raise HTTPException(status_code=status.HTTP_400_BAD_REQUEST, detail=str(exc)) from exc

    for image in images:
        await import_image_for_field(
            collection_name,
            item_id,
            field_name=image.field,
            url=image.url,
        )
    return len(images)

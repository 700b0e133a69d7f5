"""
Media upload endpoints and the media service's completion webhook.
"""

from __future__ import annotations

from fastapi import APIRouter, BackgroundTasks, Depends

from auth import dependencies as auth_dependencies
from core.errors import handler_boundary
from records import schemas as records_schemas

from . import events, schemas, service

router = APIRouter()


@router.post("/imageBulkUploader", dependencies=[Depends(auth_dependencies.require_authorized)])
async def image_bulk_uploader(request: schemas.BulkUploadRequest) -> dict:
    """
    Import public image URLs into `/<folderName>` (nested paths allowed).

    Images without `publicUrl` are skipped. Any other failure fails the whole
    request and no partial list is returned.
    """
    with handler_boundary("image_bulk_upload_failed", folder=request.folder_name):
        uploaded = await service.bulk_upload(request.folder_name, request.images)
    response = schemas.BulkUploadResponse(uploaded=uploaded)
    return response.model_dump(by_alias=True)


@router.post("/uploadImageToItem", dependencies=[Depends(auth_dependencies.require_authorized)])
async def upload_image_to_item(request: records_schemas.ItemUpdatesRequest) -> records_schemas.SuccessResponse:
    """
    Start one import per `image_<field>` key. The item field is written when
    the media service reports the upload finished, not before this returns.
    """
    with handler_boundary(
        "upload_image_to_item_failed",
        collection=request.collection_name,
        item_id=request.item_id,
    ):
        await service.upload_images_to_item(request.collection_name, request.item_id, request.updates)
    return records_schemas.SuccessResponse()


@router.post("/events/fileUploaded", dependencies=[Depends(auth_dependencies.require_webhook)])
async def file_uploaded(
    event: schemas.FileUploadedEvent,
    background_tasks: BackgroundTasks,
) -> records_schemas.SuccessResponse:
    # Acknowledge right away; the write-back must not hold the media service.
    background_tasks.add_task(events.on_file_uploaded, event.context, event.file_info)
    return records_schemas.SuccessResponse()

"""
Media service HTTP client helpers.

Used endpoints:
- POST /files/import  -> {"fileUrl": "...", "fileName": "...", "mediaId": "..."}

The media service fetches the remote URL itself. When an import carries a
`context`, the service later delivers a "file uploaded" event back to
`POST /events/fileUploaded` with that context unchanged.
"""

from __future__ import annotations

import os
from dataclasses import dataclass
from typing import Any

import httpx


# Media failures are explicit and separable from other runtime errors.
class MediaError(RuntimeError):
    pass


@dataclass(frozen=True)
class ImportedFile:
    file_url: str
    file_name: str
    media_id: str


def _env_float(name: str, default: float) -> float:
    raw = os.environ.get(name, "").strip()
    if not raw:
        return default
    try:
        return float(raw)
    except ValueError:
        return default


def media_base_url() -> str:
    return os.environ.get("MEDIA_API_BASE_URL", "http://media:8080").strip() or "http://media:8080"


def media_api_key() -> str:
    return os.environ.get("MEDIA_API_KEY", "").strip()


def media_timeout_s() -> float:
    return _env_float("MEDIA_API_TIMEOUT_S", 60.0)


def _normalize_base_url(base_url: str) -> str:
    base_url = (base_url or "").strip()
    if not base_url:
        raise MediaError("MEDIA_API_BASE_URL is empty.")
    return base_url.rstrip("/")


def _headers() -> dict[str, str]:
    key = media_api_key()
    if not key:
        return {}
    return {"Authorization": f"Bearer {key}"}


async def import_file(
    folder_path: str,
    url: str,
    *,
    mime_type: str,
    media_type: str = "image",
    is_private: bool = False,
    is_visitor_upload: bool = False,
    context: dict[str, str] | None = None,
    base_url: str | None = None,
    timeout_s: float | None = None,
    transport: httpx.AsyncBaseTransport | None = None,
) -> ImportedFile:
    """
    Ask the media service to import `url` into `folder_path`.

    `context` is opaque to the media service and is echoed back in the
    completion event.
    """
    base_url = _normalize_base_url(base_url or media_base_url())
    if not (url or "").strip():
        raise MediaError("Import URL is empty.")

    metadata: dict[str, Any] = {
        "isPrivate": is_private,
        "isVisitorUpload": is_visitor_upload,
    }
    if context is not None:
        metadata["context"] = context

    payload = {
        "parentFolderPath": folder_path,
        "url": url,
        "mediaOptions": {"mimeType": mime_type, "mediaType": media_type},
        "metadataOptions": metadata,
    }

    async with httpx.AsyncClient(
        base_url=base_url,
        timeout=timeout_s or media_timeout_s(),
        headers=_headers(),
        transport=transport,
    ) as client:
        resp = await client.post("/files/import", json=payload)

    if resp.status_code != 200:
        # Avoid dumping huge bodies; include a small snippet.
        body = resp.text[:500]
        raise MediaError(f"Media import request failed: {resp.status_code} {body}")

    try:
        data: dict[str, Any] = resp.json()
    except ValueError as e:
        raise MediaError("Media service returned a non-JSON response.") from e

    file_url = data.get("fileUrl")
    if not isinstance(file_url, str) or not file_url:
        raise MediaError("Media service returned no fileUrl.")

    return ImportedFile(
        file_url=file_url,
        file_name=str(data.get("fileName") or ""),
        media_id=str(data.get("mediaId") or ""),
    )

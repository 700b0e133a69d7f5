"""Shared fixtures: in-memory item store, fake media service, app client."""

from collections.abc import Callable
from typing import Any

import pytest
from fastapi.testclient import TestClient

from core import media
from records import repository as records_repository

SECRET = "secret1"
WEBHOOK_SECRET = "hook-secret"


class FakeItemStore:
    """In-memory stand-in for `records.repository`."""

    def __init__(self) -> None:
        self.items: dict[tuple[str, str], dict[str, Any]] = {}
        self.references: dict[tuple[str, str, str], list[str]] = {}
        self.updates: list[tuple[str, dict[str, Any]]] = []
        self.fail_update: Exception | None = None
        self.fail_references: dict[str, Exception] = {}

    def add(self, collection_name: str, item_id: str, **data: Any) -> None:
        self.items[(collection_name, item_id)] = dict(data)

    async def get_item(self, collection_name: str, item_id: str) -> dict[str, Any] | None:
        data = self.items.get((collection_name, item_id))
        if data is None:
            return None
        return {**data, "_id": item_id}

    async def update_item(self, collection_name: str, item: dict[str, Any]) -> dict[str, Any] | None:
        if self.fail_update is not None:
            raise self.fail_update
        item_id = item["_id"]
        if (collection_name, item_id) not in self.items:
            return None
        self.updates.append((collection_name, dict(item)))
        self.items[(collection_name, item_id)] = {k: v for k, v in item.items() if k != "_id"}
        return {"id": item_id}

    async def replace_references(
        self,
        collection_name: str,
        item_id: str,
        field_name: str,
        referenced_ids: Any,
    ) -> None:
        if field_name in self.fail_references:
            raise self.fail_references[field_name]
        self.references[(collection_name, item_id, field_name)] = list(referenced_ids)

    async def list_references(self, collection_name: str, item_id: str) -> dict[str, list[str]]:
        return {
            field: ids
            for (coll, iid, field), ids in self.references.items()
            if coll == collection_name and iid == item_id
        }


class FakeMedia:
    """Records `core.media.import_file` calls and returns canned results."""

    def __init__(self) -> None:
        self.calls: list[dict[str, Any]] = []
        self.fail_on: Callable[[str], Exception | None] = lambda url: None

    async def import_file(self, folder_path: str, url: str, **kwargs: Any) -> media.ImportedFile:
        error = self.fail_on(url)
        if error is not None:
            raise error
        self.calls.append({"folder_path": folder_path, "url": url, **kwargs})
        n = len(self.calls)
        return media.ImportedFile(
            file_url=f"https://media.example/{n}/{url.rsplit('/', 1)[-1]}",
            file_name=f"stored-{n}",
            media_id=f"m{n}",
        )


@pytest.fixture
def secrets_env(monkeypatch: pytest.MonkeyPatch, tmp_path) -> None:
    monkeypatch.setenv("SECRETS_DIR", str(tmp_path / "no-secrets"))
    monkeypatch.setenv("MAKE_CONNECTOR", SECRET)
    monkeypatch.setenv("MEDIA_WEBHOOK", WEBHOOK_SECRET)
    monkeypatch.delenv("AUTH_SCHEME", raising=False)
    monkeypatch.delenv("AUTH_SECRET_NAME", raising=False)


@pytest.fixture
def store(monkeypatch: pytest.MonkeyPatch) -> FakeItemStore:
    fake = FakeItemStore()
    for name in ("get_item", "update_item", "replace_references", "list_references"):
        monkeypatch.setattr(records_repository, name, getattr(fake, name))
    return fake


@pytest.fixture
def fake_media(monkeypatch: pytest.MonkeyPatch) -> FakeMedia:
    fake = FakeMedia()
    monkeypatch.setattr(media, "import_file", fake.import_file)
    return fake


@pytest.fixture
def client(secrets_env, store, fake_media) -> TestClient:
    # Not used as a context manager: the lifespan would open a DB pool.
    from main import app

    return TestClient(app)


@pytest.fixture
def auth_headers() -> dict[str, str]:
    return {"authorization": SECRET}

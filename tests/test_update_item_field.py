"""Endpoint tests for /updateItemField and item reads."""

from datetime import datetime, timezone


def _post(client, headers, updates, collection="Posts", item_id="p1"):
    return client.post(
        "/updateItemField",
        json={"collectionName": collection, "itemId": item_id, "updates": updates},
        headers=headers,
    )


class TestUpdateItemField:
    def test_merges_coerced_values(self, client, auth_headers, store) -> None:
        store.add("Posts", "p1", title="old", views=3)

        response = _post(
            client,
            auth_headers,
            {
                "title": "new",
                "safebool_featured": "1",
                "safebool_hidden": "yes",
                "date_publishedAt": "2024-05-01T08:00:00Z",
            },
        )

        assert response.status_code == 200
        assert response.json() == {"success": True}
        assert store.items[("Posts", "p1")] == {
            "title": "new",
            "views": 3,
            "featured": True,
            "hidden": False,
            "publishedAt": datetime(2024, 5, 1, 8, tzinfo=timezone.utc),
        }

    def test_refs_replace_references_and_stay_out_of_record(self, client, auth_headers, store) -> None:
        store.add("Posts", "p1", title="t")
        store.references[("Posts", "p1", "tags")] = ["old1", "old2", "old3"]

        response = _post(client, auth_headers, {"refs_tags": ["t2", "t1"], "refs_authors": []})

        assert response.status_code == 200
        assert store.items[("Posts", "p1")] == {"title": "t"}
        assert store.references[("Posts", "p1", "tags")] == ["t2", "t1"]
        assert store.references[("Posts", "p1", "authors")] == []

    def test_main_update_is_a_single_write(self, client, auth_headers, store) -> None:
        store.add("Posts", "p1")

        _post(client, auth_headers, {"a": 1, "b": 2, "safebool_c": True, "refs_d": ["x"]})

        assert len(store.updates) == 1

    def test_image_fields_issue_context_imports(self, client, auth_headers, store, fake_media) -> None:
        store.add("Posts", "p1", cover="old.png")

        response = _post(client, auth_headers, {"image_cover": "https://x/new.png", "title": "t"})

        assert response.status_code == 200
        assert store.items[("Posts", "p1")] == {"cover": "old.png", "title": "t"}
        assert fake_media.calls == [
            {
                "folder_path": "/Posts",
                "url": "https://x/new.png",
                "mime_type": "image/png",
                "context": {"collectionName": "Posts", "itemId": "p1", "fieldName": "cover"},
            }
        ]

    def test_missing_item(self, client, auth_headers, store) -> None:
        response = _post(client, auth_headers, {"title": "t"}, item_id="missing")

        assert response.status_code == 400
        assert response.json() == {"error": "Item not found."}

    def test_invalid_date_writes_nothing(self, client, auth_headers, store) -> None:
        store.add("Posts", "p1", title="t")

        response = _post(client, auth_headers, {"title": "changed", "date_when": "someday"})

        assert response.status_code == 400
        assert "date_when" in response.json()["error"]
        assert store.items[("Posts", "p1")] == {"title": "t"}

    def test_store_failure_is_reported(self, client, auth_headers, store) -> None:
        store.add("Posts", "p1")
        store.fail_update = RuntimeError("connection reset")

        response = _post(client, auth_headers, {"title": "t"})

        assert response.status_code == 400
        assert response.json() == {"error": "connection reset"}

    def test_reference_failure_keeps_main_update(self, client, auth_headers, store, fake_media) -> None:
        store.add("Posts", "p1", title="a")
        store.fail_references["tags"] = RuntimeError("refs down")

        response = _post(
            client,
            auth_headers,
            {
                "title": "b",
                "refs_tags": ["z"],
                "refs_authors": ["u1"],
                "image_cover": "https://x/c.png",
            },
        )

        assert response.status_code == 400
        assert response.json() == {"error": "refs down"}
        assert store.items[("Posts", "p1")] == {"title": "b"}
        # Steps after the failing one are not attempted.
        assert ("Posts", "p1", "authors") not in store.references
        assert fake_media.calls == []

    def test_image_failure_keeps_main_update_and_references(
        self, client, auth_headers, store, fake_media
    ) -> None:
        store.add("Posts", "p1", title="a")
        fake_media.fail_on = lambda url: RuntimeError("media down") if "bad" in url else None

        response = _post(
            client,
            auth_headers,
            {"title": "b", "refs_tags": ["z"], "image_cover": "https://x/bad.png"},
        )

        assert response.status_code == 400
        assert response.json() == {"error": "media down"}
        assert store.items[("Posts", "p1")] == {"title": "b"}
        assert store.references[("Posts", "p1", "tags")] == ["z"]

    def test_missing_fields(self, client, auth_headers) -> None:
        response = client.post(
            "/updateItemField",
            json={"collectionName": "Posts", "updates": {}},
            headers=auth_headers,
        )

        assert response.status_code == 400
        assert "itemId" in response.json()["error"]


class TestGetItem:
    def test_returns_fields_and_references(self, client, auth_headers, store) -> None:
        store.add("Posts", "p1", title="t")
        store.references[("Posts", "p1", "tags")] = ["a", "b"]

        response = client.get("/items/Posts/p1", headers=auth_headers)

        assert response.status_code == 200
        assert response.json() == {
            "item": {"title": "t", "_id": "p1"},
            "references": {"tags": ["a", "b"]},
        }

    def test_requires_authorization(self, client, store) -> None:
        store.add("Posts", "p1")

        response = client.get("/items/Posts/p1")

        assert response.status_code == 400
        assert response.json() == {"error": "Not authorized"}

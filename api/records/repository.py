"""
Item persistence.

Items are stored as one jsonb document per (collection_name, id). Reference
fields live in `item_references`, one row per referenced id, ordered by
`position`.
"""

from __future__ import annotations

from typing import Any, Sequence

from core import db


async def get_item(collection_name: str, item_id: str) -> dict[str, Any] | None:
    """
    Return the item's field data (with `_id`), or None when it does not exist.
    """
    row = await db.fetch_one(
        """
        SELECT id, data
        FROM items
        WHERE collection_name = $1
          AND id = $2
        """,
        collection_name,
        item_id,
    )
    if row is None:
        return None
    data = dict(row["data"] or {})
    data["_id"] = str(row["id"])
    return data


async def update_item(collection_name: str, item: dict[str, Any]) -> dict[str, Any] | None:
    """
    Replace the stored field data of an existing item.

    `item["_id"]` identifies the row and is not stored inside `data`.
    Returns the updated row, or None when the item is gone.
    """
    item_id = str(item.get("_id") or "").strip()
    if not item_id:
        raise ValueError("Item has no _id.")

    data = {k: v for k, v in item.items() if k != "_id"}
    return await db.fetch_one(
        """
        UPDATE items
        SET data = $3::jsonb,
            updated_at = now()
        WHERE collection_name = $1
          AND id = $2
        RETURNING id, updated_at
        """,
        collection_name,
        item_id,
        data,
    )


async def replace_references(
    collection_name: str,
    item_id: str,
    field_name: str,
    referenced_ids: Sequence[str],
) -> None:
    """
    Replace every reference of `field_name` with `referenced_ids`, in order.
    """
    async with db.transaction() as conn:
        await conn.execute(
            """
            DELETE FROM item_references
            WHERE collection_name = $1
              AND item_id = $2
              AND field_name = $3
            """,
            collection_name,
            item_id,
            field_name,
        )
        if not referenced_ids:
            return
        await conn.executemany(
            """
            INSERT INTO item_references (collection_name, item_id, field_name, position, referenced_id)
            VALUES ($1, $2, $3, $4, $5)
            """,
            [
                (collection_name, item_id, field_name, position, ref_id)
                for position, ref_id in enumerate(referenced_ids)
            ],
        )


async def list_references(collection_name: str, item_id: str) -> dict[str, list[str]]:
    rows = await db.fetch_all(
        """
        SELECT field_name, referenced_id
        FROM item_references
        WHERE collection_name = $1
          AND item_id = $2
        ORDER BY field_name, position
        """,
        collection_name,
        item_id,
    )
    out: dict[str, list[str]] = {}
    for row in rows:
        out.setdefault(str(row["field_name"]), []).append(str(row["referenced_id"]))
    return out

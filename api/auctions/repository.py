"""
Auction persistence.
"""

from __future__ import annotations

from typing import Any, Mapping

from core import crud, query, toggle
from core.db import Database

DISPLAY_FIELDS = frozenset(
    {
        "display_logo_one",
        "display_logo_second",
        "display_logo_third",
        "display_area_price",
        "display_area",
        "display_open_price",
        "display_seeking_percent",
        "display_increase",
        "display_tax_percent",
        "display_notes1",
        "display_notes2",
        "display_video_url",
        "display_bg_image",
    }
)

AUCTIONS = query.Collection(
    table="auctions",
    columns={
        "id": "int",
        "project_id": "int",
        "auction_name": "text",
        "item_name": "text",
        "item_img": "text",
        "logo_one": "text",
        "logo_second": "text",
        "logo_third": "text",
        "image_cover": "text",
        "images": "text[]",
        "bg_image": "text",
        "video_url": "text",
        "bg_color": "text",
        "text_color": "text",
        "notes_color": "text",
        "text_bg_color1": "text",
        "text_bg_color2": "text",
        "text_bg_color3": "text",
        "open_price": "numeric",
        "seeking_percent": "numeric",
        "tax_percent": "numeric",
        "area_price": "numeric",
        "area": "numeric",
        "min_increase": "numeric",
        "notes1": "text",
        "notes2": "text",
        "is_running": "bool",
        **{name: "bool" for name in sorted(DISPLAY_FIELDS)},
        "version": "int4",
        "created_at": "timestamp",
        "updated_at": "timestamp",
    },
    searchable=("auction_name", "item_name", "notes1", "notes2"),
)


async def get_auction(db: Database, auction_id: int) -> dict[str, Any] | None:
    return await crud.get_by_id(db, AUCTIONS, auction_id)


async def insert_auction(db: Database, values: Mapping[str, Any]) -> dict[str, Any]:
    return await crud.insert(db, AUCTIONS, values)


async def update_auction(db: Database, auction_id: int, values: Mapping[str, Any]) -> dict[str, Any] | None:
    return await crud.update(db, AUCTIONS, auction_id, values)


async def delete_auction(db: Database, auction_id: int) -> bool:
    return await crud.delete(db, AUCTIONS, auction_id)


async def toggle_running(db: Database, auction_id: int) -> dict[str, Any]:
    return await toggle.toggle_exclusive_flag(db, AUCTIONS, auction_id, "is_running")


async def toggle_display(db: Database, auction_id: int, field_name: str) -> dict[str, Any]:
    return await toggle.toggle_named_field(
        db,
        AUCTIONS,
        auction_id,
        field_name,
        allowed_prefix="display_",
        allowed_fields=DISPLAY_FIELDS,
    )


async def get_running_auction(db: Database) -> dict[str, Any] | None:
    columns = ", ".join(AUCTIONS.visible_columns)
    return await db.fetch_one(
        f"""
        SELECT {columns}
        FROM auctions
        WHERE is_running = true
        LIMIT 1
        """
    )

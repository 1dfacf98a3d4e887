"""
Banner persistence.
"""

from __future__ import annotations

from typing import Any, Mapping

from core import crud, query
from core.db import Database

BANNERS = query.Collection(
    table="banners",
    columns={
        "id": "int",
        "image_cover": "text",
        "version": "int4",
        "created_at": "timestamp",
        "updated_at": "timestamp",
    },
)


async def get_banner(db: Database, banner_id: int) -> dict[str, Any] | None:
    return await crud.get_by_id(db, BANNERS, banner_id)


async def insert_banner(db: Database, values: Mapping[str, Any]) -> dict[str, Any]:
    return await crud.insert(db, BANNERS, values)


async def update_banner(db: Database, banner_id: int, values: Mapping[str, Any]) -> dict[str, Any] | None:
    return await crud.update(db, BANNERS, banner_id, values)


async def delete_banner(db: Database, banner_id: int) -> bool:
    return await crud.delete(db, BANNERS, banner_id)

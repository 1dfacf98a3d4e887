"""
Price record persistence.
"""

from __future__ import annotations

from typing import Any, Mapping

from core import crud, query
from core.db import Database

PRICES = query.Collection(
    table="prices",
    columns={
        "id": "int",
        "auction_id": "int",
        "increase": "numeric",
        "sold_price": "numeric",
        "paddle_num": "text",
        "total": "numeric",
        "area_price": "numeric",
        "version": "int4",
        "created_at": "timestamp",
        "updated_at": "timestamp",
    },
    searchable=("paddle_num",),
)


async def get_price(db: Database, price_id: int) -> dict[str, Any] | None:
    return await crud.get_by_id(db, PRICES, price_id)


async def insert_price(db: Database, values: Mapping[str, Any]) -> dict[str, Any]:
    return await crud.insert(db, PRICES, values)


async def update_price(db: Database, price_id: int, values: Mapping[str, Any]) -> dict[str, Any] | None:
    return await crud.update(db, PRICES, price_id, values)


async def delete_price(db: Database, price_id: int) -> bool:
    return await crud.delete(db, PRICES, price_id)

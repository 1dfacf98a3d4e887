"""
Contact message persistence.
"""

from __future__ import annotations

from typing import Any, Mapping

from core import crud, query
from core.db import Database

CONTACTS = query.Collection(
    table="contacts",
    columns={
        "id": "int",
        "name": "text",
        "email": "text",
        "phone": "text",
        "message": "text",
        "version": "int4",
        "created_at": "timestamp",
        "updated_at": "timestamp",
    },
    searchable=("name", "email", "message"),
)


async def get_contact(db: Database, contact_id: int) -> dict[str, Any] | None:
    return await crud.get_by_id(db, CONTACTS, contact_id)


async def insert_contact(db: Database, values: Mapping[str, Any]) -> dict[str, Any]:
    return await crud.insert(db, CONTACTS, values)


async def update_contact(db: Database, contact_id: int, values: Mapping[str, Any]) -> dict[str, Any] | None:
    return await crud.update(db, CONTACTS, contact_id, values)


async def delete_contact(db: Database, contact_id: int) -> bool:
    return await crud.delete(db, CONTACTS, contact_id)

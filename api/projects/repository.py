"""
Project persistence.
"""

from __future__ import annotations

from typing import Any, Mapping

from core import crud, query
from core.db import Database

PROJECTS = query.Collection(
    table="projects",
    columns={
        "id": "int",
        "title": "text",
        "description": "text",
        "image_cover": "text",
        "images": "text[]",
        "file": "text",
        "city": "text",
        "location": "text",
        "date_start": "timestamp",
        "auction_start_time": "text",
        "status": "text",
        "is_published": "bool",
        "play_button": "bool",
        "version": "int4",
        "created_at": "timestamp",
        "updated_at": "timestamp",
    },
    searchable=("title", "description", "city", "location"),
)


async def get_project(db: Database, project_id: int) -> dict[str, Any] | None:
    return await crud.get_by_id(db, PROJECTS, project_id)


async def insert_project(db: Database, values: Mapping[str, Any]) -> dict[str, Any]:
    return await crud.insert(db, PROJECTS, values)


async def update_project(db: Database, project_id: int, values: Mapping[str, Any]) -> dict[str, Any] | None:
    return await crud.update(db, PROJECTS, project_id, values)


async def delete_project(db: Database, project_id: int) -> bool:
    return await crud.delete(db, PROJECTS, project_id)


async def flip_published(db: Database, project_id: int) -> dict[str, Any] | None:
    return await crud.flip_boolean(db, PROJECTS, project_id, "is_published")

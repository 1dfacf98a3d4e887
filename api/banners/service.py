"""
Banner business logic.
"""

from __future__ import annotations

from typing import Any, Iterable

from fastapi import HTTPException, UploadFile

from core import media, responses, uploads
from core.db import Database

from . import repository, schemas

FOLDER = "banners"

UPLOAD_SLOTS = (uploads.UploadSlot("image_cover"),)


def serialize(row: dict[str, Any]) -> dict[str, Any]:
    return media.with_media_urls(row, FOLDER, fields=("image_cover",))


def _not_found(banner_id: int) -> HTTPException:
    return HTTPException(status_code=404, detail=f"No banner found for id {banner_id}")


async def list_banners(db: Database, params: Iterable[tuple[str, str]]) -> dict:
    return await responses.list_response(db, repository.BANNERS, params, serialize=serialize)


async def get_banner(db: Database, banner_id: int) -> dict:
    row = await repository.get_banner(db, banner_id)
    if row is None:
        raise _not_found(banner_id)
    return serialize(row)


async def create_banner(
    db: Database,
    payload: schemas.BannerCreate,
    files: dict[str, list[UploadFile]],
) -> dict:
    values = payload.changes()
    async with uploads.stored_uploads(files, UPLOAD_SLOTS, folder=FOLDER, prefix="banner") as stored:
        values.update(stored)
        row = await repository.insert_banner(db, values)
    return serialize(row)


async def update_banner(
    db: Database,
    banner_id: int,
    payload: schemas.BannerUpdate,
    files: dict[str, list[UploadFile]],
) -> dict:
    current = await repository.get_banner(db, banner_id)
    if current is None:
        raise _not_found(banner_id)

    values = payload.changes()
    async with uploads.stored_uploads(
        files, UPLOAD_SLOTS, folder=FOLDER, prefix="banner", replacing=current
    ) as stored:
        values.update(stored)
        row = await repository.update_banner(db, banner_id, values)
        if row is None:
            raise _not_found(banner_id)
    return serialize(row)


async def delete_banner(db: Database, banner_id: int) -> None:
    if not await repository.delete_banner(db, banner_id):
        raise _not_found(banner_id)

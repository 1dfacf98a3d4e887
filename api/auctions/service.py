"""
Auction business logic.

Only one auction may be running at a time across all projects; switching one
on switches the others off in the same transaction (see `core.toggle`).
"""

from __future__ import annotations

import logging
from typing import Any, Iterable

from fastapi import HTTPException, UploadFile

from core import crud, media, responses, toggle, uploads
from core.db import Database

from . import repository, schemas

FOLDER = "auctions"

UPLOAD_SLOTS = (
    uploads.UploadSlot("logo_one"),
    uploads.UploadSlot("logo_second"),
    uploads.UploadSlot("logo_third"),
    uploads.UploadSlot("image_cover"),
    uploads.UploadSlot("item_img"),
    uploads.UploadSlot("bg_image", keep_gif=True),
    uploads.UploadSlot("images", max_count=5, default_format="jpeg"),
)

MEDIA_FIELDS = ("logo_one", "logo_second", "logo_third", "image_cover", "item_img", "bg_image")

PROJECT_MISSING = "Associated project does not exist."

logger = logging.getLogger(__name__)


def serialize(row: dict[str, Any]) -> dict[str, Any]:
    return media.with_media_urls(row, FOLDER, fields=MEDIA_FIELDS, list_fields=("images",))


def _not_found(auction_id: int) -> HTTPException:
    return HTTPException(status_code=404, detail=f"No auction with id: {auction_id}")


async def list_auctions(
    db: Database,
    params: Iterable[tuple[str, str]],
    *,
    project_id: int | None = None,
) -> dict:
    base_filter = {"project_id": project_id} if project_id is not None else None
    return await responses.list_response(
        db,
        repository.AUCTIONS,
        params,
        serialize=serialize,
        base_filter=base_filter,
    )


async def get_auction(db: Database, auction_id: int) -> dict:
    row = await repository.get_auction(db, auction_id)
    if row is None:
        raise _not_found(auction_id)
    return serialize(row)


async def get_running_auction(db: Database) -> dict:
    row = await repository.get_running_auction(db)
    if row is None:
        raise HTTPException(status_code=404, detail="No auction is running.")
    return serialize(row)


async def create_auction(
    db: Database,
    payload: schemas.AuctionCreate,
    files: dict[str, list[UploadFile]],
    *,
    project_id: int | None = None,
) -> dict:
    values = payload.changes()
    if project_id is not None:
        values["project_id"] = project_id
    if values.get("project_id") is None:
        raise HTTPException(status_code=400, detail="Associated project is required.")

    async with uploads.stored_uploads(files, UPLOAD_SLOTS, folder=FOLDER, prefix="auction") as stored:
        values.update(stored)
        try:
            row = await repository.insert_auction(db, values)
        except crud.ConstraintError as exc:
            raise responses.constraint_error(exc, foreign_key_detail=PROJECT_MISSING) from exc
    logger.info("auction_created id=%s project_id=%s", row["id"], row["project_id"])
    return serialize(row)


async def update_auction(
    db: Database,
    auction_id: int,
    payload: schemas.AuctionUpdate,
    files: dict[str, list[UploadFile]],
) -> dict:
    current = await repository.get_auction(db, auction_id)
    if current is None:
        raise _not_found(auction_id)

    values = payload.changes()
    async with uploads.stored_uploads(
        files, UPLOAD_SLOTS, folder=FOLDER, prefix="auction", replacing=current
    ) as stored:
        values.update(stored)
        try:
            row = await repository.update_auction(db, auction_id, values)
        except crud.ConstraintError as exc:
            raise responses.constraint_error(exc, foreign_key_detail=PROJECT_MISSING) from exc
        if row is None:
            raise _not_found(auction_id)
    return serialize(row)


async def delete_auction(db: Database, auction_id: int) -> None:
    if not await repository.delete_auction(db, auction_id):
        raise _not_found(auction_id)
    logger.info("auction_deleted id=%s", auction_id)


async def toggle_running(db: Database, auction_id: int) -> tuple[dict, str]:
    try:
        row = await repository.toggle_running(db, auction_id)
    except crud.RecordNotFound as exc:
        raise _not_found(auction_id) from exc
    except toggle.ToggleError as exc:
        raise HTTPException(status_code=500, detail="Error toggling auction state") from exc

    state = "started" if row["is_running"] else "stopped"
    return serialize(row), f"Auction {state} successfully"


async def toggle_display(db: Database, auction_id: int, field_name: str) -> dict:
    try:
        row = await repository.toggle_display(db, auction_id, field_name)
    except toggle.InvalidFieldError as exc:
        raise HTTPException(status_code=400, detail=str(exc)) from exc
    except crud.RecordNotFound as exc:
        raise HTTPException(status_code=404, detail=f"No auction found with id: {auction_id}") from exc
    return serialize(row)

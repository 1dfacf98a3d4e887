"""
Project business logic.

Status rule: a project is `upcoming` until its start instant
(`date_start` day + `auction_start_time`, UTC) and `ongoing` afterwards.
`completed` is never derived from dates; it is only set through the explicit
status endpoint.
"""

from __future__ import annotations

import logging
from datetime import datetime, timezone
from typing import Any, Iterable

from fastapi import HTTPException, UploadFile

from core import crud, media, responses, uploads
from core.db import Database

from . import repository, schemas

FOLDER = "projects"

UPLOAD_SLOTS = (
    uploads.UploadSlot("image_cover"),
    uploads.UploadSlot("images", max_count=5, default_format="jpeg"),
    uploads.UploadSlot("file", kind="pdf"),
)

logger = logging.getLogger(__name__)


def _utc_now() -> datetime:
    return datetime.now(timezone.utc)


def start_instant(date_start: datetime, auction_start_time: str) -> datetime:
    hours, minutes = (int(part) for part in auction_start_time.split(":"))
    if date_start.tzinfo is None:
        date_start = date_start.replace(tzinfo=timezone.utc)
    day = date_start.astimezone(timezone.utc)
    return day.replace(hour=hours, minute=minutes, second=0, microsecond=0)


def derive_status(date_start: datetime, auction_start_time: str, *, now: datetime | None = None) -> str:
    now = now or _utc_now()
    if now < start_instant(date_start, auction_start_time):
        return "upcoming"
    return "ongoing"


def serialize(row: dict[str, Any]) -> dict[str, Any]:
    return media.with_media_urls(
        row,
        FOLDER,
        fields=("image_cover", "file"),
        list_fields=("images",),
    )


def _not_found(project_id: int) -> HTTPException:
    return HTTPException(status_code=404, detail=f"No project found for id {project_id}")


async def list_projects(db: Database, params: Iterable[tuple[str, str]]) -> dict:
    return await responses.list_response(db, repository.PROJECTS, params, serialize=serialize)


async def get_project(db: Database, project_id: int) -> dict:
    row = await repository.get_project(db, project_id)
    if row is None:
        raise _not_found(project_id)
    return serialize(row)


async def create_project(
    db: Database,
    payload: schemas.ProjectCreate,
    files: dict[str, list[UploadFile]],
) -> dict:
    values = payload.changes()
    values["status"] = derive_status(payload.date_start, payload.auction_start_time)

    async with uploads.stored_uploads(files, UPLOAD_SLOTS, folder=FOLDER, prefix="project") as stored:
        values.update(stored)
        try:
            row = await repository.insert_project(db, values)
        except crud.ConstraintError as exc:
            raise responses.constraint_error(exc) from exc
    logger.info("project_created id=%s status=%s", row["id"], row["status"])
    return serialize(row)


async def update_project(
    db: Database,
    project_id: int,
    payload: schemas.ProjectUpdate,
    files: dict[str, list[UploadFile]],
) -> dict:
    current = await repository.get_project(db, project_id)
    if current is None:
        raise _not_found(project_id)

    values = payload.changes()
    if "date_start" in values or "auction_start_time" in values:
        values["status"] = derive_status(
            values.get("date_start", current["date_start"]),
            values.get("auction_start_time", current["auction_start_time"]),
        )
    async with uploads.stored_uploads(
        files, UPLOAD_SLOTS, folder=FOLDER, prefix="project", replacing=current
    ) as stored:
        values.update(stored)
        try:
            row = await repository.update_project(db, project_id, values)
        except crud.ConstraintError as exc:
            raise responses.constraint_error(exc) from exc
        if row is None:
            raise _not_found(project_id)
    return serialize(row)


async def delete_project(db: Database, project_id: int) -> None:
    if not await repository.delete_project(db, project_id):
        raise _not_found(project_id)
    logger.info("project_deleted id=%s", project_id)


async def update_status(db: Database, project_id: int, status: str) -> dict:
    values: dict[str, Any] = {"status": status}
    if status == "ongoing":
        now = _utc_now()
        values["date_start"] = now
        values["auction_start_time"] = now.strftime("%H:%M")

    row = await repository.update_project(db, project_id, values)
    if row is None:
        raise _not_found(project_id)
    return serialize(row)


async def toggle_publication(db: Database, project_id: int) -> dict:
    row = await repository.flip_published(db, project_id)
    if row is None:
        raise _not_found(project_id)
    return serialize(row)

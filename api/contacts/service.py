"""
Contact message business logic.
"""

from __future__ import annotations

import logging
from typing import Iterable

from fastapi import HTTPException

from core import responses
from core.db import Database

from . import repository, schemas

logger = logging.getLogger(__name__)


def _not_found(contact_id: int) -> HTTPException:
    return HTTPException(status_code=404, detail=f"No contact with id: {contact_id}")


async def list_contacts(db: Database, params: Iterable[tuple[str, str]]) -> dict:
    return await responses.list_response(db, repository.CONTACTS, params, serialize=dict)


async def get_contact(db: Database, contact_id: int) -> dict:
    row = await repository.get_contact(db, contact_id)
    if row is None:
        raise _not_found(contact_id)
    return row


async def create_contact(db: Database, payload: schemas.ContactCreate) -> dict:
    row = await repository.insert_contact(db, payload.changes())
    logger.info("contact_received id=%s", row["id"])
    return row


async def update_contact(db: Database, contact_id: int, payload: schemas.ContactUpdate) -> dict:
    row = await repository.update_contact(db, contact_id, payload.changes())
    if row is None:
        raise _not_found(contact_id)
    return row


async def delete_contact(db: Database, contact_id: int) -> None:
    if not await repository.delete_contact(db, contact_id):
        raise _not_found(contact_id)

"""
Contact API endpoints.
"""

from __future__ import annotations

from fastapi import APIRouter, Depends, Request, Response

from core.db import Database
from core.dependencies import RecordId, get_db

from . import schemas, service

router = APIRouter()


@router.get("/contacts")
async def list_contacts(request: Request, db: Database = Depends(get_db)) -> dict:
    return await service.list_contacts(db, request.query_params.multi_items())


@router.post("/contacts", status_code=201)
async def create_contact(payload: schemas.ContactCreate, db: Database = Depends(get_db)) -> dict:
    return {"success": True, "data": await service.create_contact(db, payload)}


@router.get("/contacts/{contact_id}")
async def get_contact(contact_id: RecordId, db: Database = Depends(get_db)) -> dict:
    return {"success": True, "data": await service.get_contact(db, contact_id)}


@router.put("/contacts/{contact_id}")
async def update_contact(contact_id: RecordId, payload: schemas.ContactUpdate, db: Database = Depends(get_db)) -> dict:
    return {"success": True, "data": await service.update_contact(db, contact_id, payload)}


@router.delete("/contacts/{contact_id}", status_code=204)
async def delete_contact(contact_id: RecordId, db: Database = Depends(get_db)) -> Response:
    await service.delete_contact(db, contact_id)
    return Response(status_code=204)

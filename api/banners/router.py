"""
Banner API endpoints.
"""

from __future__ import annotations

from fastapi import APIRouter, Depends, Request, Response

from core import forms
from core.db import Database
from core.dependencies import RecordId, get_db

from . import schemas, service

router = APIRouter()


@router.get("/banners")
async def list_banners(request: Request, db: Database = Depends(get_db)) -> dict:
    return await service.list_banners(db, request.query_params.multi_items())


@router.post("/banners", status_code=201)
async def create_banner(request: Request, db: Database = Depends(get_db)) -> dict:
    payload, files = await forms.read_payload(request, schemas.BannerCreate)
    return {"success": True, "data": await service.create_banner(db, payload, files)}


@router.get("/banners/{banner_id}")
async def get_banner(banner_id: RecordId, db: Database = Depends(get_db)) -> dict:
    return {"success": True, "data": await service.get_banner(db, banner_id)}


@router.put("/banners/{banner_id}")
async def update_banner(banner_id: RecordId, request: Request, db: Database = Depends(get_db)) -> dict:
    payload, files = await forms.read_payload(request, schemas.BannerUpdate)
    return {"success": True, "data": await service.update_banner(db, banner_id, payload, files)}


@router.delete("/banners/{banner_id}", status_code=204)
async def delete_banner(banner_id: RecordId, db: Database = Depends(get_db)) -> Response:
    await service.delete_banner(db, banner_id)
    return Response(status_code=204)

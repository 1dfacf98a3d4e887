"""
Auction API endpoints, including the nested `/projects/{project_id}/auctions`
routes.
"""

from __future__ import annotations

from fastapi import APIRouter, Depends, Request, Response

from core import forms
from core.db import Database
from core.dependencies import RecordId, get_db

from . import schemas, service

router = APIRouter()


@router.get("/auctions")
async def list_auctions(request: Request, db: Database = Depends(get_db)) -> dict:
    return await service.list_auctions(db, request.query_params.multi_items())


@router.get("/projects/{project_id}/auctions")
async def list_project_auctions(project_id: RecordId, request: Request, db: Database = Depends(get_db)) -> dict:
    return await service.list_auctions(db, request.query_params.multi_items(), project_id=project_id)


@router.post("/auctions", status_code=201)
async def create_auction(request: Request, db: Database = Depends(get_db)) -> dict:
    """
    Create an auction from JSON or multipart form data.

    File parts: `logo_one`, `logo_second`, `logo_third`, `image_cover`,
    `item_img`, `bg_image` (one image each) and `images` (up to 5).
    """
    payload, files = await forms.read_payload(request, schemas.AuctionCreate)
    auction = await service.create_auction(db, payload, files)
    return {"success": True, "data": auction}


@router.post("/projects/{project_id}/auctions", status_code=201)
async def create_project_auction(project_id: RecordId, request: Request, db: Database = Depends(get_db)) -> dict:
    payload, files = await forms.read_payload(request, schemas.AuctionCreate)
    auction = await service.create_auction(db, payload, files, project_id=project_id)
    return {"success": True, "data": auction}


@router.get("/auctions/running")
async def get_running_auction(db: Database = Depends(get_db)) -> dict:
    return {"success": True, "data": await service.get_running_auction(db)}


@router.get("/auctions/{auction_id}")
async def get_auction(auction_id: RecordId, db: Database = Depends(get_db)) -> dict:
    return {"success": True, "data": await service.get_auction(db, auction_id)}


@router.put("/auctions/{auction_id}")
async def update_auction(auction_id: RecordId, request: Request, db: Database = Depends(get_db)) -> dict:
    payload, files = await forms.read_payload(request, schemas.AuctionUpdate)
    auction = await service.update_auction(db, auction_id, payload, files)
    return {"success": True, "data": auction}


@router.delete("/auctions/{auction_id}", status_code=204)
async def delete_auction(auction_id: RecordId, db: Database = Depends(get_db)) -> Response:
    await service.delete_auction(db, auction_id)
    return Response(status_code=204)


@router.patch("/auctions/{auction_id}/toggle-running")
async def toggle_auction_running(auction_id: RecordId, db: Database = Depends(get_db)) -> dict:
    auction, message = await service.toggle_running(db, auction_id)
    return {"success": True, "data": auction, "message": message}


@router.patch("/auctions/{auction_id}/toggle-display/{field_name}")
async def toggle_display_field(auction_id: RecordId, field_name: str, db: Database = Depends(get_db)) -> dict:
    return {"success": True, "data": await service.toggle_display(db, auction_id, field_name)}

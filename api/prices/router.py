"""
Price API endpoints, including the nested `/auctions/{auction_id}/prices`
routes.
"""

from __future__ import annotations

from fastapi import APIRouter, Depends, Request, Response

from core.db import Database
from core.dependencies import RecordId, get_db

from . import schemas, service

router = APIRouter()


@router.get("/prices")
async def list_prices(request: Request, db: Database = Depends(get_db)) -> dict:
    return await service.list_prices(db, request.query_params.multi_items())


@router.get("/auctions/{auction_id}/prices")
async def list_auction_prices(auction_id: RecordId, request: Request, db: Database = Depends(get_db)) -> dict:
    return await service.list_prices(db, request.query_params.multi_items(), auction_id=auction_id)


@router.post("/prices", status_code=201)
async def create_price(payload: schemas.PriceCreate, db: Database = Depends(get_db)) -> dict:
    return {"success": True, "data": await service.create_price(db, payload)}


@router.post("/auctions/{auction_id}/prices", status_code=201)
async def create_auction_price(
    auction_id: RecordId,
    payload: schemas.PriceCreate,
    db: Database = Depends(get_db),
) -> dict:
    return {"success": True, "data": await service.create_price(db, payload, auction_id=auction_id)}


@router.get("/prices/{price_id}")
async def get_price(price_id: RecordId, db: Database = Depends(get_db)) -> dict:
    return {"success": True, "data": await service.get_price(db, price_id)}


@router.put("/prices/{price_id}")
async def update_price(price_id: RecordId, payload: schemas.PriceUpdate, db: Database = Depends(get_db)) -> dict:
    return {"success": True, "data": await service.update_price(db, price_id, payload)}


@router.delete("/prices/{price_id}", status_code=204)
async def delete_price(price_id: RecordId, db: Database = Depends(get_db)) -> Response:
    await service.delete_price(db, price_id)
    return Response(status_code=204)

"""
Price record business logic.
"""

from __future__ import annotations

from typing import Iterable

from fastapi import HTTPException

from auctions import repository as auction_repository
from auctions import service as auction_service
from core import crud, responses
from core.db import Database

from . import repository, schemas

AUCTION_MISSING = "Associated auction does not exist."


def _not_found(price_id: int) -> HTTPException:
    return HTTPException(status_code=404, detail=f"No price with id: {price_id}")


def serialize(row: dict) -> dict:
    return dict(row)


async def list_prices(
    db: Database,
    params: Iterable[tuple[str, str]],
    *,
    auction_id: int | None = None,
) -> dict:
    base_filter = {"auction_id": auction_id} if auction_id is not None else None
    return await responses.list_response(
        db,
        repository.PRICES,
        params,
        serialize=serialize,
        base_filter=base_filter,
    )


async def get_price(db: Database, price_id: int) -> dict:
    """
    Return a price with its auction embedded under `auction`.
    """
    row = await repository.get_price(db, price_id)
    if row is None:
        raise _not_found(price_id)

    auction = await auction_repository.get_auction(db, int(row["auction_id"]))
    data = serialize(row)
    data["auction"] = auction_service.serialize(auction) if auction is not None else None
    return data


async def create_price(
    db: Database,
    payload: schemas.PriceCreate,
    *,
    auction_id: int | None = None,
) -> dict:
    values = payload.changes()
    if auction_id is not None:
        values["auction_id"] = auction_id
    if values.get("auction_id") is None:
        raise HTTPException(status_code=400, detail="Associated auction is required.")

    try:
        row = await repository.insert_price(db, values)
    except crud.ConstraintError as exc:
        raise responses.constraint_error(exc, foreign_key_detail=AUCTION_MISSING) from exc
    return serialize(row)


async def update_price(db: Database, price_id: int, payload: schemas.PriceUpdate) -> dict:
    try:
        row = await repository.update_price(db, price_id, payload.changes())
    except crud.ConstraintError as exc:
        raise responses.constraint_error(exc, foreign_key_detail=AUCTION_MISSING) from exc
    if row is None:
        raise _not_found(price_id)
    return serialize(row)


async def delete_price(db: Database, price_id: int) -> None:
    if not await repository.delete_price(db, price_id):
        raise _not_found(price_id)

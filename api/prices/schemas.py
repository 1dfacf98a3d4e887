"""
Price request schemas.
"""

from __future__ import annotations

from decimal import Decimal
from typing import ClassVar

from pydantic import Field

from core.schemas import MAX_RECORD_ID, PartialUpdate, RequestModel


class PriceCreate(RequestModel):
    increase: Decimal | None = None
    sold_price: Decimal | None = None
    paddle_num: str | None = Field(default=None, max_length=50)
    total: Decimal | None = None
    area_price: Decimal | None = None
    # Optional here because nested routes take it from the path.
    auction_id: int | None = Field(default=None, ge=1, le=MAX_RECORD_ID)


class PriceUpdate(PartialUpdate):
    non_nullable: ClassVar[frozenset[str]] = frozenset({"auction_id"})

    increase: Decimal | None = None
    sold_price: Decimal | None = None
    paddle_num: str | None = Field(default=None, max_length=50)
    total: Decimal | None = None
    area_price: Decimal | None = None
    auction_id: int | None = Field(default=None, ge=1, le=MAX_RECORD_ID)

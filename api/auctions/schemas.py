"""
Auction request schemas.

`is_running` is not accepted here: it only changes through the
toggle-running endpoint.
"""

from __future__ import annotations

from decimal import Decimal
from typing import ClassVar

from pydantic import Field

from core.schemas import MAX_RECORD_ID, PartialUpdate, RequestModel


class AuctionFields(RequestModel):
    item_name: str | None = None
    video_url: str | None = None
    bg_color: str | None = None
    text_color: str | None = None
    notes_color: str | None = None
    text_bg_color1: str | None = None
    text_bg_color2: str | None = None
    text_bg_color3: str | None = None
    open_price: Decimal | None = None
    seeking_percent: Decimal | None = None
    tax_percent: Decimal | None = None
    area_price: Decimal | None = None
    area: Decimal | None = None
    min_increase: Decimal | None = None
    notes1: str | None = None
    notes2: str | None = None
    display_logo_one: bool | None = None
    display_logo_second: bool | None = None
    display_logo_third: bool | None = None
    display_area_price: bool | None = None
    display_area: bool | None = None
    display_open_price: bool | None = None
    display_seeking_percent: bool | None = None
    display_increase: bool | None = None
    display_tax_percent: bool | None = None
    display_notes1: bool | None = None
    display_notes2: bool | None = None
    display_video_url: bool | None = None
    display_bg_image: bool | None = None


class AuctionCreate(AuctionFields):
    auction_name: str = Field(..., min_length=1, max_length=200)
    # Optional here because nested routes take it from the path.
    project_id: int | None = Field(default=None, ge=1, le=MAX_RECORD_ID)


class AuctionUpdate(AuctionFields, PartialUpdate):
    non_nullable: ClassVar[frozenset[str]] = frozenset(
        {"auction_name", "project_id"} | {name for name in AuctionFields.model_fields if name.startswith("display_")}
    )

    auction_name: str | None = Field(default=None, min_length=1, max_length=200)
    project_id: int | None = Field(default=None, ge=1, le=MAX_RECORD_ID)

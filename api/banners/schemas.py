"""
Banner request schemas.

Banners are usually created from a multipart upload; `image_cover` may also be
given as an already-hosted URL.
"""

from __future__ import annotations

from pydantic import Field

from core.schemas import PartialUpdate, RequestModel


class BannerCreate(RequestModel):
    image_cover: str | None = Field(default=None, max_length=2000)


class BannerUpdate(PartialUpdate):
    image_cover: str | None = Field(default=None, max_length=2000)

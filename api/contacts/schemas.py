"""
Contact API schemas.
"""

from __future__ import annotations

from pydantic import Field

from core.schemas import PartialUpdate, RequestModel


class ContactCreate(RequestModel):
    name: str | None = Field(default=None, max_length=200)
    email: str | None = Field(default=None, max_length=320)
    phone: str | None = Field(default=None, max_length=50)
    message: str | None = Field(default=None, max_length=5000)


class ContactUpdate(PartialUpdate):
    name: str | None = Field(default=None, max_length=200)
    email: str | None = Field(default=None, max_length=320)
    phone: str | None = Field(default=None, max_length=50)
    message: str | None = Field(default=None, max_length=5000)

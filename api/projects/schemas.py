"""
Project request schemas.
"""

from __future__ import annotations

import re
from datetime import datetime
from typing import ClassVar, Literal

from pydantic import BaseModel, Field, field_validator

from core.schemas import PartialUpdate, RequestModel, as_utc

ProjectStatus = Literal["upcoming", "ongoing", "completed"]

_TIME_RE = re.compile(r"^([0-1]?[0-9]|2[0-3]):[0-5][0-9]$")


def _check_time(value: str | None) -> str | None:
    if value is not None and not _TIME_RE.match(value):
        raise ValueError(
            f"{value} is not a valid time format! Please use HH:MM format (e.g., 4:30 or 16:30)"
        )
    return value


class ProjectCreate(RequestModel):
    title: str = Field(..., min_length=1, max_length=100)
    description: str = Field(..., min_length=1)
    city: str | None = None
    location: str | None = None
    date_start: datetime
    auction_start_time: str
    is_published: bool = True
    play_button: bool = False

    check_time = field_validator("auction_start_time")(_check_time)
    check_date_start = field_validator("date_start")(as_utc)


class ProjectUpdate(PartialUpdate):
    non_nullable: ClassVar[frozenset[str]] = frozenset(
        {"title", "description", "date_start", "auction_start_time", "is_published", "play_button"}
    )

    title: str | None = Field(default=None, min_length=1, max_length=100)
    description: str | None = Field(default=None, min_length=1)
    city: str | None = None
    location: str | None = None
    date_start: datetime | None = None
    auction_start_time: str | None = None
    is_published: bool | None = None
    play_button: bool | None = None

    check_time = field_validator("auction_start_time")(_check_time)
    check_date_start = field_validator("date_start")(as_utc)


class ProjectStatusUpdate(BaseModel):
    status: ProjectStatus

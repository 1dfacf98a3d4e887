"""
Shared FastAPI dependencies.
"""

from __future__ import annotations

from typing import Annotated

from fastapi import Path, Request

from .db import Database
from .schemas import MAX_RECORD_ID

# Row ids are bigserial; anything outside that range can never match a row.
RecordId = Annotated[int, Path(ge=1, le=MAX_RECORD_ID)]


def get_db(request: Request) -> Database:
    return request.app.state.db

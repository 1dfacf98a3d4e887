"""
Shared pydantic bases for request bodies.
"""

from __future__ import annotations

from datetime import datetime, timezone
from typing import Any, ClassVar

from pydantic import BaseModel, ConfigDict, model_validator

MAX_RECORD_ID = 2**63 - 1


class RequestModel(BaseModel):
    model_config = ConfigDict(str_strip_whitespace=True)

    def changes(self) -> dict[str, Any]:
        """
        Column values for a write; fields the client did not send are omitted
        so table defaults apply.
        """
        return self.model_dump(exclude_unset=True)


class PartialUpdate(RequestModel):
    """
    Update body: unset fields are left untouched, and columns listed in
    `non_nullable` may be omitted but not set to null.
    """

    non_nullable: ClassVar[frozenset[str]] = frozenset()

    @model_validator(mode="after")
    def reject_nulls(self) -> "PartialUpdate":
        for name in sorted(self.non_nullable & self.model_fields_set):
            if getattr(self, name) is None:
                raise ValueError(f"'{name}' cannot be null.")
        return self


def as_utc(value: datetime | None) -> datetime | None:
    if value is None:
        return None
    if value.tzinfo is None:
        return value.replace(tzinfo=timezone.utc)
    return value.astimezone(timezone.utc)

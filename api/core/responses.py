"""
HTTP-facing helpers shared by feature services.
"""

from __future__ import annotations

from typing import Any, Callable, Iterable, Mapping

from fastapi import HTTPException

from . import crud, query
from .db import Database


async def list_response(
    db: Database,
    collection: query.Collection,
    params: Mapping[str, Any] | Iterable[tuple[str, str]],
    *,
    serialize: Callable[[dict[str, Any]], dict[str, Any]],
    base_filter: Mapping[str, Any] | None = None,
) -> dict[str, Any]:
    """
    Build a plan from query params, count, paginate and fetch one page.
    """
    try:
        plan = query.build_query_plan(params, collection, base_filter=base_filter)
    except query.QueryError as exc:
        raise HTTPException(status_code=400, detail=str(exc)) from exc

    rows, pagination = await crud.fetch_page(db, plan)
    data = [serialize(row) for row in rows]
    return {
        "success": True,
        "results": len(data),
        "pagination": pagination.as_dict(),
        "data": data,
    }


def constraint_error(
    exc: crud.ConstraintError,
    *,
    foreign_key_detail: str = "Referenced record does not exist.",
) -> HTTPException:
    if exc.kind == "foreign_key":
        return HTTPException(status_code=400, detail=foreign_key_detail)
    if exc.kind == "not_null":
        return HTTPException(status_code=400, detail="A required field is missing.")
    return HTTPException(status_code=400, detail="Invalid value for a constrained field.")

"""
Generic row persistence for query-builder collections (raw SQL).

Feature repositories describe their table with a `query.Collection` and use
these helpers for the plain list/get/insert/update/delete paths. Column names
always come from the collection allow-list; values are always bound.
"""

from __future__ import annotations

from typing import Any, Mapping

import asyncpg

from . import query
from .db import Database


class RecordNotFound(LookupError):
    pass


class ConstraintError(ValueError):
    """
    A write was rejected by a table constraint (foreign key, unique, check).
    """

    def __init__(self, message: str, *, kind: str, constraint: str | None = None) -> None:
        super().__init__(message)
        self.kind = kind
        self.constraint = constraint


def _q(name: str) -> str:
    return f'"{name}"'


def _columns_sql(names: tuple[str, ...] | list[str]) -> str:
    return ", ".join(_q(name) for name in names)


def _check_columns(collection: query.Collection, names: Mapping[str, Any] | list[str]) -> None:
    unknown = [name for name in names if not collection.has(name)]
    if unknown:
        raise ValueError(f"Unknown column(s) for {collection.table}: {', '.join(sorted(unknown))}")


def _constraint_error(exc: asyncpg.IntegrityConstraintViolationError) -> ConstraintError:
    if isinstance(exc, asyncpg.ForeignKeyViolationError):
        kind = "foreign_key"
    elif isinstance(exc, asyncpg.UniqueViolationError):
        kind = "unique"
    elif isinstance(exc, asyncpg.NotNullViolationError):
        kind = "not_null"
    else:
        kind = "check"
    return ConstraintError(
        getattr(exc, "detail", None) or str(exc),
        kind=kind,
        constraint=getattr(exc, "constraint_name", None),
    )


async def fetch_page(db: Database, plan: query.QueryPlan) -> tuple[list[dict[str, Any]], query.Pagination]:
    """
    Count the filtered set, then fetch one page of it.

    Both statements run in one read-only repeatable-read transaction so the
    pagination metadata describes the same snapshot as the returned rows.
    """
    async with db.transaction(isolation="repeatable_read", readonly=True) as conn:
        count_sql, count_args = plan.count_sql()
        total = await conn.fetchval(count_sql, *count_args)
        pagination = query.paginate(plan, int(total or 0))
        if pagination.page > pagination.total_pages:
            return [], pagination

        select_sql, select_args = plan.select_sql(pagination)
        rows = await conn.fetch(select_sql, *select_args)
    return [dict(r) for r in rows], pagination


async def get_by_id(db: Database, collection: query.Collection, record_id: int) -> dict[str, Any] | None:
    return await db.fetch_one(
        f"""
        SELECT {_columns_sql(collection.visible_columns)}
        FROM {_q(collection.table)}
        WHERE id = $1
        """,
        record_id,
    )


async def insert(db: Database, collection: query.Collection, values: Mapping[str, Any]) -> dict[str, Any]:
    _check_columns(collection, values)
    returning = _columns_sql(collection.visible_columns)
    if values:
        names = list(values)
        placeholders = ", ".join(f"${i}" for i in range(1, len(names) + 1))
        sql = f"""
            INSERT INTO {_q(collection.table)} ({_columns_sql(names)})
            VALUES ({placeholders})
            RETURNING {returning}
        """
        args = [values[name] for name in names]
    else:
        sql = f"INSERT INTO {_q(collection.table)} DEFAULT VALUES RETURNING {returning}"
        args = []

    try:
        row = await db.fetch_one(sql, *args)
    except asyncpg.IntegrityConstraintViolationError as exc:
        raise _constraint_error(exc) from exc
    if row is None:
        raise RuntimeError(f"Failed to insert into {collection.table}.")
    return row


async def update(
    db: Database,
    collection: query.Collection,
    record_id: int,
    values: Mapping[str, Any],
) -> dict[str, Any] | None:
    """
    Apply a partial update. Returns the updated row, or None when not found.

    Every write bumps `version` and `updated_at`.
    """
    _check_columns(collection, values)
    names = list(values)
    assignments = [f"{_q(name)} = ${i}" for i, name in enumerate(names, start=2)]
    assignments += ["version = version + 1", "updated_at = now()"]
    try:
        return await db.fetch_one(
            f"""
            UPDATE {_q(collection.table)}
            SET {", ".join(assignments)}
            WHERE id = $1
            RETURNING {_columns_sql(collection.visible_columns)}
            """,
            record_id,
            *[values[name] for name in names],
        )
    except asyncpg.IntegrityConstraintViolationError as exc:
        raise _constraint_error(exc) from exc


async def delete(db: Database, collection: query.Collection, record_id: int) -> bool:
    row = await db.fetch_one(
        f"DELETE FROM {_q(collection.table)} WHERE id = $1 RETURNING id",
        record_id,
    )
    return row is not None


async def flip_boolean(
    db: Database,
    collection: query.Collection,
    record_id: int,
    field: str,
) -> dict[str, Any] | None:
    """
    Negate a boolean column in a single statement. None when not found.
    """
    _check_columns(collection, [field])
    if collection.kind(field) != "bool":
        raise ValueError(f"{collection.table}.{field} is not a boolean column.")
    return await db.fetch_one(
        f"""
        UPDATE {_q(collection.table)}
        SET {_q(field)} = NOT {_q(field)},
            version = version + 1,
            updated_at = now()
        WHERE id = $1
        RETURNING {_columns_sql(collection.visible_columns)}
        """,
        record_id,
    )

"""
Boolean flag toggles.

- `toggle_exclusive_flag`: flip a flag where at most one row per table may be
  true. Clearing the other rows and flipping the target happen in one
  transaction, serialized per (table, flag) with a transaction-scoped
  advisory lock, so two concurrent toggles never both see "nobody is on".
- `toggle_named_field`: flip a caller-chosen flag, restricted to an explicit
  allow-list of column names sharing a prefix.
"""

from __future__ import annotations

import asyncio
import logging
from typing import Any, Container

import asyncpg

from . import crud, query
from .db import Database

logger = logging.getLogger(__name__)


class ToggleError(RuntimeError):
    pass


class InvalidFieldError(ValueError):
    pass


def _q(name: str) -> str:
    return f'"{name}"'


async def toggle_exclusive_flag(
    db: Database,
    collection: query.Collection,
    entity_id: int,
    flag_field: str,
) -> dict[str, Any]:
    """
    Flip `flag_field` on one row, clearing it on every other row first when
    the target is being switched on.

    Raises `crud.RecordNotFound` when the row does not exist and `ToggleError`
    when the transaction fails (nothing is committed in that case).
    """
    if not collection.has(flag_field) or collection.kind(flag_field) != "bool":
        raise ValueError(f"{collection.table}.{flag_field} is not a boolean column.")

    table = _q(collection.table)
    flag = _q(flag_field)
    returning = ", ".join(_q(name) for name in collection.visible_columns)

    try:
        async with db.transaction() as conn:
            await conn.execute(
                "SELECT pg_advisory_xact_lock(hashtext($1))",
                f"{collection.table}.{flag_field}",
            )
            current = await conn.fetchrow(
                f"SELECT id, {flag} AS flag FROM {table} WHERE id = $1 FOR UPDATE",
                entity_id,
            )
            if current is None:
                raise crud.RecordNotFound(entity_id)

            if not current["flag"]:
                await conn.execute(
                    f"""
                    UPDATE {table}
                    SET {flag} = false,
                        version = version + 1,
                        updated_at = now()
                    WHERE {flag} = true
                      AND id <> $1
                    """,
                    entity_id,
                )

            row = await conn.fetchrow(
                f"""
                UPDATE {table}
                SET {flag} = NOT {flag},
                    version = version + 1,
                    updated_at = now()
                WHERE id = $1
                RETURNING {returning}
                """,
                entity_id,
            )
            if row is None:
                raise ToggleError(f"{collection.table} {entity_id} vanished during toggle.")
    except (asyncpg.PostgresError, asyncpg.InterfaceError, OSError, asyncio.TimeoutError) as exc:
        logger.exception(
            "toggle_failed table=%s id=%s field=%s", collection.table, entity_id, flag_field
        )
        raise ToggleError(f"Failed to toggle {collection.table}.{flag_field}.") from exc

    logger.info(
        "toggle_committed table=%s id=%s field=%s value=%s",
        collection.table,
        entity_id,
        flag_field,
        row[flag_field],
    )
    return dict(row)


async def toggle_named_field(
    db: Database,
    collection: query.Collection,
    entity_id: int,
    field_name: str,
    *,
    allowed_prefix: str,
    allowed_fields: Container[str],
) -> dict[str, Any]:
    """
    Flip one boolean column picked by name.

    The name must start with `allowed_prefix` and be one of `allowed_fields`;
    anything else raises `InvalidFieldError` before storage is touched.
    """
    if not field_name.startswith(allowed_prefix):
        raise InvalidFieldError(f'Can only toggle fields that start with "{allowed_prefix}".')
    if field_name not in allowed_fields or not collection.has(field_name):
        raise InvalidFieldError(f'Field "{field_name}" not found in {collection.table}.')

    row = await crud.flip_boolean(db, collection, entity_id, field_name)
    if row is None:
        raise crud.RecordNotFound(entity_id)
    return row

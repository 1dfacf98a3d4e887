"""
Exclusive running-auction invariant against a real PostgreSQL.

Set TEST_DATABASE_URL to a disposable database to run these; the showcase
tables are dropped and recreated from the migration.
"""

import asyncio
import os
from datetime import datetime, timezone
from pathlib import Path

import asyncpg
import pytest
import pytest_asyncio

from auctions.repository import AUCTIONS
from core import crud, toggle
from core.db import Database
from projects.repository import PROJECTS

TEST_DATABASE_URL = os.environ.get("TEST_DATABASE_URL", "").strip()
MIGRATIONS = Path(__file__).resolve().parents[1] / "db" / "migrations"

pytestmark = pytest.mark.skipif(not TEST_DATABASE_URL, reason="TEST_DATABASE_URL is not set")


def _migration_up() -> str:
    parts = []
    for path in sorted(MIGRATIONS.glob("*.sql")):
        text = path.read_text()
        up = text.split("-- migrate:down", 1)[0]
        parts.append(up.replace("-- migrate:up", "", 1))
    return "\n".join(parts)


@pytest_asyncio.fixture
async def db():
    database = Database(TEST_DATABASE_URL, min_size=1, max_size=6)
    await database.connect()
    await database.execute("DROP TABLE IF EXISTS contacts, banners, prices, auctions, projects CASCADE")
    await database.execute(_migration_up())
    try:
        yield database
    finally:
        await database.close()


async def _project(db) -> int:
    row = await crud.insert(
        db,
        PROJECTS,
        {
            "title": "Harbour plots",
            "description": "Waterfront lots",
            "date_start": datetime(2030, 1, 1, tzinfo=timezone.utc),
            "auction_start_time": "10:00",
        },
    )
    return row["id"]


async def _auctions(db, count: int) -> list[int]:
    project_id = await _project(db)
    ids = []
    for i in range(count):
        row = await crud.insert(db, AUCTIONS, {"auction_name": f"Lot {i}", "project_id": project_id})
        ids.append(row["id"])
    return ids


async def _running_ids(db) -> list[int]:
    rows = await db.fetch_all("SELECT id FROM auctions WHERE is_running ORDER BY id")
    return [row["id"] for row in rows]


@pytest.mark.asyncio
async def test_starting_b_stops_a(db):
    a, b = await _auctions(db, 2)
    await toggle.toggle_exclusive_flag(db, AUCTIONS, a, "is_running")
    assert await _running_ids(db) == [a]

    row = await toggle.toggle_exclusive_flag(db, AUCTIONS, b, "is_running")

    assert row["is_running"] is True
    assert await _running_ids(db) == [b]


@pytest.mark.asyncio
async def test_double_toggle_restores_original_state(db):
    a, b = await _auctions(db, 2)
    await toggle.toggle_exclusive_flag(db, AUCTIONS, a, "is_running")

    await toggle.toggle_exclusive_flag(db, AUCTIONS, b, "is_running")
    await toggle.toggle_exclusive_flag(db, AUCTIONS, b, "is_running")

    # A was cleared by the first toggle of B and stays cleared.
    assert await _running_ids(db) == []


@pytest.mark.asyncio
async def test_concurrent_toggles_leave_one_running(db):
    ids = await _auctions(db, 5)

    await asyncio.gather(
        *(toggle.toggle_exclusive_flag(db, AUCTIONS, auction_id, "is_running") for auction_id in ids)
    )

    assert len(await _running_ids(db)) == 1


@pytest.mark.asyncio
async def test_unknown_id(db):
    with pytest.raises(crud.RecordNotFound):
        await toggle.toggle_exclusive_flag(db, AUCTIONS, 123456, "is_running")


@pytest.mark.asyncio
async def test_index_rejects_a_second_running_row(db):
    a, b = await _auctions(db, 2)
    await db.execute("UPDATE auctions SET is_running = true WHERE id = $1", a)

    with pytest.raises(asyncpg.UniqueViolationError):
        await db.execute("UPDATE auctions SET is_running = true WHERE id = $1", b)


@pytest.mark.asyncio
async def test_deleting_a_project_removes_its_auctions(db):
    a, _ = await _auctions(db, 2)
    project_id = (await crud.get_by_id(db, AUCTIONS, a))["project_id"]

    assert await crud.delete(db, PROJECTS, project_id) is True
    assert await db.fetch_val("SELECT count(*) FROM auctions") == 0

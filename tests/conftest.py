"""
Shared fixtures: an in-memory stand-in for `core.db.Database` whose
transaction yields a mocked asyncpg connection.
"""

from contextlib import asynccontextmanager
from unittest.mock import AsyncMock

import pytest


class FakeDatabase:
    """Database double: pool-level helpers and transaction connection are mocks."""

    def __init__(self):
        self.conn = AsyncMock()
        self.fetch_one = AsyncMock(return_value=None)
        self.fetch_all = AsyncMock(return_value=[])
        self.fetch_val = AsyncMock(return_value=None)
        self.execute = AsyncMock(return_value="OK")
        self.transaction_options = []

    @asynccontextmanager
    async def transaction(self, **options):
        self.transaction_options.append(options)
        yield self.conn


@pytest.fixture
def fake_db():
    return FakeDatabase()


@pytest.fixture
def uploads_dir(tmp_path, monkeypatch):
    monkeypatch.setenv("UPLOADS_DIR", str(tmp_path))
    return tmp_path


@pytest.fixture
def media_base(monkeypatch):
    monkeypatch.setenv("MEDIA_BASE_URL", "https://cdn.example.com/uploads/")
    return "https://cdn.example.com/uploads"

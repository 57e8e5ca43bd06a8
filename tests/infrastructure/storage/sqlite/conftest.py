"""Pytest fixtures for SQLite storage tests."""

from collections.abc import AsyncGenerator
from pathlib import Path
from unittest.mock import MagicMock, patch

import pytest

from src.infrastructure.storage.sqlite.migrations.migrator import initialize_database


@pytest.fixture
def temp_db_path(tmp_path: Path) -> Path:
    """Create a temporary database path."""
    return tmp_path / "test.db"


@pytest.fixture
async def initialized_db(temp_db_path: Path) -> Path:
    """Create a temporary database with the real migrations applied."""
    results = await initialize_database(temp_db_path, create_backup_before=False)
    assert all(r.success for r in results)
    return temp_db_path


@pytest.fixture
def mock_settings(temp_db_path: Path):
    """Mock settings with temp database path."""
    mock = MagicMock()
    mock.storage.db_path = temp_db_path
    mock.storage.pool_size = 2
    mock.storage.busy_timeout = 5000
    return mock


@pytest.fixture
async def db_pool(initialized_db: Path, mock_settings) -> AsyncGenerator[Path, None]:
    """Route the global connection pool to the migrated temp database."""
    import src.infrastructure.storage.sqlite.connection as conn_module

    conn_module._pool = None
    mock_settings.storage.db_path = initialized_db

    with patch.object(conn_module, "get_settings", return_value=mock_settings):
        yield initialized_db
        await conn_module.close_pool()

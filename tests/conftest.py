"""Pytest configuration and fixtures."""

from collections.abc import AsyncGenerator, Generator
from pathlib import Path
from unittest.mock import MagicMock, patch

import pytest

import src.infrastructure.storage.sqlite.connection as conn_module
from src.application.services import reset_services
from src.infrastructure.channel import reset_channel_client
from src.infrastructure.storage.sqlite.migrations import initialize_database


@pytest.fixture(autouse=True)
def _reset_singletons() -> Generator[None, None, None]:
    """Drop cached service instances between tests."""
    yield
    reset_services()
    reset_channel_client()


@pytest.fixture
def temp_db_path(tmp_path: Path) -> Path:
    """Create a temporary database path."""
    return tmp_path / "test.db"


@pytest.fixture
def mock_settings(temp_db_path: Path):
    """Mock settings with temp database path."""
    mock = MagicMock()
    mock.storage.db_path = temp_db_path
    mock.storage.pool_size = 2
    mock.storage.busy_timeout = 5000
    return mock


@pytest.fixture
async def migrated_db(temp_db_path: Path) -> Path:
    """Temporary database with every migration applied."""
    results = await initialize_database(db_path=temp_db_path, create_backup_before=False)
    assert results and all(r.success for r in results)
    return temp_db_path


@pytest.fixture
async def sqlite_db(migrated_db: Path, mock_settings) -> AsyncGenerator[Path, None]:
    """Point the global connection pool at a freshly migrated database."""
    conn_module._pool = None
    with patch.object(conn_module, "get_settings", return_value=mock_settings):
        try:
            yield migrated_db
        finally:
            await conn_module.close_pool()

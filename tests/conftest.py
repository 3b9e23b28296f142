"""Pytest fixtures for Log Manager tests."""

import os

import pytest
import pytest_asyncio
from sqlalchemy.ext.asyncio import async_sessionmaker, create_async_engine

# Set database URL before any package imports to avoid using the real DB
os.environ["LOG_MANAGER_DATABASE_URL"] = "sqlite+aiosqlite:///:memory:"

from log_manager.config import StorageType, settings  # noqa: E402
from log_manager.context import RequestContext  # noqa: E402
from log_manager.manager import LogManager  # noqa: E402
from tests.fakes import CapturingRecorder, FakeHost  # noqa: E402


def pytest_configure(config):
    """Register the asyncio marker."""
    config.addinivalue_line(
        "markers", "asyncio: mark test as async"
    )


@pytest.fixture
def host():
    return FakeHost()


@pytest.fixture
def recorder():
    return CapturingRecorder()


@pytest.fixture
def manager(host, recorder):
    return LogManager(host, recorder=recorder)


@pytest.fixture
def ctx():
    return RequestContext(ip_address="203.0.113.7", user_id=1)


@pytest.fixture
def storage_settings(monkeypatch, tmp_path):
    """Point storage at a temporary directory and restore afterwards."""
    monkeypatch.setattr(settings, "storage_type", StorageType.DATABASE)
    monkeypatch.setattr(settings, "file_path", str(tmp_path / "logs"))
    return settings


@pytest_asyncio.fixture(scope="function")
async def test_db(tmp_path):
    """Create a fresh file-backed SQLite database for each test.

    Patches the database module's engine and session factory, which the
    sink and repository look up at call time, and restores them afterwards.
    """
    from log_manager.database import Base
    import log_manager.database as db_module

    original_factory = db_module.async_session_factory
    original_engine = db_module.engine

    db_path = tmp_path / "test.db"
    test_engine = create_async_engine(
        f"sqlite+aiosqlite:///{db_path}",
        connect_args={"check_same_thread": False},
        echo=False,
    )

    async with test_engine.begin() as conn:
        await conn.run_sync(Base.metadata.create_all)

    test_factory = async_sessionmaker(test_engine, expire_on_commit=False)
    db_module.async_session_factory = test_factory
    db_module.engine = test_engine

    yield test_factory

    db_module.async_session_factory = original_factory
    db_module.engine = original_engine
    await test_engine.dispose()

"""
Pytest configuration and fixtures for tests.

This file is automatically loaded by pytest and provides shared fixtures
and configuration for all tests.
"""

import sys
import os

import pytest
import pytest_asyncio
from sqlalchemy.ext.asyncio import create_async_engine, AsyncSession, async_sessionmaker

# Add parent directory to Python path so tests can import modules
sys.path.insert(0, os.path.abspath(os.path.join(os.path.dirname(__file__), '..')))

# Environment must be in place before config is imported anywhere
import test_config  # noqa: E402,F401

from db import make_session_factory, session_commit  # noqa: E402
from models import Base  # noqa: E402


# ============================================================================
# Database Fixtures
# ============================================================================

@pytest_asyncio.fixture
async def test_engine(tmp_path):
    """
    Create test database engine.

    A file per test instead of :memory: so concurrent sessions (catalog gather,
    dashboard tasks) each get their own connection to the same data.
    """
    engine = create_async_engine(
        f"sqlite+aiosqlite:///{tmp_path / 'monetizepro_test.db'}",
        echo=False
    )

    async with engine.begin() as conn:
        await conn.run_sync(Base.metadata.create_all)

    yield engine

    # Cleanup
    await engine.dispose()


@pytest.fixture
def session_factory(test_engine):
    """Session factory the services take instead of db.get_db_session."""
    return make_session_factory(
        async_sessionmaker(test_engine, class_=AsyncSession, expire_on_commit=False)
    )


@pytest_asyncio.fixture
async def test_session(session_factory):
    """Create test database session."""
    async with session_factory() as session:
        yield session
        await session.rollback()


@pytest_asyncio.fixture
async def catalog_ids(session_factory):
    """Seed products, articles and plans. Returns created ids per collection."""
    from scripts.seed_catalog import seed

    async with session_factory() as session:
        created = await seed(session)
        await session_commit(session)
    return created


# ============================================================================
# Identity / Shell Fixtures
# ============================================================================

@pytest.fixture
def identity(session_factory):
    """Identity provider with its own event bus, isolated per test."""
    from services.identity import IdentityProvider
    from services.session_events import SessionEventBus

    return IdentityProvider(session_factory=session_factory, event_bus=SessionEventBus())


@pytest_asyncio.fixture
async def shell(identity, session_factory, catalog_ids):
    """Mounted anonymous view shell over a seeded catalog."""
    from services.shell import ViewShell

    view_shell = ViewShell(identity, session_factory)
    await view_shell.mount()
    yield view_shell
    await view_shell.unmount()


@pytest_asyncio.fixture
async def signed_in_shell(shell):
    """Shell with a freshly registered user signed in."""
    await shell.sign_up("jane@example.com", "secret123", "Jane Doe")
    return shell

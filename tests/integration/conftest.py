# Copyright (c) 2026 Multitenant Contributors. All Rights Reserved.

"""
Integration test fixtures — in-memory SQLite through the async engine.

Models are declared in the test modules on the shared Base; tables are
created from Base.metadata for every test and dropped afterwards.
"""

import pytest
from sqlalchemy.ext.asyncio import create_async_engine
from sqlalchemy.pool import StaticPool

from multitenant.storage.database import (
    close_db,
    create_all_tables,
    drop_all_tables,
    get_session_factory,
    override_engine_for_test,
)


@pytest.fixture
async def db_engine():
    """Single-connection SQLite engine shared by fixtures and the app."""
    engine = create_async_engine(
        "sqlite+aiosqlite://",
        poolclass=StaticPool,
    )
    override_engine_for_test(engine)
    await create_all_tables()
    yield engine
    await drop_all_tables()
    await close_db()


@pytest.fixture
async def db_session(db_engine):
    factory = get_session_factory()
    async with factory() as session:
        yield session

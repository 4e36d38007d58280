# Copyright (c) 2026 Multitenant Contributors. All Rights Reserved.

"""
Database Connection Management — Async SQLAlchemy 2.0.

Also wires a TenantScope into a session so new tenant-scoped rows are
stamped before their INSERT is generated.
"""

from __future__ import annotations

import logging
from typing import Any, AsyncGenerator, Optional

from sqlalchemy import event, text
from sqlalchemy.ext.asyncio import (
    AsyncEngine,
    AsyncSession,
    async_sessionmaker,
    create_async_engine,
)
from sqlalchemy.orm import DeclarativeBase, Session

from multitenant.core.config import settings
from multitenant.orm.model import is_tenant_scoped
from multitenant.scope.tenant_scope import TenantScope

logger = logging.getLogger("multitenant.storage")

_LISTENER_KEY = "tenant_scope_listener"


class Base(DeclarativeBase):
    """SQLAlchemy declarative base for all ORM models."""
    pass


# ── Engine & Session Factory ────────────────────────────────

_engine: Optional[AsyncEngine] = None
_session_factory: Optional[async_sessionmaker[AsyncSession]] = None


def get_engine() -> AsyncEngine:
    """Get or create the async engine singleton."""
    global _engine
    if _engine is None:
        _engine = create_async_engine(
            settings.DATABASE_URL,
            pool_size=20,
            max_overflow=5,
            echo=settings.DB_ECHO,
        )
    return _engine


def get_session_factory() -> async_sessionmaker[AsyncSession]:
    """Get or create the session factory singleton."""
    global _session_factory
    if _session_factory is None:
        _session_factory = async_sessionmaker(
            bind=get_engine(),
            class_=AsyncSession,
            expire_on_commit=False,
            autocommit=False,
            autoflush=False,
        )
    return _session_factory


async def get_db() -> AsyncGenerator[AsyncSession, None]:
    """FastAPI dependency: yields an async DB session."""
    factory = get_session_factory()
    async with factory() as session:
        try:
            yield session
            await session.commit()
        except Exception:
            await session.rollback()
            raise
        finally:
            await session.close()


# ── Creation hook ───────────────────────────────────────────

def bind_tenant_scope(session: Any, scope: TenantScope) -> None:
    """
    Stamp pending tenant-scoped objects via ``scope.creating`` on every flush.

    Accepts an AsyncSession or a plain Session. Binding again replaces
    the previous scope.
    """
    sync_session: Session = getattr(session, "sync_session", session)
    unbind_tenant_scope(sync_session)

    def _before_flush(flushing: Session, flush_context, instances) -> None:
        for obj in list(flushing.new):
            if is_tenant_scoped(obj):
                scope.creating(obj)

    event.listen(sync_session, "before_flush", _before_flush)
    sync_session.info[_LISTENER_KEY] = _before_flush


def unbind_tenant_scope(session: Any) -> None:
    sync_session: Session = getattr(session, "sync_session", session)
    listener = sync_session.info.pop(_LISTENER_KEY, None)
    if listener is not None:
        event.remove(sync_session, "before_flush", listener)


# ── Lifecycle ───────────────────────────────────────────────

async def init_db() -> None:
    """Verify database connection on startup."""
    engine = get_engine()
    async with engine.begin() as conn:
        await conn.execute(text("SELECT 1"))
    logger.info("Database connection verified")


async def close_db() -> None:
    """Dispose engine on shutdown."""
    global _engine, _session_factory
    if _engine is not None:
        await _engine.dispose()
        _engine = None
        _session_factory = None


async def create_all_tables() -> None:
    """Create all tables from ORM metadata (dev/test use)."""
    engine = get_engine()
    async with engine.begin() as conn:
        await conn.run_sync(Base.metadata.create_all)


async def drop_all_tables() -> None:
    """Drop all tables (test cleanup only)."""
    engine = get_engine()
    async with engine.begin() as conn:
        await conn.run_sync(Base.metadata.drop_all)


# ── Test Support ────────────────────────────────────────────

def override_engine_for_test(engine: AsyncEngine) -> None:
    """Inject a test engine (e.g. SQLite in-memory)."""
    global _engine, _session_factory
    _engine = engine
    _session_factory = async_sessionmaker(
        bind=engine,
        class_=AsyncSession,
        expire_on_commit=False,
    )

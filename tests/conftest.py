# tests/conftest.py
from __future__ import annotations

import os
from pathlib import Path
from typing import AsyncGenerator

import httpx
import pytest
import pytest_asyncio
from sqlalchemy.ext.asyncio import AsyncEngine, AsyncSession, async_sessionmaker, create_async_engine
from sqlalchemy.pool import StaticPool

# ============================================================
# ★ 在 import app.main 之前指定读库：内存 SQLite（aiosqlite）
# ============================================================
os.environ.setdefault("PORTAL_DATABASE_URL", "sqlite+aiosqlite:///:memory:")
os.environ.setdefault("PORTAL_ENV", "test")

from app.api.deps import get_session  # noqa: E402
from app.db.base import Base, init_models  # noqa: E402
from app.main import app  # noqa: E402

TEST_DATABASE_URL = "sqlite+aiosqlite:///:memory:"


# =========================================
# 每用例独立内存库（StaticPool：同一连接，表不丢）
# =========================================
@pytest_asyncio.fixture(scope="function")
async def async_engine() -> AsyncGenerator[AsyncEngine, None]:
    engine = create_async_engine(
        TEST_DATABASE_URL,
        poolclass=StaticPool,
        connect_args={"check_same_thread": False},
        future=True,
    )
    init_models()
    async with engine.begin() as conn:
        await conn.run_sync(Base.metadata.create_all)
    try:
        yield engine
    finally:
        await engine.dispose()


@pytest.fixture(scope="function")
def async_session_maker(async_engine: AsyncEngine) -> async_sessionmaker[AsyncSession]:
    return async_sessionmaker(async_engine, class_=AsyncSession, expire_on_commit=False)


@pytest_asyncio.fixture(scope="function")
async def session(async_session_maker) -> AsyncGenerator[AsyncSession, None]:
    """
    标准 Session（自动 commit / rollback）
    """
    async with async_session_maker() as sess:
        try:
            yield sess
            if sess.in_transaction():
                await sess.commit()
        except Exception:
            if sess.in_transaction():
                await sess.rollback()
            raise


# =========================================
# 不可达读库：指向不存在目录下的 SQLite 文件，连接即失败
# =========================================
@pytest_asyncio.fixture(scope="function")
async def broken_session_maker(tmp_path: Path) -> AsyncGenerator[async_sessionmaker[AsyncSession], None]:
    missing = tmp_path / "no-such-dir" / "orders.db"
    engine = create_async_engine(f"sqlite+aiosqlite:///{missing}", future=True)
    try:
        yield async_sessionmaker(engine, class_=AsyncSession, expire_on_commit=False)
    finally:
        await engine.dispose()


@pytest_asyncio.fixture
async def broken_session(broken_session_maker) -> AsyncGenerator[AsyncSession, None]:
    async with broken_session_maker() as sess:
        yield sess


# =========================================
# FastAPI / httpx AsyncClient
# =========================================
def _override_session(maker: async_sessionmaker[AsyncSession]):
    async def _dep() -> AsyncGenerator[AsyncSession, None]:
        async with maker() as sess:
            yield sess

    return _dep


@pytest_asyncio.fixture(scope="function")
async def client(async_session_maker) -> AsyncGenerator[httpx.AsyncClient, None]:
    app.dependency_overrides[get_session] = _override_session(async_session_maker)
    transport = httpx.ASGITransport(app=app)
    try:
        async with httpx.AsyncClient(transport=transport, base_url="http://testserver") as c:
            yield c
    finally:
        app.dependency_overrides.pop(get_session, None)


@pytest_asyncio.fixture(scope="function")
async def broken_client(broken_session_maker) -> AsyncGenerator[httpx.AsyncClient, None]:
    app.dependency_overrides[get_session] = _override_session(broken_session_maker)
    transport = httpx.ASGITransport(app=app)
    try:
        async with httpx.AsyncClient(transport=transport, base_url="http://testserver") as c:
            yield c
    finally:
        app.dependency_overrides.pop(get_session, None)

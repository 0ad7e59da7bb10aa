"""测试配置和 fixtures."""

from collections.abc import AsyncGenerator

import pytest
import pytest_asyncio
from sqlalchemy.ext.asyncio import AsyncSession, async_sessionmaker, create_async_engine
from sqlalchemy.pool import StaticPool
from sqlmodel import SQLModel

from fakes import (
    FakeFeedSource,
    FakeNotifier,
    FakeTagResolver,
    InMemoryWatermarkStore,
)
from tagwatch.models import database  # noqa: F401  注册表结构


@pytest.fixture
def feed_source() -> FakeFeedSource:
    """订阅源."""
    return FakeFeedSource()


@pytest.fixture
def tag_resolver() -> FakeTagResolver:
    """标签解析."""
    return FakeTagResolver()


@pytest.fixture
def notifier() -> FakeNotifier:
    """通知."""
    return FakeNotifier()


@pytest.fixture
def store() -> InMemoryWatermarkStore:
    """水位线存储."""
    return InMemoryWatermarkStore()


@pytest_asyncio.fixture
async def session_factory() -> AsyncGenerator[async_sessionmaker[AsyncSession], None]:
    """创建测试用的内存数据库会话工厂."""
    engine = create_async_engine(
        "sqlite+aiosqlite:///:memory:",
        echo=False,
        poolclass=StaticPool,
    )

    async with engine.begin() as conn:
        await conn.run_sync(SQLModel.metadata.create_all)

    yield async_sessionmaker(
        engine,
        class_=AsyncSession,
        expire_on_commit=False,
    )

    await engine.dispose()


@pytest_asyncio.fixture
async def async_session(
    session_factory: async_sessionmaker[AsyncSession],
) -> AsyncGenerator[AsyncSession, None]:
    """创建测试用的数据库会话."""
    async with session_factory() as session:
        yield session

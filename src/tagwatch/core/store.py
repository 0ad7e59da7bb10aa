"""水位线存储."""

import logging
from abc import ABC, abstractmethod

from sqlalchemy import delete
from sqlalchemy.exc import SQLAlchemyError
from sqlalchemy.ext.asyncio import AsyncSession, async_sessionmaker
from sqlmodel import select

from tagwatch.core.diff import as_utc
from tagwatch.core.errors import StoreError
from tagwatch.models.entry import Watermark
from tagwatch.models.watermark import LastSeenPost

logger = logging.getLogger(__name__)


class WatermarkStore(ABC):
    """单条水位线记录的读写接口."""

    @abstractmethod
    async def get(self) -> Watermark | None:
        """读取水位线，不存在时返回 None."""
        ...

    @abstractmethod
    async def set(self, watermark: Watermark) -> None:
        """原子替换水位线."""
        ...


class SQLWatermarkStore(WatermarkStore):
    """基于 last_seen_post 表的水位线存储."""

    def __init__(self, session_factory: async_sessionmaker[AsyncSession]) -> None:
        self._session_factory = session_factory

    async def get(self) -> Watermark | None:
        """读取最新的一条记录."""
        stmt = select(LastSeenPost).order_by(LastSeenPost.pub_date.desc()).limit(1)
        try:
            async with self._session_factory() as session:
                result = await session.execute(stmt)
                row = result.scalar_one_or_none()
        except SQLAlchemyError as e:
            msg = f"读取水位线失败: {e}"
            raise StoreError(msg) from e

        if row is None:
            return None

        # 部分 SQLModel 版本读回的时间不带时区
        return Watermark(id=row.cf_guid, published_at=as_utc(row.pub_date))

    async def set(self, watermark: Watermark) -> None:
        """先清空表再写入，在同一事务中完成."""
        row = LastSeenPost(
            cf_guid=watermark.id,
            pub_date=as_utc(watermark.published_at),
        )
        try:
            async with self._session_factory() as session:
                try:
                    await session.execute(delete(LastSeenPost))
                    session.add(row)
                    await session.commit()
                except SQLAlchemyError:
                    await session.rollback()
                    raise
        except SQLAlchemyError as e:
            msg = f"写入水位线失败: {watermark.id} - {e}"
            raise StoreError(msg) from e

        logger.info(f"水位线已更新: {watermark.id} ({watermark.published_at.isoformat()})")

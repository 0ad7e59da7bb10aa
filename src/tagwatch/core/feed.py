"""订阅源抓取与解析."""

import asyncio
import logging
from abc import ABC, abstractmethod
from datetime import UTC, datetime
from typing import Any

import feedparser
import httpx

from tagwatch.core.errors import FetchError
from tagwatch.models.entry import Entry

logger = logging.getLogger(__name__)


class FeedSource(ABC):
    """订阅源抽象基类."""

    @abstractmethod
    async def fetch(self) -> list[Entry]:
        """抓取订阅源，返回按最新在前排列的条目."""
        ...

    async def close(self) -> None:
        """释放资源."""


class RSSFeedSource(FeedSource):
    """通过 HTTP 拉取 RSS/Atom 订阅源."""

    def __init__(
        self,
        feed_url: str,
        client: httpx.AsyncClient | None = None,
        timeout: float = 30.0,
        user_agent: str | None = None,
    ) -> None:
        self.feed_url = feed_url
        self._owns_client = client is None
        self._client = client or httpx.AsyncClient(
            timeout=timeout,
            follow_redirects=True,
            headers={"User-Agent": user_agent} if user_agent else None,
        )

    async def close(self) -> None:
        """关闭客户端."""
        if self._owns_client:
            await self._client.aclose()

    async def fetch(self) -> list[Entry]:
        """抓取并解析订阅源."""
        try:
            response = await self._client.get(self.feed_url)
            response.raise_for_status()
        except (httpx.HTTPError, httpx.InvalidURL) as e:
            msg = f"订阅源请求失败: {self.feed_url} - {e}"
            raise FetchError(msg) from e

        # feedparser 是同步库，放到线程池中解析
        loop = asyncio.get_running_loop()
        parsed = await loop.run_in_executor(None, feedparser.parse, response.content)

        if parsed.bozo and not parsed.entries:
            msg = f"订阅源解析失败: {self.feed_url} - {parsed.get('bozo_exception')}"
            raise FetchError(msg)

        entries = [self._parse_entry(item) for item in parsed.entries]
        logger.info(f"订阅源共 {len(entries)} 个条目: {self.feed_url}")
        return entries

    def _parse_entry(self, item: dict[str, Any]) -> Entry:
        """解析单个条目."""
        link = item.get("link")
        if not link:
            msg = f"条目缺少链接: {item.get('title', '无标题')}"
            raise FetchError(msg)

        published = item.get("published_parsed") or item.get("updated_parsed")
        if not published:
            msg = f"条目缺少发布时间: {item.get('title', '无标题')}"
            raise FetchError(msg)

        # 提取正文：优先 content:encoded
        contents = item.get("content") or []
        body = contents[0].get("value", "") if contents else item.get("summary", "")

        return Entry(
            id=item.get("id") or link,
            title=item.get("title", "无标题"),
            link=link,
            published_at=datetime(*published[:6], tzinfo=UTC),
            body=body,
        )

"""文章标签解析."""

from abc import ABC, abstractmethod

import httpx
from bs4 import BeautifulSoup

from tagwatch.core.errors import ResolutionError

# 文章标签位于 <meta property="article:tag" content="...">
TAG_META_PROPERTY = "article:tag"


class TagResolver(ABC):
    """标签解析抽象基类."""

    @abstractmethod
    async def resolve(self, link: str) -> frozenset[str]:
        """返回文章页面声明的标签集合."""
        ...

    async def close(self) -> None:
        """释放资源."""


def extract_tags(html: str) -> frozenset[str]:
    """
    从 HTML 中提取文章标签.

    Args:
        html: 页面 HTML

    Returns:
        标签集合，没有标签时为空集合
    """
    if not html:
        return frozenset()

    soup = BeautifulSoup(html, "lxml")
    tags: set[str] = set()
    for meta in soup.find_all("meta", attrs={"property": TAG_META_PROPERTY}):
        content = meta.get("content")
        # 确保是字符串
        if isinstance(content, list):
            content = content[0] if content else None
        if content and content.strip():
            tags.add(content.strip())

    return frozenset(tags)


class HTMLTagResolver(TagResolver):
    """抓取文章页面并读取 meta 标签."""

    def __init__(
        self,
        client: httpx.AsyncClient | None = None,
        timeout: float = 30.0,
        user_agent: str | None = None,
    ) -> None:
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

    async def resolve(self, link: str) -> frozenset[str]:
        """抓取页面并解析标签."""
        try:
            response = await self._client.get(link)
            response.raise_for_status()
        except (httpx.HTTPError, httpx.InvalidURL) as e:
            msg = f"文章页面请求失败: {link} - {e}"
            raise ResolutionError(msg) from e

        return extract_tags(response.text)

"""通知发送."""

from abc import ABC, abstractmethod

import httpx

from tagwatch.core.errors import DeliveryError
from tagwatch.models.entry import Notification


class Notifier(ABC):
    """通知发送抽象基类."""

    @abstractmethod
    async def notify(self, notification: Notification) -> None:
        """发送一条通知."""
        ...

    async def close(self) -> None:
        """释放资源."""


class WebhookNotifier(Notifier):
    """以 JSON POST 调用 webhook."""

    def __init__(
        self,
        webhook_url: str,
        client: httpx.AsyncClient | None = None,
        timeout: float = 30.0,
        user_agent: str | None = None,
    ) -> None:
        self.webhook_url = webhook_url
        self._owns_client = client is None
        self._client = client or httpx.AsyncClient(
            timeout=timeout,
            headers={"User-Agent": user_agent} if user_agent else None,
        )

    async def close(self) -> None:
        """关闭客户端."""
        if self._owns_client:
            await self._client.aclose()

    async def notify(self, notification: Notification) -> None:
        """发送 {"title", "url"} 到 webhook."""
        try:
            response = await self._client.post(
                self.webhook_url,
                json=notification.model_dump(),
            )
            response.raise_for_status()
        except (httpx.HTTPError, httpx.InvalidURL) as e:
            msg = f"webhook 调用失败: {notification.url} - {e}"
            raise DeliveryError(msg) from e

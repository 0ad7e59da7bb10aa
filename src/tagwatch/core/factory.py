"""RunCoordinator 工厂."""

from sqlalchemy.ext.asyncio import AsyncSession, async_sessionmaker

from tagwatch.config import Settings
from tagwatch.core.coordinator import RunCoordinator
from tagwatch.core.feed import RSSFeedSource
from tagwatch.core.notifier import WebhookNotifier
from tagwatch.core.store import SQLWatermarkStore
from tagwatch.core.tags import HTMLTagResolver


def create_coordinator(
    settings: Settings,
    session_factory: async_sessionmaker[AsyncSession],
) -> RunCoordinator:
    """根据配置创建 RunCoordinator."""
    timeout = float(settings.request_timeout_seconds)

    return RunCoordinator(
        feed_source=RSSFeedSource(
            settings.feed_url,
            timeout=timeout,
            user_agent=settings.user_agent,
        ),
        tag_resolver=HTMLTagResolver(timeout=timeout, user_agent=settings.user_agent),
        notifier=WebhookNotifier(
            settings.webhook_url,
            timeout=timeout,
            user_agent=settings.user_agent,
        ),
        store=SQLWatermarkStore(session_factory),
        subscribed_tags=settings.subscription(),
        concurrency=settings.process_concurrency,
    )


# 全局实例（应用启动时创建）
_coordinator: RunCoordinator | None = None


def set_coordinator(coordinator: RunCoordinator | None) -> None:
    """设置全局 RunCoordinator."""
    global _coordinator
    _coordinator = coordinator


def get_coordinator() -> RunCoordinator | None:
    """获取全局 RunCoordinator."""
    return _coordinator

"""应用配置管理."""

import json
from functools import lru_cache

from pydantic_settings import BaseSettings, SettingsConfigDict


class Settings(BaseSettings):
    """应用配置（环境变量）."""

    model_config = SettingsConfigDict(
        env_file=".env",
        env_file_encoding="utf-8",
        extra="ignore",
    )

    # 订阅源配置
    feed_url: str = "https://blog.cloudflare.com/rss/"

    # 通知配置
    webhook_url: str = ""

    # 订阅标签：JSON 数组或逗号分隔
    subscribed_tags: str = ""

    # 应用配置
    database_url: str = "sqlite+aiosqlite:///./tagwatch.db"
    poll_interval_minutes: int = 15
    scheduler_enabled: bool = True

    # 抓取配置
    request_timeout_seconds: int = 30
    process_concurrency: int = 1
    user_agent: str = "TagWatch/0.1 (+https://github.com/tagwatch/tagwatch)"

    def subscription(self) -> frozenset[str]:
        """解析订阅标签集合."""
        raw = self.subscribed_tags.strip()
        if not raw:
            return frozenset()

        if raw.startswith("["):
            values = json.loads(raw)
        else:
            values = raw.split(",")

        return frozenset(str(v).strip() for v in values if str(v).strip())


@lru_cache
def get_settings() -> Settings:
    """获取应用配置（带缓存）."""
    return Settings()

"""TagWatch 主应用入口."""

import logging
from collections.abc import AsyncIterator
from contextlib import asynccontextmanager

from fastapi import FastAPI

from tagwatch.api import runs
from tagwatch.config import get_settings
from tagwatch.core.factory import create_coordinator, get_coordinator, set_coordinator
from tagwatch.models.database import close_db, init_db
from tagwatch.scheduler import create_scheduler, shutdown_scheduler

# 配置日志
logging.basicConfig(
    level=logging.INFO,
    format="%(asctime)s - %(name)s - %(levelname)s - %(message)s",
)
logger = logging.getLogger(__name__)


@asynccontextmanager
async def lifespan(app: FastAPI) -> AsyncIterator[None]:
    """应用生命周期管理."""
    app_settings = get_settings()

    # 启动时初始化
    logger.info("正在初始化数据库...")
    session_factory = await init_db(app_settings.database_url)

    if not app_settings.webhook_url:
        logger.warning("webhook 未配置，匹配的文章将无法通知")
    if not app_settings.subscription():
        logger.warning("订阅标签为空，不会有文章匹配")

    set_coordinator(create_coordinator(app_settings, session_factory))

    if app_settings.scheduler_enabled:
        logger.info("正在启动定时任务...")
        create_scheduler(app_settings)

    logger.info("TagWatch 启动完成！")
    yield

    # 关闭时清理
    logger.info("正在关闭...")
    await shutdown_scheduler()
    coordinator = get_coordinator()
    if coordinator:
        await coordinator.close()
        set_coordinator(None)
    await close_db()
    logger.info("TagWatch 已关闭")


app = FastAPI(
    title="TagWatch",
    description="订阅源标签监控 - 新文章匹配订阅标签时发送 webhook 通知",
    version="0.1.0",
    lifespan=lifespan,
)

# 注册路由
app.include_router(runs.router)


@app.get("/")
async def root() -> dict:
    """根路径."""
    return {
        "name": "TagWatch",
        "version": "0.1.0",
        "description": "订阅源标签监控",
    }


@app.get("/health")
async def health() -> dict:
    """健康检查."""
    return {"status": "ok"}


if __name__ == "__main__":
    import uvicorn

    uvicorn.run(
        "tagwatch.main:app",
        host="0.0.0.0",
        port=8000,
    )

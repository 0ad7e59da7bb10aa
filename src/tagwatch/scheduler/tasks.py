"""定时任务定义."""

import logging

from apscheduler.schedulers.asyncio import AsyncIOScheduler
from sqlalchemy.exc import SQLAlchemyError
from sqlalchemy.ext.asyncio import AsyncSession, async_sessionmaker

from tagwatch.config import Settings
from tagwatch.core.coordinator import RunCoordinator, RunResult
from tagwatch.core.errors import WatermarkPersistError
from tagwatch.core.history import record_run

logger = logging.getLogger(__name__)

_scheduler: AsyncIOScheduler | None = None


async def _save_history(
    session_factory: async_sessionmaker[AsyncSession],
    result: RunResult,
) -> None:
    """保存运行记录，失败不影响运行结果."""
    try:
        async with session_factory() as session:
            await record_run(session, result)
    except SQLAlchemyError as e:
        logger.warning(f"运行记录保存失败: {result.run_id} - {e}")


async def run_and_record(
    coordinator: RunCoordinator,
    session_factory: async_sessionmaker[AsyncSession],
) -> RunResult:
    """执行一次轮询并保存运行记录."""
    try:
        result = await coordinator.run_once()
    except WatermarkPersistError as e:
        await _save_history(session_factory, e.result)
        raise

    await _save_history(session_factory, result)
    return result


async def poll_task() -> None:
    """轮询任务：查找新文章并发送通知."""
    from tagwatch.core.factory import get_coordinator
    from tagwatch.models.database import async_session_maker

    coordinator = get_coordinator()
    if coordinator is None:
        logger.warning("RunCoordinator 未初始化，跳过轮询")
        return

    # 已有运行中的任务时合并本次触发
    if coordinator.is_running:
        logger.info("已有轮询任务在运行，跳过本次调度")
        return

    try:
        result = await run_and_record(coordinator, async_session_maker())
        logger.info(
            f"轮询结束: 状态={result.status}, 新条目={result.seen}, "
            f"通知={result.notified}"
        )
    except Exception as e:
        logger.exception(f"轮询任务失败: {e}")


def create_scheduler(settings: Settings) -> AsyncIOScheduler:
    """创建并启动定时任务调度器."""
    global _scheduler

    _scheduler = AsyncIOScheduler()

    _scheduler.add_job(
        poll_task,
        "interval",
        minutes=settings.poll_interval_minutes,
        id="poll_task",
        name="订阅源轮询",
        replace_existing=True,
        max_instances=1,
        coalesce=True,
    )

    # 启动时立即执行一次
    _scheduler.add_job(
        poll_task,
        "date",  # 一次性任务
        id="poll_task_initial",
        name="初始轮询",
    )

    _scheduler.start()
    logger.info(
        f"定时任务调度器已启动，轮询间隔: {settings.poll_interval_minutes} 分钟"
    )

    return _scheduler


async def shutdown_scheduler() -> None:
    """关闭定时任务调度器."""
    global _scheduler
    if _scheduler:
        _scheduler.shutdown(wait=False)
        logger.info("定时任务调度器已关闭")
        _scheduler = None

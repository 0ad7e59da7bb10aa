"""运行记录持久化."""

from sqlalchemy.ext.asyncio import AsyncSession
from sqlmodel import select

from tagwatch.core.coordinator import RunResult
from tagwatch.models.run import RunRecord


def to_record(result: RunResult) -> RunRecord:
    """将运行摘要转换为数据库记录."""
    return RunRecord(
        run_id=result.run_id,
        status=result.status,
        is_bootstrap=result.is_bootstrap,
        feed_size=result.feed_size,
        entries_seen=result.seen,
        entries_matched=result.matched,
        entries_notified=result.notified,
        entries_failed=len(result.failures),
        watermark_advanced=result.watermark_advanced,
        previous_watermark_id=(
            result.previous_watermark.id if result.previous_watermark else None
        ),
        next_watermark_id=result.next_watermark.id if result.next_watermark else None,
        error_message=result.error,
        started_at=result.started_at,
        completed_at=result.completed_at,
    )


async def record_run(session: AsyncSession, result: RunResult) -> RunRecord:
    """保存一次运行记录."""
    record = to_record(result)
    session.add(record)
    await session.commit()
    await session.refresh(record)
    return record


async def list_runs(session: AsyncSession, limit: int = 20) -> list[RunRecord]:
    """获取最近的运行记录."""
    stmt = (
        select(RunRecord)
        .order_by(RunRecord.started_at.desc(), RunRecord.id.desc())
        .limit(limit)
    )
    result = await session.execute(stmt)
    return list(result.scalars().all())

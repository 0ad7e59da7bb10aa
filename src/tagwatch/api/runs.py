"""轮询运行 API."""

from typing import Any

from fastapi import APIRouter, Depends, HTTPException, Query
from sqlalchemy.ext.asyncio import AsyncSession, async_sessionmaker

from tagwatch.core.coordinator import RunCoordinator, RunResult
from tagwatch.core.errors import StoreError, WatermarkPersistError
from tagwatch.core.factory import get_coordinator
from tagwatch.core.history import list_runs
from tagwatch.models.database import async_session_maker, get_session
from tagwatch.scheduler.tasks import run_and_record

router = APIRouter(prefix="/api", tags=["runs"])


def _require_coordinator(
    coordinator: RunCoordinator | None = Depends(get_coordinator),
) -> RunCoordinator:
    if coordinator is None:
        raise HTTPException(status_code=503, detail="RunCoordinator 未初始化")
    return coordinator


def serialize_result(result: RunResult) -> dict[str, Any]:
    """运行摘要转为 JSON."""
    return {
        "run_id": result.run_id,
        "status": result.status,
        "is_bootstrap": result.is_bootstrap,
        "feed_size": result.feed_size,
        "seen": result.seen,
        "matched": result.matched,
        "notified": result.notified,
        "failures": [
            {
                "entry_id": f.entry_id,
                "title": f.title,
                "stage": f.stage,
                "error": f.error,
            }
            for f in result.failures
        ],
        "previous_watermark": (
            result.previous_watermark.model_dump(mode="json")
            if result.previous_watermark
            else None
        ),
        "next_watermark": (
            result.next_watermark.model_dump(mode="json")
            if result.next_watermark
            else None
        ),
        "watermark_advanced": result.watermark_advanced,
        "error": result.error,
        "started_at": result.started_at.isoformat(),
        "completed_at": result.completed_at.isoformat() if result.completed_at else None,
    }


@router.post("/runs")
async def trigger_run(
    coordinator: RunCoordinator = Depends(_require_coordinator),
    session_factory: async_sessionmaker[AsyncSession] = Depends(async_session_maker),
) -> dict:
    """手动触发一次轮询."""
    if coordinator.is_running:
        raise HTTPException(status_code=409, detail="已有轮询任务在运行")

    try:
        result = await run_and_record(coordinator, session_factory)
    except WatermarkPersistError as e:
        raise HTTPException(
            status_code=500,
            detail={"error": str(e), "run": serialize_result(e.result)},
        ) from e

    return serialize_result(result)


@router.get("/runs")
async def get_runs(
    limit: int = Query(20, ge=1, le=100),
    session: AsyncSession = Depends(get_session),
) -> dict:
    """获取最近运行记录."""
    records = await list_runs(session, limit=limit)

    return {
        "items": [
            {
                "id": r.id,
                "run_id": r.run_id,
                "status": r.status,
                "is_bootstrap": r.is_bootstrap,
                "feed_size": r.feed_size,
                "entries_seen": r.entries_seen,
                "entries_matched": r.entries_matched,
                "entries_notified": r.entries_notified,
                "entries_failed": r.entries_failed,
                "watermark_advanced": r.watermark_advanced,
                "next_watermark_id": r.next_watermark_id,
                "error_message": r.error_message,
                "started_at": r.started_at.isoformat(),
                "completed_at": r.completed_at.isoformat() if r.completed_at else None,
            }
            for r in records
        ]
    }


@router.get("/watermark")
async def get_watermark(
    coordinator: RunCoordinator = Depends(_require_coordinator),
) -> dict:
    """获取当前水位线."""
    try:
        watermark = await coordinator.store.get()
    except StoreError as e:
        raise HTTPException(status_code=503, detail=str(e)) from e

    return {"watermark": watermark.model_dump(mode="json") if watermark else None}

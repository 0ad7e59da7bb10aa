"""RunRecord 运行记录模型."""

from datetime import UTC, datetime

from sqlmodel import Field, SQLModel


class RunRecord(SQLModel, table=True):
    """单次轮询运行的摘要."""

    __tablename__ = "run_history"  # type: ignore[assignment]

    id: int | None = Field(default=None, primary_key=True)
    run_id: str = Field(index=True, description="运行 ID")
    status: str = Field(description="状态: completed|aborted")
    is_bootstrap: bool = Field(default=False, description="是否首次运行")
    feed_size: int = Field(default=0, description="订阅源条目数")
    entries_seen: int = Field(default=0, description="新条目数")
    entries_matched: int = Field(default=0, description="匹配订阅标签数")
    entries_notified: int = Field(default=0, description="已通知数")
    entries_failed: int = Field(default=0, description="单条失败数")
    watermark_advanced: bool = Field(default=False, description="水位线是否已更新")
    previous_watermark_id: str | None = Field(default=None)
    next_watermark_id: str | None = Field(default=None)
    error_message: str | None = Field(default=None, description="错误信息")
    started_at: datetime = Field(default_factory=lambda: datetime.now(UTC))
    completed_at: datetime | None = Field(default=None)

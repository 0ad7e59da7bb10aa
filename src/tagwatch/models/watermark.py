"""LastSeenPost 水位线模型."""

from datetime import datetime

from sqlmodel import Field, SQLModel


class LastSeenPost(SQLModel, table=True):
    """最近处理的文章（单行存储）."""

    __tablename__ = "last_seen_post"  # type: ignore[assignment]

    cf_guid: str = Field(primary_key=True, description="条目 guid")
    pub_date: datetime = Field(index=True, description="发布时间（UTC）")

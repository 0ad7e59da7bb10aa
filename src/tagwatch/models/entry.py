"""订阅条目与水位线值对象."""

from datetime import datetime

from pydantic import BaseModel, ConfigDict


class Entry(BaseModel):
    """订阅源中的一个条目（只读）."""

    model_config = ConfigDict(frozen=True)

    id: str  # RSS guid，不透明
    title: str
    link: str
    published_at: datetime
    body: str = ""


class Watermark(BaseModel):
    """最近一次处理到的条目."""

    model_config = ConfigDict(frozen=True)

    id: str
    published_at: datetime

    @classmethod
    def from_entry(cls, entry: Entry) -> "Watermark":
        """由条目生成水位线."""
        return cls(id=entry.id, published_at=entry.published_at)


class Notification(BaseModel):
    """发送给 webhook 的通知内容."""

    title: str
    url: str

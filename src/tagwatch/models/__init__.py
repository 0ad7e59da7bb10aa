"""数据模型."""

from tagwatch.models.database import get_session, init_db
from tagwatch.models.entry import Entry, Notification, Watermark
from tagwatch.models.run import RunRecord
from tagwatch.models.watermark import LastSeenPost

__all__ = [
    "Entry",
    "LastSeenPost",
    "Notification",
    "RunRecord",
    "Watermark",
    "get_session",
    "init_db",
]

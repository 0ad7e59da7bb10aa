"""核心业务逻辑."""

from tagwatch.core.coordinator import (
    EntryFailure,
    EntryOutcome,
    RunCoordinator,
    RunResult,
    RunStatus,
)
from tagwatch.core.diff import DiffResult, select_new_entries
from tagwatch.core.feed import FeedSource, RSSFeedSource
from tagwatch.core.notifier import Notifier, WebhookNotifier
from tagwatch.core.store import SQLWatermarkStore, WatermarkStore
from tagwatch.core.tags import HTMLTagResolver, TagResolver

__all__ = [
    "DiffResult",
    "EntryFailure",
    "EntryOutcome",
    "FeedSource",
    "HTMLTagResolver",
    "Notifier",
    "RSSFeedSource",
    "RunCoordinator",
    "RunResult",
    "RunStatus",
    "SQLWatermarkStore",
    "TagResolver",
    "WatermarkStore",
    "WebhookNotifier",
    "select_new_entries",
]

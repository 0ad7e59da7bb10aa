"""单次轮询运行：读取水位线 → 抓取订阅源 → 对比 → 标签匹配与通知 → 更新水位线."""

import asyncio
import logging
from collections.abc import Iterable, Sequence
from dataclasses import dataclass, field
from datetime import UTC, datetime
from uuid import uuid4

from tagwatch.core.diff import select_new_entries
from tagwatch.core.errors import (
    DeliveryError,
    EmptyFeedError,
    FetchError,
    ResolutionError,
    StoreError,
    WatermarkPersistError,
)
from tagwatch.core.feed import FeedSource
from tagwatch.core.notifier import Notifier
from tagwatch.core.store import WatermarkStore
from tagwatch.core.tags import TagResolver
from tagwatch.models.entry import Entry, Notification, Watermark

logger = logging.getLogger(__name__)


class RunStatus:
    """运行结束状态."""

    COMPLETED = "completed"
    ABORTED = "aborted"


class EntryStage:
    """单条目处理阶段."""

    RESOLVE = "resolve"
    NOTIFY = "notify"


@dataclass
class EntryFailure:
    """单条目失败记录."""

    entry_id: str
    title: str
    stage: str  # resolve | notify
    error: str
    failed_at: datetime = field(default_factory=lambda: datetime.now(UTC))


@dataclass
class EntryOutcome:
    """单条目处理结果."""

    entry: Entry
    tags: frozenset[str] = frozenset()
    matched: bool = False
    notified: bool = False
    failure: EntryFailure | None = None


@dataclass
class RunResult:
    """运行摘要."""

    run_id: str
    status: str = RunStatus.COMPLETED
    is_bootstrap: bool = False
    feed_size: int = 0
    outcomes: list[EntryOutcome] = field(default_factory=list)
    previous_watermark: Watermark | None = None
    next_watermark: Watermark | None = None
    watermark_advanced: bool = False
    error: str | None = None
    started_at: datetime = field(default_factory=lambda: datetime.now(UTC))
    completed_at: datetime | None = None

    @property
    def seen(self) -> int:
        """新条目数."""
        return len(self.outcomes)

    @property
    def matched(self) -> int:
        """匹配订阅标签的条目数."""
        return sum(1 for o in self.outcomes if o.matched)

    @property
    def notified(self) -> int:
        """通知成功的条目数."""
        return sum(1 for o in self.outcomes if o.notified)

    @property
    def failures(self) -> list[EntryFailure]:
        """单条目失败列表."""
        return [o.failure for o in self.outcomes if o.failure is not None]


def _new_run_id() -> str:
    return f"run_{datetime.now(UTC):%Y%m%d%H%M%S}_{uuid4().hex[:6]}"


class RunCoordinator:
    """
    编排一次轮询运行.

    运行只有两种结束状态：aborted（订阅源或存储读取失败，不修改任何状态）
    和 completed（水位线总是前移，通知按条目尽力发送）。
    同一实例上的并发调用会排队执行。
    """

    def __init__(
        self,
        feed_source: FeedSource,
        tag_resolver: TagResolver,
        notifier: Notifier,
        store: WatermarkStore,
        subscribed_tags: Iterable[str],
        concurrency: int = 1,
    ) -> None:
        self.feed_source = feed_source
        self.tag_resolver = tag_resolver
        self.notifier = notifier
        self.store = store
        self.subscribed_tags = frozenset(subscribed_tags)
        self.concurrency = max(1, concurrency)
        self._lock = asyncio.Lock()

    @property
    def is_running(self) -> bool:
        """是否有运行中的任务."""
        return self._lock.locked()

    async def close(self) -> None:
        """关闭所有外部依赖."""
        await self.feed_source.close()
        await self.tag_resolver.close()
        await self.notifier.close()

    async def run_once(self) -> RunResult:
        """执行一次轮询."""
        async with self._lock:
            return await self._run()

    async def _run(self) -> RunResult:
        result = RunResult(run_id=_new_run_id())
        logger.info(
            f"[{result.run_id}] 开始查找新文章，订阅标签: "
            f"{', '.join(sorted(self.subscribed_tags))}"
        )

        # 存储不可用时不抓取，避免基于未知状态行动
        try:
            watermark = await self.store.get()
        except StoreError as e:
            return self._abort(result, str(e))
        result.previous_watermark = watermark

        try:
            feed = await self.feed_source.fetch()
            result.feed_size = len(feed)
            diff = select_new_entries(feed, watermark)
        except (FetchError, EmptyFeedError) as e:
            return self._abort(result, str(e))

        result.is_bootstrap = diff.is_bootstrap
        result.next_watermark = diff.next_watermark

        if diff.is_bootstrap:
            logger.info(f"[{result.run_id}] 首次运行，仅记录最新条目")
        else:
            logger.info(f"[{result.run_id}] 发现 {len(diff.new_entries)} 个新条目")
            result.outcomes = await self._process_entries(diff.new_entries)

        await self._advance(result, diff.next_watermark)
        return result

    def _abort(self, result: RunResult, error: str) -> RunResult:
        result.status = RunStatus.ABORTED
        result.error = error
        result.completed_at = datetime.now(UTC)
        logger.error(f"[{result.run_id}] 运行中止，水位线未改变: {error}")
        return result

    async def _advance(self, result: RunResult, next_watermark: Watermark) -> None:
        """所有条目处理完成后无条件更新水位线."""
        try:
            await self.store.set(next_watermark)
        except StoreError as e:
            result.error = str(e)
            result.completed_at = datetime.now(UTC)
            msg = (
                f"[{result.run_id}] 水位线写入失败，下一次运行将重新处理 "
                f"{result.seen} 个条目并可能重复通知: {e}"
            )
            logger.critical(msg)
            raise WatermarkPersistError(msg, result) from e

        result.watermark_advanced = True
        result.completed_at = datetime.now(UTC)
        logger.info(
            f"[{result.run_id}] 完成: 新条目={result.seen}, 匹配={result.matched}, "
            f"通知={result.notified}, 失败={len(result.failures)}"
        )

    async def _process_entries(self, entries: Sequence[Entry]) -> list[EntryOutcome]:
        """逐条处理新条目，结果保持订阅源顺序."""
        semaphore = asyncio.Semaphore(self.concurrency)
        total = len(entries)

        async def process_with_semaphore(entry: Entry, index: int) -> EntryOutcome:
            async with semaphore:
                return await self._process_entry(entry, index, total)

        tasks = [
            process_with_semaphore(entry, i) for i, entry in enumerate(entries, 1)
        ]
        return list(await asyncio.gather(*tasks))

    async def _process_entry(
        self,
        entry: Entry,
        index: int,
        total: int,
    ) -> EntryOutcome:
        """处理单个条目，失败只记录不抛出."""
        outcome = EntryOutcome(entry=entry)
        prefix = f"[{index}/{total}]"

        try:
            outcome.tags = await self.tag_resolver.resolve(entry.link)
        except Exception as e:
            # 解析失败视为不匹配
            outcome.failure = self._record_failure(prefix, entry, EntryStage.RESOLVE, e)
            return outcome

        matched_tags = outcome.tags & self.subscribed_tags
        if not matched_tags:
            logger.info(f"{prefix} 没有订阅标签，跳过: '{entry.title}'")
            return outcome

        outcome.matched = True
        logger.info(
            f"{prefix} 匹配标签 {', '.join(sorted(matched_tags))}，"
            f"发送通知: '{entry.title}'"
        )

        try:
            await self.notifier.notify(Notification(title=entry.title, url=entry.link))
        except Exception as e:
            outcome.failure = self._record_failure(prefix, entry, EntryStage.NOTIFY, e)
            return outcome

        outcome.notified = True
        return outcome

    def _record_failure(
        self,
        prefix: str,
        entry: Entry,
        stage: str,
        error: Exception,
    ) -> EntryFailure:
        if isinstance(error, ResolutionError | DeliveryError):
            logger.warning(f"{prefix} {stage} 失败: '{entry.title}' - {error}")
        else:
            logger.exception(f"{prefix} {stage} 异常: '{entry.title}' - {error}")

        return EntryFailure(
            entry_id=entry.id,
            title=entry.title,
            stage=stage,
            error=str(error) or type(error).__name__,
        )

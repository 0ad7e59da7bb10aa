"""增量对比 - 根据水位线挑选新条目."""

from collections.abc import Sequence
from dataclasses import dataclass
from datetime import UTC, datetime

from tagwatch.core.errors import EmptyFeedError
from tagwatch.models.entry import Entry, Watermark


@dataclass(frozen=True)
class DiffResult:
    """对比结果."""

    new_entries: tuple[Entry, ...]
    next_watermark: Watermark
    is_bootstrap: bool = False


def as_utc(value: datetime) -> datetime:
    """无时区的时间视为 UTC."""
    if value.tzinfo is None:
        return value.replace(tzinfo=UTC)
    return value.astimezone(UTC)


def select_new_entries(
    feed: Sequence[Entry],
    watermark: Watermark | None,
) -> DiffResult:
    """
    挑选水位线之后发布的条目.

    Args:
        feed: 订阅源条目，按最新在前排列
        watermark: 当前水位线，首次运行时为 None

    Returns:
        DiffResult: 新条目（保持订阅源顺序）和下一个水位线

    下一个水位线总是取 feed[0]，即使没有新条目，也即使 feed[0]
    早于当前水位线。
    """
    if not feed:
        msg = "订阅源为空，无法计算新条目"
        raise EmptyFeedError(msg)

    next_watermark = Watermark.from_entry(feed[0])

    # 首次运行：只记录位置，不通知
    if watermark is None:
        return DiffResult(
            new_entries=(),
            next_watermark=next_watermark,
            is_bootstrap=True,
        )

    # 严格大于：与水位线同一时间的条目视为已处理
    threshold = as_utc(watermark.published_at)
    new_entries = tuple(
        entry for entry in feed if as_utc(entry.published_at) > threshold
    )

    return DiffResult(new_entries=new_entries, next_watermark=next_watermark)

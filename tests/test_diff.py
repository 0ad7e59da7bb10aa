"""测试增量对比."""

from datetime import datetime

import pytest
from fakes import T1, T2, T3, T4, make_entry

from tagwatch.core.diff import select_new_entries
from tagwatch.core.errors import EmptyFeedError
from tagwatch.models.entry import Watermark


class TestBootstrap:
    """测试首次运行."""

    def test_no_watermark_returns_no_entries(self) -> None:
        """没有水位线时不返回新条目，水位线取 feed[0]."""
        feed = [make_entry("a", T3), make_entry("b", T2)]

        result = select_new_entries(feed, None)

        assert result.new_entries == ()
        assert result.next_watermark == Watermark(id="a", published_at=T3)
        assert result.is_bootstrap is True

    def test_single_entry_feed(self) -> None:
        """只有一个条目时同样以其为水位线."""
        result = select_new_entries([make_entry("only", T1)], None)
        assert result.next_watermark.id == "only"


class TestSteadyState:
    """测试常规运行."""

    def test_returns_entries_newer_than_watermark(self) -> None:
        """只返回发布时间晚于水位线的条目."""
        feed = [make_entry("a", T3), make_entry("b", T2)]
        watermark = Watermark(id="b", published_at=T2)

        result = select_new_entries(feed, watermark)

        assert [e.id for e in result.new_entries] == ["a"]
        assert result.next_watermark == Watermark(id="a", published_at=T3)
        assert result.is_bootstrap is False

    def test_preserves_feed_order(self) -> None:
        """新条目保持订阅源顺序."""
        feed = [
            make_entry("d", T4),
            make_entry("c", T3),
            make_entry("b", T2),
            make_entry("a", T1),
        ]
        watermark = Watermark(id="a", published_at=T1)

        result = select_new_entries(feed, watermark)

        assert [e.id for e in result.new_entries] == ["d", "c", "b"]

    def test_compares_timestamps_not_positions(self) -> None:
        """乱序的订阅源按时间过滤，而不是按位置截断."""
        feed = [
            make_entry("c", T3),
            make_entry("a", T1),
            make_entry("d", T4),
            make_entry("b", T2),
        ]
        watermark = Watermark(id="b", published_at=T2)

        result = select_new_entries(feed, watermark)

        assert [e.id for e in result.new_entries] == ["c", "d"]

    def test_equal_timestamp_is_already_seen(self) -> None:
        """与水位线同一时间的条目视为已处理."""
        feed = [make_entry("a", T3), make_entry("twin", T2), make_entry("b", T2)]
        watermark = Watermark(id="b", published_at=T2)

        result = select_new_entries(feed, watermark)

        assert [e.id for e in result.new_entries] == ["a"]

    def test_no_new_entries_still_moves_watermark_to_head(self) -> None:
        """没有新条目时水位线依然取 feed[0]."""
        feed = [make_entry("a", T3), make_entry("b", T2)]
        watermark = Watermark(id="a", published_at=T3)

        result = select_new_entries(feed, watermark)

        assert result.new_entries == ()
        assert result.next_watermark == Watermark(id="a", published_at=T3)

    def test_older_head_moves_watermark_backwards(self) -> None:
        """feed[0] 早于水位线时水位线会后退（保留的已知行为）."""
        feed = [make_entry("old", T1)]
        watermark = Watermark(id="new", published_at=T3)

        result = select_new_entries(feed, watermark)

        assert result.new_entries == ()
        assert result.next_watermark == Watermark(id="old", published_at=T1)

    def test_naive_watermark_treated_as_utc(self) -> None:
        """无时区的水位线按 UTC 比较."""
        feed = [make_entry("a", T3), make_entry("b", T2)]
        watermark = Watermark(id="b", published_at=datetime(2024, 5, 2, 8, 0))

        result = select_new_entries(feed, watermark)

        assert [e.id for e in result.new_entries] == ["a"]

    def test_every_returned_entry_satisfies_filter(self) -> None:
        """返回集合与过滤条件一一对应."""
        times = [T4, T1, T3, T2, T3, T1]
        feed = [make_entry(f"e{i}", t) for i, t in enumerate(times)]
        watermark = Watermark(id="w", published_at=T2)

        result = select_new_entries(feed, watermark)

        expected = [e for e in feed if e.published_at > T2]
        assert list(result.new_entries) == expected


class TestEmptyFeed:
    """测试空订阅源."""

    def test_empty_feed_raises(self) -> None:
        """空订阅源抛出 EmptyFeedError."""
        with pytest.raises(EmptyFeedError):
            select_new_entries([], Watermark(id="a", published_at=T1))

    def test_empty_feed_on_bootstrap_raises(self) -> None:
        """首次运行时空订阅源同样报错."""
        with pytest.raises(EmptyFeedError):
            select_new_entries([], None)

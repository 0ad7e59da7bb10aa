"""错误类型.

中止类（FetchError / EmptyFeedError / 读取时的 StoreError）会终止本次运行且不修改任何状态；
隔离类（ResolutionError / DeliveryError）只影响单个条目，记录在运行摘要中。
"""

from typing import TYPE_CHECKING

if TYPE_CHECKING:
    from tagwatch.core.coordinator import RunResult


class TagWatchError(Exception):
    """TagWatch 基础错误."""


class FetchError(TagWatchError):
    """订阅源无法访问或无法解析."""


class EmptyFeedError(TagWatchError):
    """订阅源没有任何条目."""


class ResolutionError(TagWatchError):
    """文章页面标签解析失败."""


class DeliveryError(TagWatchError):
    """通知发送失败."""


class StoreError(TagWatchError):
    """水位线存储不可用."""


class WatermarkPersistError(StoreError):
    """
    运行已完成但水位线写入失败.

    下一次运行会重新处理相同的条目，可能产生重复通知。
    """

    def __init__(self, message: str, result: "RunResult") -> None:
        super().__init__(message)
        self.result = result

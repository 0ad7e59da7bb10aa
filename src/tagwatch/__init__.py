"""TagWatch - 订阅源标签监控."""

__version__ = "0.1.0"

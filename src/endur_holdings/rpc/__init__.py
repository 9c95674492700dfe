"""Chain reader interface and retry policy."""

from endur_holdings.rpc.reader import ChainReader
from endur_holdings.rpc.retry import RetryConfig, retry_async

__all__ = [
    "ChainReader",
    "RetryConfig",
    "retry_async",
]

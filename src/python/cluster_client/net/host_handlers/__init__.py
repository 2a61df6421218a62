"""Host handlers: interchangeable failover strategies."""

from .dirty_read_host_handler import DirtyReadHostHandler
from .fallback_host_handler import FallbackHostHandler
from .host_handler import HostHandler
from .pinned_host_handler import PinnedHostHandler
from .random_host_handler import RandomHostHandler
from .retry_episode import DEFAULT_RETRY_PASSES, RetryEpisode
from .round_robin_host_handler import RoundRobinHostHandler

__all__ = [
    "DEFAULT_RETRY_PASSES",
    "DirtyReadHostHandler",
    "FallbackHostHandler",
    "HostHandler",
    "PinnedHostHandler",
    "RandomHostHandler",
    "RetryEpisode",
    "RoundRobinHostHandler",
]

# Networking subpackage

from .connection import Connection, ConnectionFactory, HttpConnection, http_connection_factory
from .host import Host
from .host_handle import HostHandle
from .host_handlers import (
    DirtyReadHostHandler,
    FallbackHostHandler,
    HostHandler,
    PinnedHostHandler,
    RandomHostHandler,
    RoundRobinHostHandler,
)
from .host_resolver import ExtendedHostResolver, HostResolver, SimpleHostResolver
from .host_set import HostSet
from .request_executor import RequestExecutor

__all__ = [
    "Connection",
    "ConnectionFactory",
    "DirtyReadHostHandler",
    "ExtendedHostResolver",
    "FallbackHostHandler",
    "Host",
    "HostHandle",
    "HostHandler",
    "HostResolver",
    "HostSet",
    "HttpConnection",
    "PinnedHostHandler",
    "RandomHostHandler",
    "RequestExecutor",
    "RoundRobinHostHandler",
    "SimpleHostResolver",
    "http_connection_factory",
]

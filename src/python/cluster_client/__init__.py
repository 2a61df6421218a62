"""Cluster Client Library: resilient multi-endpoint request execution.

Sends requests to a clustered, multi-coordinator database server and
transparently fails over to other coordinators when one cannot be
reached.  Application errors (not found, conflict, ...) are surfaced
unchanged; only transport failures trigger failover, bounded by a
fixed number of passes over the host list.  The host list can be
refreshed from the cluster itself, and the revisions of written
documents are kept in an advisory cache.

Quick Start::

    from cluster_client import ClientConfig, ClusterClient, Request, RequestType

    client = ClusterClient(ClientConfig.from_yaml("config.yaml"))

    response = client.execute(Request(
        request_type=RequestType.POST,
        path="/_api/document/users",
        body=b'{"name": "Alice"}',
    ))
    revision = client.document_cache.get(response.body_json()["_id"])

    client.close()
"""

from .cache.document_cache import DocumentRevisionCache
from .cluster_client import ClusterClient
from .configs import ClientConfig
from .exceptions import (
    ApplicationError,
    ClusterClientError,
    ConnectionTimeoutError,
    ConnectivityError,
    DiscoveryError,
    ExhaustedRetriesError,
    RedirectError,
    RequestTimeoutError,
)
from .models import (
    AccessType,
    DocumentRevision,
    ErrorEntity,
    HostDescription,
    LoadBalancingStrategy,
    Request,
    RequestType,
    Response,
)
from .net.connection import Connection, ConnectionFactory, HttpConnection
from .net.host import Host
from .net.host_handle import HostHandle
from .net.host_handlers import (
    DirtyReadHostHandler,
    FallbackHostHandler,
    HostHandler,
    PinnedHostHandler,
    RandomHostHandler,
    RoundRobinHostHandler,
)
from .net.host_resolver import ExtendedHostResolver, HostResolver, SimpleHostResolver
from .net.host_set import HostSet
from .net.request_executor import RequestExecutor

__all__ = [
    # Main entry point
    "ClusterClient",
    "ClientConfig",
    # Request layer
    "RequestExecutor",
    "HostHandler",
    "FallbackHostHandler",
    "RoundRobinHostHandler",
    "RandomHostHandler",
    "PinnedHostHandler",
    "DirtyReadHostHandler",
    "HostResolver",
    "SimpleHostResolver",
    "ExtendedHostResolver",
    "HostSet",
    "Host",
    "HostHandle",
    "Connection",
    "ConnectionFactory",
    "HttpConnection",
    # Cache
    "DocumentRevisionCache",
    # Models
    "AccessType",
    "DocumentRevision",
    "ErrorEntity",
    "HostDescription",
    "LoadBalancingStrategy",
    "Request",
    "RequestType",
    "Response",
    # Exceptions
    "ApplicationError",
    "ClusterClientError",
    "ConnectionTimeoutError",
    "ConnectivityError",
    "DiscoveryError",
    "ExhaustedRetriesError",
    "RedirectError",
    "RequestTimeoutError",
]

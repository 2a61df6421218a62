"""Cluster client: main entry point.

Wires the request layer together from a :class:`ClientConfig`:
connection factory, host set, host resolver, failover strategy,
request executor and document revision cache.

Usage::

    from cluster_client import ClientConfig, ClusterClient, Request, RequestType

    config = ClientConfig(
        hosts=["10.0.0.1:8529", "10.0.0.2:8529"],
        password="secret",
        acquire_host_list=True,
    )
    with ClusterClient(config) as client:
        response = client.execute(
            Request(request_type=RequestType.GET, path="/_api/version")
        )
"""

from __future__ import annotations

import logging
import threading

from .cache.document_cache import DocumentRevisionCache
from .configs import ClientConfig
from .models import AccessType, LoadBalancingStrategy, Request, Response
from .net.connection import ConnectionFactory, http_connection_factory
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

logger = logging.getLogger(__name__)


class ClusterClient:
    """Resilient request execution against a multi-coordinator cluster.

    Parameters:
        config: Client settings.
        connection_factory: Builds host connections; defaults to
            HTTP connections for *config*.
        document_cache: Shared revision cache; a private one is
            created when omitted.
    """

    def __init__(
        self,
        config: ClientConfig,
        connection_factory: ConnectionFactory | None = None,
        document_cache: DocumentRevisionCache | None = None,
    ) -> None:
        self._config = config
        self._factory = connection_factory or http_connection_factory(config)
        self._document_cache = document_cache if document_cache is not None else DocumentRevisionCache()

        self._hosts = HostSet(self._factory, config.hosts, jwt=config.jwt)
        self._resolver = self._create_resolver()
        self._host_handler = self._create_host_handler()
        self._executor = RequestExecutor(
            host_handler=self._host_handler,
            document_cache=self._document_cache,
            max_redirects=config.max_redirects,
        )

        self._close_lock = threading.Lock()
        self._closed = False
        logger.info(
            "ClusterClient created: %d hosts, strategy=%s, acquire_host_list=%s",
            len(self._hosts),
            config.load_balancing_strategy.value,
            config.acquire_host_list,
        )

    # ── Properties ────────────────────────────────────────────────

    @property
    def config(self) -> ClientConfig:
        return self._config

    @property
    def hosts(self) -> HostSet:
        return self._hosts

    @property
    def host_handler(self) -> HostHandler:
        return self._host_handler

    @property
    def document_cache(self) -> DocumentRevisionCache:
        return self._document_cache

    @property
    def is_closed(self) -> bool:
        return self._closed

    # ── Public API ────────────────────────────────────────────────

    def execute(
        self,
        request: Request,
        host_handle: HostHandle | None = None,
        access_type: AccessType | None = None,
    ) -> Response:
        """Execute *request*, failing over between hosts as needed.

        See :meth:`RequestExecutor.execute`.
        """
        if request.database is None:
            request = request.model_copy(update={"database": self._config.database})
        return self._executor.execute(request, host_handle, access_type)

    def set_jwt(self, jwt: str | None) -> None:
        """Use *jwt* for every host, including hosts discovered later."""
        self._host_handler.set_jwt(jwt)

    def close(self) -> None:
        """Close the resolver and every host connection exactly once."""
        with self._close_lock:
            if self._closed:
                return
            self._closed = True
        self._host_handler.close()
        logger.info("ClusterClient closed")

    def __enter__(self) -> ClusterClient:
        return self

    def __exit__(self, exc_type, exc_val, exc_tb) -> None:  # noqa: ANN001
        self.close()

    # ── Internal Helpers ──────────────────────────────────────────

    def _create_resolver(self) -> HostResolver:
        if self._config.acquire_host_list:
            return ExtendedHostResolver(
                self._hosts,
                acquire_host_list_interval=self._config.acquire_host_list_interval,
            )
        return SimpleHostResolver(self._hosts)

    def _create_host_handler(self) -> HostHandler:
        handler = self._create_strategy(self._config.load_balancing_strategy)
        if self._config.allow_dirty_read:
            follower = RandomHostHandler(self._resolver, retry_passes=self._config.retry_passes)
            return DirtyReadHostHandler(leader=handler, follower=follower)
        return handler

    def _create_strategy(self, strategy: LoadBalancingStrategy) -> HostHandler:
        passes = self._config.retry_passes
        if strategy == LoadBalancingStrategy.ROUND_ROBIN:
            return RoundRobinHostHandler(self._resolver, retry_passes=passes)
        if strategy == LoadBalancingStrategy.ONE_RANDOM:
            return RandomHostHandler(self._resolver, retry_passes=passes)
        if strategy == LoadBalancingStrategy.STICKY:
            return PinnedHostHandler(self._resolver, retry_passes=passes)
        return FallbackHostHandler(self._resolver, retry_passes=passes)

"""Host resolvers: supply the current :class:`HostSet` to host handlers.

:class:`SimpleHostResolver` serves the configured endpoints as-is.
:class:`ExtendedHostResolver` also asks the cluster for its current
coordinator list every ``acquire_host_list_interval`` seconds, so
coordinators added while the client runs become selectable without
rebuilding anything.  Discovery is best-effort: when it fails the
previous list keeps being served.
"""

from __future__ import annotations

import abc
import logging
import threading
import time
from typing import Callable

from prometheus_client import Counter

from ..exceptions import ConnectivityError, DiscoveryError, RequestTimeoutError
from ..models import HostDescription, Request, RequestType
from .host_set import HostSet

logger = logging.getLogger(__name__)

DISCOVERY_COUNTER = Counter("cc_host_discovery_total", "Total number of host list refreshes attempted")
DISCOVERY_ERROR_COUNTER = Counter("cc_host_discovery_error_total", "Total number of host list refreshes that failed")

ENDPOINTS_PATH = "/_api/cluster/endpoints"


class HostResolver(abc.ABC):
    """Interface that supplies the current set of cluster hosts."""

    @abc.abstractmethod
    def get_hosts(self) -> HostSet:
        """Return the current host set.

        Must be safe to call from any thread.  Never returns an empty
        set and never raises because of a discovery failure.
        """
        ...

    @abc.abstractmethod
    def close(self) -> None:
        ...


class SimpleHostResolver(HostResolver):
    """Serves a fixed host set built from configuration."""

    def __init__(self, hosts: HostSet) -> None:
        self._hosts = hosts

    def get_hosts(self) -> HostSet:
        return self._hosts

    def close(self) -> None:
        pass


class ExtendedHostResolver(HostResolver):
    """Periodically refreshes the host set from the cluster itself.

    Parameters:
        hosts: Seed host set; refreshed in place.
        acquire_host_list_interval: Minimum seconds between refreshes.
        clock: Monotonic time source (overridable in tests).
    """

    def __init__(
        self,
        hosts: HostSet,
        acquire_host_list_interval: float = 3600.0,
        clock: Callable[[], float] = time.monotonic,
    ) -> None:
        self._hosts = hosts
        self._interval = acquire_host_list_interval
        self._clock = clock
        self._refresh_lock = threading.Lock()
        self._last_update: float | None = None
        self._closed = False

    @property
    def last_update(self) -> float | None:
        return self._last_update

    def get_hosts(self) -> HostSet:
        if self._closed or not self._is_expired():
            return self._hosts

        # One refresher at a time; everybody else keeps using the current set
        if not self._refresh_lock.acquire(blocking=False):
            return self._hosts
        try:
            if self._is_expired():
                self._refresh()
        finally:
            self._refresh_lock.release()
        return self._hosts

    def close(self) -> None:
        self._closed = True

    # ── Internal Helpers ──────────────────────────────────────────

    def _is_expired(self) -> bool:
        return self._last_update is None or self._clock() - self._last_update >= self._interval

    def _refresh(self) -> None:
        self._last_update = self._clock()
        DISCOVERY_COUNTER.inc()
        try:
            endpoints = self._resolve_from_server()
        except DiscoveryError as exc:
            DISCOVERY_ERROR_COUNTER.inc()
            logger.warning("%s Keeping %d known hosts.", exc, len(self._hosts))
            return

        logger.debug("Resolved %d endpoints", len(endpoints))
        descriptions: list[HostDescription] = []
        for endpoint in endpoints:
            try:
                descriptions.append(HostDescription.parse(endpoint))
            except ValueError:
                logger.warning("Skip endpoint (missing port): %s", endpoint)

        added, evicted = self._hosts.reconcile(descriptions)
        if added or evicted:
            logger.info(
                "Host list refreshed: %d added, %d evicted, %d total",
                len(added),
                len(evicted),
                len(self._hosts),
            )

    def _resolve_from_server(self) -> list[str]:
        """Ask known hosts, in order, for the cluster endpoint list.

        Raises:
            DiscoveryError: If no host returned a usable answer.
        """
        request = Request(request_type=RequestType.GET, path=ENDPOINTS_PATH, database="_system")
        errors: list[str] = []
        for host in self._hosts.hosts_list:
            try:
                response = host.send(request)
            except (ConnectivityError, RequestTimeoutError) as exc:
                errors.append(str(exc))
                continue

            # Not a cluster, or not allowed to list endpoints
            if response.status == 403:
                return []
            if not response.is_success:
                errors.append(f"{host.description} answered {response.status}")
                continue
            try:
                return [str(item["endpoint"]) for item in response.body_json()["endpoints"]]
            except (ValueError, KeyError, TypeError) as exc:
                errors.append(f"{host.description} sent an unreadable endpoint list: {exc!r}")

        raise DiscoveryError("; ".join(errors))

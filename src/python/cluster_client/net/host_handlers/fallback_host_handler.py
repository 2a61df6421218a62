"""Fallback strategy: stay on the last good host, walk the list on failure.

Hosts are tried in preference order starting from the last host that
answered.  Every wrap past the end of the list counts as one pass;
the episode is exhausted once ``retry_passes`` passes have been made
and the walk is back at the last good host, i.e. after at most
``retry_passes × len(hosts)`` consecutive failures.
"""

from __future__ import annotations

import logging
import threading

from ...models import AccessType, HostDescription
from ..host import Host
from ..host_handle import HostHandle
from ..host_resolver import HostResolver
from ..host_set import HostSet
from .host_handler import HostHandler
from .retry_episode import DEFAULT_RETRY_PASSES, RetryEpisode, raise_exhausted

logger = logging.getLogger(__name__)


class FallbackHostHandler(HostHandler):
    """Ordered failover with a bounded number of passes.

    A sticky hint naming a known host moves the walk to that host.

    Parameters:
        resolver: Supplies the (possibly refreshed) host set.
        retry_passes: Full passes over the host list before giving up.
    """

    def __init__(self, resolver: HostResolver, retry_passes: int = DEFAULT_RETRY_PASSES) -> None:
        self._resolver = resolver
        self._lock = threading.Lock()
        self._episode = RetryEpisode(retry_passes)
        self._hosts: HostSet = resolver.get_hosts()
        self._current: Host = self._hosts.hosts_list[0]
        self._last_success: Host = self._current

    # ── Properties ────────────────────────────────────────────────

    @property
    def current(self) -> Host:
        return self._current

    @property
    def last_success(self) -> Host:
        return self._last_success

    @property
    def iterations(self) -> int:
        return self._episode.iterations

    @property
    def causes(self) -> tuple[BaseException, ...]:
        with self._lock:
            return self._episode.causes

    # ── HostHandler ───────────────────────────────────────────────

    def get(self, host_handle: HostHandle | None = None, access_type: AccessType | None = None) -> Host:
        with self._lock:
            if self._has_next():
                hinted = host_handle.host if host_handle is not None else None
                if hinted is not None:
                    host = self._hosts.get_host(hinted)
                    if host is not None:
                        self._current = host
                return self._current
            error = self._episode.exhaust()
        raise_exhausted(error)

    def has_next(self, host_handle: HostHandle | None = None, access_type: AccessType | None = None) -> bool:
        with self._lock:
            return self._has_next()

    def success(self) -> None:
        with self._lock:
            self._last_success = self._current
            self._episode.reset()

    def fail(self, cause: BaseException) -> None:
        hosts = self._resolver.get_hosts()
        with self._lock:
            self._advance(hosts, cause)

    def fail_if_not_match(self, description: HostDescription, cause: BaseException) -> None:
        hosts = self._resolver.get_hosts()
        with self._lock:
            if self._current.description != description:
                self._advance(hosts, cause)

    def reset(self) -> None:
        with self._lock:
            self._episode.reset()

    def close(self) -> None:
        self._hosts.close()
        self._resolver.close()

    def set_jwt(self, jwt: str | None) -> None:
        self._hosts.set_jwt(jwt)

    # ── Internal Helpers ──────────────────────────────────────────

    def _has_next(self) -> bool:
        return self._current is not self._last_success or self._episode.within_passes()

    def _advance(self, hosts: HostSet, cause: BaseException) -> None:
        self._hosts = hosts
        host_list = hosts.hosts_list
        # An evicted last-good host would never be reached again
        if self._last_success not in host_list:
            self._last_success = host_list[0]

        try:
            index = host_list.index(self._current) + 1
        except ValueError:
            index = 0
        in_bound = index < len(host_list)
        self._current = host_list[index if in_bound else 0]
        if not in_bound:
            self._episode.next_pass()
        self._episode.record(cause)
        logger.debug(
            "Failover to %s (pass %d/%d, %d failures)",
            self._current.description,
            self._episode.iterations,
            self._episode.retry_passes,
            self._episode.failures,
        )

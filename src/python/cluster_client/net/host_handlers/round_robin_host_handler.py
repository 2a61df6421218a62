"""Round-robin strategy: spread requests over all hosts in turn."""

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


class RoundRobinHostHandler(HostHandler):
    """Hand out hosts in rotation.

    A sticky hint naming a known host wins over the rotation.  The
    episode is exhausted after ``retry_passes × len(hosts)``
    consecutive failures.

    Parameters:
        resolver: Supplies the (possibly refreshed) host set.
        retry_passes: Full passes over the host list before giving up.
    """

    def __init__(self, resolver: HostResolver, retry_passes: int = DEFAULT_RETRY_PASSES) -> None:
        self._resolver = resolver
        self._lock = threading.Lock()
        self._episode = RetryEpisode(retry_passes)
        self._hosts: HostSet = resolver.get_hosts()
        self._counter = 0
        self._current: Host | None = None

    @property
    def current(self) -> Host | None:
        return self._current

    @property
    def causes(self) -> tuple[BaseException, ...]:
        with self._lock:
            return self._episode.causes

    def get(self, host_handle: HostHandle | None = None, access_type: AccessType | None = None) -> Host:
        hosts = self._resolver.get_hosts()
        with self._lock:
            self._hosts = hosts
            host_list = hosts.hosts_list
            if self._episode.within_attempts(len(host_list)):
                hinted = host_handle.host if host_handle is not None else None
                host = hosts.get_host(hinted) if hinted is not None else None
                if host is None:
                    host = host_list[self._counter % len(host_list)]
                    self._counter += 1
                self._current = host
                return host
            error = self._episode.exhaust()
        raise_exhausted(error)

    def has_next(self, host_handle: HostHandle | None = None, access_type: AccessType | None = None) -> bool:
        with self._lock:
            return self._episode.within_attempts(len(self._hosts))

    def success(self) -> None:
        with self._lock:
            self._episode.reset()

    def fail(self, cause: BaseException) -> None:
        with self._lock:
            self._record(cause)

    def fail_if_not_match(self, description: HostDescription, cause: BaseException) -> None:
        with self._lock:
            if self._current is None or self._current.description != description:
                self._record(cause)

    def reset(self) -> None:
        with self._lock:
            self._episode.reset()

    def close(self) -> None:
        self._hosts.close()
        self._resolver.close()

    def set_jwt(self, jwt: str | None) -> None:
        self._hosts.set_jwt(jwt)

    def _record(self, cause: BaseException) -> None:
        self._episode.record(cause)
        host_count = len(self._hosts)
        if self._episode.failures % host_count == 0:
            self._episode.next_pass()
        logger.debug("Host %s failed (%d failures)", self._current, self._episode.failures)

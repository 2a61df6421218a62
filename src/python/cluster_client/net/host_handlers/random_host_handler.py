"""Random strategy: settle on one randomly chosen host per client."""

from __future__ import annotations

import logging
import random
import threading

from ...models import AccessType, HostDescription
from ..host import Host
from ..host_handle import HostHandle
from ..host_resolver import HostResolver
from ..host_set import HostSet
from .host_handler import HostHandler
from .retry_episode import DEFAULT_RETRY_PASSES, RetryEpisode, raise_exhausted

logger = logging.getLogger(__name__)


class RandomHostHandler(HostHandler):
    """Pick a random host and keep it while it answers.

    Clients built with this strategy spread over the coordinators
    instead of all piling onto the first one.  A sticky hint naming a
    known host moves the client to that host.  On failure a different
    random host is chosen; the episode is exhausted after
    ``retry_passes × len(hosts)`` consecutive failures.

    Parameters:
        resolver: Supplies the (possibly refreshed) host set.
        retry_passes: Full passes over the host list before giving up.
        rng: Random source (seedable in tests).
    """

    def __init__(
        self,
        resolver: HostResolver,
        retry_passes: int = DEFAULT_RETRY_PASSES,
        rng: random.Random | None = None,
    ) -> None:
        self._resolver = resolver
        self._lock = threading.Lock()
        self._episode = RetryEpisode(retry_passes)
        self._rng = rng or random.Random()
        self._hosts: HostSet = resolver.get_hosts()
        self._current: Host = self._rng.choice(self._hosts.hosts_list)

    @property
    def current(self) -> Host:
        return self._current

    @property
    def causes(self) -> tuple[BaseException, ...]:
        with self._lock:
            return self._episode.causes

    def get(self, host_handle: HostHandle | None = None, access_type: AccessType | None = None) -> Host:
        with self._lock:
            if self._episode.within_attempts(len(self._hosts)):
                hinted = host_handle.host if host_handle is not None else None
                host = self._hosts.get_host(hinted) if hinted is not None else None
                if host is not None:
                    self._current = host
                return self._current
            error = self._episode.exhaust()
        raise_exhausted(error)

    def has_next(self, host_handle: HostHandle | None = None, access_type: AccessType | None = None) -> bool:
        with self._lock:
            return self._episode.within_attempts(len(self._hosts))

    def success(self) -> None:
        with self._lock:
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

    def _advance(self, hosts: HostSet, cause: BaseException) -> None:
        self._hosts = hosts
        host_list = hosts.hosts_list
        candidates = [host for host in host_list if host is not self._current] or list(host_list)
        self._current = self._rng.choice(candidates)
        self._episode.record(cause)
        if self._episode.failures % len(host_list) == 0:
            self._episode.next_pass()
        logger.debug("Failover to %s (%d failures)", self._current.description, self._episode.failures)

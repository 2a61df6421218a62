"""Pinned strategy: one host for the whole client (sticky sessions)."""

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


class PinnedHostHandler(HostHandler):
    """Always use a single host; never fail over to another one.

    A sticky hint naming a known host overrides the pin for that
    request, and the host of the last success becomes the new pin.
    Each failure counts as a full pass, so the episode is exhausted
    after ``retry_passes`` consecutive failures.

    Parameters:
        resolver: Supplies the host set.
        retry_passes: Attempts on the pinned host before giving up.
        pinned: Host to pin; defaults to the first configured host.
    """

    def __init__(
        self,
        resolver: HostResolver,
        retry_passes: int = DEFAULT_RETRY_PASSES,
        pinned: HostDescription | None = None,
    ) -> None:
        self._resolver = resolver
        self._lock = threading.Lock()
        self._episode = RetryEpisode(retry_passes)
        self._hosts: HostSet = resolver.get_hosts()
        host = self._hosts.get_host(pinned) if pinned is not None else None
        self._pinned: Host = host or self._hosts.hosts_list[0]
        self._current: Host = self._pinned

    @property
    def current(self) -> Host:
        return self._current

    @property
    def pinned(self) -> Host:
        return self._pinned

    @property
    def causes(self) -> tuple[BaseException, ...]:
        with self._lock:
            return self._episode.causes

    def get(self, host_handle: HostHandle | None = None, access_type: AccessType | None = None) -> Host:
        hosts = self._resolver.get_hosts()
        with self._lock:
            if self._episode.within_passes():
                self._hosts = hosts
                hinted = host_handle.host if host_handle is not None else None
                host = hosts.get_host(hinted) if hinted is not None else None
                if host is None:
                    if self._pinned not in hosts.hosts_list:
                        self._pinned = hosts.hosts_list[0]
                    host = self._pinned
                self._current = host
                return host
            error = self._episode.exhaust()
        raise_exhausted(error)

    def has_next(self, host_handle: HostHandle | None = None, access_type: AccessType | None = None) -> bool:
        with self._lock:
            return self._episode.within_passes()

    def success(self) -> None:
        with self._lock:
            self._pinned = self._current
            self._episode.reset()

    def fail(self, cause: BaseException) -> None:
        with self._lock:
            self._record(cause)

    def fail_if_not_match(self, description: HostDescription, cause: BaseException) -> None:
        with self._lock:
            if self._current.description != description:
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
        self._episode.next_pass()
        logger.debug("Pinned host %s failed (%d failures)", self._current.description, self._episode.failures)

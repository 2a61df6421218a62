"""Route dirty reads to followers, everything else to the leader handler."""

from __future__ import annotations

import threading

from ...models import AccessType, HostDescription
from ..host import Host
from ..host_handle import HostHandle
from .host_handler import HostHandler


class DirtyReadHostHandler(HostHandler):
    """Delegate by access type.

    ``AccessType.DIRTY_READ`` requests go to *follower*, all others to
    *leader*.  The delegate chosen by the last ``get``/``has_next`` of
    the calling thread receives the following ``success``/``fail``.

    Parameters:
        leader: Handler for reads and writes that need the leader.
        follower: Handler for reads that tolerate stale data.
    """

    def __init__(self, leader: HostHandler, follower: HostHandler) -> None:
        self._leader = leader
        self._follower = follower
        self._local = threading.local()

    def get(self, host_handle: HostHandle | None = None, access_type: AccessType | None = None) -> Host:
        return self._select(access_type).get(host_handle, access_type)

    def has_next(self, host_handle: HostHandle | None = None, access_type: AccessType | None = None) -> bool:
        return self._select(access_type).has_next(host_handle, access_type)

    def success(self) -> None:
        self._selected().success()

    def fail(self, cause: BaseException) -> None:
        self._selected().fail(cause)

    def fail_if_not_match(self, description: HostDescription, cause: BaseException) -> None:
        self._selected().fail_if_not_match(description, cause)

    def reset(self) -> None:
        self._selected().reset()

    def close(self) -> None:
        self._leader.close()
        self._follower.close()

    def set_jwt(self, jwt: str | None) -> None:
        self._leader.set_jwt(jwt)
        self._follower.set_jwt(jwt)

    def _select(self, access_type: AccessType | None) -> HostHandler:
        handler = self._follower if access_type == AccessType.DIRTY_READ else self._leader
        self._local.handler = handler
        return handler

    def _selected(self) -> HostHandler:
        return getattr(self._local, "handler", self._leader)

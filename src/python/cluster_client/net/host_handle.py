"""Sticky host hint shared by related requests."""

from __future__ import annotations

import threading

from ..models import HostDescription


class HostHandle:
    """Remembers which host served the last request of a caller.

    Pass the same handle to consecutive requests that should land on
    the same coordinator (cursors, stream transactions).  The request
    executor records the serving host on success and forgets it when
    that host becomes unreachable.
    """

    def __init__(self, host: HostDescription | None = None) -> None:
        self._lock = threading.Lock()
        self._host = host

    @property
    def host(self) -> HostDescription | None:
        with self._lock:
            return self._host

    def set_host(self, host: HostDescription | None) -> HostHandle:
        with self._lock:
            self._host = host
        return self

    def __repr__(self) -> str:
        return f"HostHandle(host={self.host})"

"""Host set: the known endpoints of the cluster, in preference order.

The set owns its hosts: it creates them, closes their connections
when they are evicted, and pushes credential changes to all of them.
"""

from __future__ import annotations

import logging
import threading
from typing import Iterable

from ..models import HostDescription
from .connection import ConnectionFactory
from .host import Host

logger = logging.getLogger(__name__)


class HostSet:
    """Thread-safe ordered collection of :class:`Host`, unique by address.

    Parameters:
        connection_factory: Used to build the connection of every host
            the set creates.
        seeds: Initial endpoints. Must not be empty.
        jwt: Initial bearer token applied to every host.
    """

    def __init__(
        self,
        connection_factory: ConnectionFactory,
        seeds: Iterable[HostDescription],
        jwt: str | None = None,
    ) -> None:
        self._lock = threading.Lock()
        self._factory = connection_factory
        self._jwt = jwt
        self._closed = False

        # Insertion order is preference order
        self._hosts: dict[HostDescription, Host] = {}
        for description in seeds:
            if description not in self._hosts:
                self._hosts[description] = Host(description, connection_factory, jwt)
        if not self._hosts:
            raise ValueError("A host set needs at least one host")

    # ── Query Methods ─────────────────────────────────────────────

    @property
    def hosts_list(self) -> tuple[Host, ...]:
        """Snapshot of the hosts in preference order."""
        with self._lock:
            return tuple(self._hosts.values())

    @property
    def descriptions(self) -> list[HostDescription]:
        with self._lock:
            return list(self._hosts.keys())

    @property
    def jwt(self) -> str | None:
        return self._jwt

    def get_host(self, description: HostDescription) -> Host | None:
        with self._lock:
            return self._hosts.get(description)

    def __contains__(self, description: HostDescription) -> bool:
        with self._lock:
            return description in self._hosts

    def __len__(self) -> int:
        with self._lock:
            return len(self._hosts)

    # ── Mutation Methods ──────────────────────────────────────────

    def add_host(self, description: HostDescription) -> Host:
        """Return the host for *description*, creating it if unknown.

        New hosts pick up the most recently set token.
        """
        with self._lock:
            host = self._hosts.get(description)
            if host is None:
                host = Host(description, self._factory, self._jwt)
                self._hosts[description] = host
                logger.info("Host added: %s", description)
            return host

    def reconcile(self, descriptions: Iterable[HostDescription]) -> tuple[list[HostDescription], list[HostDescription]]:
        """Merge a fresh endpoint list into the set.

        Known hosts are kept with their connections.  Hosts missing
        from a non-empty list are evicted and closed; an empty list
        leaves the set untouched.

        Returns:
            A tuple of ``(added, evicted)`` descriptions.
        """
        wanted = list(dict.fromkeys(descriptions))
        if not wanted:
            return [], []

        added: list[HostDescription] = []
        evicted: list[Host] = []
        with self._lock:
            for description in wanted:
                if description not in self._hosts:
                    self._hosts[description] = Host(description, self._factory, self._jwt)
                    added.append(description)
            wanted_set = set(wanted)
            for description in list(self._hosts):
                if description not in wanted_set:
                    evicted.append(self._hosts.pop(description))

        for description in added:
            logger.info("Host added: %s", description)
        for host in evicted:
            logger.info("Host evicted: %s", host.description)
            host.close()
        return added, [host.description for host in evicted]

    def set_jwt(self, jwt: str | None) -> None:
        """Apply *jwt* to every current host and to hosts added later."""
        with self._lock:
            self._jwt = jwt
            hosts = list(self._hosts.values())
        for host in hosts:
            host.set_jwt(jwt)

    def close(self) -> None:
        """Close every host connection. Safe to call more than once."""
        with self._lock:
            if self._closed:
                return
            self._closed = True
            hosts = list(self._hosts.values())
        for host in hosts:
            host.close()

    def __repr__(self) -> str:
        return f"HostSet({', '.join(str(d) for d in self.descriptions)})"

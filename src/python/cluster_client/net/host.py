"""A single server endpoint and its lazily opened connection."""

from __future__ import annotations

import logging
import threading

from ..exceptions import ConnectivityError
from ..models import HostDescription, Request, Response
from .connection import Connection, ConnectionFactory

logger = logging.getLogger(__name__)


class Host:
    """One endpoint of the cluster.

    Identity is the :class:`HostDescription`.  The transport connection
    is created on the first :meth:`send` under a per-host lock, so a
    slow connect never blocks other hosts.

    Parameters:
        description: Address of the endpoint.
        connection_factory: Builds the connection on first use.
        jwt: Bearer token applied to the connection when it is created.
    """

    def __init__(
        self,
        description: HostDescription,
        connection_factory: ConnectionFactory,
        jwt: str | None = None,
    ) -> None:
        self._description = description
        self._factory = connection_factory
        self._lock = threading.Lock()
        self._connection: Connection | None = None
        self._jwt = jwt
        self._closed = False

    @property
    def description(self) -> HostDescription:
        return self._description

    @property
    def jwt(self) -> str | None:
        return self._jwt

    @property
    def is_connected(self) -> bool:
        return self._connection is not None

    @property
    def is_closed(self) -> bool:
        return self._closed

    def connection(self) -> Connection:
        """Return the connection, opening it on first use."""
        with self._lock:
            if self._closed:
                raise ConnectivityError(str(self._description), reason="Host has been closed")
            if self._connection is None:
                logger.debug("Opening connection to %s", self._description)
                self._connection = self._factory(self._description)
                if self._jwt is not None:
                    self._connection.set_jwt(self._jwt)
            return self._connection

    def send(self, request: Request) -> Response:
        return self.connection().execute(request)

    def set_jwt(self, jwt: str | None) -> None:
        with self._lock:
            self._jwt = jwt
            if self._connection is not None:
                self._connection.set_jwt(jwt)

    def close(self) -> None:
        """Close the connection. Safe to call more than once."""
        with self._lock:
            if self._closed:
                return
            self._closed = True
            connection, self._connection = self._connection, None
        if connection is not None:
            logger.debug("Closing connection to %s", self._description)
            connection.close()

    def __repr__(self) -> str:
        return f"Host({self._description})"

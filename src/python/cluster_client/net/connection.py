"""Transport connections to a single host.

A :class:`Connection` sends one :class:`Request` and returns the raw
:class:`Response`, whatever its status.  It raises only for transport
failures, mapped onto :class:`ConnectivityError` (the host could not
be reached, failover is safe) or :class:`RequestTimeoutError` (the
request may have reached the server, failover is not safe).
"""

from __future__ import annotations

import abc
import logging
import threading
from typing import Callable

import httpx

from ..configs import ClientConfig
from ..exceptions import ConnectionTimeoutError, ConnectivityError, RequestTimeoutError
from ..models import HostDescription, Request, Response

logger = logging.getLogger(__name__)


class Connection(abc.ABC):
    """A transport handle bound to one host."""

    @abc.abstractmethod
    def execute(self, request: Request) -> Response:
        """Send *request* and return the response.

        Raises:
            ConnectivityError: If the host could not be reached.
            RequestTimeoutError: If the host did not answer in time.
        """
        ...

    @abc.abstractmethod
    def set_jwt(self, jwt: str | None) -> None:
        """Replace the bearer token used for subsequent requests."""
        ...

    @abc.abstractmethod
    def close(self) -> None:
        ...


# Builds the connection of a host on its first use.
ConnectionFactory = Callable[[HostDescription], Connection]


class HttpConnection(Connection):
    """HTTP connection backed by a keep-alive :class:`httpx.Client`.

    Parameters:
        description: The host this connection talks to.
        config: Client settings (protocol, credentials, timeouts).
        jwt: Initial bearer token; takes precedence over basic auth.
        transport: Optional httpx transport, e.g. a mock in tests.
    """

    def __init__(
        self,
        description: HostDescription,
        config: ClientConfig,
        jwt: str | None = None,
        transport: httpx.BaseTransport | None = None,
    ) -> None:
        self._description = description
        self._address = str(description)
        self._timeout = config.timeout
        self._connect_timeout = config.connect_timeout
        self._lock = threading.Lock()
        self._jwt = jwt or config.jwt
        self._basic_auth = (config.user, config.password or "") if config.password is not None else None
        self._client = httpx.Client(
            base_url=f"{config.protocol}://{self._address}",
            timeout=httpx.Timeout(config.timeout, connect=config.connect_timeout),
            verify=config.verify_ssl,
            transport=transport,
        )
        self._closed = False

    @property
    def description(self) -> HostDescription:
        return self._description

    def set_jwt(self, jwt: str | None) -> None:
        with self._lock:
            self._jwt = jwt

    def execute(self, request: Request) -> Response:
        if self._closed:
            raise ConnectivityError(self._address, reason="Connection is closed")

        headers = dict(request.headers)
        auth = None
        with self._lock:
            if self._jwt:
                headers["Authorization"] = f"bearer {self._jwt}"
            elif self._basic_auth is not None:
                auth = self._basic_auth

        params = {key: _param_value(value) for key, value in request.query_params.items() if value is not None}
        try:
            response = self._client.request(
                request.request_type.value,
                request.url_path,
                params=params,
                headers=headers,
                content=request.body,
                auth=auth if auth is not None else httpx.USE_CLIENT_DEFAULT,
            )
        except httpx.ConnectTimeout as exc:
            raise ConnectionTimeoutError(self._address, self._connect_timeout) from exc
        except (httpx.ReadTimeout, httpx.WriteTimeout) as exc:
            raise RequestTimeoutError(self._address, self._timeout) from exc
        except httpx.HTTPError as exc:
            raise ConnectivityError(self._address, reason=str(exc) or exc.__class__.__name__) from exc

        logger.debug(
            "%s %s on %s -> %d",
            request.request_type.value,
            request.url_path,
            self._address,
            response.status_code,
        )
        return Response(
            status=response.status_code,
            headers={key.lower(): value for key, value in response.headers.items()},
            body=response.content,
        )

    def close(self) -> None:
        if not self._closed:
            self._closed = True
            self._client.close()

    @property
    def is_closed(self) -> bool:
        return self._closed

    def __repr__(self) -> str:
        return f"HttpConnection({self._address!r})"


def http_connection_factory(
    config: ClientConfig,
    transport: httpx.BaseTransport | None = None,
) -> ConnectionFactory:
    """Return a factory producing :class:`HttpConnection` objects for *config*."""

    def create(description: HostDescription) -> Connection:
        return HttpConnection(description, config, transport=transport)

    return create


def _param_value(value: object) -> str:
    if isinstance(value, bool):
        return "true" if value else "false"
    return str(value)

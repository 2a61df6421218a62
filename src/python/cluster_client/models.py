"""Data models for the cluster request layer.

All models use Pydantic for validation and serialization.
"""

from __future__ import annotations

import enum
import json
from collections.abc import Hashable
from typing import Any

from pydantic import BaseModel, ConfigDict, Field


# ── Enums ─────────────────────────────────────────────────────────


class RequestType(str, enum.Enum):
    """HTTP verbs understood by the server."""

    GET = "GET"
    HEAD = "HEAD"
    POST = "POST"
    PUT = "PUT"
    PATCH = "PATCH"
    DELETE = "DELETE"
    OPTIONS = "OPTIONS"


class AccessType(str, enum.Enum):
    """How a request touches the data, used to pick a host handler."""

    READ = "read"
    WRITE = "write"
    DIRTY_READ = "dirty_read"


class LoadBalancingStrategy(str, enum.Enum):
    """Host selection strategy for a client."""

    NONE = "none"
    ROUND_ROBIN = "round_robin"
    ONE_RANDOM = "one_random"
    STICKY = "sticky"


# ── Hosts ─────────────────────────────────────────────────────────


class HostDescription(BaseModel):
    """Address of one server endpoint. Equal and hashable by value."""

    model_config = ConfigDict(frozen=True)

    host: str
    """Hostname or IP address (IPv6 without brackets)."""

    port: int = Field(gt=0, lt=65536)
    """TCP port."""

    @classmethod
    def parse(cls, address: str) -> HostDescription:
        """Parse ``host:port``, optionally prefixed by a scheme.

        Accepts ``tcp://``, ``ssl://``, ``http://`` and ``https://``
        prefixes and bracketed IPv6 literals (``[::1]:8529``).

        Raises:
            ValueError: If the address has no port.
        """
        value = address.strip()
        if "://" in value:
            value = value.split("://", 1)[1]
        value = value.split("/", 1)[0]

        if value.startswith("["):
            host, sep, rest = value[1:].partition("]")
            if not sep or not rest.startswith(":"):
                raise ValueError(f"Invalid address format: {address!r}. Expected [host]:port")
            port_str = rest[1:]
        else:
            parts = value.rsplit(":", 1)
            if len(parts) != 2 or ":" in parts[0]:
                raise ValueError(f"Invalid address format: {address!r}. Expected host:port")
            host, port_str = parts

        if not host or not port_str.isdigit():
            raise ValueError(f"Invalid address format: {address!r}. Expected host:port")
        return cls(host=host, port=int(port_str))

    def __str__(self) -> str:
        if ":" in self.host:
            return f"[{self.host}]:{self.port}"
        return f"{self.host}:{self.port}"


# ── Requests & Responses ──────────────────────────────────────────


class Request(BaseModel):
    """A logical request, independent of the host that will serve it."""

    request_type: RequestType
    """HTTP verb."""

    path: str
    """Server path, e.g. ``/_api/document/users``."""

    database: str | None = None
    """Target database; ``None`` addresses the server root."""

    query_params: dict[str, Any] = Field(default_factory=dict)
    """Query parameters. ``None`` values are dropped on the wire."""

    headers: dict[str, str] = Field(default_factory=dict)
    """Extra request headers."""

    body: bytes | None = None
    """Serialized request body."""

    document_identity: Hashable | None = None
    """Key under which a written document's revision is cached."""

    @property
    def url_path(self) -> str:
        """Path prefixed with the database scope, if any."""
        if self.database:
            return f"/_db/{self.database}{self.path}"
        return self.path

    @property
    def default_access_type(self) -> AccessType:
        if self.request_type in (RequestType.GET, RequestType.HEAD):
            return AccessType.READ
        return AccessType.WRITE

    def put_query_param(self, key: str, value: Any) -> Request:
        if value is not None:
            self.query_params[key] = value
        return self

    def put_header(self, key: str, value: str | None) -> Request:
        if value is not None:
            self.headers[key] = value
        return self


class Response(BaseModel):
    """A response as returned by the transport, before classification."""

    status: int
    """HTTP status code."""

    headers: dict[str, str] = Field(default_factory=dict)
    """Response headers, keys lower-cased."""

    body: bytes = b""
    """Raw response body."""

    @property
    def is_success(self) -> bool:
        return 200 <= self.status < 300

    def header(self, name: str) -> str | None:
        return self.headers.get(name.lower())

    def body_json(self) -> Any:
        """Decode the body as JSON. Raises ``ValueError`` if it is not."""
        if not self.body:
            return None
        return json.loads(self.body)


# ── Documents & Errors ────────────────────────────────────────────


class DocumentRevision(BaseModel):
    """Identity and revision of a document after a write."""

    model_config = ConfigDict(frozen=True)

    id: str
    """Document handle (``collection/key``)."""

    key: str
    """Document key."""

    rev: str
    """Revision string assigned by the server."""


class ErrorEntity(BaseModel):
    """Error envelope returned by the server on a rejected request."""

    code: int
    """HTTP status code reported in the body."""

    error_num: int = 0
    """Server specific error number (``errorNum``)."""

    error_message: str = ""
    """Human readable message (``errorMessage``)."""

    @classmethod
    def from_response(cls, response: Response) -> ErrorEntity:
        """Build from a response, tolerating bodies that are not envelopes."""
        try:
            payload = response.body_json()
        except ValueError:
            payload = None
        if not isinstance(payload, dict):
            return cls(code=response.status, error_message=response.body.decode("utf-8", "replace"))
        return cls(
            code=int(payload.get("code", response.status)),
            error_num=int(payload.get("errorNum", 0)),
            error_message=str(payload.get("errorMessage", "")),
        )

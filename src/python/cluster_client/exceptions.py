"""Exception hierarchy for the cluster request layer."""

from __future__ import annotations

from http import HTTPStatus
from typing import Sequence

from .models import ErrorEntity, HostDescription


class ClusterClientError(Exception):
    """Base exception for all cluster client errors."""

    def __init__(self, message: str = "") -> None:
        self.message = message
        super().__init__(message)


# ── Connectivity Errors ───────────────────────────────────────────

class ConnectivityError(ClusterClientError):
    """Raised when a host cannot be reached. Drives failover."""

    def __init__(self, address: str, reason: str = "") -> None:
        self.address = address
        msg = f"Could not connect to {address}."
        if reason:
            msg += f" Reason: {reason}"
        super().__init__(msg)


class ConnectionTimeoutError(ConnectivityError):
    """Raised when establishing a connection to a host times out."""

    def __init__(self, address: str, timeout: float) -> None:
        self.timeout = timeout
        super().__init__(address, reason=f"Connect timed out after {timeout:.1f}s")


class RequestTimeoutError(ClusterClientError):
    """Raised when a host accepted a request but did not answer in time.

    Not retried: the server may already have applied the request.
    """

    def __init__(self, address: str, timeout: float | None) -> None:
        self.address = address
        self.timeout = timeout
        if timeout is None:
            msg = f"Request to {address} timed out."
        else:
            msg = f"Request to {address} timed out after {timeout:.1f}s."
        super().__init__(msg)


class ExhaustedRetriesError(ClusterClientError):
    """Raised when every allowed attempt of a retry episode has failed.

    Attributes:
        causes: The individual failures, in the order they occurred.
            Connectivity failures, plus the :class:`RedirectError` of
            any redirect that moved the episode to another host.
    """

    def __init__(self, causes: Sequence[BaseException], message: str = "Cannot contact any host!") -> None:
        self.causes: tuple[BaseException, ...] = tuple(causes)
        details = "; ".join(str(cause) for cause in self.causes)
        super().__init__(f"{message} [{details}]" if details else message)


class DiscoveryError(ClusterClientError):
    """Raised when the cluster host list cannot be refreshed. Never fatal."""

    def __init__(self, reason: str = "") -> None:
        msg = "Failed to acquire host list from the cluster."
        if reason:
            msg += f" Reason: {reason}"
        super().__init__(msg)


# ── Application Errors ────────────────────────────────────────────

class ApplicationError(ClusterClientError):
    """Raised when a reachable host rejected the request.

    Never triggers failover; surfaced to the caller unchanged.
    """

    def __init__(self, error: ErrorEntity) -> None:
        self.error = error
        try:
            self.status_code: HTTPStatus | int = HTTPStatus(error.code)
        except ValueError:
            self.status_code = error.code
        self.error_num = error.error_num
        super().__init__(f"Response: {error.code}, Error: {error.error_num} - {error.error_message}")

    @property
    def diagnostic_code(self) -> str:
        return str(self.error_num)

    @property
    def diagnostic_details(self) -> dict[str, str]:
        return {"code": str(self.error.code), "errorNum": str(self.error_num)}


class RedirectError(ApplicationError):
    """Raised when a host asks for the request to be served elsewhere."""

    def __init__(self, error: ErrorEntity, location: HostDescription) -> None:
        self.location = location
        super().__init__(error)

"""Interface shared by every host selection strategy."""

from __future__ import annotations

import abc

from ...models import AccessType, HostDescription
from ..host import Host
from ..host_handle import HostHandle


class HostHandler(abc.ABC):
    """Failover policy deciding which host serves the next attempt.

    One handler is shared by all requests of a client, so every
    implementation must apply ``success``, ``fail``, ``fail_if_not_match``
    and ``reset`` atomically with respect to each other.
    """

    @abc.abstractmethod
    def get(self, host_handle: HostHandle | None = None, access_type: AccessType | None = None) -> Host:
        """Return the host to try next.

        Raises:
            ExhaustedRetriesError: If the episode ran out of attempts.
                The episode is reset before raising.
        """
        ...

    @abc.abstractmethod
    def has_next(self, host_handle: HostHandle | None = None, access_type: AccessType | None = None) -> bool:
        """True if another attempt is allowed in the current episode."""
        ...

    @abc.abstractmethod
    def success(self) -> None:
        """Mark the current host as good and clear the episode."""
        ...

    @abc.abstractmethod
    def fail(self, cause: BaseException) -> None:
        """Record *cause* and move on to the next candidate host."""
        ...

    @abc.abstractmethod
    def fail_if_not_match(self, description: HostDescription, cause: BaseException) -> None:
        """Call :meth:`fail` unless the current host is *description*."""
        ...

    @abc.abstractmethod
    def reset(self) -> None:
        """Clear the episode without changing the selected host."""
        ...

    @abc.abstractmethod
    def close(self) -> None:
        """Close the resolver and every host connection."""
        ...

    @abc.abstractmethod
    def set_jwt(self, jwt: str | None) -> None:
        """Propagate a new bearer token to every host."""
        ...

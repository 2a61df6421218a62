"""Failure bookkeeping for one retry episode.

An episode spans the attempts between a success (or reset) and the
next success or exhaustion.  Instances are not synchronized; each
host handler guards its episode with its own lock.
"""

from __future__ import annotations

from typing import NoReturn

from ...exceptions import ExhaustedRetriesError

DEFAULT_RETRY_PASSES = 3


class RetryEpisode:
    """Iteration counter plus ordered failure causes.

    Parameters:
        retry_passes: Full passes over the host list allowed before
            the episode is exhausted.
    """

    def __init__(self, retry_passes: int = DEFAULT_RETRY_PASSES) -> None:
        if retry_passes < 1:
            raise ValueError(f"retry_passes must be >= 1, got {retry_passes}")
        self.retry_passes = retry_passes
        self.iterations = 0
        self._causes: list[BaseException] = []

    @property
    def causes(self) -> tuple[BaseException, ...]:
        return tuple(self._causes)

    @property
    def failures(self) -> int:
        return len(self._causes)

    def record(self, cause: BaseException) -> None:
        self._causes.append(cause)

    def next_pass(self) -> None:
        self.iterations += 1

    def within_passes(self) -> bool:
        return self.iterations < self.retry_passes

    def within_attempts(self, host_count: int) -> bool:
        """True while fewer than ``retry_passes × host_count`` failures were seen."""
        return self.failures < self.retry_passes * max(host_count, 1)

    def reset(self) -> None:
        self.iterations = 0
        self._causes.clear()

    def exhaust(self) -> ExhaustedRetriesError:
        """Build the aggregate error for this episode and start a fresh one."""
        error = ExhaustedRetriesError(self._causes)
        self.reset()
        return error


def raise_exhausted(error: ExhaustedRetriesError) -> NoReturn:
    """Raise *error* chained to the last failure it aggregates."""
    last = error.causes[-1] if error.causes else None
    raise error from last

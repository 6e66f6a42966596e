# streamstats/domain/errors.py
from __future__ import annotations

from dataclasses import dataclass
from typing import Optional


class StreamStatsError(Exception):
    """Root of all errors raised or returned by streamstats."""


@dataclass(frozen=True)
class ProbeError(StreamStatsError, RuntimeError):
    """
    Failure of a single probe run. Probe clients *return* these instead of
    raising so background refreshes can never take down their worker.
    """
    message: str
    endpoint: Optional[str] = None
    stderr: Optional[str] = None
    rc: Optional[int] = None

    def __str__(self) -> str:
        where = f" ({self.endpoint})" if self.endpoint else ""
        return f"{self.message}{where}"


@dataclass(frozen=True)
class ProbeUnavailable(ProbeError):
    """ffprobe could not be run or could not read the endpoint (streamer likely offline)."""


@dataclass(frozen=True)
class ProbeMalformed(ProbeError):
    """ffprobe ran but produced output we could not parse."""


class StorageFailure(StreamStatsError):
    """Raised by recording storage adapters; the cause is chained, not interpreted."""

    def __init__(self, message: str, *, key: Optional[str] = None) -> None:
        super().__init__(message)
        self.key = key

# streamstats/domain/dataclasses/reports.py
from __future__ import annotations

from dataclasses import dataclass, field, asdict, replace
from datetime import datetime, timezone
from typing import Any, Dict, Optional, Tuple


# ---------------------------------------------------------------------------
# Probe refresh counters kept by the streamer registry
# ---------------------------------------------------------------------------
@dataclass
class RefreshStats:
    """Running totals for background probes.

    - scheduled: probes handed to the worker pool
    - succeeded / failed: probes whose outcome was merged or recorded
    - discarded: outcomes dropped because the streamer was removed or re-added
    - last_errors: identity -> (when, message) of the most recent failure
    """
    scheduled: int = 0
    succeeded: int = 0
    failed: int = 0
    discarded: int = 0
    last_errors: Dict[str, Tuple[datetime, str]] = field(default_factory=dict)

    @property
    def completed(self) -> int:
        return self.succeeded + self.failed + self.discarded

    @property
    def in_flight(self) -> int:
        return max(0, self.scheduled - self.completed)

    def record_failure(self, identity: str, message: str, at: Optional[datetime] = None) -> None:
        self.failed += 1
        self.last_errors[identity] = (at or datetime.now(timezone.utc), message)

    def record_success(self, identity: str) -> None:
        self.succeeded += 1
        self.last_errors.pop(identity, None)

    def forget(self, identity: str) -> None:
        self.last_errors.pop(identity, None)

    def snapshot(self) -> "RefreshStats":
        return replace(self, last_errors=dict(self.last_errors))

    def as_dict(self) -> Dict[str, Any]:
        d = asdict(self)
        d["in_flight"] = self.in_flight
        return d

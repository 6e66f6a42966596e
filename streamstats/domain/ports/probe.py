from __future__ import annotations
from typing import Protocol, Union

from streamstats.domain.entities.probe import ProbeResult
from streamstats.domain.errors import ProbeError

ProbeOutcome = Union[ProbeResult, ProbeError]


class StreamProbePort(Protocol):
    # Implementations return ProbeError instead of raising
    def probe(self, endpoint: str) -> ProbeOutcome: ...

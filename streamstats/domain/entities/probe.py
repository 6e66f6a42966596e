# streamstats/domain/entities/probe.py
from __future__ import annotations

from dataclasses import dataclass, field
from types import MappingProxyType
from typing import Any, Mapping, Optional, Tuple

from streamstats.domain.enums.track_type import TrackType


@dataclass(frozen=True)
class ProbeStream:
    """One raw stream record from ffprobe, tagged with its track type."""
    track_type: TrackType
    raw: Mapping[str, Any] = field(default_factory=dict)

    def __post_init__(self) -> None:
        object.__setattr__(self, "raw", MappingProxyType(dict(self.raw)))

    def get(self, key: str, default: Any = None) -> Any:
        return self.raw.get(key, default)


@dataclass(frozen=True)
class ProbeResult:
    """
    Successful, un-normalised outcome of a probe: every stream ffprobe saw
    plus its format record. `format` is None when ffprobe reported none.
    Normalisation into track stats happens in services.mappers.
    """
    streams: Tuple[ProbeStream, ...] = ()
    format: Optional[Mapping[str, Any]] = None

    def __post_init__(self) -> None:
        object.__setattr__(self, "streams", tuple(self.streams))

    def of_type(self, track_type: TrackType) -> Tuple[ProbeStream, ...]:
        return tuple(s for s in self.streams if s.track_type is track_type)

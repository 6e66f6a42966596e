# streamstats/domain/entities/streamer.py
from __future__ import annotations

import math
from dataclasses import dataclass, field, replace
from datetime import datetime, timezone
from types import MappingProxyType
from typing import Any, Dict, Mapping, Optional, Tuple


def _utcnow() -> datetime:
    return datetime.now(timezone.utc)


def _frozen_map(data: Mapping[str, str] | None) -> Mapping[str, str]:
    return MappingProxyType(dict(data or {}))


@dataclass(frozen=True)
class Resolution:
    width: Optional[int] = None
    height: Optional[int] = None

    def __str__(self) -> str:
        return f"{self.width}x{self.height}"


@dataclass(frozen=True)
class VideoTrackStats:
    """
    One video rendition as last reported by ffprobe.

    `bitrate` is NaN when ffprobe did not report a usable value.
    `fps` stays in ffprobe's rational form (e.g. "30000/1001").
    `keyframes` is ffprobe's has_b_frames, passed through untouched.
    """
    duration_sec: float = math.nan
    codec: Optional[str] = None
    bitrate: float = math.nan
    fps: Optional[str] = None
    keyframes: Optional[int] = None
    resolution: Resolution = field(default_factory=Resolution)


@dataclass(frozen=True)
class AudioTrackStats:
    codec: Optional[str] = None
    bitrate: float = math.nan
    sample_rate: Optional[int] = None
    channels: Optional[int] = None


@dataclass(frozen=True)
class StreamerState:
    """
    Immutable snapshot of everything known about one live streamer.

    The registry never mutates an instance in place; every probe merge
    produces a new object, so a snapshot handed to a caller stays valid
    no matter what happens to the registry afterwards.
    """
    identity: str
    last_updated: datetime = field(default_factory=_utcnow)
    container_format: Mapping[str, str] = field(default_factory=dict)
    video_tracks: Tuple[VideoTrackStats, ...] = ()
    audio_tracks: Tuple[AudioTrackStats, ...] = ()

    def __post_init__(self) -> None:
        if not self.identity:
            raise ValueError("StreamerState requires a non-empty identity")
        # normalise collections so callers cannot mutate through the snapshot
        object.__setattr__(self, "container_format", _frozen_map(self.container_format))
        object.__setattr__(self, "video_tracks", tuple(self.video_tracks))
        object.__setattr__(self, "audio_tracks", tuple(self.audio_tracks))

    @classmethod
    def fresh(cls, identity: str) -> "StreamerState":
        """State of a streamer that has just been registered and not yet probed."""
        return cls(identity=identity)

    def with_probe(
        self,
        *,
        video_tracks: Tuple[VideoTrackStats, ...],
        audio_tracks: Tuple[AudioTrackStats, ...],
        container_format: Mapping[str, str] | None,
        at: Optional[datetime] = None,
    ) -> "StreamerState":
        """
        Apply a successful probe. Track lists are replaced wholesale; the
        container format is only replaced when the probe carried one.
        """
        return replace(
            self,
            last_updated=at or _utcnow(),
            video_tracks=video_tracks,
            audio_tracks=audio_tracks,
            container_format=self.container_format if container_format is None else container_format,
        )

    @property
    def has_probe_data(self) -> bool:
        return bool(self.video_tracks or self.audio_tracks or self.container_format)

    def as_dict(self) -> Dict[str, Any]:
        return {
            "identity": self.identity,
            "last_updated": self.last_updated,
            "container_format": dict(self.container_format),
            "video_tracks": [
                {
                    "duration_sec": v.duration_sec,
                    "codec": v.codec,
                    "bitrate": v.bitrate,
                    "fps": v.fps,
                    "keyframes": v.keyframes,
                    "resolution": {"width": v.resolution.width, "height": v.resolution.height},
                }
                for v in self.video_tracks
            ],
            "audio_tracks": [
                {
                    "codec": a.codec,
                    "bitrate": a.bitrate,
                    "sample_rate": a.sample_rate,
                    "channels": a.channels,
                }
                for a in self.audio_tracks
            ],
        }

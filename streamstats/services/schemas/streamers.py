# services/schemas/streamers.py
from __future__ import annotations

import math
from datetime import datetime
from typing import Dict, List, Optional

from pydantic import BaseModel, Field, field_validator

from streamstats.domain.entities.streamer import AudioTrackStats, StreamerState, VideoTrackStats


def _nan_to_none(v: Optional[float]) -> Optional[float]:
    if v is None or (isinstance(v, float) and math.isnan(v)):
        return None
    return v


class ResolutionSchema(BaseModel):
    width: Optional[int] = Field(None, examples=[1920])
    height: Optional[int] = Field(None, examples=[1080])


class VideoTrackSchema(BaseModel):
    duration_sec: Optional[float] = None
    codec: Optional[str] = Field(None, examples=["h264"])
    bitrate: Optional[float] = Field(None, description="bits/sec; null when ffprobe did not report one",
                                     examples=[2500000])
    fps: Optional[str] = Field(None, examples=["30000/1001"])
    keyframes: Optional[int] = None
    resolution: ResolutionSchema

    @field_validator("duration_sec", "bitrate", mode="before")
    @classmethod
    def _finite(cls, v):
        return _nan_to_none(v)

    @classmethod
    def from_domain(cls, v: VideoTrackStats) -> "VideoTrackSchema":
        return cls(
            duration_sec=v.duration_sec,
            codec=v.codec,
            bitrate=v.bitrate,
            fps=v.fps,
            keyframes=v.keyframes,
            resolution=ResolutionSchema(width=v.resolution.width, height=v.resolution.height),
        )


class AudioTrackSchema(BaseModel):
    codec: Optional[str] = Field(None, examples=["aac"])
    bitrate: Optional[float] = Field(None, examples=[128000])
    sample_rate: Optional[int] = Field(None, examples=[44100])
    channels: Optional[int] = Field(None, examples=[2])

    @field_validator("bitrate", mode="before")
    @classmethod
    def _finite(cls, v):
        return _nan_to_none(v)

    @classmethod
    def from_domain(cls, a: AudioTrackStats) -> "AudioTrackSchema":
        return cls(codec=a.codec, bitrate=a.bitrate, sample_rate=a.sample_rate, channels=a.channels)


class StreamerDataSchema(BaseModel):
    name: str = Field(..., examples=["bob"])
    timestamp: datetime
    format: Dict[str, str] = Field(default_factory=dict)
    video: List[VideoTrackSchema] = Field(default_factory=list)
    audio: List[AudioTrackSchema] = Field(default_factory=list)

    @classmethod
    def from_domain(cls, s: StreamerState) -> "StreamerDataSchema":
        return cls(
            name=s.identity,
            timestamp=s.last_updated,
            format=dict(s.container_format),
            video=[VideoTrackSchema.from_domain(v) for v in s.video_tracks],
            audio=[AudioTrackSchema.from_domain(a) for a in s.audio_tracks],
        )


class StreamerListResponse(BaseModel):
    streamers: List[str]


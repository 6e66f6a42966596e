# streamstats/services/mappers/tracks.py
from __future__ import annotations

from typing import Any, Dict, Mapping, Optional, Tuple

from streamstats.common.probe.ffprobe_helpers import maybe_int, maybe_str, to_number
from streamstats.domain.entities.probe import ProbeResult, ProbeStream
from streamstats.domain.entities.streamer import AudioTrackStats, Resolution, VideoTrackStats
from streamstats.domain.enums.track_type import TrackType

# format keys copied verbatim into the container map
_FORMAT_KEYS = ("filename", "format_name", "start_time", "probe_score")


def to_video_track(stream: ProbeStream) -> VideoTrackStats:
    return VideoTrackStats(
        duration_sec=to_number(stream.get("start_time")),
        codec=maybe_str(stream.get("codec_name")),
        bitrate=to_number(stream.get("bit_rate")),
        fps=maybe_str(stream.get("avg_frame_rate")),
        keyframes=maybe_int(stream.get("has_b_frames")),
        resolution=Resolution(
            width=maybe_int(stream.get("width")),
            height=maybe_int(stream.get("height")),
        ),
    )


def to_audio_track(stream: ProbeStream) -> AudioTrackStats:
    return AudioTrackStats(
        codec=maybe_str(stream.get("codec_name")),
        bitrate=to_number(stream.get("bit_rate")),
        sample_rate=maybe_int(stream.get("sample_rate")),
        channels=maybe_int(stream.get("channels")),
    )


def to_container_format(fmt: Optional[Mapping[str, Any]]) -> Optional[Dict[str, str]]:
    """
    Flatten ffprobe's format record into a str -> str map.
    Tags land under "tags.<name>". Returns None when there is nothing to keep,
    so callers can tell "no format data" apart from "empty format".
    """
    if not fmt:
        return None
    out: Dict[str, str] = {}
    for key in _FORMAT_KEYS:
        val = fmt.get(key)
        if val is not None:
            out[key] = str(val)
    tags = fmt.get("tags") or {}
    if isinstance(tags, Mapping):
        for name, val in tags.items():
            if val is not None:
                out[f"tags.{name}"] = str(val)
    return out or None


def partition_tracks(
    result: ProbeResult,
) -> Tuple[Tuple[VideoTrackStats, ...], Tuple[AudioTrackStats, ...]]:
    """Split a probe result into video and audio stats; other stream types are dropped."""
    video = tuple(to_video_track(s) for s in result.of_type(TrackType.video))
    audio = tuple(to_audio_track(s) for s in result.of_type(TrackType.audio))
    return video, audio

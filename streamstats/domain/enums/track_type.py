from __future__ import annotations
from enum import StrEnum


class TrackType(StrEnum):
    video = "video"
    audio = "audio"
    other = "other"

    @classmethod
    def from_codec_type(cls, value: object) -> "TrackType":
        """Map ffprobe's codec_type onto the three kinds we track."""
        if value == cls.video.value:
            return cls.video
        if value == cls.audio.value:
            return cls.audio
        return cls.other

from streamstats.domain.enums.track_type import TrackType
__all__ = [
    "TrackType",
]

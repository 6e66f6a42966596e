# streamstats/services/api/deps.py
from __future__ import annotations
from functools import lru_cache

from streamstats.domain.ports.probe import StreamProbePort
from streamstats.services.probe.ffprobe_adapter import FFprobeAdapter
from streamstats.services.registry.streamer_registry import StreamerRegistry


def get_stream_probe() -> StreamProbePort:
    """
    Provide a StreamProbePort implementation (ffprobe) via DI.
    Swappable later if you add other probers.
    """
    return FFprobeAdapter()


@lru_cache(maxsize=1)
def get_registry() -> StreamerRegistry:
    """
    Process-wide registry. State lives only in memory, so every worker
    process builds its own from scratch on start.
    """
    return StreamerRegistry(prober=get_stream_probe())

# streamstats/services/api/routers/health.py
from __future__ import annotations
from fastapi import APIRouter, Depends

from streamstats.common.settings import get_settings
from streamstats.services.api.deps import get_registry
from streamstats.services.registry.streamer_registry import StreamerRegistry

router = APIRouter()


@router.get("/healthz")
def healthz(registry: StreamerRegistry = Depends(get_registry)):
    s = get_settings()
    stats = registry.stats()
    return {
        "ok": True,
        "app": s.app_name,
        "env": s.app_env,
        "streamers": len(registry),
        "probes": {
            "scheduled": stats.scheduled,
            "succeeded": stats.succeeded,
            "failed": stats.failed,
            "discarded": stats.discarded,
            "in_flight": stats.in_flight,
        },
    }

# streamstats/services/api/routers/streamers.py
from __future__ import annotations
from http import HTTPStatus

from fastapi import APIRouter, Depends, HTTPException, Path, Response

from streamstats.common.settings import get_settings
from streamstats.services.api.deps import get_registry
from streamstats.services.registry.streamer_registry import StreamerRegistry
from streamstats.services.schemas.streamers import StreamerDataSchema, StreamerListResponse

cfg = get_settings()
router = APIRouter(prefix=f"{cfg.api.prefix}/streamers", tags=["streamers"])


@router.get("", response_model=StreamerListResponse)
def list_streamers(registry: StreamerRegistry = Depends(get_registry)) -> StreamerListResponse:
    return StreamerListResponse(streamers=registry.get_streamer_list())


@router.get("/{name}", response_model=StreamerDataSchema)
def get_streamer(
    name: str = Path(..., min_length=1, max_length=128, description="Case-insensitive streamer name"),
    registry: StreamerRegistry = Depends(get_registry),
) -> StreamerDataSchema:
    state = registry.get_streamer_data(name)
    if state is None:
        raise HTTPException(status_code=HTTPStatus.NOT_FOUND, detail=f"Streamer '{name}' not found")
    return StreamerDataSchema.from_domain(state)


@router.post("/{name}", status_code=HTTPStatus.ACCEPTED, response_model=StreamerListResponse)
def add_streamer(
    name: str = Path(..., min_length=1, max_length=128),
    registry: StreamerRegistry = Depends(get_registry),
) -> StreamerListResponse:
    """Called when a stream goes live. Re-adding an existing name resets its stats."""
    registry.add_streamer(name)
    return StreamerListResponse(streamers=registry.get_streamer_list())


@router.delete("/{name}", status_code=HTTPStatus.NO_CONTENT)
def remove_streamer(
    name: str = Path(..., min_length=1, max_length=128),
    registry: StreamerRegistry = Depends(get_registry),
) -> Response:
    """Called when a stream ends. Unknown names are ignored."""
    registry.remove_streamer(name)
    return Response(status_code=HTTPStatus.NO_CONTENT)


@router.post("/{name}/refresh", status_code=HTTPStatus.ACCEPTED)
def refresh_streamer(
    name: str = Path(..., min_length=1, max_length=128, description="Case-insensitive streamer name"),
    registry: StreamerRegistry = Depends(get_registry),
):
    if not registry.request_refresh(name):
        raise HTTPException(status_code=HTTPStatus.NOT_FOUND, detail=f"Streamer '{name}' not found")
    return {"ok": True, "name": registry.resolve_identity(name)}

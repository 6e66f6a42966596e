from __future__ import annotations

from contextlib import asynccontextmanager

from fastapi import FastAPI
from fastapi.middleware.cors import CORSMiddleware

from streamstats.common.settings import get_settings
from streamstats.services.api.deps import get_registry
from streamstats.services.api.routers import health, streamers

cfg = get_settings()


@asynccontextmanager
async def lifespan(app: FastAPI):
    yield
    # only tear down a registry that was actually built
    if get_registry.cache_info().currsize:
        get_registry().shutdown(wait=False)


def create_app() -> FastAPI:
    app = FastAPI(
        title="Streamstats API",
        version="0.1.0",
        docs_url=f"{cfg.api.prefix}/docs",
        openapi_url=f"{cfg.api.prefix}/openapi.json",
        lifespan=lifespan,
    )

    allow_origins = ["*"] if cfg.is_dev else cfg.api.cors_allow_origins
    # CORS
    app.add_middleware(
        CORSMiddleware,
        allow_origins=allow_origins,
        allow_methods=cfg.api.cors_allow_methods,
        allow_headers=cfg.api.cors_allow_headers,
        allow_credentials=cfg.api.cors_allow_credentials,
    )

    # Routers
    app.include_router(health.router)
    app.include_router(streamers.router)
    return app


app = create_app()

"""
RAML Server - application entry point.

The normal application (health check, anything not described by RAML) sits
behind the ZeroRouter dispatcher.
"""
from __future__ import annotations

from typing import Optional

from fastapi import FastAPI
from fastapi.responses import JSONResponse

from raml_api.dispatcher import ZeroRouter
from raml_api.middleware.auth import build_auth_gate
from raml_core.definition_cache import (
    BaseDefinitionStore,
    DefinitionCache,
    MemoryDefinitionStore,
    RedisDefinitionStore,
)
from raml_core.logging import log
from raml_core.settings.config import Settings, settings as default_settings


def build_definition_store(settings: Settings) -> Optional[BaseDefinitionStore]:
    if settings.definition_cache == "redis":
        return RedisDefinitionStore(
            url=settings.redis_url,
            prefix=settings.definition_cache_prefix,
            ttl_seconds=settings.definition_cache_ttl_seconds,
        )
    if settings.definition_cache == "memory":
        return MemoryDefinitionStore()
    return None


def create_fallback_app(settings: Settings) -> FastAPI:
    app = FastAPI(
        title=settings.app_name,
        description="Dispatcher for RAML described APIs",
        version=settings.app_version,
    )

    @app.api_route("/health", methods=["GET", "HEAD"])
    async def health_check():
        """Health check endpoint"""
        return JSONResponse(
            status_code=200,
            content={
                "status": "ok",
                "service": "raml-server",
                "version": settings.app_version,
            },
        )

    return app


def create_app(settings: Optional[Settings] = None) -> ZeroRouter:
    settings = settings or default_settings
    config = settings.router_config()
    store = build_definition_store(settings)
    log.info(
        "Starting RAML dispatcher: api={} raml={} cache={}",
        config.api_uri,
        config.raml_uri,
        settings.definition_cache,
    )
    return ZeroRouter(
        config,
        fallback=create_fallback_app(settings),
        definition_cache=DefinitionCache(store=store, index_file=settings.index_file),
        gate=build_auth_gate(settings.api_key),
    )


if __name__ == "__main__":
    import uvicorn

    uvicorn.run(
        "raml_api.main:create_app",
        factory=True,
        host="0.0.0.0",
        port=8000,
    )

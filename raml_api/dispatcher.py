"""
Pre-routing dispatcher.

``ZeroRouter`` sits in front of the normal application: requests under the
API prefix go to FastAPI apps generated from RAML definitions, requests under
the RAML prefix are answered with the RAML documents themselves, and
everything else falls through to the wrapped application.

Usage:
    app = ZeroRouter(settings.router_config(), fallback=FastAPI())
"""
from __future__ import annotations

import threading
from dataclasses import dataclass
from pathlib import Path
from typing import Any, Optional

from fastapi import FastAPI, Request
from fastapi.responses import JSONResponse, PlainTextResponse
from starlette.concurrency import run_in_threadpool
from starlette.types import ASGIApp, Receive, Scope, Send
from starlette.websockets import WebSocketClose

from raml_api.middleware.auth import AuthGate
from raml_api.processors import RouteProcessor
from raml_api.registrar import RouteRegistrar
from raml_api.spec_documents import SpecDocumentServer
from raml_core.classifier import classify_uri
from raml_core.definition_cache import DefinitionCache
from raml_core.errors import HandlerNotFoundError, SpecDocumentNotFound
from raml_core.logging import log
from raml_core.models.classification import ClassificationResult, RequestKind
from raml_core.models.definition import ApiDefinition
from raml_core.settings.config import RouterConfig


@dataclass(frozen=True)
class ApiBinding:
    """A FastAPI app built from one definition."""
    definition: ApiDefinition
    app: FastAPI


async def _handler_not_found(request: Request, exc: HandlerNotFoundError) -> JSONResponse:
    return JSONResponse(status_code=501, content={"detail": str(exc)})


def request_uri(scope: Scope) -> str:
    """Scheme, authority and path of the request; the query string is left out."""
    url = Request(scope).url
    return f"{url.scheme}://{url.netloc}{url.path}"


class ZeroRouter:
    def __init__(
        self,
        config: RouterConfig,
        fallback: Optional[ASGIApp] = None,
        definition_cache: Optional[DefinitionCache] = None,
        gate: Optional[AuthGate] = None,
        processor: Optional[RouteProcessor] = None,
    ):
        self.config = config
        # fail early on a missing server or URI part
        self.api_uri = config.api_uri
        self.raml_uri = config.raml_uri
        self.fallback = fallback
        self.definition_cache = definition_cache or DefinitionCache(
            index_file=config.get_option("index_file")
        )
        self.registrar = RouteRegistrar(config, gate=gate, processor=processor, router=self)
        self.documents = SpecDocumentServer(config)
        self._bindings: dict[tuple[str, str], ApiBinding] = {}
        self._bindings_lock = threading.Lock()

    def get_option(self, name: str, *default: Any) -> Any:
        return self.config.get_option(name, *default)

    @property
    def raml_root_directory(self) -> str:
        return self.config.raml_dir

    @property
    def controller_namespace(self) -> str:
        return self.config.controller_namespace

    def api_directory(self, api_name: str, version: str) -> Path:
        return Path(self.raml_root_directory) / api_name / version

    def api_index_file(self, api_name: str, version: str) -> str:
        return self.definition_cache.index_path(self.api_directory(api_name, version))

    def classify(self, uri: str) -> ClassificationResult:
        return classify_uri(self.config, uri)

    def get_api_app(self, api_name: str, version: str) -> FastAPI:
        """Return the app for an API version, rebuilding it when the definition changed."""
        definition = self.definition_cache.get_definition(self.api_directory(api_name, version))
        key = (api_name, version)
        with self._bindings_lock:
            binding = self._bindings.get(key)
            if binding is None or binding.definition != definition:
                binding = ApiBinding(definition, self.build_api_app(definition, api_name, version))
                self._bindings[key] = binding
        return binding.app

    def build_api_app(self, definition: ApiDefinition, api_name: str, version: str) -> FastAPI:
        app = FastAPI(
            title=definition.title,
            version=definition.version or version,
            openapi_url=None,
            docs_url=None,
            redoc_url=None,
        )
        app.add_exception_handler(HandlerNotFoundError, _handler_not_found)
        app.include_router(
            self.registrar.register_routes(definition, api_name, version),
            tags=[api_name],
        )
        return app

    def serve_raml_file(self, api_name: str, version: str, requested_file: str):
        return self.documents.serve(api_name, version, requested_file)

    async def _lifespan(self, receive: Receive, send: Send) -> None:
        """Acknowledge startup and shutdown when no fallback app owns the lifespan."""
        while True:
            message = await receive()
            if message["type"] == "lifespan.startup":
                await send({"type": "lifespan.startup.complete"})
            elif message["type"] == "lifespan.shutdown":
                await send({"type": "lifespan.shutdown.complete"})
                return

    async def __call__(self, scope: Scope, receive: Receive, send: Send) -> None:
        if scope["type"] != "http":
            if self.fallback is not None:
                await self.fallback(scope, receive, send)
            elif scope["type"] == "lifespan":
                await self._lifespan(receive, send)
            elif scope["type"] == "websocket":
                await WebSocketClose()(scope, receive, send)
            return

        result = self.classify(request_uri(scope))

        if result.kind is RequestKind.API:
            try:
                app = await run_in_threadpool(self.get_api_app, result.api_name, result.version)
            except SpecDocumentNotFound as exc:
                log.info("No RAML definition for {} {}: {}", result.api_name, result.version, exc)
                response = PlainTextResponse("Not Found", status_code=404)
                await response(scope, receive, send)
                return
            except Exception:
                log.exception("Failed to build API {} {}", result.api_name, result.version)
                raise
            await app(scope, receive, send)
            return

        if result.kind is RequestKind.SPEC:
            try:
                response = await run_in_threadpool(
                    self.serve_raml_file, result.api_name, result.version, result.spec_file
                )
            except SpecDocumentNotFound as exc:
                log.info("RAML document not found: {}", exc.path)
                response = PlainTextResponse("Not Found", status_code=404)
            await response(scope, receive, send)
            return

        if self.fallback is not None:
            await self.fallback(scope, receive, send)
            return
        response = PlainTextResponse("Not Found", status_code=404)
        await response(scope, receive, send)

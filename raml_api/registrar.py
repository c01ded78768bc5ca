"""Compile a parsed RAML definition into FastAPI routes."""

from __future__ import annotations

import inspect
from collections.abc import Callable
from typing import TYPE_CHECKING, Any, Optional

from fastapi import APIRouter, Depends, Request
from fastapi.responses import JSONResponse
from starlette.concurrency import run_in_threadpool

from raml_api.middleware.auth import AllowAllGate, AuthGate
from raml_api.processors import (
    DefaultProcessor,
    ProcessingContext,
    RouteDescriptor,
    RouteProcessor,
)
from raml_core.errors import RouteRegistrationError
from raml_core.logging import log
from raml_core.models.definition import ApiDefinition, HttpMethod
from raml_core.naming import generate_class_name, generate_method_name
from raml_core.settings.config import RouterConfig

if TYPE_CHECKING:
    from raml_api.dispatcher import ZeroRouter

_VERB_REGISTRATIONS: dict[HttpMethod, Callable[[APIRouter], Callable[..., Any]]] = {
    HttpMethod.GET: lambda api_router: api_router.get,
    HttpMethod.POST: lambda api_router: api_router.post,
    HttpMethod.PUT: lambda api_router: api_router.put,
    HttpMethod.PATCH: lambda api_router: api_router.patch,
    HttpMethod.DELETE: lambda api_router: api_router.delete,
    HttpMethod.HEAD: lambda api_router: api_router.head,
    HttpMethod.OPTIONS: lambda api_router: api_router.options,
}


def normalize_http_method(method: str) -> HttpMethod:
    try:
        return HttpMethod(str(method).strip().lower())
    except ValueError as exc:
        raise RouteRegistrationError(f"Unsupported HTTP method {method!r}") from exc


class RouteRegistrar:
    """Registers one FastAPI route per (method, resource) of a definition.

    Every route runs the auth gate as a dependency before its handler; the
    handler delegates to the route processor and always answers with the
    API media type.
    """

    def __init__(
        self,
        config: RouterConfig,
        gate: Optional[AuthGate] = None,
        processor: Optional[RouteProcessor] = None,
        router: Optional["ZeroRouter"] = None,
    ):
        self.config = config
        self.gate = gate or AllowAllGate()
        self.processor = processor or DefaultProcessor()
        self.router = router

    def route_prefix(self, definition: ApiDefinition, api_name: str, version: str) -> str:
        return f"/{self.config.api_uri_part}/{api_name}/{definition.version or version}"

    def describe_routes(
        self, definition: ApiDefinition, api_name: str, version: str
    ) -> list[RouteDescriptor]:
        prefix = self.route_prefix(definition, api_name, version)
        handler_class = generate_class_name(api_name, self.config.controller_namespace)
        descriptors = []
        for route in definition.routes():
            if not route.path.startswith("/"):
                raise RouteRegistrationError(f"Malformed resource path {route.path!r}")
            http_method = normalize_http_method(route.method)
            descriptors.append(
                RouteDescriptor(
                    http_method=http_method.value,
                    path_template=prefix + route.path,
                    handler_class=handler_class,
                    handler_method=generate_method_name(http_method.value, route.path),
                    route=route,
                )
            )
        return descriptors

    def register_routes(
        self,
        definition: ApiDefinition,
        api_name: str,
        version: str,
        api_router: Optional[APIRouter] = None,
    ) -> APIRouter:
        """Build the complete router for one API version.

        Raises ``RouteRegistrationError`` before anything is registered when a
        route cannot be compiled.
        """
        api_router = api_router or APIRouter()
        descriptors = self.describe_routes(definition, api_name, version)

        seen: dict[str, str] = {}
        for descriptor in descriptors:
            handler = f"{descriptor.handler_class}.{descriptor.handler_method}"
            if handler in seen:
                log.warning(
                    "Handler name {} generated for both {} and {} {}",
                    handler,
                    seen[handler],
                    descriptor.http_method.upper(),
                    descriptor.path_template,
                )
            seen[handler] = f"{descriptor.http_method.upper()} {descriptor.path_template}"

            register = _VERB_REGISTRATIONS[HttpMethod(descriptor.http_method)](api_router)
            register(
                descriptor.path_template,
                dependencies=[Depends(self.gate)],
                name=descriptor.handler_method,
                response_class=JSONResponse,
            )(self._make_endpoint(descriptor, api_name, version))

        log.info(
            "Registered {} routes for {} {} (definition version {})",
            len(descriptors),
            api_name,
            version,
            definition.version,
        )
        return api_router

    def _make_endpoint(self, descriptor: RouteDescriptor, api_name: str, version: str):
        media_type = self.config.get_option("api_media_type")

        async def endpoint(request: Request) -> JSONResponse:
            context = ProcessingContext(
                request=request,
                route=descriptor,
                api_name=api_name,
                version=version,
            )
            if inspect.iscoroutinefunction(self.processor.process):
                await self.processor.process(self.router, context, descriptor)
            else:
                await run_in_threadpool(self.processor.process, self.router, context, descriptor)

            return JSONResponse(
                content=context.payload,
                status_code=context.status_code,
                headers=context.headers,
                media_type=media_type,
            )

        endpoint.__name__ = descriptor.handler_method
        return endpoint

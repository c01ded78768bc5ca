"""
Per-route processors invoked by generated API handlers.

A processor receives the dispatcher, a ``ProcessingContext`` wrapping the
request and the response under construction, and the matched route. Its
return value is ignored; it answers by mutating the context.
"""
from __future__ import annotations

import importlib
from dataclasses import dataclass, field
from typing import TYPE_CHECKING, Any, Optional, Protocol

from fastapi import Request

from raml_core.errors import HandlerNotFoundError
from raml_core.logging import log
from raml_core.models.definition import Route

if TYPE_CHECKING:
    from raml_api.dispatcher import ZeroRouter


@dataclass(frozen=True)
class RouteDescriptor:
    http_method: str
    path_template: str
    handler_class: str
    handler_method: str
    route: Route


@dataclass
class ProcessingContext:
    request: Request
    route: RouteDescriptor
    api_name: str
    version: str
    status_code: int = 200
    payload: Any = None
    headers: dict[str, str] = field(default_factory=dict)

    @property
    def path_params(self) -> dict[str, Any]:
        return dict(self.request.path_params)


class RouteProcessor(Protocol):
    def process(
        self,
        router: Optional["ZeroRouter"],
        context: ProcessingContext,
        route: RouteDescriptor,
    ) -> Any:
        ...


class DefaultProcessor:
    """Dispatch to ``<namespace>.<ApiClass>().<methodName>(**path_params)``.

    ``handler_class`` on the route is the dotted path built from the
    controller namespace, e.g. ``controllers.TestApi`` for the module
    ``controllers``. The controller is instantiated with the processing
    context; a non-``None`` return value becomes the response payload.
    """

    def process(
        self,
        router: Optional["ZeroRouter"],
        context: ProcessingContext,
        route: RouteDescriptor,
    ) -> None:
        handler = self.resolve_handler(route, context)
        result = handler(**context.path_params)
        if result is not None:
            context.payload = result

    def resolve_handler(self, route: RouteDescriptor, context: ProcessingContext):
        module_name, _, class_name = route.handler_class.rpartition(".")
        qualified = f"{route.handler_class}.{route.handler_method}"
        if not module_name:
            raise HandlerNotFoundError(qualified)

        try:
            module = importlib.import_module(module_name)
        except ModuleNotFoundError as exc:
            # a broken import inside the controller module is not a missing handler
            if exc.name != module_name and not module_name.startswith(f"{exc.name}."):
                raise
            log.warning("Controller module {} not found: {}", module_name, exc)
            raise HandlerNotFoundError(qualified) from exc

        controller_class = getattr(module, class_name, None)
        if controller_class is None:
            raise HandlerNotFoundError(qualified)

        handler = getattr(controller_class(context), route.handler_method, None)
        if not callable(handler):
            raise HandlerNotFoundError(qualified)
        return handler

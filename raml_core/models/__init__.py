from raml_core.models.classification import NO_MATCH, ClassificationResult, RequestKind
from raml_core.models.definition import (
    ApiDefinition,
    HttpMethod,
    Resource,
    ResourceMethod,
    Route,
)

__all__ = [
    "ApiDefinition",
    "ClassificationResult",
    "HttpMethod",
    "NO_MATCH",
    "RequestKind",
    "Resource",
    "ResourceMethod",
    "Route",
]

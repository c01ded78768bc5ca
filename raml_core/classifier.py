"""URI classification for the pre-routing dispatcher."""

from __future__ import annotations

from raml_core.models.classification import NO_MATCH, ClassificationResult, RequestKind
from raml_core.settings.config import RouterConfig


def classify_uri(config: RouterConfig, uri: str) -> ClassificationResult:
    """Decide whether ``uri`` targets the API, a RAML document or neither.

    API URIs look like ``{server}/{api_uri_part}/{api_name}/{version}/...``,
    RAML URIs like ``{server}/{raml_uri_part}/{api_name}/{version}/{file}``.
    Prefixes are compared as plain strings.
    """
    api_uri = config.api_uri
    raml_uri = config.raml_uri

    if uri.startswith(api_uri):
        parts = uri[len(api_uri) + 1:].split("/")
        if len(parts) >= 2 and parts[0] and parts[1]:
            return ClassificationResult(RequestKind.API, api_name=parts[0], version=parts[1])
        return NO_MATCH

    if uri.startswith(raml_uri):
        parts = uri[len(raml_uri) + 1:].split("/", 2)
        # at least api-name and version must be part of url
        if len(parts) >= 3 and parts[0] and parts[1]:
            return ClassificationResult(
                RequestKind.SPEC,
                api_name=parts[0],
                version=parts[1],
                spec_file=parts[2],
            )
    return NO_MATCH

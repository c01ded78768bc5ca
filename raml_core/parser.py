"""
RAML parser producing ``ApiDefinition`` objects.

Only the parts the dispatcher needs are read: title, version, baseUri,
mediaType and the resource/method tree. ``!include`` tags are resolved
relative to the API directory.
"""
from __future__ import annotations

from pathlib import Path
from typing import Any, Protocol

import yaml

from raml_core.errors import SpecParseError
from raml_core.models.definition import ApiDefinition, Resource, ResourceMethod

RAML_HEADER = "#%RAML"

# Keys of a resource node that declare methods
RAML_METHODS = frozenset({"get", "post", "put", "patch", "delete", "head", "options"})

_YAML_SUFFIXES = frozenset({".raml", ".yaml", ".yml"})

# Numbers stay as written: "version: 1.10" must not become "1.1"
_TEXT_TAGS = frozenset({"tag:yaml.org,2002:int", "tag:yaml.org,2002:float"})

_TEXT_RESOLVERS = {
    first: [(tag, regexp) for tag, regexp in resolvers if tag not in _TEXT_TAGS]
    for first, resolvers in yaml.SafeLoader.yaml_implicit_resolvers.items()
}


class SpecificationParser(Protocol):
    def parse(self, source: str, base_directory: str | Path) -> ApiDefinition:
        ...


def _make_loader(base_directory: Path) -> type[yaml.SafeLoader]:
    class IncludeLoader(yaml.SafeLoader):
        yaml_implicit_resolvers = _TEXT_RESOLVERS

    def include(loader: yaml.SafeLoader, node: yaml.Node) -> Any:
        target = base_directory / loader.construct_scalar(node)
        try:
            text = target.read_text(encoding="utf-8")
        except OSError as exc:
            raise SpecParseError(f"cannot include {target}: {exc}", str(base_directory)) from exc
        if target.suffix.lower() in _YAML_SUFFIXES:
            return yaml.load(text, Loader=_make_loader(target.parent))
        return text

    IncludeLoader.add_constructor("!include", include)
    return IncludeLoader


def _optional_str(value: Any) -> str | None:
    return None if value is None else str(value)


class RamlParser:
    """Parses RAML source text into an ``ApiDefinition``."""

    def parse(self, source: str, base_directory: str | Path) -> ApiDefinition:
        base = Path(base_directory)
        if not source.lstrip().startswith(RAML_HEADER):
            raise SpecParseError("missing #%RAML header", str(base))

        try:
            document = yaml.load(source, Loader=_make_loader(base))
        except yaml.YAMLError as exc:
            raise SpecParseError(str(exc), str(base)) from exc

        if not isinstance(document, dict):
            raise SpecParseError("root node must be a mapping", str(base))
        if not document.get("title"):
            raise SpecParseError("title is required", str(base))

        return ApiDefinition(
            title=str(document["title"]),
            version=_optional_str(document.get("version")),
            base_uri=_optional_str(document.get("baseUri")),
            media_type=_optional_str(document.get("mediaType")),
            resources=self._parse_resources(document, str(base)),
        )

    def parse_file(self, index_path: str | Path) -> ApiDefinition:
        path = Path(index_path)
        try:
            source = path.read_text(encoding="utf-8")
        except OSError as exc:
            raise SpecParseError(str(exc), str(path)) from exc
        return self.parse(source, path.parent)

    def _parse_resources(self, node: dict, location: str) -> list[Resource]:
        resources = []
        for key, body in node.items():
            if not isinstance(key, str) or not key.startswith("/"):
                continue
            body = body or {}
            if not isinstance(body, dict):
                raise SpecParseError(f"resource {key} must be a mapping", location)
            resources.append(
                Resource(
                    relative_uri=key,
                    display_name=_optional_str(body.get("displayName")),
                    description=_optional_str(body.get("description")),
                    methods=self._parse_methods(body),
                    resources=self._parse_resources(body, location),
                )
            )
        return resources

    def _parse_methods(self, body: dict) -> list[ResourceMethod]:
        methods = []
        for key, method_body in body.items():
            name = str(key).lower()
            if name not in RAML_METHODS:
                continue
            method_body = method_body if isinstance(method_body, dict) else {}
            methods.append(
                ResourceMethod(
                    method=name,
                    description=_optional_str(method_body.get("description")),
                    display_name=_optional_str(method_body.get("displayName")),
                )
            )
        return methods

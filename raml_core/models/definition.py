"""
In-memory form of a parsed RAML tree.
"""
from __future__ import annotations

from enum import Enum
from typing import Optional

from pydantic import BaseModel, ConfigDict, Field


class HttpMethod(str, Enum):
    """HTTP methods a RAML resource may declare."""
    GET = "get"
    POST = "post"
    PUT = "put"
    PATCH = "patch"
    DELETE = "delete"
    HEAD = "head"
    OPTIONS = "options"


class ResourceMethod(BaseModel):
    """One method declared on a resource."""
    model_config = ConfigDict(frozen=True)

    method: str
    description: Optional[str] = None
    display_name: Optional[str] = None


class Resource(BaseModel):
    """A resource node; nested resources extend the parent's URI."""
    model_config = ConfigDict(frozen=True)

    relative_uri: str
    display_name: Optional[str] = None
    description: Optional[str] = None
    methods: list[ResourceMethod] = Field(default_factory=list)
    resources: list["Resource"] = Field(default_factory=list)


class Route(BaseModel):
    """A (method, absolute path) pair flattened out of the resource tree."""
    model_config = ConfigDict(frozen=True)

    method: str
    path: str
    description: Optional[str] = None


class ApiDefinition(BaseModel):
    """Parsed RAML definition of one API version."""
    model_config = ConfigDict(frozen=True)

    title: str
    version: Optional[str] = None
    base_uri: Optional[str] = None
    media_type: Optional[str] = None
    resources: list[Resource] = Field(default_factory=list)

    def routes(self) -> list[Route]:
        """Return every route depth-first in declaration order."""
        collected: list[Route] = []

        def walk(resource: Resource, parent_path: str) -> None:
            path = parent_path + resource.relative_uri
            for method in resource.methods:
                collected.append(
                    Route(method=method.method, path=path, description=method.description)
                )
            for child in resource.resources:
                walk(child, path)

        for resource in self.resources:
            walk(resource, "")
        return collected


Resource.model_rebuild()

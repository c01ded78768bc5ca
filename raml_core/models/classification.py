"""
Result of classifying a request URI.
"""
from __future__ import annotations

from dataclasses import dataclass
from enum import Enum
from typing import Optional


class RequestKind(str, Enum):
    API = "API"
    SPEC = "SPEC"
    NONE = "NONE"


@dataclass(frozen=True)
class ClassificationResult:
    kind: RequestKind = RequestKind.NONE
    api_name: Optional[str] = None
    version: Optional[str] = None
    spec_file: Optional[str] = None

    @property
    def is_api_request(self) -> bool:
        return self.kind is RequestKind.API

    @property
    def is_raml_request(self) -> bool:
        return self.kind is RequestKind.SPEC


NO_MATCH = ClassificationResult()

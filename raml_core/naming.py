"""Handler names derived from API names, HTTP methods and resource paths."""

from __future__ import annotations

import re
from typing import Optional

_WORD_SEPARATORS = re.compile(r"[-_]")


def _pascal_case(value: str) -> str:
    return "".join(word[:1].upper() + word[1:] for word in _WORD_SEPARATORS.split(value) if word)


def generate_class_name(api_name: str, namespace: Optional[str] = None) -> str:
    """``test-api`` -> ``TestApi``; with a namespace, ``Namespace.TestApi``."""
    class_name = _pascal_case(api_name)
    if namespace:
        return f"{namespace.rstrip('.')}.{class_name}"
    return class_name


def generate_method_name(http_method: str, path: str) -> str:
    """``GET /users/search`` -> ``getUsersSearch``.

    Templated segments such as ``{id}`` do not contribute to the name.
    """
    segments = [
        _pascal_case(segment)
        for segment in path.split("/")
        if segment and not (segment.startswith("{") and segment.endswith("}"))
    ]
    return http_method.lower() + "".join(segments)

"""
Error types raised by the RAML dispatcher.
"""
from __future__ import annotations


class RamlServerError(Exception):
    """Base class for dispatcher errors."""


class ConfigurationError(RamlServerError, KeyError):
    """A required router option is missing."""

    def __init__(self, option_name: str):
        self.option_name = option_name
        super().__init__(f"RamlServer: Invalid configuration, key `{option_name}` is missing")

    def __str__(self) -> str:
        return self.args[0]


class SpecParseError(RamlServerError):
    """The RAML tree could not be parsed into a definition."""

    def __init__(self, message: str, path: str | None = None):
        self.path = path
        super().__init__(f"{path}: {message}" if path else message)


class SpecDocumentNotFound(RamlServerError):
    """A requested RAML document does not exist."""

    def __init__(self, path: str):
        self.path = path
        super().__init__(f"File {path} does not exist.")


class RouteRegistrationError(RamlServerError):
    """A route from the definition cannot be registered."""


class HandlerNotFoundError(RamlServerError):
    """No controller class or method exists for a generated handler name."""

    def __init__(self, handler: str):
        self.handler = handler
        super().__init__(f"No handler implemented for {handler}")

"""Serve RAML documents from disk.

The index document gets its ``baseUri:`` line pointed at this server so
clients loading the RAML can call the API directly.
"""

from __future__ import annotations

import re
from pathlib import Path

from starlette.responses import FileResponse, Response

from raml_core.errors import SpecDocumentNotFound
from raml_core.logging import log
from raml_core.settings.config import RouterConfig

BASE_URI_PATTERN = re.compile(rb"^(baseUri:)[ \t]*[^\r\n]+", re.MULTILINE)


def rewrite_base_uri(document: bytes, api_url: str) -> bytes:
    """Replace the value of the first ``baseUri:`` line, leaving every other byte as is."""
    replacement = b"\\1 " + api_url.encode("utf-8").replace(b"\\", b"\\\\")
    return BASE_URI_PATTERN.sub(replacement, document, count=1)


class SpecDocumentServer:
    def __init__(self, config: RouterConfig):
        self.config = config

    @property
    def index_file(self) -> str:
        return self.config.get_option("index_file")

    @property
    def media_type(self) -> str:
        return self.config.get_option("raml_media_type")

    def api_directory(self, api_name: str, version: str) -> Path:
        return Path(self.config.raml_dir) / api_name / version

    def api_url(self, api_name: str, version: str) -> str:
        return f"{self.config.api_uri}/{api_name}/{version}"

    def resolve(self, api_name: str, version: str, requested_file: str) -> Path:
        api_directory = self.api_directory(api_name, version)
        local_path = api_directory / requested_file
        resolved = local_path.resolve()
        if not resolved.is_relative_to(api_directory.resolve()) or not resolved.is_file():
            raise SpecDocumentNotFound(str(local_path))
        return resolved

    def serve(self, api_name: str, version: str, requested_file: str) -> Response:
        local_path = self.resolve(api_name, version, requested_file)

        if requested_file == self.index_file:
            api_url = self.api_url(api_name, version)
            log.debug("Serving {} with baseUri {}", local_path, api_url)
            return Response(
                content=rewrite_base_uri(local_path.read_bytes(), api_url),
                media_type=self.media_type,
            )

        return FileResponse(local_path, media_type=self.media_type)

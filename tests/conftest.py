"""Test configuration and fixtures.

Provides a throwaway RAML tree under ``tmp_path`` and router options pointing
at it. ``sample_controllers`` (next to this file) is the controller namespace
used by tests that exercise the default processor.
"""

from pathlib import Path

import pytest

from raml_core.settings.config import RouterConfig

SERVER = "http://test-server"

INDEX_RAML = """#%RAML 1.0
title: Test API
version: v1
baseUri: http://old/x
mediaType: application/json
types: !include types.raml
/search:
  get:
    description: Full text search
/users:
  displayName: Users
  get:
  post:
  /search:
    get:
  /{userId}:
    get:
    delete:
"""

TYPES_RAML = """#%RAML 1.0 Library
User:
  type: object
  properties:
    name: string
"""

README = "# Test API\r\n\r\nbaseUri: not rewritten here\r\n"


def write_raml_tree(root: Path, api_name: str = "test-api", version: str = "v1") -> Path:
    api_dir = root / api_name / version
    (api_dir / "schemas").mkdir(parents=True, exist_ok=True)
    (api_dir / "index.raml").write_text(INDEX_RAML, encoding="utf-8")
    (api_dir / "types.raml").write_text(TYPES_RAML, encoding="utf-8")
    (api_dir / "schemas" / "user.json").write_text('{"type": "object"}', encoding="utf-8")
    (api_dir / "README.md").write_bytes(README.encode("utf-8"))
    return api_dir


@pytest.fixture
def raml_dir(tmp_path) -> Path:
    root = tmp_path / "raml"
    write_raml_tree(root)
    return root


@pytest.fixture
def api_dir(raml_dir) -> Path:
    return raml_dir / "test-api" / "v1"


@pytest.fixture
def router_config(raml_dir) -> RouterConfig:
    return RouterConfig(
        {
            "server": SERVER,
            "api_uri_part": "api",
            "raml_uri_part": "raml",
            "raml_dir": str(raml_dir),
            "controller_namespace": "sample_controllers",
        }
    )

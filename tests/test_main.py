import pytest
from fastapi.testclient import TestClient

from raml_api.dispatcher import ZeroRouter
from raml_api.main import build_definition_store, create_app
from raml_core.definition_cache import MemoryDefinitionStore, RedisDefinitionStore
from raml_core.errors import ConfigurationError
from raml_core.settings.config import Settings

from conftest import SERVER


@pytest.fixture
def env(monkeypatch, raml_dir):
    monkeypatch.setenv("RAML_SERVER_URL", SERVER)
    monkeypatch.setenv("RAML_API_URI_PART", "api")
    monkeypatch.setenv("RAML_URI_PART", "raml")
    monkeypatch.setenv("RAML_DIR", str(raml_dir))
    monkeypatch.setenv("RAML_CONTROLLER_NAMESPACE", "sample_controllers")
    monkeypatch.setenv("DEFINITION_CACHE", "memory")
    monkeypatch.delenv("RAML_API_KEY", raising=False)
    return monkeypatch


def test_create_app_serves_all_three_kinds(env):
    client = TestClient(create_app(Settings(_env_file=None)), base_url=SERVER)

    assert client.get("/health").json()["status"] == "ok"
    assert client.get("/api/test-api/v1/search").status_code == 200
    assert client.get("/raml/test-api/v1/index.raml").status_code == 200


def test_create_app_with_api_key(env):
    env.setenv("RAML_API_KEY", "secret")
    client = TestClient(create_app(Settings(_env_file=None)), base_url=SERVER)

    assert client.get("/api/test-api/v1/search").status_code == 401
    response = client.get("/api/test-api/v1/search", headers={"Authorization": "Bearer secret"})
    assert response.status_code == 200
    # RAML documents are public
    assert client.get("/raml/test-api/v1/index.raml").status_code == 200


def test_create_app_requires_server(env):
    env.delenv("RAML_SERVER_URL")

    with pytest.raises(ConfigurationError):
        create_app(Settings(_env_file=None))


def test_build_definition_store(env):
    assert isinstance(build_definition_store(Settings(_env_file=None)), MemoryDefinitionStore)

    env.setenv("DEFINITION_CACHE", "none")
    assert build_definition_store(Settings(_env_file=None)) is None

    env.setenv("DEFINITION_CACHE", "redis")
    env.setenv("REDIS_URL", "redis://localhost:6399/3")
    store = build_definition_store(Settings(_env_file=None))
    assert isinstance(store, RedisDefinitionStore)


def test_create_app_returns_dispatcher(env):
    assert isinstance(create_app(Settings(_env_file=None)), ZeroRouter)

import pytest

from raml_core.errors import ConfigurationError
from raml_core.settings.config import RouterConfig, Settings


def test_get_option_returns_value_or_default():
    config = RouterConfig({"server": "http://test-server"})
    assert config.get_option("server") == "http://test-server"
    assert config.get_option("raml_dir", "/tmp/raml") == "/tmp/raml"
    assert config.get_option("raml_dir", None) is None


def test_missing_option_raises_configuration_error():
    config = RouterConfig({})
    with pytest.raises(ConfigurationError) as exc_info:
        config.get_option("controller_namespace")
    assert exc_info.value.option_name == "controller_namespace"
    assert str(exc_info.value) == (
        "RamlServer: Invalid configuration, key `controller_namespace` is missing"
    )
    with pytest.raises(KeyError):
        config["controller_namespace"]


def test_router_config_is_read_only_mapping():
    config = RouterConfig({"server": "http://test-server"})
    assert "server" in config
    assert "raml_dir" not in config
    assert config["index_file"] == "index.raml"
    with pytest.raises(TypeError):
        config._options["server"] = "http://elsewhere"


def test_prefixes():
    config = RouterConfig(server="http://test-server", api_uri_part="api", raml_uri_part="raml")
    assert config.api_uri == "http://test-server/api"
    assert config.raml_uri == "http://test-server/raml"


def test_settings_from_environment(monkeypatch, tmp_path):
    monkeypatch.setenv("RAML_SERVER_URL", "http://test-server")
    monkeypatch.setenv("RAML_API_URI_PART", "api")
    monkeypatch.setenv("RAML_URI_PART", "raml")
    monkeypatch.setenv("RAML_DIR", str(tmp_path))
    monkeypatch.setenv("RAML_CONTROLLER_NAMESPACE", "controllers")
    monkeypatch.setenv("DEFINITION_CACHE", "none")

    settings = Settings()
    config = settings.router_config()

    assert settings.definition_cache == "none"
    assert config.server == "http://test-server"
    assert config.raml_dir == str(tmp_path)
    assert config.controller_namespace == "controllers"
    assert config.get_option("raml_media_type") == "text/raml"


def test_settings_missing_key_fails_on_access(monkeypatch):
    for name in (
        "RAML_SERVER_URL",
        "RAML_API_URI_PART",
        "RAML_URI_PART",
        "RAML_DIR",
        "RAML_CONTROLLER_NAMESPACE",
    ):
        monkeypatch.delenv(name, raising=False)
    monkeypatch.setenv("RAML_SERVER_URL", "http://test-server")

    config = Settings(_env_file=None).router_config()

    assert config.server == "http://test-server"
    with pytest.raises(ConfigurationError):
        config.raml_dir

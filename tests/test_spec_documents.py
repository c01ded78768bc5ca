import pytest
from fastapi.testclient import TestClient

from raml_api.dispatcher import ZeroRouter
from raml_api.spec_documents import SpecDocumentServer, rewrite_base_uri
from raml_core.errors import SpecDocumentNotFound

from conftest import INDEX_RAML, README, SERVER


def _client(router_config) -> TestClient:
    return TestClient(ZeroRouter(router_config), base_url=SERVER)


def test_rewrite_base_uri_only_touches_that_line():
    document = b"#%RAML 1.0\r\ntitle: X\r\nbaseUri:   http://old/x\r\n/a:\r\n  get:\r\n"
    rewritten = rewrite_base_uri(document, "http://test-server/api/x/v1")
    assert rewritten == (
        b"#%RAML 1.0\r\ntitle: X\r\nbaseUri: http://test-server/api/x/v1\r\n/a:\r\n  get:\r\n"
    )


def test_rewrite_base_uri_ignores_indented_keys():
    document = b"title: X\n  baseUri: nested\n"
    assert rewrite_base_uri(document, "http://new") == document


def test_rewrite_base_uri_keeps_backslashes_literal():
    document = b"baseUri: http://old\n"
    assert rewrite_base_uri(document, r"http://new/\1") == b"baseUri: http://new/\\1\n"


def test_index_document_base_uri_is_rewritten(router_config):
    response = SpecDocumentServer(router_config).serve("test-api", "v1", "index.raml")

    expected = INDEX_RAML.replace(
        "baseUri: http://old/x", "baseUri: http://test-server/api/test-api/v1"
    )
    assert response.body == expected.encode("utf-8")
    assert response.media_type == "text/raml"


def test_api_url(router_config):
    server = SpecDocumentServer(router_config)
    assert server.api_url("test-api", "v1") == "http://test-server/api/test-api/v1"


def test_missing_document(router_config):
    with pytest.raises(SpecDocumentNotFound):
        SpecDocumentServer(router_config).serve("test-api", "v1", "missing.raml")


@pytest.mark.parametrize(
    "requested",
    ["../../../outside.txt", "../v1/../../../outside.txt", "schemas"],
)
def test_paths_outside_the_api_directory_or_directories_are_not_served(
    router_config, raml_dir, requested
):
    (raml_dir.parent / "outside.txt").write_text("secret")
    with pytest.raises(SpecDocumentNotFound):
        SpecDocumentServer(router_config).serve("test-api", "v1", requested)


def test_serve_index_over_http(router_config):
    response = _client(router_config).get("/raml/test-api/v1/index.raml")

    assert response.status_code == 200
    assert response.headers["content-type"].startswith("text/raml")
    assert "baseUri: http://test-server/api/test-api/v1\n" in response.text
    assert "http://old/x" not in response.text


def test_other_documents_are_served_unmodified(router_config):
    client = _client(router_config)

    readme = client.get("/raml/test-api/v1/README.md")
    schema = client.get("/raml/test-api/v1/schemas/user.json")

    assert readme.status_code == 200
    assert readme.content == README.encode("utf-8")
    assert readme.headers["content-type"].startswith("text/raml")
    assert schema.content == b'{"type": "object"}'


def test_missing_document_over_http_is_404(router_config):
    response = _client(router_config).get("/raml/test-api/v1/missing.raml")

    assert response.status_code == 404
    assert response.text == "Not Found"


def test_crlf_index_is_rewritten_over_http(router_config, api_dir):
    (api_dir / "index.raml").write_bytes(INDEX_RAML.replace("\n", "\r\n").encode("utf-8"))

    response = _client(router_config).get("/raml/test-api/v1/index.raml")

    assert response.status_code == 200
    assert response.content == INDEX_RAML.replace(
        "baseUri: http://old/x", "baseUri: http://test-server/api/test-api/v1"
    ).replace("\n", "\r\n").encode("utf-8")

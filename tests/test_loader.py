"""Unit tests for OpenAPI document loading."""

from __future__ import annotations

import json
from pathlib import Path

import httpx
import pytest

from openapi_to_ts_client_generator.loader import (
    OpenAPILoadError,
    ensure_supported_version,
    get_component_schemas,
    get_openapi_version,
    get_path_map,
    is_url,
    load_openapi_document,
)

from .fixture_helpers import fixture_path

_DOCUMENT = {
    "openapi": "3.0.0",
    "info": {"title": "Remote", "version": "1"},
    "paths": {"/b": {}, "/a": {}},
}


def test_load_yaml_fixture() -> None:
    """YAML documents load as mappings."""
    document = load_openapi_document(str(fixture_path("users_api.yaml")))
    assert document["openapi"] == "3.0.3"


def test_load_json_file_preserves_key_order(tmp_path: Path) -> None:
    """JSON documents keep their declaration order."""
    spec_path = tmp_path / "spec.json"
    spec_path.write_text(json.dumps(_DOCUMENT), encoding="utf-8")
    document = load_openapi_document(str(spec_path))
    assert list(get_path_map(document)) == ["/b", "/a"]


def test_missing_file_raises(tmp_path: Path) -> None:
    """Unreadable files raise a load error."""
    with pytest.raises(OpenAPILoadError, match="Failed to read"):
        load_openapi_document(str(tmp_path / "missing.yaml"))


def test_invalid_json_raises(tmp_path: Path) -> None:
    """Malformed JSON raises a load error."""
    spec_path = tmp_path / "spec.json"
    spec_path.write_text("{not json", encoding="utf-8")
    with pytest.raises(OpenAPILoadError, match="Failed to parse JSON"):
        load_openapi_document(str(spec_path))


def test_non_mapping_document_raises(tmp_path: Path) -> None:
    """Documents must deserialize to a mapping."""
    spec_path = tmp_path / "spec.yaml"
    spec_path.write_text("- just\n- a list\n", encoding="utf-8")
    with pytest.raises(OpenAPILoadError, match="mapping"):
        load_openapi_document(str(spec_path))


def test_load_from_url_uses_client() -> None:
    """URL locations are fetched with the provided HTTP client."""
    seen: list[httpx.Request] = []

    def _handler(request: httpx.Request) -> httpx.Response:
        seen.append(request)
        return httpx.Response(200, json=_DOCUMENT)

    with httpx.Client(transport=httpx.MockTransport(_handler)) as client:
        document = load_openapi_document("https://api.example.com/openapi.json", client=client)

    assert document["info"] == {"title": "Remote", "version": "1"}
    assert seen[0].headers["accept"] == "application/json"


def test_url_fetch_failure_raises() -> None:
    """HTTP errors surface as load errors."""

    def _handler(request: httpx.Request) -> httpx.Response:
        return httpx.Response(404, text="missing")

    with httpx.Client(transport=httpx.MockTransport(_handler)) as client:
        with pytest.raises(OpenAPILoadError, match="Failed to fetch"):
            load_openapi_document("http://api.example.com/openapi.json", client=client)


def test_is_url() -> None:
    """Only http and https locations are fetched."""
    assert is_url("https://example.com/spec.json")
    assert is_url("HTTP://example.com/spec.json")
    assert not is_url("./spec.json")
    assert not is_url("ftp://example.com/spec.json")


@pytest.mark.parametrize("version", ["3.0.0", "3.0.3", "3.1.0"])
def test_v3_versions_are_supported(version: str) -> None:
    """Every v3 document version is accepted."""
    ensure_supported_version(version)


@pytest.mark.parametrize("version", ["2.0", "4.0.0", "three"])
def test_other_versions_are_rejected(version: str) -> None:
    """Versions other than v3 are rejected."""
    with pytest.raises(OpenAPILoadError):
        ensure_supported_version(version)


def test_swagger_document_has_no_openapi_version() -> None:
    """Swagger 2 documents lack the ``openapi`` field."""
    with pytest.raises(OpenAPILoadError, match="version"):
        get_openapi_version({"swagger": "2.0"})


def test_missing_paths_raises() -> None:
    """A document without ``paths`` cannot be compiled."""
    with pytest.raises(OpenAPILoadError, match="paths"):
        get_path_map({"openapi": "3.0.0"})


def test_component_schemas_default_to_empty() -> None:
    """Documents without components have no models."""
    assert get_component_schemas({"paths": {}}) == {}
    assert list(get_component_schemas({"components": {"schemas": {"B": {}, "A": {}}}})) == ["B", "A"]

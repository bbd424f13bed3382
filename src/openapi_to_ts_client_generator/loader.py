"""OpenAPI document loading from local files or URLs."""

from __future__ import annotations

import json
import re
from pathlib import Path
from typing import Any, Optional

import httpx
import yaml

from .json_types import JSONObject

_URL_RE = re.compile(r"^https?://", re.IGNORECASE)
_FETCH_TIMEOUT_SECONDS = 30.0


class OpenAPILoadError(RuntimeError):
    """Raised when a source OpenAPI document cannot be loaded."""


def is_url(location: str) -> bool:
    """Return whether a spec location should be fetched over HTTP."""
    return bool(_URL_RE.match(location))


def load_openapi_document(location: str, *, client: Optional[httpx.Client] = None) -> JSONObject:
    """Load an OpenAPI document from a path or an ``http(s)://`` URL.

    Args:
        location (str): File path or URL of a JSON or YAML document.
        client (Optional[httpx.Client]): Client used for URLs; a short-lived
            one is created when omitted.

    Returns:
        JSONObject: Parsed document mapping.
    """
    if is_url(location):
        payload = _fetch_document(location, client=client)
    else:
        payload = _read_document(Path(location))

    if not isinstance(payload, dict):
        raise OpenAPILoadError(
            f"OpenAPI document must deserialize to a mapping, got {type(payload)!r}"
        )
    return payload


def _read_document(path: Path) -> Any:
    try:
        text = path.read_text(encoding="utf-8")
    except OSError as exc:
        raise OpenAPILoadError(f"Failed to read OpenAPI file {path}: {exc}") from exc
    return _parse_text(text, source=str(path), is_json=path.suffix.lower() == ".json")


def _fetch_document(url: str, *, client: Optional[httpx.Client]) -> Any:
    try:
        if client is None:
            with httpx.Client(timeout=_FETCH_TIMEOUT_SECONDS, follow_redirects=True) as owned:
                response = owned.get(url, headers={"Accept": "application/json"})
        else:
            response = client.get(url, headers={"Accept": "application/json"})
        response.raise_for_status()
    except httpx.HTTPError as exc:
        raise OpenAPILoadError(f"Failed to fetch OpenAPI document from {url}: {exc}") from exc

    content_type = response.headers.get("content-type", "")
    return _parse_text(response.text, source=url, is_json="json" in content_type)


def _parse_text(text: str, *, source: str, is_json: bool) -> Any:
    if is_json:
        try:
            return json.loads(text)
        except json.JSONDecodeError as exc:
            raise OpenAPILoadError(f"Failed to parse JSON in {source}: {exc}") from exc
    try:
        return yaml.safe_load(text)
    except yaml.YAMLError as exc:
        raise OpenAPILoadError(f"Failed to parse YAML in {source}: {exc}") from exc


def get_openapi_version(document: JSONObject) -> str:
    """Return the declared OpenAPI version string."""
    version = document.get("openapi")
    if not isinstance(version, str) or not version.strip():
        raise OpenAPILoadError("Missing or invalid 'openapi' version field")
    return version.strip()


def ensure_supported_version(version: str) -> None:
    """Validate that the input version is OpenAPI v3."""
    major_text = version.split(".", maxsplit=1)[0]
    try:
        major = int(major_text)
    except ValueError as exc:
        raise OpenAPILoadError(f"Unable to parse OpenAPI version: {version}") from exc
    if major != 3:
        raise OpenAPILoadError(f"Unsupported OpenAPI version {version}; only v3 is supported")


def get_path_map(document: JSONObject) -> dict[str, dict[str, Any]]:
    """Return path items keyed by raw path, in declaration order."""
    raw_paths = document.get("paths")
    if not isinstance(raw_paths, dict):
        raise OpenAPILoadError("OpenAPI document missing 'paths' object")

    path_map: dict[str, dict[str, Any]] = {}
    for path, path_item in raw_paths.items():
        if isinstance(path, str) and isinstance(path_item, dict):
            path_map[path] = path_item
    return path_map


def get_component_schemas(document: JSONObject) -> dict[str, Any]:
    """Return ``components.schemas``, or an empty mapping when absent."""
    components = document.get("components")
    if not isinstance(components, dict):
        return {}
    schemas = components.get("schemas")
    if not isinstance(schemas, dict):
        return {}
    return {str(name): schema for name, schema in schemas.items()}

"""Extract operation descriptors from OpenAPI path items."""

from __future__ import annotations

from collections.abc import Iterable
from typing import Any, Optional

from .model_types import ContentDescriptor, OperationDescriptor, ParamDescriptor, ParamLocation
from .schema_types import parse_schema, resolve_ref_name

KNOWN_METHODS: tuple[str, ...] = (
    "post",
    "get",
    "patch",
    "delete",
    "put",
)

_PATH_ITEM_FIELDS = frozenset({"summary", "description", "servers", "parameters", "$ref"})

OPERATION_ID_SEPARATOR = "_"
FALLBACK_SERVICE_NAME = "Service"
FALLBACK_METHOD_NAME = "unknownName"
FALLBACK_BODY_NAME = "bodyArgs"
RESPONSE_ARGUMENT_NAME = "response"
JSON_MEDIA_TYPE = "application/json"

_RESPONSE_STATUS_ORDER: tuple[str, ...] = ("200", "201")
_DEFAULT_PARAMETER_SCHEMA: dict[str, Any] = {"type": "string"}


class UnknownOperationError(RuntimeError):
    """Raised when a path declares an HTTP method outside the supported set."""


def ensure_known_methods(raw_path: str, path_item: dict[str, Any]) -> None:
    """Fail the generation run when a path declares an unsupported method.

    Args:
        raw_path (str): Raw OpenAPI path template.
        path_item (dict[str, Any]): Path item object keyed by method.

    Raises:
        UnknownOperationError: If any key is neither a known method nor path metadata.
    """
    unknown = [
        str(key)
        for key in path_item
        if key not in KNOWN_METHODS
        and key not in _PATH_ITEM_FIELDS
        and not str(key).startswith("x-")
    ]
    if unknown:
        raise UnknownOperationError(
            f"Unknown operation(s) found for {raw_path}: {', '.join(unknown)}"
        )


def declared_methods(path_item: dict[str, Any]) -> list[str]:
    """Return the path item's operation keys in declaration order."""
    return [
        key for key in path_item if key in KNOWN_METHODS and isinstance(path_item[key], dict)
    ]


def split_operation_id(operation_id: Any) -> tuple[str, str]:
    """Derive ``(service_name, method_name)`` from an operation identifier.

    ``UserController_getUser`` becomes ``("UserService", "getUser")``.
    Identifiers that do not split into exactly two segments share the
    fallback pair, so such operations may collide.
    """
    if not isinstance(operation_id, str):
        return FALLBACK_SERVICE_NAME, FALLBACK_METHOD_NAME
    segments = operation_id.split(OPERATION_ID_SEPARATOR)
    if len(segments) != 2:
        return FALLBACK_SERVICE_NAME, FALLBACK_METHOD_NAME
    owner, method_name = segments
    return owner.replace("Controller", "Service", 1), method_name


def uses_fallback_name(operation_id: Any) -> bool:
    """Return whether the identifier falls back to the generic names."""
    return not (
        isinstance(operation_id, str)
        and len(operation_id.split(OPERATION_ID_SEPARATOR)) == 2
    )


def to_argument_name(type_name: str) -> str:
    """Lower the leading character: ``CreateUserDto`` -> ``createUserDto``."""
    return type_name[:1].lower() + type_name[1:]


def merge_parameters(
    path_parameters: Iterable[Any],
    operation_parameters: Iterable[Any],
) -> list[dict[str, Any]]:
    """Merge path-level and operation-level parameters.

    An operation parameter with the same ``(name, in)`` pair replaces the
    path-level one in place.
    """
    merged: list[dict[str, Any]] = [
        parameter for parameter in path_parameters if isinstance(parameter, dict)
    ]
    for parameter in operation_parameters:
        if not isinstance(parameter, dict):
            continue
        key = (parameter.get("name"), parameter.get("in"))
        for index, existing in enumerate(merged):
            if (existing.get("name"), existing.get("in")) == key:
                merged[index] = parameter
                break
        else:
            merged.append(parameter)
    return merged


def parse_parameters(
    parameters: Iterable[dict[str, Any]],
) -> tuple[list[ParamDescriptor], list[str]]:
    """Parse path and query parameters in declaration order.

    Args:
        parameters (Iterable[dict[str, Any]]): Raw parameter objects.

    Returns:
        tuple[list[ParamDescriptor], list[str]]: Parsed parameters, and a
            label for every parameter carried anywhere other than the path
            or the query string.
    """
    parsed: list[ParamDescriptor] = []
    skipped: list[str] = []
    for parameter in parameters:
        name = str(parameter.get("name", ""))
        location = parameter.get("in")
        if location not in {"path", "query"}:
            skipped.append(f"{name} (in: {location})")
            continue
        schema = parameter.get("schema")
        parsed.append(
            ParamDescriptor(
                name=name,
                required=bool(parameter.get("required", False)),
                location=ParamLocation(location),
                type=parse_schema(schema if isinstance(schema, dict) else _DEFAULT_PARAMETER_SCHEMA),
            )
        )
    return parsed, skipped


def _json_schema(content: Any) -> Optional[dict[str, Any]]:
    if not isinstance(content, dict):
        return None
    media = content.get(JSON_MEDIA_TYPE)
    if not isinstance(media, dict):
        return None
    schema = media.get("schema")
    return schema if isinstance(schema, dict) else None


def _import_name(schema: dict[str, Any]) -> Optional[str]:
    if schema.get("type") is not None:
        return None
    return resolve_ref_name(schema.get("$ref")) or None


def extract_body_content(operation: dict[str, Any]) -> Optional[ContentDescriptor]:
    """Build the body descriptor from the ``application/json`` request body.

    A referenced schema names the argument after the model; inline schemas
    use ``bodyArgs``. An omitted ``required`` flag means the body is required.
    """
    request_body = operation.get("requestBody")
    if not isinstance(request_body, dict):
        return None
    schema = _json_schema(request_body.get("content"))
    if schema is None:
        return None

    import_name = _import_name(schema)
    return ContentDescriptor(
        argument_name=to_argument_name(import_name) if import_name else FALLBACK_BODY_NAME,
        type=parse_schema(schema),
        required=bool(request_body.get("required", True)),
        import_name=import_name,
    )


def extract_response_content(operation: dict[str, Any]) -> Optional[ContentDescriptor]:
    """Build the response descriptor from the ``200`` or else ``201`` response."""
    responses = operation.get("responses")
    if not isinstance(responses, dict):
        return None
    by_status = {str(status): response for status, response in responses.items()}

    response: Any = None
    for status in _RESPONSE_STATUS_ORDER:
        if status in by_status:
            response = by_status[status]
            break
    if not isinstance(response, dict):
        return None
    schema = _json_schema(response.get("content"))
    if schema is None:
        return None

    return ContentDescriptor(
        argument_name=RESPONSE_ARGUMENT_NAME,
        type=parse_schema(schema),
        required=True,
        import_name=_import_name(schema),
    )


def extract_operation(
    raw_path: str,
    http_method: str,
    operation: dict[str, Any],
    *,
    path_parameters: Iterable[Any] = (),
) -> OperationDescriptor:
    """Derive naming, parameters, body and response for one operation.

    Args:
        raw_path (str): Raw OpenAPI path template.
        http_method (str): Lower-case HTTP method key.
        operation (dict[str, Any]): Operation object.
        path_parameters (Iterable[Any]): Parameters declared on the path item.

    Returns:
        OperationDescriptor: Descriptor ready for service aggregation.
    """
    service_name, method_name = split_operation_id(operation.get("operationId"))
    raw_parameters = operation.get("parameters")
    parameters = merge_parameters(
        path_parameters,
        raw_parameters if isinstance(raw_parameters, list) else [],
    )
    ordered, skipped = parse_parameters(parameters)

    return OperationDescriptor(
        raw_path=raw_path,
        http_method=http_method,
        service_name=service_name,
        method_name=method_name,
        params=tuple(ordered),
        body=extract_body_content(operation),
        response=extract_response_content(operation),
        skipped_parameters=tuple(skipped),
    )

"""High-level generator orchestration."""

from __future__ import annotations

from collections.abc import Sequence
from dataclasses import dataclass
from pathlib import Path
from typing import Any, Optional

import httpx

from .codegen_ts import SourceFileDecl, build_models_file, build_utils_file
from .json_types import JSONObject
from .loader import (
    OpenAPILoadError,
    ensure_supported_version,
    get_component_schemas,
    get_openapi_version,
    get_path_map,
    load_openapi_document,
)
from .model_types import GenerationResult, ModelEntry, ServiceUnit
from .operations import (
    FALLBACK_METHOD_NAME,
    FALLBACK_SERVICE_NAME,
    UnknownOperationError,
    declared_methods,
    ensure_known_methods,
    extract_operation,
    uses_fallback_name,
)
from .schema_types import parse_schema
from .services import ServiceRegistry, build_service_file, renamed_props_keys
from .verify import VerificationReport, verify_references
from .writer import WriteError, write_source_files

DEFAULT_HEADER_LINES: tuple[str, ...] = (
    "/* eslint-disable */",
    "// This file was generated by openapi-to-ts-client-generator. Do not edit.",
)


@dataclass(frozen=True)
class CompiledClient:
    """In-memory client sources for one OpenAPI document."""

    files: tuple[SourceFileDecl, ...]
    models: tuple[ModelEntry, ...]
    services: tuple[ServiceUnit, ...]
    warnings: tuple[str, ...]


@dataclass(frozen=True)
class GenerationRun:
    """Generation result with optional verification report."""

    result: GenerationResult
    verification_report: Optional[VerificationReport]


def run_generation(
    *,
    spec_location: str,
    output_dir: Path,
    header: bool = True,
    verify: bool = False,
    client: Optional[httpx.Client] = None,
) -> GenerationRun:
    """Generate a TypeScript client from an OpenAPI document.

    Args:
        spec_location (str): Path or URL of the OpenAPI document.
        output_dir (Path): Directory where generated files are written.
        header (bool): Whether generated files start with the header lines.
        verify (bool): Whether to check references after generation.
        client (Optional[httpx.Client]): HTTP client for URL locations.

    Returns:
        GenerationRun: Generation metadata and optional verification report.
    """
    document = load_openapi_document(spec_location, client=client)
    ensure_supported_version(get_openapi_version(document))

    compiled = compile_document(
        document,
        header_lines=DEFAULT_HEADER_LINES if header else (),
    )
    written = write_source_files(output_dir=output_dir, files=compiled.files)

    result = GenerationResult(
        output_dir=str(output_dir),
        written_files=tuple(str(path) for path in written),
        model_count=len(compiled.models),
        service_names=tuple(unit.name for unit in compiled.services),
        warnings=compiled.warnings,
    )
    if not verify:
        return GenerationRun(result=result, verification_report=None)

    report = verify_references(models=compiled.models, services=compiled.services)
    return GenerationRun(result=result, verification_report=report)


def compile_document(
    document: JSONObject,
    *,
    header_lines: Sequence[str] = DEFAULT_HEADER_LINES,
) -> CompiledClient:
    """Compile a document into source file declarations without touching disk.

    Raises:
        UnknownOperationError: If any path declares an unsupported method.
    """
    path_map = get_path_map(document)
    models = build_model_entries(document)
    registry, warnings = build_service_registry(path_map)

    files = [
        build_utils_file(header_lines),
        build_models_file(models, header_lines),
    ]
    files.extend(build_service_file(unit, header_lines) for unit in registry.services)
    return CompiledClient(
        files=tuple(files),
        models=models,
        services=registry.services,
        warnings=tuple(warnings),
    )


def build_model_entries(document: JSONObject) -> tuple[ModelEntry, ...]:
    """Resolve every component schema once, in declaration order."""
    return tuple(
        ModelEntry(name=name, type=parse_schema(schema))
        for name, schema in get_component_schemas(document).items()
    )


def build_service_registry(
    path_map: dict[str, dict[str, Any]],
) -> tuple[ServiceRegistry, list[str]]:
    """Extract and register every operation, collecting warnings."""
    registry = ServiceRegistry()
    warnings: list[str] = []
    for raw_path, path_item in path_map.items():
        ensure_known_methods(raw_path, path_item)
        methods = declared_methods(path_item)
        if not methods:
            warnings.append(f"No operations found for {raw_path}; skipping")
            continue

        path_parameters = path_item.get("parameters")
        for method in methods:
            operation = path_item[method]
            label = f"{method.upper()} {raw_path}"
            operation_id = operation.get("operationId")
            if uses_fallback_name(operation_id):
                warnings.append(
                    f"operationId {operation_id!r} of {label} does not split into two "
                    f"segments; using {FALLBACK_SERVICE_NAME}.{FALLBACK_METHOD_NAME}"
                )
            descriptor = extract_operation(
                raw_path,
                method,
                operation,
                path_parameters=path_parameters if isinstance(path_parameters, list) else (),
            )
            for skipped in descriptor.skipped_parameters:
                warnings.append(
                    f"Ignoring parameter {skipped} of {label}; "
                    "only path and query parameters are supported"
                )
            for declared, key in renamed_props_keys(descriptor):
                warnings.append(
                    f"Input {declared!r} of {label} clashes with another input; "
                    f"passed as props[{key!r}]"
                )
            registry.register(descriptor)
    return registry, warnings


__all__ = [
    "CompiledClient",
    "GenerationRun",
    "compile_document",
    "run_generation",
    "OpenAPILoadError",
    "UnknownOperationError",
    "WriteError",
]

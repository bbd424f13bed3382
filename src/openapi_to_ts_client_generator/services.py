"""Group operations into service units and build their class declarations."""

from __future__ import annotations

import re
from collections.abc import Iterable, Mapping, Sequence
from typing import Optional

from .codegen_ts import (
    SERVICES_DIR,
    ClassDecl,
    ImportDecl,
    MethodDecl,
    ParameterDecl,
    SourceFileDecl,
    Statement,
    add_named_imports,
    print_call,
    print_destructure,
    print_object_literal,
    print_string_template,
)
from .model_types import OperationDescriptor, ParamDescriptor, ParamLocation, ServiceUnit
from .schema_types import (
    collect_complex_type_names,
    print_string,
    property_key,
    render_record,
    render_type,
    to_identifier,
)

UTILS_MODULE = "../utils"
MODELS_MODULE = "../models"
CONFIGURATION_TYPE = "Configuration"
CONFIGURATION_ALIAS = "ClientConfiguration"
CONFIGURATION_ATTRIBUTE = "configuration"
PROPS_ARGUMENT = "props"
ABSENT = "undefined"
NO_RESPONSE_TYPE = "void"

_PATH_PLACEHOLDER_RE = re.compile(r"\{([^{}]+)\}")
_LOCATION_SUFFIXES = {ParamLocation.PATH: "Path", ParamLocation.QUERY: "Query"}
# Locals every method body already declares.
_METHOD_LOCALS = frozenset({"baseUrl", "adapter", PROPS_ARGUMENT})


class ServiceRegistry:
    """Keyed table of service units for one generation run."""

    def __init__(self) -> None:
        self._units: dict[str, ServiceUnit] = {}

    def register(self, descriptor: OperationDescriptor) -> ServiceUnit:
        """Upsert the owning unit, then its method, then refresh imports.

        A second operation with the same service and method name replaces the
        first one in its original slot, and drops the imports only the
        replaced operation needed.

        Args:
            descriptor (OperationDescriptor): Operation to add.

        Returns:
            ServiceUnit: The unit that now owns the operation.
        """
        unit = self._units.get(descriptor.service_name)
        if unit is None:
            unit = ServiceUnit(name=descriptor.service_name)
            self._units[descriptor.service_name] = unit

        unit.methods[descriptor.method_name] = descriptor
        unit.imports = _dedupe(
            name
            for method in unit.methods.values()
            for name in collect_operation_imports(method)
        )
        return unit

    @property
    def services(self) -> tuple[ServiceUnit, ...]:
        """Service units in first-registration order."""
        return tuple(self._units.values())

    def __len__(self) -> int:
        return len(self._units)


def _dedupe(names: Iterable[str]) -> list[str]:
    unique: list[str] = []
    for name in names:
        if name not in unique:
            unique.append(name)
    return unique


def _unique_name(base: str, taken: Iterable[str]) -> str:
    taken = set(taken)
    candidate = base
    counter = 2
    while candidate in taken:
        candidate = f"{base}{counter}"
        counter += 1
    return candidate


def collect_operation_imports(descriptor: OperationDescriptor) -> list[str]:
    """List model names a method's signature and return type depend on."""
    names: list[str] = []
    if descriptor.body is not None and descriptor.body.import_name:
        names.append(descriptor.body.import_name)
    if descriptor.response is not None:
        names.extend(collect_complex_type_names(descriptor.response.type))
    if descriptor.body is not None:
        names.extend(collect_complex_type_names(descriptor.body.type))
    for param in descriptor.params:
        names.extend(collect_complex_type_names(param.type))
    return _dedupe(names)


def props_keys(descriptor: OperationDescriptor) -> tuple[Optional[str], tuple[str, ...]]:
    """Return the props record keys of the body and of each parameter.

    The body keeps its argument name. A parameter whose name is already
    taken gets its location appended (``idQuery``), then a counter.
    """
    taken: set[str] = set()
    body_key: Optional[str] = None
    if descriptor.body is not None:
        body_key = descriptor.body.argument_name
        taken.add(body_key)

    param_keys: list[str] = []
    for param in descriptor.params:
        key = param.name
        if key in taken:
            key = _unique_name(f"{param.name}{_LOCATION_SUFFIXES[param.location]}", taken)
        taken.add(key)
        param_keys.append(key)
    return body_key, tuple(param_keys)


def renamed_props_keys(descriptor: OperationDescriptor) -> list[tuple[str, str]]:
    """List ``(declared_name, props_key)`` pairs for parameters renamed on a clash."""
    _, param_keys = props_keys(descriptor)
    return [
        (param.name, key)
        for param, key in zip(descriptor.params, param_keys)
        if param.name != key
    ]


def path_aliases(params: Sequence[ParamDescriptor], keys: Sequence[str]) -> dict[str, str]:
    """Map each path parameter name to the local variable it is bound to.

    Names that are valid identifiers and do not shadow a method local are
    bound as-is; others get a derived identifier.
    """
    aliases: dict[str, str] = {}
    used = set(_METHOD_LOCALS)
    for param, key in zip(params, keys):
        if param.location is not ParamLocation.PATH or param.name in aliases:
            continue
        alias = to_identifier(key)
        if alias in used:
            alias = _unique_name(f"{alias}Param", used)
        used.add(alias)
        aliases[param.name] = alias
    return aliases


def path_to_template(raw_path: str, aliases: Optional[Mapping[str, str]] = None) -> str:
    """Rewrite ``{param}`` placeholders as ``${param}`` substitutions.

    Placeholders listed in ``aliases`` substitute the aliased variable.
    """
    aliases = aliases or {}
    return _PATH_PLACEHOLDER_RE.sub(
        lambda match: f"${{{aliases.get(match.group(1), match.group(1))}}}",
        raw_path,
    )


def build_props_type(descriptor: OperationDescriptor) -> Optional[str]:
    """Render the aggregate input record, or ``None`` when nothing is passed in.

    The body argument comes first, then every parameter in declaration order.
    """
    body_key, param_keys = props_keys(descriptor)
    fields: list[tuple[str, str, bool]] = []
    if descriptor.body is not None and body_key is not None:
        fields.append(
            (
                body_key,
                render_type(descriptor.body.type, indent=2),
                descriptor.body.required,
            )
        )
    fields.extend(
        (key, render_type(param.type, indent=2), param.required)
        for param, key in zip(descriptor.params, param_keys)
    )
    if not fields:
        return None
    return render_record(fields, indent=1)


def _props_access(name: str) -> str:
    return f"{PROPS_ARGUMENT}[{print_string(name)}]"


def _destructure_entry(key: str, alias: str) -> str:
    if key == alias:
        return key
    return f"{property_key(key)}: {alias}"


def build_method(descriptor: OperationDescriptor) -> MethodDecl:
    """Build the method that forwards one operation to the adapter."""
    body_key, param_keys = props_keys(descriptor)
    aliases = path_aliases(descriptor.params, param_keys)

    statements: list[str] = [
        print_destructure(f"this.{CONFIGURATION_ATTRIBUTE}", ["baseUrl", "adapter"]),
    ]
    path_entries: list[str] = []
    bound: set[str] = set()
    for param, key in zip(descriptor.params, param_keys):
        if param.location is ParamLocation.PATH and param.name not in bound:
            bound.add(param.name)
            path_entries.append(_destructure_entry(key, aliases[param.name]))
    if path_entries:
        statements.append(print_destructure(PROPS_ARGUMENT, path_entries))
    statements.append("")

    query_entries = [
        (property_key(param.name), _props_access(key))
        for param, key in zip(descriptor.params, param_keys)
        if param.location is ParamLocation.QUERY
    ]
    query_args = print_object_literal(query_entries) if query_entries else ABSENT
    body_args = _props_access(body_key) if body_key is not None else ABSENT
    response_type = (
        render_type(descriptor.response.type)
        if descriptor.response is not None
        else NO_RESPONSE_TYPE
    )
    url = path_to_template(descriptor.raw_path, aliases)
    request = print_object_literal(
        [
            ("url", print_string_template(f"${{baseUrl}}{url}")),
            ("method", print_string(descriptor.http_method.upper())),
            ("queryParams", query_args),
            ("bodyArgs", body_args),
        ]
    )
    statements.append(f"return {print_call('adapter', [request], type_argument=response_type)};")

    props_type = build_props_type(descriptor)
    parameters: tuple[ParameterDecl, ...] = ()
    if props_type is not None:
        parameters = (ParameterDecl(name=PROPS_ARGUMENT, type_text=props_type),)

    return MethodDecl(
        name=descriptor.method_name,
        parameters=parameters,
        statements=tuple(statements),
    )


def configuration_type_name(unit: ServiceUnit) -> str:
    """Local name of the client configuration type inside a service file.

    A model called ``Configuration`` keeps its name, and the client
    configuration is imported under an alias instead.
    """
    if CONFIGURATION_TYPE not in unit.imports:
        return CONFIGURATION_TYPE
    return _unique_name(CONFIGURATION_ALIAS, unit.imports)


def build_service_class(unit: ServiceUnit) -> ClassDecl:
    """Build the exported service class for a unit."""
    return ClassDecl(
        name=unit.name,
        constructor_parameters=(
            ParameterDecl(
                name=CONFIGURATION_ATTRIBUTE,
                type_text=configuration_type_name(unit),
                scope="private",
            ),
        ),
        methods=tuple(build_method(descriptor) for descriptor in unit.methods.values()),
    )


def build_service_file(unit: ServiceUnit, header_lines: Sequence[str]) -> SourceFileDecl:
    """Build ``services/<Name>.ts`` for a unit, imports included."""
    local_name = configuration_type_name(unit)
    imported = (
        CONFIGURATION_TYPE
        if local_name == CONFIGURATION_TYPE
        else f"{CONFIGURATION_TYPE} as {local_name}"
    )
    statements: list[Statement] = [
        ImportDecl(module=UTILS_MODULE, names=(imported,)),
    ]
    add_named_imports(statements, module=MODELS_MODULE, names=unit.imports)
    statements.append(build_service_class(unit))
    return SourceFileDecl(
        relative_path=f"{SERVICES_DIR}/{unit.name}.ts",
        header_lines=tuple(header_lines),
        statements=tuple(statements),
    )

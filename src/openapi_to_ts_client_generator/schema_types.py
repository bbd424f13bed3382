"""Resolve OpenAPI schema nodes into type descriptors and TypeScript text."""

from __future__ import annotations

import re
from collections.abc import Iterable
from typing import Any

from .model_types import (
    ArrayType,
    BooleanType,
    EnumType,
    NumberType,
    ObjectType,
    RefType,
    StringType,
    TypeDescriptor,
    UnknownType,
)

UNKNOWN_TYPE_NAME = "unknown"
OPEN_RECORD_TYPE = "Record<string, unknown>"
INDENT = "    "

_IDENTIFIER_RE = re.compile(r"^[A-Za-z_$][A-Za-z0-9_$]*$")
_NON_IDENTIFIER_CHARS_RE = re.compile(r"[^A-Za-z0-9_$]+")

# Words that cannot name a variable in strict-mode TypeScript.
_RESERVED_WORDS = frozenset(
    {
        "arguments", "await", "break", "case", "catch", "class", "const", "continue",
        "debugger", "default", "delete", "do", "else", "enum", "eval", "export",
        "extends", "false", "finally", "for", "function", "if", "implements",
        "import", "in", "instanceof", "interface", "let", "new", "null", "package",
        "private", "protected", "public", "return", "static", "super", "switch",
        "this", "throw", "true", "try", "typeof", "var", "void", "while", "with",
        "yield",
    }
)

_PRIMITIVE_TYPES: dict[str, TypeDescriptor] = {
    "string": StringType(),
    "date": StringType(),
    "number": NumberType(),
    "integer": NumberType(),
    "boolean": BooleanType(),
}


def resolve_ref_name(ref: Any) -> str:
    """Return the last ``/`` segment of a reference, or ``""`` when there is none.

    Args:
        ref (Any): Raw ``$ref`` value, e.g. ``#/components/schemas/User``.

    Returns:
        str: Target schema name; empty for missing or malformed references.
    """
    if not isinstance(ref, str):
        return ""
    return ref.split("/")[-1]


def parse_schema(node: Any) -> TypeDescriptor:
    """Decide the type descriptor of a schema node.

    Nodes without a declared ``type`` are references. References are never
    expanded, which keeps recursion finite on cyclic schema graphs.

    Args:
        node (Any): Raw schema node from the OpenAPI document.

    Returns:
        TypeDescriptor: Canonical descriptor for the node.
    """
    if not isinstance(node, dict):
        return RefType(name="")

    schema_type = node.get("type")
    if schema_type is None:
        return RefType(name=resolve_ref_name(node.get("$ref")))

    if schema_type == "object":
        return _parse_object(node)

    if schema_type == "array":
        return ArrayType(item=parse_schema(node.get("items")))

    if schema_type == "string":
        enum = node.get("enum")
        if isinstance(enum, list) and enum:
            return EnumType(values=tuple(str(value) for value in enum))

    if isinstance(schema_type, str) and schema_type in _PRIMITIVE_TYPES:
        return _PRIMITIVE_TYPES[schema_type]
    return UnknownType(declared=str(schema_type))


def _parse_object(node: dict[str, Any]) -> ObjectType:
    properties = node.get("properties")
    if not isinstance(properties, dict):
        return ObjectType(properties=None)

    required = node.get("required")
    if not isinstance(required, list):
        required = []
    required_names = frozenset(name for name in required if isinstance(name, str))
    return ObjectType(
        properties=tuple((str(name), parse_schema(prop)) for name, prop in properties.items()),
        required=required_names,
    )


def render_type(descriptor: TypeDescriptor, *, indent: int = 0) -> str:
    """Render a descriptor as TypeScript type syntax.

    Args:
        descriptor (TypeDescriptor): Descriptor to render.
        indent (int): Nesting level used for multi-line object types.

    Returns:
        str: TypeScript type expression.
    """
    match descriptor:
        case RefType(name=name):
            return name or UNKNOWN_TYPE_NAME
        case ObjectType(properties=None):
            return OPEN_RECORD_TYPE
        case ObjectType(properties=properties, required=required):
            return _render_object(properties or (), required, indent=indent)
        case ArrayType(item=item):
            rendered = render_type(item, indent=indent)
            if isinstance(item, EnumType):
                rendered = f"({rendered})"
            return f"{rendered}[]"
        case EnumType(values=values):
            return render_union(print_string(value) for value in values)
        case StringType():
            return "string"
        case NumberType():
            return "number"
        case BooleanType():
            return "boolean"
        case UnknownType():
            return UNKNOWN_TYPE_NAME
    raise TypeError(f"Unsupported type descriptor: {descriptor!r}")


def resolve(node: Any) -> str:
    """Render a raw schema node as TypeScript type syntax."""
    return render_type(parse_schema(node))


def render_union(members: Iterable[str]) -> str:
    """Render a leading-pipe union, which keeps single members a union."""
    return " ".join(f"| {member}" for member in members)


def render_record(fields: Iterable[tuple[str, str, bool]], *, indent: int = 0) -> str:
    """Render ``(name, type, required)`` triples as a multi-line record type."""
    lines = ["{"]
    for name, type_text, required in fields:
        marker = "" if required else "?"
        lines.append(f"{INDENT * (indent + 1)}{property_key(name)}{marker}: {type_text};")
    lines.append(f"{INDENT * indent}}}")
    return "\n".join(lines)


def _render_object(
    properties: tuple[tuple[str, TypeDescriptor], ...],
    required: frozenset[str],
    *,
    indent: int,
) -> str:
    if not properties:
        return "{}"
    return render_record(
        (
            (name, render_type(prop, indent=indent + 1), name in required)
            for name, prop in properties
        ),
        indent=indent,
    )


def collect_complex_type_names(descriptor: TypeDescriptor) -> list[str]:
    """Collect referenced schema names nested anywhere in a descriptor.

    Args:
        descriptor (TypeDescriptor): Descriptor to walk.

    Returns:
        list[str]: Reference names in first-seen order, without duplicates.
    """
    names: list[str] = []
    for ref in iter_refs(descriptor):
        if ref.name and ref.name not in names:
            names.append(ref.name)
    return names


def iter_refs(descriptor: TypeDescriptor) -> Iterable[RefType]:
    """Yield every reference inside a descriptor, malformed ones included."""
    match descriptor:
        case RefType():
            yield descriptor
        case ArrayType(item=item):
            yield from iter_refs(item)
        case ObjectType(properties=properties) if properties:
            for _, prop in properties:
                yield from iter_refs(prop)


def to_identifier(name: str) -> str:
    """Derive a variable name: ``user-id`` -> ``userId``, ``class`` -> ``class_``."""
    parts = [part for part in _NON_IDENTIFIER_CHARS_RE.split(name) if part]
    if not parts:
        return "_"
    identifier = parts[0] + "".join(part[:1].upper() + part[1:] for part in parts[1:])
    if identifier[0].isdigit():
        identifier = f"_{identifier}"
    if identifier in _RESERVED_WORDS:
        identifier = f"{identifier}_"
    return identifier


def property_key(name: str) -> str:
    """Quote a property name unless it is a valid identifier."""
    if _IDENTIFIER_RE.match(name):
        return name
    return print_string(name)


def print_string(value: str) -> str:
    """Render a single-quoted TypeScript string literal."""
    escaped = value.replace("\\", "\\\\").replace("'", "\\'")
    return f"'{escaped}'"

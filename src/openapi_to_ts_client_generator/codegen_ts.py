"""TypeScript declaration model and source rendering."""

from __future__ import annotations

from collections.abc import Iterable, Sequence
from dataclasses import dataclass
from typing import Optional, Union

from .model_types import ModelEntry
from .schema_types import INDENT, print_string, render_type

UTILS_FILE = "utils.ts"
MODELS_FILE = "models.ts"
SERVICES_DIR = "services"

_UTILS_SOURCE = """\
export type Adapter = <T>(args: {
    url: string;
    method: 'POST' | 'GET' | 'PATCH' | 'DELETE' | 'PUT';
    queryParams?: any;
    bodyArgs?: any;
}) => Promise<T>;

export type Configuration = {
    baseUrl: string;
    adapter: Adapter;
};"""


@dataclass(frozen=True)
class ImportDecl:
    """Named import from one module."""

    module: str
    names: tuple[str, ...]
    type_only: bool = True


@dataclass(frozen=True)
class TypeAliasDecl:
    """``type Name = ...`` declaration."""

    name: str
    type_text: str
    exported: bool = True


@dataclass(frozen=True)
class RawStatement:
    """Verbatim top-level source text."""

    text: str


@dataclass(frozen=True)
class ParameterDecl:
    """Function or constructor parameter."""

    name: str
    type_text: str
    scope: Optional[str] = None


@dataclass(frozen=True)
class MethodDecl:
    """Class method; an empty statement renders as a blank line."""

    name: str
    parameters: tuple[ParameterDecl, ...]
    statements: tuple[str, ...]


@dataclass(frozen=True)
class ClassDecl:
    """Class with a constructor made only of parameter properties."""

    name: str
    constructor_parameters: tuple[ParameterDecl, ...]
    methods: tuple[MethodDecl, ...]
    exported: bool = True


type Statement = Union[ImportDecl, TypeAliasDecl, RawStatement, ClassDecl]


@dataclass(frozen=True)
class SourceFileDecl:
    """One generated source file relative to the output directory."""

    relative_path: str
    header_lines: tuple[str, ...]
    statements: tuple[Statement, ...]


def render_source_file(source_file: SourceFileDecl) -> str:
    """Render a source file declaration as TypeScript source.

    Args:
        source_file (SourceFileDecl): File declaration to render.

    Returns:
        str: Source text ending in exactly one newline.
    """
    blocks: list[str] = []
    if source_file.header_lines:
        blocks.append("\n".join(source_file.header_lines))

    previous: Optional[Statement] = None
    for statement in source_file.statements:
        rendered = render_statement(statement)
        if isinstance(statement, ImportDecl) and isinstance(previous, ImportDecl):
            blocks[-1] = f"{blocks[-1]}\n{rendered}"
        else:
            blocks.append(rendered)
        previous = statement
    return "\n\n".join(blocks) + "\n"


def render_statement(statement: Statement) -> str:
    """Render one top-level statement."""
    match statement:
        case ImportDecl():
            return _render_import(statement)
        case TypeAliasDecl():
            export = "export " if statement.exported else ""
            return f"{export}type {statement.name} = {statement.type_text};"
        case RawStatement():
            return statement.text
        case ClassDecl():
            return _render_class(statement)
    raise TypeError(f"Unsupported statement: {statement!r}")


def _render_import(declaration: ImportDecl) -> str:
    keyword = "import type" if declaration.type_only else "import"
    names = ", ".join(declaration.names)
    return f"{keyword} {{ {names} }} from {print_string(declaration.module)};"


def _render_class(declaration: ClassDecl) -> str:
    export = "export " if declaration.exported else ""
    lines = [f"{export}class {declaration.name} {{"]
    members: list[str] = []
    if declaration.constructor_parameters:
        params = ", ".join(_render_parameter(param) for param in declaration.constructor_parameters)
        members.append(f"{INDENT}constructor({params}) {{}}")
    members.extend(_render_method(method) for method in declaration.methods)
    lines.append("\n\n".join(members))
    lines.append("}")
    return "\n".join(line for line in lines if line)


def _render_method(method: MethodDecl) -> str:
    params = ", ".join(_render_parameter(param) for param in method.parameters)
    lines = [f"{INDENT}{method.name}({params}) {{"]
    for statement in method.statements:
        lines.append(indent_lines(statement, level=2))
    lines.append(f"{INDENT}}}")
    return "\n".join(lines)


def _render_parameter(parameter: ParameterDecl) -> str:
    scope = f"{parameter.scope} " if parameter.scope else ""
    return f"{scope}{parameter.name}: {parameter.type_text}"


def indent_lines(text: str, *, level: int = 1) -> str:
    """Indent every non-empty line of ``text`` by ``level`` steps."""
    prefix = INDENT * level
    return "\n".join(f"{prefix}{line}" if line else "" for line in text.split("\n"))


def add_named_imports(
    statements: list[Statement],
    *,
    module: str,
    names: Iterable[str],
) -> None:
    """Merge ``names`` into the import from ``module``, creating it if needed.

    A name already imported from the module is never added twice. New import
    declarations are placed after the last existing import.
    """
    for index, statement in enumerate(statements):
        if isinstance(statement, ImportDecl) and statement.module == module:
            statements[index] = ImportDecl(
                module=module,
                names=_dedupe([*statement.names, *names]),
                type_only=statement.type_only,
            )
            return

    unique = _dedupe(names)
    if not unique:
        return
    position = 0
    for index, statement in enumerate(statements):
        if isinstance(statement, ImportDecl):
            position = index + 1
    statements.insert(position, ImportDecl(module=module, names=unique))


def _dedupe(names: Iterable[str]) -> tuple[str, ...]:
    unique: list[str] = []
    for name in names:
        if name not in unique:
            unique.append(name)
    return tuple(unique)


def print_string_template(text: str) -> str:
    """Wrap text in a template literal without escaping it."""
    return f"`{text}`"


def print_destructure(target: str, names: Sequence[str]) -> str:
    """Render ``const { a, b } = target;``."""
    return f"const {{ {', '.join(names)} }} = {target};"


def print_object_literal(entries: Iterable[tuple[str, str]]) -> str:
    """Render a multi-line object literal; values may span several lines."""
    lines = ["{"]
    for key, value in entries:
        first, *rest = value.split("\n")
        lines.append(f"{INDENT}{key}: {first}")
        lines.extend(f"{INDENT}{line}" if line else "" for line in rest)
        lines[-1] = f"{lines[-1]},"
    lines.append("}")
    return "\n".join(lines)


def print_call(callee: str, args: Sequence[str], *, type_argument: Optional[str] = None) -> str:
    """Render a call expression with an optional type argument."""
    parametric = f"<{type_argument}>" if type_argument else ""
    return f"{callee}{parametric}({', '.join(args)})"


def build_utils_file(header_lines: Sequence[str]) -> SourceFileDecl:
    """Build ``utils.ts`` with the ``Adapter`` and ``Configuration`` shapes."""
    return SourceFileDecl(
        relative_path=UTILS_FILE,
        header_lines=tuple(header_lines),
        statements=(RawStatement(text=_UTILS_SOURCE),),
    )


def build_models_file(models: Iterable[ModelEntry], header_lines: Sequence[str]) -> SourceFileDecl:
    """Build ``models.ts`` with one exported type alias per component schema."""
    return SourceFileDecl(
        relative_path=MODELS_FILE,
        header_lines=tuple(header_lines),
        statements=tuple(
            TypeAliasDecl(name=model.name, type_text=render_type(model.type))
            for model in models
        ),
    )

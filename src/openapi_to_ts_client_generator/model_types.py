"""Internal datatypes for schema resolution and service generation."""

from __future__ import annotations

from dataclasses import dataclass, field
from enum import Enum
from typing import Optional, Union


@dataclass(frozen=True)
class RefType:
    """Reference to a named component schema by its last path segment."""

    name: str


@dataclass(frozen=True)
class ObjectType:
    """Record type; ``properties`` of ``None`` marks an open mapping."""

    properties: Optional[tuple[tuple[str, TypeDescriptor], ...]]
    required: frozenset[str] = frozenset()


@dataclass(frozen=True)
class ArrayType:
    """Sequence of a single item type."""

    item: TypeDescriptor


@dataclass(frozen=True)
class StringType:
    """Primitive string type."""


@dataclass(frozen=True)
class EnumType(StringType):
    """String restricted to an ordered set of literal values."""

    values: tuple[str, ...] = ()


@dataclass(frozen=True)
class NumberType:
    """Primitive number type."""


@dataclass(frozen=True)
class BooleanType:
    """Primitive boolean type."""


@dataclass(frozen=True)
class UnknownType:
    """Declared schema type without a TypeScript counterpart."""

    declared: str


type TypeDescriptor = Union[
    RefType,
    ObjectType,
    ArrayType,
    EnumType,
    StringType,
    NumberType,
    BooleanType,
    UnknownType,
]


class ParamLocation(Enum):
    """Where an operation parameter is carried in the request."""

    PATH = "path"
    QUERY = "query"


@dataclass(frozen=True)
class ParamDescriptor:
    """One declared path or query parameter."""

    name: str
    required: bool
    location: ParamLocation
    type: TypeDescriptor


@dataclass(frozen=True)
class ContentDescriptor:
    """Resolved shape of a JSON request body or response."""

    argument_name: str
    type: TypeDescriptor
    required: bool
    import_name: Optional[str]


@dataclass(frozen=True)
class OperationDescriptor:
    """Everything needed to emit one service method."""

    raw_path: str
    http_method: str
    service_name: str
    method_name: str
    params: tuple[ParamDescriptor, ...]
    body: Optional[ContentDescriptor]
    response: Optional[ContentDescriptor]
    skipped_parameters: tuple[str, ...] = ()

    @property
    def path_params(self) -> tuple[ParamDescriptor, ...]:
        """Parameters substituted into the URL template."""
        return tuple(param for param in self.params if param.location is ParamLocation.PATH)

    @property
    def query_params(self) -> tuple[ParamDescriptor, ...]:
        """Parameters sent as the query string."""
        return tuple(param for param in self.params if param.location is ParamLocation.QUERY)


@dataclass
class ServiceUnit:
    """Generated service class under construction.

    Methods are keyed by name in registration order; imports are model names
    in first-seen order without duplicates.
    """

    name: str
    methods: dict[str, OperationDescriptor] = field(default_factory=dict)
    imports: list[str] = field(default_factory=list)


@dataclass(frozen=True)
class ModelEntry:
    """One component schema resolved into a model type alias."""

    name: str
    type: TypeDescriptor


@dataclass(frozen=True)
class GenerationResult:
    """Generation output metadata."""

    output_dir: str
    written_files: tuple[str, ...]
    model_count: int
    service_names: tuple[str, ...]
    warnings: tuple[str, ...]

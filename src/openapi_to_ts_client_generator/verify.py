"""Verification that every emitted reference names a generated model."""

from __future__ import annotations

from collections.abc import Iterable, Sequence
from dataclasses import dataclass

from .model_types import ModelEntry, ServiceUnit, TypeDescriptor
from .schema_types import UNKNOWN_TYPE_NAME, iter_refs


@dataclass(frozen=True)
class DanglingReference:
    """A reference that does not resolve to a component schema."""

    location: str
    name: str


@dataclass(frozen=True)
class VerificationReport:
    """Result of the verification phase."""

    checked_count: int
    dangling_count: int
    dangling: tuple[DanglingReference, ...]


def verify_references(
    *,
    models: Sequence[ModelEntry],
    services: Sequence[ServiceUnit],
) -> VerificationReport:
    """Check references in models and service signatures against model names.

    Malformed references, which render as ``unknown``, are reported with an
    empty name.
    """
    known = {model.name for model in models}
    checked = 0
    dangling: list[DanglingReference] = []
    for location, descriptor in _iter_typed_locations(models=models, services=services):
        for ref in iter_refs(descriptor):
            checked += 1
            if ref.name not in known:
                dangling.append(DanglingReference(location=location, name=ref.name))

    return VerificationReport(
        checked_count=checked,
        dangling_count=len(dangling),
        dangling=tuple(dangling),
    )


def _iter_typed_locations(
    *,
    models: Sequence[ModelEntry],
    services: Sequence[ServiceUnit],
) -> Iterable[tuple[str, TypeDescriptor]]:
    for model in models:
        yield f"models.{model.name}", model.type
    for unit in services:
        for descriptor in unit.methods.values():
            prefix = f"{unit.name}.{descriptor.method_name}"
            if descriptor.body is not None:
                yield f"{prefix} body", descriptor.body.type
            if descriptor.response is not None:
                yield f"{prefix} response", descriptor.response.type
            for param in descriptor.params:
                yield f"{prefix} parameter {param.name}", param.type


def format_report(report: VerificationReport) -> str:
    """Render report as CLI output text."""
    lines = [
        f"Checked references: {report.checked_count}",
        f"Dangling references: {report.dangling_count}",
    ]
    for item in report.dangling:
        target = item.name or f"<malformed, rendered as {UNKNOWN_TYPE_NAME}>"
        lines.append(f"- {item.location}: {target}")
    return "\n".join(lines)

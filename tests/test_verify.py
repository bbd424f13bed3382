"""Unit tests for reference verification."""

from __future__ import annotations

from openapi_to_ts_client_generator.model_types import (
    ArrayType,
    ModelEntry,
    ObjectType,
    RefType,
    StringType,
)
from openapi_to_ts_client_generator.operations import extract_operation
from openapi_to_ts_client_generator.services import ServiceRegistry
from openapi_to_ts_client_generator.verify import format_report, verify_references


def test_known_references_pass() -> None:
    """References to declared models are counted but not reported."""
    models = (
        ModelEntry(name="User", type=ObjectType(properties=(("id", StringType()),))),
        ModelEntry(name="Users", type=ArrayType(item=RefType(name="User"))),
    )
    report = verify_references(models=models, services=())
    assert report.checked_count == 1
    assert report.dangling_count == 0
    assert format_report(report) == "Checked references: 1\nDangling references: 0"


def test_parameter_and_body_references_are_checked() -> None:
    """Service signatures are checked alongside models."""
    registry = ServiceRegistry()
    registry.register(
        extract_operation(
            "/users",
            "post",
            {
                "operationId": "UserController_create",
                "parameters": [
                    {"name": "role", "in": "query", "schema": {"$ref": "#/components/schemas/Role"}}
                ],
                "requestBody": {
                    "content": {
                        "application/json": {"schema": {"$ref": "#/components/schemas/NewUser"}}
                    }
                },
            },
        )
    )
    report = verify_references(
        models=(ModelEntry(name="NewUser", type=StringType()),),
        services=registry.services,
    )
    assert report.checked_count == 2
    assert [(item.location, item.name) for item in report.dangling] == [
        ("UserService.create parameter role", "Role"),
    ]


def test_malformed_reference_is_reported() -> None:
    """Empty reference names are listed with a placeholder."""
    report = verify_references(
        models=(ModelEntry(name="Broken", type=RefType(name="")),),
        services=(),
    )
    assert format_report(report).splitlines() == [
        "Checked references: 1",
        "Dangling references: 1",
        "- models.Broken: <malformed, rendered as unknown>",
    ]

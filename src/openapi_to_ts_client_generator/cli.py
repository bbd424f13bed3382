"""Command line interface for OpenAPI to TypeScript client generation."""

from __future__ import annotations

import argparse
from pathlib import Path

from .generator import OpenAPILoadError, UnknownOperationError, WriteError, run_generation
from .verify import format_report


def build_parser() -> argparse.ArgumentParser:
    """Build the CLI parser."""
    parser = argparse.ArgumentParser(
        prog="openapi-to-ts-client-generator",
        description="Generate a typed TypeScript client from an OpenAPI v3 document",
    )
    parser.add_argument(
        "--spec",
        required=True,
        help="URL or path to the OpenAPI v3 document (JSON or YAML)",
    )
    parser.add_argument("--output", required=True, help="Output directory for generated sources")
    parser.add_argument(
        "--no-header",
        dest="header",
        action="store_false",
        help="Do not prepend the generated-file header to emitted sources",
    )
    parser.add_argument(
        "--verify",
        action="store_true",
        help="Report references that do not resolve to a component schema",
    )
    return parser


def main(argv: list[str] | None = None) -> int:
    """Run CLI and return process exit code."""
    parser = build_parser()
    args = parser.parse_args(argv)

    try:
        run = run_generation(
            spec_location=args.spec,
            output_dir=Path(args.output),
            header=bool(args.header),
            verify=bool(args.verify),
        )
    except (OpenAPILoadError, UnknownOperationError, WriteError) as exc:
        parser.error(str(exc))
        return 2

    for warning in run.result.warnings:
        print(f"Warning: {warning}")

    print(
        f"Generated {run.result.model_count} model(s) and "
        f"{len(run.result.service_names)} service(s) in {run.result.output_dir}"
    )

    if run.verification_report is not None:
        print(format_report(run.verification_report))
        if run.verification_report.dangling_count > 0:
            return 1

    return 0


if __name__ == "__main__":
    raise SystemExit(main())

"""Filesystem writers for generated TypeScript sources."""

from __future__ import annotations

from collections.abc import Sequence
from pathlib import Path

from .codegen_ts import SourceFileDecl, render_source_file


class WriteError(RuntimeError):
    """Raised when output files cannot be written."""


def write_source_files(*, output_dir: Path, files: Sequence[SourceFileDecl]) -> list[Path]:
    """Render and write source files below the output directory.

    Every file is rendered before the first write. Existing files are
    overwritten so regenerating into the same directory is idempotent.

    Args:
        output_dir (Path): Root output directory; created when missing.
        files (Sequence[SourceFileDecl]): Files to write.

    Returns:
        list[Path]: Written file paths in input order.
    """
    rendered = [(output_dir / item.relative_path, render_source_file(item)) for item in files]

    if output_dir.exists() and not output_dir.is_dir():
        raise WriteError(f"Output path is not a directory: {output_dir}")

    written: list[Path] = []
    for path, source in rendered:
        _ensure_directory(path.parent)
        _write_file(path, source)
        written.append(path)
    return written


def _ensure_directory(path: Path) -> None:
    try:
        path.mkdir(parents=True, exist_ok=True)
    except OSError as exc:
        raise WriteError(f"Failed to create directory {path}: {exc}") from exc


def _write_file(path: Path, content: str) -> None:
    try:
        path.write_text(content, encoding="utf-8", newline="\n")
    except OSError as exc:
        raise WriteError(f"Failed to write file {path}: {exc}") from exc

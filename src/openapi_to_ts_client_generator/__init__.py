"""OpenAPI to TypeScript client generator package."""

from __future__ import annotations

from .cli import main
from .generator import CompiledClient, GenerationRun, compile_document, run_generation

__all__ = ["CompiledClient", "GenerationRun", "compile_document", "main", "run_generation"]

"""Conversion code generation for stringfrom."""

from stringfrom.compiler.codegen import CodeEmitter
from stringfrom.compiler.module import render_module
from stringfrom.compiler.pipeline import (
    DocumentError,
    DocumentResult,
    GenerationPipeline,
    GenerationResult,
)

__all__ = [
    "CodeEmitter",
    "DocumentError",
    "DocumentResult",
    "GenerationPipeline",
    "GenerationResult",
    "render_module",
]

"""Orchestrates generation: Declaration -> Reading -> Validation -> Emission."""

from __future__ import annotations

import logging
from concurrent.futures import ThreadPoolExecutor
from dataclasses import dataclass, field
from typing import Any

from stringfrom.compiler.codegen import CodeEmitter
from stringfrom.compiler.syntax import check_syntax
from stringfrom.models.annotation import ConversionSpec
from stringfrom.models.declaration import TypeDeclaration
from stringfrom.models.errors import Diagnostic
from stringfrom.parser.loader import SourceMap
from stringfrom.parser.reader import SchemaReader
from stringfrom.parser.validator import DEFAULT_TEXT_TYPES, AttributeValidator
from stringfrom.settings import Settings

logger = logging.getLogger("stringfrom.pipeline")


class DocumentError(Exception):
    """Raised when a declaration document does not have the expected layout."""


@dataclass
class GenerationResult:
    """Outcome for one declaration: generated code or a diagnostic, never both."""

    declaration: str
    code: str | None = None
    specs: list[ConversionSpec] = field(default_factory=list)
    diagnostic: Diagnostic | None = None
    warnings: list[str] = field(default_factory=list)

    @property
    def ok(self) -> bool:
        return self.diagnostic is None


@dataclass
class DocumentResult:
    """Outcomes for every declaration of a document, in document order."""

    results: list[GenerationResult] = field(default_factory=list)
    module: str | None = None

    @property
    def ok(self) -> bool:
        return all(r.ok for r in self.results)

    @property
    def diagnostics(self) -> list[Diagnostic]:
        return [r.diagnostic for r in self.results if r.diagnostic is not None]

    @property
    def specs(self) -> list[ConversionSpec]:
        return [spec for r in self.results for spec in r.specs]

    @property
    def code(self) -> str:
        blocks = [r.code.rstrip("\n") for r in self.results if r.code]
        return "\n\n\n".join(blocks) + "\n" if blocks else ""


class GenerationPipeline:
    """Orchestrates: Declaration -> Reading -> Validation -> Emission."""

    def __init__(
        self,
        text_types: list[str] | tuple[str, ...] = DEFAULT_TEXT_TYPES,
        emit_docstrings: bool = True,
        max_workers: int = 1,
    ) -> None:
        self._validator = AttributeValidator(text_types)
        self._emitter = CodeEmitter(emit_docstrings=emit_docstrings)
        self._max_workers = max(1, max_workers)

    @classmethod
    def from_settings(cls, settings: Settings) -> GenerationPipeline:
        return cls(
            text_types=settings.text_types,
            emit_docstrings=settings.emit_docstrings,
            max_workers=settings.max_workers,
        )

    def generate(
        self,
        name: str,
        raw: Any,
        source_map: SourceMap | None = None,
        prefix: str = "declarations",
    ) -> GenerationResult:
        """Generate conversions for one raw declaration mapping."""
        # Phase 1: Reading
        declaration, diagnostic = SchemaReader(source_map, prefix).read(name, raw)
        if diagnostic is not None:
            return self._failed(name, diagnostic, source_map)
        return self.generate_declaration(declaration, source_map)

    def generate_declaration(
        self, declaration: TypeDeclaration, source_map: SourceMap | None = None
    ) -> GenerationResult:
        """Generate conversions for an already-read declaration."""
        # Phase 2: Validation
        specs, diagnostic = self._validator.validate(declaration)
        if diagnostic is not None:
            return self._failed(declaration.name, diagnostic, source_map)

        # Phase 3: Emission
        code = self._emitter.emit(specs)

        # Phase 4: Syntax check (non-blocking)
        warnings = [f"Syntax check: {e}" for e in check_syntax(code, declaration.name)]
        for warning in warnings:
            logger.warning("%s: %s", declaration.name, warning)
        logger.info("%s: generated %d conversion(s)", declaration.name, len(specs))
        return GenerationResult(
            declaration=declaration.name, code=code, specs=specs, warnings=warnings
        )

    def generate_document(
        self, raw: dict[str, Any], source_map: SourceMap | None = None
    ) -> DocumentResult:
        """Generate every declaration of a document.

        A diagnostic in one declaration does not affect the others.
        """
        if not isinstance(raw, dict):
            raise DocumentError("Declaration document must be a mapping")
        declarations = raw.get("declarations")
        if not isinstance(declarations, dict) or not declarations:
            raise DocumentError("Document has no 'declarations' mapping")
        module = raw.get("module")
        if module is not None and not isinstance(module, str):
            raise DocumentError("'module' must be a dotted module name")

        items = list(declarations.items())
        if self._max_workers > 1 and len(items) > 1:
            with ThreadPoolExecutor(max_workers=self._max_workers) as pool:
                results = list(pool.map(lambda item: self.generate(*item, source_map), items))
        else:
            results = [self.generate(name, decl, source_map) for name, decl in items]
        return DocumentResult(results=results, module=module)

    @staticmethod
    def _failed(
        name: str, diagnostic: Diagnostic, source_map: SourceMap | None
    ) -> GenerationResult:
        if diagnostic.span is None and source_map is not None and diagnostic.path:
            diagnostic = diagnostic.model_copy(update={"span": source_map.nearest(diagnostic.path)})
        return GenerationResult(declaration=name, diagnostic=diagnostic)

"""Structured diagnostics with YAML source position tracking."""

from __future__ import annotations

from enum import StrEnum

from pydantic import BaseModel


class DiagnosticKind(StrEnum):
    NOT_A_UNION = "NotAUnion"
    MISSING_SOURCE_FIELD = "MissingSourceField"
    AMBIGUOUS_SOURCE_FIELD = "AmbiguousSourceField"
    WRONG_FIELD_TYPE = "WrongFieldType"
    MALFORMED_ANNOTATION = "MalformedAnnotation"
    INVALID_DECLARATION = "InvalidDeclaration"


class SourceSpan(BaseModel):
    """Points to exact location in YAML source for error reporting."""

    file: str
    line: int
    column: int


class Diagnostic(BaseModel):
    """A build-time failure anchored to a declaration, variant or field."""

    kind: DiagnosticKind
    message: str
    path: str | None = None
    span: SourceSpan | None = None

    model_config = {"frozen": True}

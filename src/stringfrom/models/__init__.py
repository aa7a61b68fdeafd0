"""Pydantic domain models for stringfrom."""

from stringfrom.models.annotation import (
    ANNOTATION_NAME,
    SOURCE_MARKER,
    Annotation,
    AnnotationMode,
    ContextAnnotation,
    ConversionSpec,
    TypeAnnotation,
)
from stringfrom.models.declaration import (
    DeclarationKind,
    Field,
    RawAnnotation,
    TypeDeclaration,
    Variant,
    VariantShape,
)
from stringfrom.models.errors import Diagnostic, DiagnosticKind, SourceSpan

__all__ = [
    "ANNOTATION_NAME",
    "SOURCE_MARKER",
    "Annotation",
    "AnnotationMode",
    "ContextAnnotation",
    "ConversionSpec",
    "DeclarationKind",
    "Diagnostic",
    "DiagnosticKind",
    "Field",
    "RawAnnotation",
    "SourceSpan",
    "TypeAnnotation",
    "TypeDeclaration",
    "Variant",
    "VariantShape",
]

"""Attribute validation: resolves each annotated variant to a ConversionSpec."""

from __future__ import annotations

import ast
import logging
from collections.abc import Iterable

from pydantic import TypeAdapter

from stringfrom.models.annotation import (
    ANNOTATION_NAME,
    Annotation,
    AnnotationMode,
    ContextAnnotation,
    ConversionSpec,
    TypeAnnotation,
)
from stringfrom.models.declaration import RawAnnotation, TypeDeclaration, Variant, VariantShape
from stringfrom.models.errors import Diagnostic, DiagnosticKind

logger = logging.getLogger("stringfrom.validator")

DEFAULT_TEXT_TYPES: tuple[str, ...] = ("str", "builtins.str")

_annotation_adapter: TypeAdapter[Annotation] = TypeAdapter(Annotation)


class _Rejected(Exception):
    def __init__(self, diagnostic: Diagnostic) -> None:
        self.diagnostic = diagnostic
        super().__init__(diagnostic.message)


def dotted_name(node: ast.expr) -> str | None:
    """Return ``a.b.C`` for a Name/Attribute chain, else None."""
    if isinstance(node, ast.Name):
        return node.id
    if isinstance(node, ast.Attribute):
        base = dotted_name(node.value)
        return f"{base}.{node.attr}" if base else None
    return None


class AttributeValidator:
    """Checks variant annotations and fields against the annotation schema.

    Validation stops at the first diagnostic of a declaration.
    """

    def __init__(self, text_types: Iterable[str] = DEFAULT_TEXT_TYPES) -> None:
        self._text_types = frozenset(t.strip() for t in text_types)

    def validate(
        self, declaration: TypeDeclaration
    ) -> tuple[list[ConversionSpec], Diagnostic | None]:
        specs: list[ConversionSpec] = []
        for variant in declaration.variants:
            try:
                spec = self._check_variant(declaration.name, variant)
            except _Rejected as exc:
                return [], exc.diagnostic
            if spec is not None:
                specs.append(spec)
        return specs, None

    def _parse_annotation(self, token: RawAnnotation, path: str = "") -> Annotation:
        """Interpret a ``stringfrom`` token as a context or type annotation."""
        if token.arguments is None or not token.arguments:
            raise self._reject(
                DiagnosticKind.MALFORMED_ANNOTATION,
                f"'{ANNOTATION_NAME}' requires one argument: a context string or a type name",
                path,
                token,
            )
        try:
            call = ast.parse(f"_({token.arguments})", mode="eval").body
        except SyntaxError:
            raise self._reject(
                DiagnosticKind.MALFORMED_ANNOTATION,
                f"Cannot parse arguments of '{token}'",
                path,
                token,
            ) from None
        if (
            not isinstance(call, ast.Call)
            or not isinstance(call.func, ast.Name)
            or call.func.id != "_"
            or call.keywords
            or len(call.args) != 1
        ):
            raise self._reject(
                DiagnosticKind.MALFORMED_ANNOTATION,
                f"'{ANNOTATION_NAME}' takes exactly one positional argument, got '{token}'",
                path,
                token,
            )
        arg = call.args[0]
        if isinstance(arg, ast.Constant) and isinstance(arg.value, str):
            return _annotation_adapter.validate_python(
                {"mode": AnnotationMode.CONTEXT.value, "context": arg.value}
            )
        type_name = dotted_name(arg)
        if type_name is not None:
            return _annotation_adapter.validate_python(
                {"mode": AnnotationMode.TYPE.value, "type_name": type_name}
            )
        raise self._reject(
            DiagnosticKind.MALFORMED_ANNOTATION,
            f"Argument of '{token}' must be a string literal or a type name",
            path,
            token,
        )

    # -- per-variant checks --------------------------------------------------

    def _check_variant(self, union: str, variant: Variant) -> ConversionSpec | None:
        tokens = variant.annotations_named(ANNOTATION_NAME)
        if not tokens:
            logger.debug("%s.%s: no %s attribute, skipped", union, variant.name, ANNOTATION_NAME)
            return None
        if len(tokens) > 1:
            raise self._reject(
                DiagnosticKind.MALFORMED_ANNOTATION,
                f"Variant '{variant.name}' has {len(tokens)} '{ANNOTATION_NAME}' attributes; "
                "only one is allowed",
                variant.path,
                tokens[1],
            )
        annotation = self._parse_annotation(tokens[0], variant.path)

        if variant.shape is not VariantShape.POSITIONAL:
            raise self._reject(
                DiagnosticKind.MALFORMED_ANNOTATION,
                f"'{ANNOTATION_NAME}' can only be used with positional-field variants; "
                f"'{variant.name}' has {variant.shape} fields",
                variant.path,
            )

        if isinstance(annotation, ContextAnnotation):
            return self._context_spec(union, variant, annotation)
        return self._type_spec(union, variant, annotation)

    def _context_spec(
        self, union: str, variant: Variant, annotation: ContextAnnotation
    ) -> ConversionSpec:
        marked = [i for i, f in enumerate(variant.fields) if f.is_source_marked]
        fields_path = f"{variant.path}.fields"
        if not marked:
            raise self._reject(
                DiagnosticKind.MISSING_SOURCE_FIELD,
                f"Variant '{variant.name}' needs a field with the `from` attribute",
                fields_path,
            )
        if len(marked) > 1:
            positions = ", ".join(str(i) for i in marked)
            raise self._reject(
                DiagnosticKind.AMBIGUOUS_SOURCE_FIELD,
                f"Only one field of variant '{variant.name}' can have the `from` attribute "
                f"(found at positions {positions})",
                fields_path,
            )
        index = marked[0]
        logger.debug(
            "%s.%s: context mode, source %s at position %d",
            union, variant.name, variant.fields[index].type, index,
        )
        return ConversionSpec(
            union_name=union,
            variant_name=variant.name,
            mode=AnnotationMode.CONTEXT,
            source_type=variant.fields[index].type,
            field_count=len(variant.fields),
            source_index=index,
            context=annotation.context,
        )

    def _type_spec(
        self, union: str, variant: Variant, annotation: TypeAnnotation
    ) -> ConversionSpec:
        if len(variant.fields) != 1:
            raise self._reject(
                DiagnosticKind.WRONG_FIELD_TYPE,
                f"'{ANNOTATION_NAME}({annotation.type_name})' requires exactly one text field; "
                f"variant '{variant.name}' has {len(variant.fields)}",
                f"{variant.path}.fields",
            )
        field = variant.fields[0]
        if field.type not in self._text_types:
            allowed = ", ".join(sorted(self._text_types))
            raise self._reject(
                DiagnosticKind.WRONG_FIELD_TYPE,
                f"Field of variant '{variant.name}' must be a text type ({allowed}), "
                f"not '{field.type}'",
                field.path,
            )
        logger.debug("%s.%s: type mode, source %s", union, variant.name, annotation.type_name)
        return ConversionSpec(
            union_name=union,
            variant_name=variant.name,
            mode=AnnotationMode.TYPE,
            source_type=annotation.type_name,
            field_count=1,
        )

    @staticmethod
    def _reject(
        kind: DiagnosticKind, message: str, path: str, token: RawAnnotation | None = None
    ) -> _Rejected:
        # Spans come from the token when it has one; the pipeline fills the rest.
        span = token.span if token is not None else None
        return _Rejected(Diagnostic(kind=kind, message=message, path=path, span=span))

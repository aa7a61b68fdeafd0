"""Tests for AttributeValidator: mode resolution and diagnostics."""

from __future__ import annotations

import pytest

from stringfrom.models.annotation import AnnotationMode
from stringfrom.models.errors import DiagnosticKind
from stringfrom.parser.reader import SchemaReader
from stringfrom.parser.validator import AttributeValidator
from tests.conftest import source, union, variant


def _validate(raw: dict, validator: AttributeValidator | None = None):
    decl, diagnostic = SchemaReader().read("AppError", raw)
    assert diagnostic is None, diagnostic
    return (validator or AttributeValidator()).validate(decl)


class TestContextMode:
    def test_marked_field_becomes_source(self, validator: AttributeValidator) -> None:
        raw = union(
            variant("Wrapped", "str", source("InnerError"), attributes=['stringfrom("use case error")'])
        )
        specs, diagnostic = _validate(raw, validator)
        assert diagnostic is None
        [spec] = specs
        assert spec.mode == AnnotationMode.CONTEXT
        assert spec.union_name == "AppError"
        assert spec.variant_name == "Wrapped"
        assert spec.source_type == "InnerError"
        assert spec.source_index == 1
        assert spec.field_count == 2
        assert spec.context == "use case error"

    def test_marked_field_first(self) -> None:
        raw = union(variant("Wrapped", source("Inner"), "str", "str", attributes=["stringfrom('x')"]))
        [spec], _ = _validate(raw)
        assert spec.source_index == 0
        assert spec.field_count == 3

    def test_empty_context_allowed(self) -> None:
        raw = union(variant("Wrapped", "str", source("Inner"), attributes=['stringfrom("")']))
        [spec], diagnostic = _validate(raw)
        assert diagnostic is None
        assert spec.context == ""

    def test_missing_source_field(self) -> None:
        raw = union(variant("Wrapped", "str", "Inner", attributes=['stringfrom("ctx")']))
        specs, diagnostic = _validate(raw)
        assert specs == []
        assert diagnostic.kind == DiagnosticKind.MISSING_SOURCE_FIELD
        assert diagnostic.path == "declarations.AppError.variants[0].fields"

    def test_ambiguous_source_field(self) -> None:
        raw = union(
            variant("Plain", "str"),
            variant("Twice", source("A"), source("B"), attributes=['stringfrom("ctx")']),
        )
        specs, diagnostic = _validate(raw)
        assert specs == []
        assert diagnostic.kind == DiagnosticKind.AMBIGUOUS_SOURCE_FIELD
        assert "'Twice'" in diagnostic.message
        assert diagnostic.path == "declarations.AppError.variants[1].fields"

    def test_marker_without_annotation_is_ignored(self) -> None:
        specs, diagnostic = _validate(union(variant("Transparent", source("Inner"))))
        assert specs == []
        assert diagnostic is None


class TestTypeMode:
    def test_named_type_becomes_source(self) -> None:
        raw = union(
            variant("BadRequest", "str"),
            variant("Upstream", "str", attributes=["stringfrom(UseCaseError)"]),
        )
        specs, diagnostic = _validate(raw)
        assert diagnostic is None
        [spec] = specs
        assert spec.mode == AnnotationMode.TYPE
        assert spec.variant_name == "Upstream"
        assert spec.source_type == "UseCaseError"
        assert spec.source_index is None

    def test_dotted_type_name(self) -> None:
        raw = union(variant("Upstream", "str", attributes=["stringfrom(usecases.errors.UseCaseError)"]))
        [spec], _ = _validate(raw)
        assert spec.source_type == "usecases.errors.UseCaseError"

    def test_non_text_field(self) -> None:
        raw = union(variant("Upstream", "int", attributes=["stringfrom(UseCaseError)"]))
        _, diagnostic = _validate(raw)
        assert diagnostic.kind == DiagnosticKind.WRONG_FIELD_TYPE
        assert "'int'" in diagnostic.message
        assert diagnostic.path == "declarations.AppError.variants[0].fields[0]"

    @pytest.mark.parametrize("fields", [(), ("str", "str")])
    def test_field_count(self, fields: tuple[str, ...]) -> None:
        raw = union(variant("Upstream", *fields, attributes=["stringfrom(UseCaseError)"]))
        _, diagnostic = _validate(raw)
        assert diagnostic.kind == DiagnosticKind.WRONG_FIELD_TYPE

    def test_configured_text_types(self) -> None:
        raw = union(variant("Upstream", "Text", attributes=["stringfrom(UseCaseError)"]))
        specs, diagnostic = _validate(raw, AttributeValidator(text_types=["Text"]))
        assert diagnostic is None
        assert len(specs) == 1


class TestMalformedAnnotations:
    @pytest.mark.parametrize(
        "token",
        [
            "stringfrom",
            "stringfrom()",
            "stringfrom(1)",
            'stringfrom("a", "b")',
            "stringfrom(context='x')",
            "stringfrom(Foo[int])",
            "stringfrom(a b)",
            'stringfrom("a")("b")',
            'stringfrom("a") + _("b")',
        ],
    )
    def test_bad_arguments(self, token: str) -> None:
        raw = union(variant("Wrapped", "str", source("Inner"), attributes=[token]))
        _, diagnostic = _validate(raw)
        assert diagnostic.kind == DiagnosticKind.MALFORMED_ANNOTATION

    def test_duplicate_annotation(self) -> None:
        raw = union(
            variant(
                "Wrapped",
                "str",
                source("Inner"),
                attributes=['stringfrom("a")', 'stringfrom("b")'],
            )
        )
        _, diagnostic = _validate(raw)
        assert diagnostic.kind == DiagnosticKind.MALFORMED_ANNOTATION

    def test_named_fields(self) -> None:
        raw = union(
            {
                "name": "Wrapped",
                "fields": {"reason": "str", "cause": {"type": "Inner", "attributes": ["from"]}},
                "attributes": ['stringfrom("ctx")'],
            }
        )
        _, diagnostic = _validate(raw)
        assert diagnostic.kind == DiagnosticKind.MALFORMED_ANNOTATION
        assert "positional" in diagnostic.message

    def test_unit_variant(self) -> None:
        raw = union({"name": "Empty", "attributes": ["stringfrom(Inner)"]})
        _, diagnostic = _validate(raw)
        assert diagnostic.kind == DiagnosticKind.MALFORMED_ANNOTATION


class TestResolutionRules:
    def test_unannotated_variants_skipped(self) -> None:
        specs, diagnostic = _validate(union(variant("A", "str"), variant("B", "int")))
        assert specs == []
        assert diagnostic is None

    def test_unrecognized_attributes_ignored(self) -> None:
        raw = union(variant("A", "str", attributes=["error('{0}')", "deprecated"]))
        specs, diagnostic = _validate(raw)
        assert specs == []
        assert diagnostic is None

    def test_same_source_type_not_deduplicated(self) -> None:
        raw = union(
            variant("First", "str", attributes=["stringfrom(Inner)"]),
            variant("Second", "str", source("Inner"), attributes=['stringfrom("again")']),
        )
        specs, _ = _validate(raw)
        assert [s.variant_name for s in specs] == ["First", "Second"]
        assert {s.source_type for s in specs} == {"Inner"}

    def test_stops_at_first_diagnostic(self) -> None:
        raw = union(
            variant("Ok", "str", attributes=["stringfrom(Inner)"]),
            variant("Missing", "str", attributes=['stringfrom("x")']),
            variant("Twice", source("A"), source("B"), attributes=['stringfrom("x")']),
        )
        specs, diagnostic = _validate(raw)
        assert specs == []
        assert diagnostic.kind == DiagnosticKind.MISSING_SOURCE_FIELD

"""Schema reading: raw declaration mapping -> TypeDeclaration.

The reader only extracts attribute tokens (name + argument text); their
meaning is decided by the AttributeValidator.
"""

from __future__ import annotations

import ast
import keyword
import logging
import re
from typing import Any

from stringfrom.models.annotation import SOURCE_MARKER
from stringfrom.models.declaration import (
    DeclarationKind,
    Field,
    RawAnnotation,
    TypeDeclaration,
    Variant,
    VariantShape,
)
from stringfrom.models.errors import Diagnostic, DiagnosticKind, SourceSpan
from stringfrom.parser.loader import SourceMap

logger = logging.getLogger("stringfrom.parser")

_TOKEN_RE = re.compile(r"^\s*([A-Za-z_][\w.]*)\s*(?:\((.*)\))?\s*$", re.DOTALL)


class DeclarationError(Exception):
    """Internal signal carrying the diagnostic that stops reading."""

    def __init__(self, diagnostic: Diagnostic) -> None:
        self.diagnostic = diagnostic
        super().__init__(diagnostic.message)


def is_identifier(name: Any) -> bool:
    return isinstance(name, str) and name.isidentifier() and not keyword.iskeyword(name)


class SchemaReader:
    """Reads one declaration from its document mapping."""

    def __init__(self, source_map: SourceMap | None = None, prefix: str = "declarations") -> None:
        self._source_map = source_map
        self._prefix = prefix

    def read(
        self, name: str, raw: Any
    ) -> tuple[TypeDeclaration | None, Diagnostic | None]:
        """Read declaration ``name``.

        Returns (declaration, None) on success and (None, diagnostic) when the
        declaration is not a tagged union or is structurally invalid.
        """
        path = f"{self._prefix}.{name}" if self._prefix else str(name)
        try:
            return self._read_declaration(name, raw, path), None
        except DeclarationError as exc:
            logger.debug("declaration %s rejected: %s", name, exc.diagnostic.kind)
            return None, exc.diagnostic

    # -- helpers -------------------------------------------------------------

    def _span(self, path: str) -> SourceSpan | None:
        return self._source_map.nearest(path) if self._source_map else None

    def _fail(self, kind: DiagnosticKind, message: str, path: str) -> DeclarationError:
        return DeclarationError(
            Diagnostic(kind=kind, message=message, path=path, span=self._span(path))
        )

    def _invalid(self, message: str, path: str) -> DeclarationError:
        return self._fail(DiagnosticKind.INVALID_DECLARATION, message, path)

    # -- structure -----------------------------------------------------------

    def _read_declaration(self, name: str, raw: Any, path: str) -> TypeDeclaration:
        if not is_identifier(name):
            raise self._invalid(f"'{name}' is not a valid type name", path)
        if not isinstance(raw, dict):
            raise self._invalid(f"Declaration '{name}' must be a mapping", path)

        raw_kind = raw.get("kind")
        try:
            kind = DeclarationKind(raw_kind)
        except ValueError:
            kind = None
        if kind is None or not kind.is_union:
            described = f"a {raw_kind}" if raw_kind else "of no declared kind"
            raise self._fail(
                DiagnosticKind.NOT_A_UNION,
                f"stringfrom can only be applied to tagged unions; '{name}' is {described}",
                path,
            )

        raw_variants = raw.get("variants") or []
        if not isinstance(raw_variants, list):
            raise self._invalid(f"'variants' of '{name}' must be a list", f"{path}.variants")

        variants: list[Variant] = []
        seen: set[str] = set()
        for i, raw_variant in enumerate(raw_variants):
            variant = self._read_variant(name, raw_variant, f"{path}.variants[{i}]")
            if variant.name in seen:
                raise self._invalid(
                    f"Duplicate variant '{variant.name}' in '{name}'", variant.path
                )
            seen.add(variant.name)
            variants.append(variant)

        return TypeDeclaration(
            name=name,
            kind=kind,
            variants=tuple(variants),
            path=path,
            span=self._span(path),
        )

    def _read_variant(self, union: str, raw: Any, path: str) -> Variant:
        if not isinstance(raw, dict):
            raise self._invalid(f"Variant of '{union}' must be a mapping", path)
        name = raw.get("name")
        if not is_identifier(name):
            raise self._invalid(f"Variant of '{union}' has an invalid name: {name!r}", path)

        annotations = self._read_annotations(raw.get("attributes"), f"{path}.attributes")

        raw_fields = raw.get("fields")
        fields: list[Field] = []
        if raw_fields is None:
            shape = VariantShape.UNIT
        elif isinstance(raw_fields, list):
            shape = VariantShape.POSITIONAL
            for j, raw_field in enumerate(raw_fields):
                fields.append(self._read_field(None, raw_field, f"{path}.fields[{j}]"))
        elif isinstance(raw_fields, dict):
            shape = VariantShape.NAMED
            for field_name, raw_field in raw_fields.items():
                field_path = f"{path}.fields.{field_name}"
                if not is_identifier(field_name):
                    raise self._invalid(f"'{field_name}' is not a valid field name", field_path)
                fields.append(self._read_field(field_name, raw_field, field_path))
        else:
            raise self._invalid(
                f"'fields' of variant '{name}' must be a list or a mapping", f"{path}.fields"
            )

        return Variant(
            name=name,
            shape=shape,
            fields=tuple(fields),
            annotations=annotations,
            path=path,
            span=self._span(path),
        )

    def _read_field(self, name: str | None, raw: Any, path: str) -> Field:
        # A bare string is shorthand for {type: <string>}.
        if isinstance(raw, str):
            raw = {"type": raw}
        if not isinstance(raw, dict):
            raise self._invalid("Field must be a type name or a mapping", path)
        type_ref = raw.get("type")
        if not isinstance(type_ref, str) or not type_ref.strip():
            raise self._invalid("Field has no type", path)
        try:
            ast.parse(type_ref.strip(), mode="eval")
        except SyntaxError:
            raise self._invalid(f"'{type_ref}' is not a valid type expression", path) from None
        annotations = self._read_annotations(raw.get("attributes"), f"{path}.attributes")
        return Field(
            type=type_ref.strip(),
            name=name,
            is_source_marked=any(a.name == SOURCE_MARKER for a in annotations),
            annotations=annotations,
            path=path,
            span=self._span(path),
        )

    def _read_annotations(self, raw: Any, path: str) -> tuple[RawAnnotation, ...]:
        if raw is None:
            return ()
        if isinstance(raw, str):
            raw = [raw]
        if not isinstance(raw, list):
            raise self._invalid("'attributes' must be a list of attribute tokens", path)
        tokens: list[RawAnnotation] = []
        for k, token in enumerate(raw):
            token_path = f"{path}[{k}]"
            if not isinstance(token, str):
                raise self._invalid(f"Attribute token must be a string, got {token!r}", token_path)
            match = _TOKEN_RE.match(token)
            if match is None:
                raise self._invalid(f"Cannot parse attribute token {token!r}", token_path)
            tokens.append(
                RawAnnotation(
                    name=match.group(1),
                    arguments=match.group(2).strip() if match.group(2) is not None else None,
                    span=self._span(token_path),
                )
            )
        return tuple(tokens)

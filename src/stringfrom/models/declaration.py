"""In-memory description of a type declaration, its variants and fields."""

from __future__ import annotations

from enum import StrEnum

from pydantic import BaseModel, Field as PydanticField

from stringfrom.models.errors import SourceSpan


class DeclarationKind(StrEnum):
    UNION = "union"
    ENUM = "enum"
    STRUCT = "struct"
    CLASS = "class"

    @property
    def is_union(self) -> bool:
        return self in (DeclarationKind.UNION, DeclarationKind.ENUM)


class VariantShape(StrEnum):
    POSITIONAL = "positional"
    NAMED = "named"
    UNIT = "unit"


class RawAnnotation(BaseModel):
    """An attribute token as written: a name plus its unparsed argument text.

    ``arguments`` is ``None`` when the token has no parentheses at all and
    ``""`` for an empty argument list.
    """

    name: str
    arguments: str | None = None
    span: SourceSpan | None = None

    model_config = {"frozen": True}

    def __str__(self) -> str:
        if self.arguments is None:
            return self.name
        return f"{self.name}({self.arguments})"


class Field(BaseModel):
    """A field of one variant; positional fields have no name."""

    type: str
    name: str | None = None
    is_source_marked: bool = False
    annotations: tuple[RawAnnotation, ...] = ()
    path: str = ""
    span: SourceSpan | None = None

    model_config = {"frozen": True}


class Variant(BaseModel):
    """One alternative of a tagged union."""

    name: str
    shape: VariantShape = VariantShape.POSITIONAL
    fields: tuple[Field, ...] = ()
    annotations: tuple[RawAnnotation, ...] = ()
    path: str = ""
    span: SourceSpan | None = None

    model_config = {"frozen": True}

    def annotations_named(self, name: str) -> list[RawAnnotation]:
        return [a for a in self.annotations if a.name == name]


class TypeDeclaration(BaseModel):
    """A tagged union read from a declaration document."""

    name: str
    kind: DeclarationKind = DeclarationKind.UNION
    variants: tuple[Variant, ...] = PydanticField(default_factory=tuple)
    path: str = ""
    span: SourceSpan | None = None

    model_config = {"frozen": True}

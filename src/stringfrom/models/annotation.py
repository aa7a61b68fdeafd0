"""The annotation schema: which per-variant metadata is legal.

Everything here is immutable and shared read-only by every generation run.
"""

from __future__ import annotations

from enum import StrEnum
from typing import Annotated, Literal

from pydantic import BaseModel, Field

ANNOTATION_NAME = "stringfrom"
SOURCE_MARKER = "from"


class AnnotationMode(StrEnum):
    CONTEXT = "context"
    TYPE = "type"


class ContextAnnotation(BaseModel):
    """``stringfrom("some context")``: wrap the source-marked field's value."""

    mode: Literal["context"] = "context"
    context: str

    model_config = {"frozen": True}


class TypeAnnotation(BaseModel):
    """``stringfrom(SomeError)``: store the named type's string form."""

    mode: Literal["type"] = "type"
    type_name: str

    model_config = {"frozen": True}


Annotation = Annotated[ContextAnnotation | TypeAnnotation, Field(discriminator="mode")]


class ConversionSpec(BaseModel):
    """A validated conversion from ``source_type`` to one union variant.

    In context mode ``source_index`` is the slot that receives the original
    value; every other slot receives the context-prefixed string form.
    In type mode there is a single slot and it receives the string form.
    An empty ``context`` means the string form is used without a prefix.
    """

    union_name: str
    variant_name: str
    mode: AnnotationMode
    source_type: str
    field_count: int = 1
    source_index: int | None = None
    context: str = ""

    model_config = {"frozen": True}

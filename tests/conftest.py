"""Shared test fixtures for stringfrom."""

from __future__ import annotations

import pytest

from stringfrom.compiler.pipeline import GenerationPipeline
from stringfrom.parser.loader import TrackedLoader
from stringfrom.parser.validator import AttributeValidator


@pytest.fixture
def loader() -> TrackedLoader:
    return TrackedLoader()


@pytest.fixture
def validator() -> AttributeValidator:
    return AttributeValidator()


@pytest.fixture
def pipeline() -> GenerationPipeline:
    return GenerationPipeline()


SAMPLE_DOCUMENT_YAML = """\
module: app.errors
declarations:
  AppError:
    kind: union
    variants:
      - name: Wrapped
        attributes: ['stringfrom("use case error")']
        fields:
          - type: str
          - type: InnerError
            attributes: [from]
      - name: Plain
        fields: [str]
  ApiError:
    kind: enum
    variants:
      - name: BadRequest
        fields: [str]
      - name: Upstream
        attributes: [stringfrom(UseCaseError)]
        fields: [str]
"""

BROKEN_DOCUMENT_YAML = """\
declarations:
  Broken:
    kind: union
    variants:
      - name: Twice
        attributes: ['stringfrom("ctx")']
        fields:
          - {type: SourceA, attributes: [from]}
          - {type: SourceB, attributes: [from]}
  Fine:
    kind: union
    variants:
      - name: Wrapped
        attributes: ['stringfrom("fine")']
        fields: [str, {type: Inner, attributes: [from]}]
"""

APP_ERROR_CODE = '''\
def app_error_from_inner_error(err: InnerError) -> AppError:
    """Convert ``InnerError`` into ``AppError.Wrapped``."""
    return AppError.Wrapped(f"use case error: {err}", err)
'''

API_ERROR_CODE = '''\
def api_error_from_use_case_error(err: UseCaseError) -> ApiError:
    """Convert ``UseCaseError`` into ``ApiError.Upstream``."""
    return ApiError.Upstream(str(err))
'''


def union(*variants: dict, kind: str = "union") -> dict:
    """Build a raw declaration mapping from variant mappings."""
    return {"kind": kind, "variants": list(variants)}


def variant(name: str, *fields: object, attributes: list[str] | None = None) -> dict:
    raw: dict = {"name": name, "fields": list(fields)}
    if attributes is not None:
        raw["attributes"] = attributes
    return raw


def source(type_name: str) -> dict:
    """A positional field carrying the ``from`` marker."""
    return {"type": type_name, "attributes": ["from"]}

"""Renders ConversionSpecs as Python conversion functions."""

from __future__ import annotations

import json
import re
from collections.abc import Sequence

from stringfrom.models.annotation import AnnotationMode, ConversionSpec

_CAMEL_BOUNDARY = re.compile(r"(?<=[a-z0-9])(?=[A-Z])|(?<=[A-Z])(?=[A-Z][a-z])")
_NON_IDENT = re.compile(r"\W+")

ARGUMENT = "err"


def snake_case(name: str) -> str:
    """``UseCaseError`` -> ``use_case_error``, ``HTTPError`` -> ``http_error``."""
    name = _NON_IDENT.sub("_", name).strip("_")
    return _CAMEL_BOUNDARY.sub("_", name).lower()


def function_name(spec: ConversionSpec) -> str:
    """``AppError`` from ``db.Error`` -> ``app_error_from_db_error``."""
    return f"{snake_case(spec.union_name)}_from_{snake_case(spec.source_type)}"


def function_names(specs: Sequence[ConversionSpec]) -> list[str]:
    """Name every spec, qualifying names that distinct source types share.

    ``HTTPError`` and ``HttpError`` both snake-case to ``http_error``; such
    specs get the variant name as well. Specs with the same source type keep
    the same name.
    """
    names = [function_name(spec) for spec in specs]
    sources: dict[str, set[str]] = {}
    for name, spec in zip(names, specs):
        sources.setdefault(name, set()).add(spec.source_type)
    return [
        f"{snake_case(spec.union_name)}_{snake_case(spec.variant_name)}_from_"
        f"{snake_case(spec.source_type)}"
        if len(sources[name]) > 1
        else name
        for name, spec in zip(names, specs)
    ]


def message_expr(context: str) -> str:
    """Expression producing the string form of ``err``, prefixed by ``context``."""
    if not context:
        return f"str({ARGUMENT})"
    body = context.replace("{", "{{").replace("}", "}}") + ": {" + ARGUMENT + "}"
    return "f" + json.dumps(body, ensure_ascii=False)


class CodeEmitter:
    """Generates one standalone function per ConversionSpec.

    Output depends only on the specs and their order.
    """

    def __init__(self, emit_docstrings: bool = True) -> None:
        self._emit_docstrings = emit_docstrings

    def emit(self, specs: Sequence[ConversionSpec]) -> str:
        """Render all specs in order, separated the way top-level defs are."""
        if not specs:
            return ""
        functions = [
            self.emit_function(spec, name) for spec, name in zip(specs, function_names(specs))
        ]
        return "\n\n\n".join(functions) + "\n"

    def emit_function(self, spec: ConversionSpec, name: str | None = None) -> str:
        name = name or function_name(spec)
        lines = [f"def {name}({ARGUMENT}: {spec.source_type}) -> {spec.union_name}:"]
        if self._emit_docstrings:
            lines.append(
                f'    """Convert ``{spec.source_type}`` into '
                f'``{spec.union_name}.{spec.variant_name}``."""'
            )
        args = ", ".join(self._arguments(spec))
        lines.append(f"    return {spec.union_name}.{spec.variant_name}({args})")
        return "\n".join(lines)

    @staticmethod
    def _arguments(spec: ConversionSpec) -> list[str]:
        if spec.mode is AnnotationMode.TYPE:
            return [f"str({ARGUMENT})"]
        message = message_expr(spec.context)
        return [
            ARGUMENT if i == spec.source_index else message for i in range(spec.field_count)
        ]

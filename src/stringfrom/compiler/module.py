"""Assembles a complete generated module: provenance header, imports, functions."""

from __future__ import annotations

import ast
import builtins
import hashlib
import re

from stringfrom import __version__
from stringfrom.compiler.pipeline import DocumentResult
from stringfrom.models.annotation import ConversionSpec
from stringfrom.parser.validator import dotted_name

FORMAT_VERSION = "1"
GENERATED_MARKER = "# stringfrom-generated"
DIGEST_PATTERN = re.compile(r"^# digest: ([0-9a-f]{64})$", re.MULTILINE)


def compute_digest(source_bytes: bytes, body: str) -> str:
    h = hashlib.sha256()
    h.update(__version__.encode("utf-8"))
    h.update(b"\x00")
    h.update(FORMAT_VERSION.encode("utf-8"))
    h.update(b"\x00")
    h.update(source_bytes)
    h.update(b"\x00")
    h.update(body.encode("utf-8"))
    return h.hexdigest()


def extract_digest(text: str) -> str | None:
    m = DIGEST_PATTERN.search(text)
    if not m:
        return None
    return m.group(1)


def _collect_names(node: ast.AST, names: set[str], packages: set[str]) -> None:
    dotted = dotted_name(node) if isinstance(node, (ast.Name, ast.Attribute)) else None
    if dotted is None:
        for child in ast.iter_child_nodes(node):
            _collect_names(child, names, packages)
    elif "." in dotted:
        packages.add(dotted.rsplit(".", 1)[0])
    elif not hasattr(builtins, dotted):
        names.add(dotted)


def import_lines(module: str | None, specs: list[ConversionSpec]) -> list[str]:
    """Imports for every name the generated functions refer to.

    Bare names come from ``module``, dotted names import their package and
    builtins are left alone. Source types may be any type expression, such
    as ``list[pkg.Err]``.
    """
    if module is None or not specs:
        return []
    names: set[str] = set()
    packages: set[str] = set()
    for spec in specs:
        names.add(spec.union_name)
        _collect_names(ast.parse(spec.source_type, mode="eval").body, names, packages)
    lines = [f"import {package}" for package in sorted(packages)]
    lines.append(f"from {module} import {', '.join(sorted(names))}")
    return lines


def render_module(result: DocumentResult, source_label: str, source_bytes: bytes) -> str:
    """Render the whole output file for a document.

    Failed declarations contribute nothing; their diagnostics are reported
    separately.
    """
    imports = import_lines(result.module, result.specs)
    body = "from __future__ import annotations\n"
    if imports:
        body += "\n" + "\n".join(imports) + "\n"
    if result.code:
        body += "\n\n" + result.code

    meta = (
        f"{GENERATED_MARKER}\n"
        f"# source: {source_label}\n"
        f"# generator_version: {__version__}\n"
        f"# format_version: {FORMAT_VERSION}\n"
        f"# digest: {compute_digest(source_bytes, body)}\n\n"
    )
    return meta + body

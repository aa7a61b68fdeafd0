"""Post-generation syntax check of emitted Python source."""

from __future__ import annotations

import ast


def check_syntax(source: str, filename: str = "<generated>") -> list[str]:
    """Parse generated source without executing it.

    Returns a list of error messages (empty if the source parses).
    The check is non-blocking; callers should treat errors as warnings.
    Names and types are not resolved here.
    """
    errors: list[str] = []
    try:
        ast.parse(source, filename=filename)
    except SyntaxError as exc:
        location = f"line {exc.lineno}" if exc.lineno else "unknown line"
        errors.append(f"{exc.msg} ({location})")
    return errors

"""Renders diagnostics as location-anchored build failures."""

from __future__ import annotations

import logging
import sys
from collections.abc import Iterable
from typing import TextIO

from stringfrom.models.errors import Diagnostic

logger = logging.getLogger("stringfrom.reporter")


class DiagnosticReporter:
    """Writes one message per diagnostic, in the order given.

    Messages follow the ``file:line:column: error[Kind]: message`` convention
    so editors and build logs can jump to the offending declaration.
    """

    def __init__(self, stream: TextIO | None = None) -> None:
        self._stream = stream if stream is not None else sys.stderr
        self.reported = 0

    @staticmethod
    def render(diagnostic: Diagnostic) -> str:
        if diagnostic.span is not None:
            span = diagnostic.span
            location = f"{span.file}:{span.line}:{span.column}: "
        else:
            location = ""
        line = f"{location}error[{diagnostic.kind}]: {diagnostic.message}"
        if diagnostic.path:
            line += f" (at {diagnostic.path})"
        return line

    def report(self, diagnostics: Iterable[Diagnostic]) -> int:
        """Report every diagnostic and return how many were written."""
        count = 0
        for diagnostic in diagnostics:
            rendered = self.render(diagnostic)
            logger.error("%s at %s: %s", diagnostic.kind, diagnostic.path, diagnostic.message)
            print(rendered, file=self._stream)
            count += 1
        self.reported += count
        return count

"""YAML loader with position tracking for declaration documents."""

from __future__ import annotations

from dataclasses import dataclass, field
from pathlib import Path
from typing import Any

from ruamel.yaml import YAML
from ruamel.yaml.comments import CommentedMap, CommentedSeq

from stringfrom.models.errors import SourceSpan

# ---------------------------------------------------------------------------
# Safety limits
# ---------------------------------------------------------------------------

_MAX_DOCUMENT_SIZE = 2_000_000  # 2M characters
_MAX_NODE_COUNT = 50_000
_MAX_DEPTH = 20


class YAMLSafetyError(Exception):
    """Raised when YAML input violates safety constraints.

    Distinct from parse errors: anchors, excessive nesting and oversized
    documents are rejected before any declaration is read.
    """


@dataclass
class SourceMap:
    """Maps document key paths to their source positions."""

    _positions: dict[str, SourceSpan] = field(default_factory=dict)

    def add(self, path: str, span: SourceSpan) -> None:
        self._positions[path] = span

    def get(self, path: str) -> SourceSpan | None:
        return self._positions.get(path)

    def nearest(self, path: str) -> SourceSpan | None:
        """Return the span of ``path`` or of its closest recorded ancestor."""
        while path:
            span = self._positions.get(path)
            if span is not None:
                return span
            cut = max(path.rfind("."), path.rfind("["))
            if cut <= 0:
                return None
            path = path[:cut]
        return None


class TrackedLoader:
    """YAML loader that records the line and column of every key and item.

    Uses ruamel.yaml, which keeps position info on every parsed node.
    """

    def __init__(self) -> None:
        self._yaml = YAML()
        self._yaml.preserve_quotes = True
        self._yaml.max_depth = _MAX_DEPTH

    # -- safety checks -------------------------------------------------------

    def _check_yaml_safety(self, content: str) -> None:
        if len(content) > _MAX_DOCUMENT_SIZE:
            raise YAMLSafetyError(
                f"YAML document exceeds maximum size "
                f"({len(content):,} chars > {_MAX_DOCUMENT_SIZE:,} limit)"
            )
        # Anchors and aliases come from parse events; "&" in a scalar is text.
        for event in self._yaml.parse(content):
            if getattr(event, "anchor", None):
                raise YAMLSafetyError(
                    "YAML anchors/aliases are not supported in declaration documents"
                )

    @staticmethod
    def _check_node_count(data: Any, limit: int = _MAX_NODE_COUNT) -> None:
        count = 0
        stack: list[Any] = [data]
        while stack:
            node = stack.pop()
            count += 1
            if count > limit:
                raise YAMLSafetyError(f"YAML document exceeds maximum node count ({limit:,})")
            if isinstance(node, dict):
                stack.extend(node.values())
            elif isinstance(node, list):
                stack.extend(node)

    # -- public loading API --------------------------------------------------

    def load(self, path: Path) -> tuple[dict[str, Any], SourceMap]:
        """Load a YAML file and return parsed dict + source position map."""
        with path.open("r", encoding="utf-8") as handle:
            content = handle.read()
        return self.load_string(content, filename=str(path))

    def load_string(
        self, content: str, filename: str = "<string>"
    ) -> tuple[dict[str, Any], SourceMap]:
        """Load YAML from a string."""
        self._check_yaml_safety(content)
        data = self._yaml.load(content)
        if data is None:
            return {}, SourceMap()
        self._check_node_count(data)
        source_map = SourceMap()
        self._extract_positions(data, filename, "", source_map)
        return self._to_plain_dict(data), source_map

    def _extract_positions(
        self,
        data: Any,
        filename: str,
        prefix: str,
        source_map: SourceMap,
    ) -> None:
        if isinstance(data, CommentedMap):
            for key in data:
                key_path = f"{prefix}.{key}" if prefix else str(key)
                try:
                    key_positions = data.lc.key(key)
                except (AttributeError, KeyError, TypeError):
                    key_positions = None
                if key_positions:
                    line, col = key_positions
                    source_map.add(
                        key_path, SourceSpan(file=filename, line=line + 1, column=col + 1)
                    )
                self._extract_positions(data[key], filename, key_path, source_map)
        elif isinstance(data, CommentedSeq):
            for i, item in enumerate(data):
                item_path = f"{prefix}[{i}]"
                try:
                    item_pos = data.lc.item(i)
                except (AttributeError, KeyError, TypeError):
                    item_pos = None
                if item_pos:
                    line, col = item_pos
                    source_map.add(
                        item_path, SourceSpan(file=filename, line=line + 1, column=col + 1)
                    )
                self._extract_positions(item, filename, item_path, source_map)

    def _to_plain_dict(self, data: Any) -> dict[str, Any]:
        if isinstance(data, dict):
            return {str(k): self._to_plain_value(v) for k, v in data.items()}
        return {}

    def _to_plain_value(self, data: Any) -> Any:
        if isinstance(data, dict):
            return {str(k): self._to_plain_value(v) for k, v in data.items()}
        if isinstance(data, list):
            return [self._to_plain_value(item) for item in data]
        if isinstance(data, str):
            return str(data)
        return data

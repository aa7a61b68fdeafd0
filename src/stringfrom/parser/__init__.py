"""Declaration reading and attribute validation for stringfrom."""

from stringfrom.parser.loader import SourceMap, TrackedLoader, YAMLSafetyError
from stringfrom.parser.reader import SchemaReader
from stringfrom.parser.validator import AttributeValidator

__all__ = [
    "AttributeValidator",
    "SchemaReader",
    "SourceMap",
    "TrackedLoader",
    "YAMLSafetyError",
]

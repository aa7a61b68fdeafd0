"""stringfrom: generates error conversion functions from annotated tagged unions."""

__version__ = "0.3.0"

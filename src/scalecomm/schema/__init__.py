"""Schema sources: type expressions and document loading."""

from __future__ import annotations

from .expressions import parse_type_expression
from .source import SchemaSource, load_schema, load_schema_file

__all__ = [
    "SchemaSource",
    "load_schema",
    "load_schema_file",
    "parse_type_expression",
]

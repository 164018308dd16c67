"""
Schema Validation Utilities

Validates format tables and template descriptions against JSON schemas.

Format tables and templates are plain data (usually loaded from JSON
files), so they are validated once, when they enter the context, and
never again during layout. A table that passes validation can be turned
into typed models without further checks.
"""

from __future__ import annotations

import json
from pathlib import Path
from typing import Any

import jsonschema

from stamp_toolkit.errors import StampError


_SCHEMAS: dict[str, dict] = {}


def _load_schema(name: str) -> dict:
    """Load a schema from the schemas directory."""
    if name not in _SCHEMAS:
        schema_path = Path(__file__).parent / f"{name}.schema.json"
        if not schema_path.exists():
            raise FileNotFoundError(f"Schema not found: {schema_path}")
        with open(schema_path, "r", encoding="utf-8") as f:
            _SCHEMAS[name] = json.load(f)
    return _SCHEMAS[name]


class ValidationError(StampError):
    """Raised when data fails schema validation."""

    def __init__(self, message: str, path: str = "", errors: list[str] | None = None):
        super().__init__(message)
        self.path = path
        self.errors = errors or []


def _validate(data: Any, schema_name: str, what: str) -> None:
    schema = _load_schema(schema_name)
    validator = jsonschema.Draft202012Validator(schema)
    failures = sorted(validator.iter_errors(data), key=lambda e: list(e.absolute_path))
    if not failures:
        return

    first = failures[0]
    path = ".".join(str(p) for p in first.absolute_path)
    raise ValidationError(
        f"Invalid {what}: {first.message}" + (f" (at {path})" if path else ""),
        path=path,
        errors=[
            f"{'.'.join(str(p) for p in e.absolute_path) or '<root>'}: {e.message}"
            for e in failures
        ],
    )


def validate_format_table(data: dict[str, Any]) -> None:
    """
    Validate a format table against format.schema.json.

    Args:
        data: Mapping of format key to format description

    Raises:
        ValidationError: If data is invalid; ``errors`` lists every failure
    """
    _validate(data, "format", "format table")


def validate_template(data: dict[str, Any]) -> None:
    """
    Validate a template description against template.schema.json.

    Hole name uniqueness is not expressible in the schema and is checked
    here as well.

    Args:
        data: Template description dictionary

    Raises:
        ValidationError: If data is invalid
    """
    _validate(data, "template", "template")

    seen: set[str] = set()
    for i, hole in enumerate(data["holes"]):
        name = hole["name"]
        if name in seen:
            raise ValidationError(
                f"Duplicate hole name {name!r} in template {data['name']!r}",
                path=f"holes.{i}.name",
            )
        seen.add(name)

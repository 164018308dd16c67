"""
Schemas Package

JSON schema definitions and validation utilities.
"""

from .validator import (
    validate_format_table,
    validate_template,
    ValidationError,
)

__all__ = [
    "validate_format_table",
    "validate_template",
    "ValidationError",
]

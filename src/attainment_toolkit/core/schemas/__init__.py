"""
Schemas Package

JSON schema definitions and payload validation.
"""

from .validator import (
    validate_payload,
    variant_keys,
    ValidationError,
)

__all__ = [
    "validate_payload",
    "variant_keys",
    "ValidationError",
]

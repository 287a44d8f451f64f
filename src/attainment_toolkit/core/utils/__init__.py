"""
Utils Package

Payload and report serialization.
"""

from .serialization import (
    deserialize_payload,
    serialize_payload,
    serialize_matrix,
    load_payload_json,
    save_matrix_json,
)

__all__ = [
    "deserialize_payload",
    "serialize_payload",
    "serialize_matrix",
    "load_payload_json",
    "save_matrix_json",
]

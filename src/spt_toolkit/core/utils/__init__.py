"""
Utils Package

Serialization helpers.
"""

from .serialization import (
    deserialize_students,
    load_students_json,
    save_students_json,
    save_json,
    load_json,
    parse_po_mapping,
    parse_indirect,
)

__all__ = [
    "deserialize_students",
    "load_students_json",
    "save_students_json",
    "save_json",
    "load_json",
    "parse_po_mapping",
    "parse_indirect",
]

"""
Python dataclass renderer module.

Generates a row dataclass and a facade class per database table.
"""

from .config import python_type_for
from .generator import DataclassFacadeRenderer
from .naming import create_class_name_sanitizer, create_python_sanitizer

__all__ = [
    "DataclassFacadeRenderer",
    "python_type_for",
    "create_python_sanitizer",
    "create_class_name_sanitizer",
]

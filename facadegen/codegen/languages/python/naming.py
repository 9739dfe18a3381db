"""
Python-specific naming utilities and sanitization.

Handles Python reserved words and names generated facades rely on.
"""

from ...core.naming import NameSanitizer


# Python reserved keywords
PYTHON_RESERVED_WORDS = {
    "False",
    "None",
    "True",
    "and",
    "as",
    "assert",
    "async",
    "await",
    "break",
    "class",
    "continue",
    "def",
    "del",
    "elif",
    "else",
    "except",
    "finally",
    "for",
    "from",
    "global",
    "if",
    "import",
    "in",
    "is",
    "lambda",
    "nonlocal",
    "not",
    "or",
    "pass",
    "raise",
    "return",
    "try",
    "while",
    "with",
    "yield",
}

# Names a generated module binds at top level
FACADE_MODULE_NAMES = {
    "dataclasses",
    "datetime",
    "uuid",
    "Decimal",
    "Any",
    "ClassVar",
    "Optional",
    "SCHEMA_NAME",
    "TABLE_NAME",
    "COLUMNS",
    "PRIMARY_KEY",
}


def create_python_sanitizer() -> NameSanitizer:
    """Create a name sanitizer for row field names."""
    return NameSanitizer(PYTHON_RESERVED_WORDS)


def create_class_name_sanitizer() -> NameSanitizer:
    """Create a name sanitizer for facade and row class names."""
    return NameSanitizer(PYTHON_RESERVED_WORDS, FACADE_MODULE_NAMES)

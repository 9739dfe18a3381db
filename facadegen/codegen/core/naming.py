"""
Naming utilities for safe code generation.

Handles name sanitization, case conversions and keyword conflicts for
generated identifiers, plus the two naming rules the path resolver relies
on: schema name to package directory and table name to file name.
"""

import keyword
import re
from enum import Enum
from typing import Dict, Set


class NamingCase(Enum):
    """Different naming case styles."""

    SNAKE_CASE = "snake"  # user_name
    PASCAL_CASE = "pascal"  # UserName


class NameSanitizer:
    """Handles name sanitization and case conversion."""

    def __init__(self, reserved_words: Set[str] = None, builtin_types: Set[str] = None):
        """
        Initialize name sanitizer.

        Args:
            reserved_words: Set of language reserved words
            builtin_types: Set of builtin names that might conflict
        """
        self.reserved_words = reserved_words or set()
        self.builtin_types = builtin_types or set()
        self._name_cache: Dict[str, str] = {}
        self._used_names: Set[str] = set()

    def sanitize_name(
        self,
        name: str,
        target_case: NamingCase = NamingCase.SNAKE_CASE,
        suffix_on_conflict: str = "_",
    ) -> str:
        """
        Sanitize a name for safe use in generated code.

        Names are unique within one sanitizer, so two columns that collapse
        to the same identifier get numbered suffixes.

        Args:
            name: Original name to sanitize
            target_case: Desired case style
            suffix_on_conflict: Suffix to add for conflicts

        Returns:
            Sanitized name safe for use
        """
        cache_key = f"{name}_{target_case.value}_{suffix_on_conflict}"
        if cache_key in self._name_cache:
            return self._name_cache[cache_key]

        cleaned = self._clean_basic(name)
        converted = self._convert_case(cleaned, target_case)
        final_name = self._resolve_conflicts(converted, suffix_on_conflict)

        self._name_cache[cache_key] = final_name
        self._used_names.add(final_name)

        return final_name

    def _clean_basic(self, name: str) -> str:
        """Basic name cleanup - remove invalid characters."""
        cleaned = re.sub(r"[^a-zA-Z0-9_]", "_", name)
        cleaned = cleaned.strip("_")

        if not cleaned:
            cleaned = "column"

        return cleaned

    def _convert_case(self, name: str, target_case: NamingCase) -> str:
        """Convert name to target case style."""
        if target_case == NamingCase.SNAKE_CASE:
            converted = to_snake_case(name)
        elif target_case == NamingCase.PASCAL_CASE:
            converted = to_pascal_case(name)
        else:
            converted = name

        # Identifiers cannot start with a digit
        if converted and converted[0].isdigit():
            converted = f"_{converted}"
        return converted

    def _resolve_conflicts(self, name: str, suffix: str) -> str:
        """Resolve naming conflicts with reserved words and existing names."""
        if name in self.reserved_words or name in self.builtin_types:
            name = f"{name}{suffix}"

        original_name = name
        counter = 1
        while name in self._used_names:
            name = f"{original_name}{suffix}{counter}"
            counter += 1

        return name


def to_snake_case(name: str) -> str:
    """Convert to snake_case."""
    name = name.replace("-", "_")
    name = re.sub(r"([a-z0-9])([A-Z])", r"\1_\2", name)
    name = name.lower()
    name = re.sub(r"_+", "_", name)
    return name.strip("_")


def to_pascal_case(name: str) -> str:
    """Convert to PascalCase."""
    # Upper-case tables (ORDERS, ORDER_ITEMS) should not become O_R_D_E_R_S
    if name.isupper():
        name = name.lower()
    return "".join(part.capitalize() for part in to_snake_case(name).split("_") if part)


class PackageNameRule:
    """Maps a raw schema name to a package-safe directory name."""

    def sanitize(self, schema_name: str) -> str:
        """
        Lower-case the schema name and replace characters that cannot appear
        in a Python package name.

        The mapping is deterministic; keywords get a trailing underscore.
        """
        name = re.sub(r"[^0-9a-zA-Z_]", "_", schema_name.strip()).lower()
        if not name:
            name = "_"
        if name[0].isdigit():
            name = f"_{name}"
        if keyword.iskeyword(name):
            name = f"{name}_"
        return name


class CompilationUnitNamer:
    """Maps table names to generated file names and back."""

    def __init__(self, extension: str = ".py"):
        if not extension.startswith("."):
            extension = f".{extension}"
        self.extension = extension

    def unit_name(self, table_name: str) -> str:
        """
        File name for a table: the escaped table name plus the source extension.

        Characters that would leave the schema directory (path separators,
        NUL and a leading dot) are percent-encoded, as is '%' itself, so
        the mapping stays reversible.
        """
        return f"{_escape_unit(table_name)}{self.extension}"

    def table_name(self, unit_name: str) -> str:
        """
        Inverse of unit_name().

        Raises:
            ValueError: If the name does not carry the expected extension
        """
        if not unit_name.endswith(self.extension):
            raise ValueError(
                f"'{unit_name}' does not end with '{self.extension}'"
            )
        table_name = _unescape_unit(unit_name[: -len(self.extension)])
        if not table_name:
            raise ValueError(f"'{unit_name}' has an empty table name")
        return table_name


_UNSAFE_UNIT_CHARS = re.compile(r"[%/\\\x00]|^\.")
_ESCAPED_UNIT_CHAR = re.compile(r"%([0-9A-Fa-f]{2})")


def _escape_unit(name: str) -> str:
    return _UNSAFE_UNIT_CHARS.sub(lambda m: f"%{ord(m.group(0)):02X}", name)


def _unescape_unit(name: str) -> str:
    return _ESCAPED_UNIT_CHAR.sub(lambda m: chr(int(m.group(1), 16)), name)

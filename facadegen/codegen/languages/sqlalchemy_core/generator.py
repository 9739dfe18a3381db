"""
SQLAlchemy Core table renderer.

Renders one module per table holding a ``Table`` declaration bound to a
module-level ``MetaData``. The superclass options have no meaning here and
only feed the fingerprint.
"""

import re
from pathlib import Path
from typing import Any, Dict

from ...core.generator import SourceRenderer
from ...core.naming import NameSanitizer, NamingCase
from ...core.schema import ColumnInfo, TableSchema
from ..python.config import base_type_name, python_type_for
from ..python.naming import PYTHON_RESERVED_WORDS

# Python annotation -> SQLAlchemy generic type
SA_TYPE_MAP = {
    "int": "Integer",
    "Decimal": "Numeric",
    "float": "Float",
    "bool": "Boolean",
    "str": "String",
    "bytes": "LargeBinary",
    "datetime.date": "Date",
    "datetime.time": "Time",
    "datetime.datetime": "DateTime",
    "datetime.timedelta": "Interval",
    "uuid.UUID": "Uuid",
}

# Base SQL names that have a more specific generic type
SA_BASE_OVERRIDES = {
    "BIGINT": "BigInteger",
    "BIGSERIAL": "BigInteger",
    "INT8": "BigInteger",
    "SMALLINT": "SmallInteger",
    "SMALLSERIAL": "SmallInteger",
    "INT2": "SmallInteger",
    "TEXT": "Text",
    "CLOB": "Text",
    "JSON": "JSON",
    "JSONB": "JSON",
}

_LENGTH = re.compile(r"\(\s*(\d+)\s*\)")


class SQLAlchemyTableRenderer(SourceRenderer):
    """Renderer producing SQLAlchemy Core ``Table`` facades."""

    @property
    def name(self) -> str:
        return "sqlalchemy"

    @property
    def template_name(self) -> str:
        return "table.py.j2"

    def get_template_directory(self) -> Path:
        return Path(__file__).parent / "templates"

    def build_context(self, table: TableSchema) -> Dict[str, Any]:
        sanitizer = NameSanitizer(PYTHON_RESERVED_WORDS)
        variable = sanitizer.sanitize_name(
            f"{table.identifier.table_name}_table", NamingCase.SNAKE_CASE
        )

        return {
            "variable": variable,
            "columns": [self._column_arguments(column) for column in table.columns],
            "uses_text": any(column.default is not None for column in table.columns),
        }

    def _column_arguments(self, column: ColumnInfo) -> str:
        arguments = [repr(column.name), f"types.{self._sa_type(column.type_name)}"]
        if column.primary_key:
            arguments.append("primary_key=True")
        arguments.append(f"nullable={column.nullable}")
        if column.default is not None:
            arguments.append(f"server_default=text({column.default!r})")
        if column.comment:
            arguments.append(f"comment={column.comment!r}")
        return ", ".join(arguments)

    def _sa_type(self, type_name: str) -> str:
        base = base_type_name(type_name)
        if base in SA_BASE_OVERRIDES:
            sa_name = SA_BASE_OVERRIDES[base]
        else:
            annotation, _ = python_type_for(type_name)
            sa_name = SA_TYPE_MAP.get(annotation)
            if sa_name is None:
                return "NullType()"

        if self.options.use_number_class and sa_name in {
            "Integer",
            "BigInteger",
            "SmallInteger",
            "Float",
        }:
            sa_name = "Numeric"

        if sa_name == "String":
            match = _LENGTH.search(type_name)
            if match:
                return f"String({match.group(1)})"
        return f"{sa_name}()"

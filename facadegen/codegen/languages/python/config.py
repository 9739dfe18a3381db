"""
Python type mapping for database column types.

Maps the SQL type names reported by the metadata layer onto Python
annotations, together with the import each annotation needs.
"""

import re
from typing import Optional, Tuple

# Base SQL type name -> Python annotation
SQL_TYPE_MAP = {
    # Integers
    "INT": "int",
    "INTEGER": "int",
    "BIGINT": "int",
    "SMALLINT": "int",
    "TINYINT": "int",
    "MEDIUMINT": "int",
    "SERIAL": "int",
    "BIGSERIAL": "int",
    "SMALLSERIAL": "int",
    "INT2": "int",
    "INT4": "int",
    "INT8": "int",
    # Exact numerics
    "NUMERIC": "Decimal",
    "DECIMAL": "Decimal",
    "NUMBER": "Decimal",
    "MONEY": "Decimal",
    # Approximate numerics
    "FLOAT": "float",
    "FLOAT4": "float",
    "FLOAT8": "float",
    "REAL": "float",
    "DOUBLE": "float",
    "DOUBLE PRECISION": "float",
    # Booleans
    "BOOL": "bool",
    "BOOLEAN": "bool",
    "BIT": "bool",
    # Temporal
    "DATE": "datetime.date",
    "TIME": "datetime.time",
    "DATETIME": "datetime.datetime",
    "DATETIME2": "datetime.datetime",
    "TIMESTAMP": "datetime.datetime",
    "TIMESTAMPTZ": "datetime.datetime",
    "INTERVAL": "datetime.timedelta",
    # Binary
    "BLOB": "bytes",
    "LONGBLOB": "bytes",
    "BYTEA": "bytes",
    "BINARY": "bytes",
    "VARBINARY": "bytes",
    "RAW": "bytes",
    # Other
    "UUID": "uuid.UUID",
    "JSON": "Any",
    "JSONB": "Any",
}

# Any base name containing one of these is textual
TEXT_MARKERS = ("CHAR", "TEXT", "CLOB", "STRING", "ENUM")

NUMERIC_TYPES = {"int", "float", "Decimal"}

# Annotations that require imports
PYTHON_IMPORT_MAP = {
    "Decimal": "from decimal import Decimal",
    "datetime.date": "import datetime",
    "datetime.time": "import datetime",
    "datetime.datetime": "import datetime",
    "datetime.timedelta": "import datetime",
    "uuid.UUID": "import uuid",
    "Any": "from typing import Any",
}

UNKNOWN_TYPE = "Any"

_BASE_TYPE = re.compile(r"^\s*([A-Za-z][A-Za-z0-9_ ]*?)\s*(?:\(|\[|$| WITH| WITHOUT| UNSIGNED)")


def base_type_name(type_name: str) -> str:
    """'VARCHAR(20)' -> 'VARCHAR', 'timestamp without time zone' -> 'TIMESTAMP'."""
    match = _BASE_TYPE.match(type_name.upper())
    if not match:
        return type_name.strip().upper()
    return match.group(1).strip()


def python_type_for(type_name: str, use_number_class: bool = False) -> Tuple[str, Optional[str]]:
    """
    Python annotation for a SQL type.

    Args:
        type_name: Type name as reported by the database
        use_number_class: Map every numeric type to Decimal

    Returns:
        (annotation, import statement or None)
    """
    base = base_type_name(type_name)
    annotation = SQL_TYPE_MAP.get(base)

    if annotation is None:
        if any(marker in base for marker in TEXT_MARKERS):
            annotation = "str"
        elif base.startswith("TIMESTAMP"):
            annotation = "datetime.datetime"
        else:
            annotation = UNKNOWN_TYPE

    if use_number_class and annotation in NUMERIC_TYPES:
        annotation = "Decimal"

    return annotation, PYTHON_IMPORT_MAP.get(annotation)

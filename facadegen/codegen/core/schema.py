"""
Core table representation for code generation.

Normalizes what the metadata layer reports about a table into immutable
values that selectors, resolvers and renderers can share.
"""

from dataclasses import dataclass, field
from typing import Optional, Tuple

from .errors import ConfigurationError


@dataclass(frozen=True, order=True)
class TableIdentifier:
    """A (schema, table) pair. Ordered lexicographically by schema then table."""

    schema_name: str
    table_name: str

    def __post_init__(self):
        if not self.schema_name:
            raise ValueError("Schema name must not be empty")
        if not self.table_name:
            raise ValueError("Table name must not be empty")

    @classmethod
    def parse(cls, token: str) -> "TableIdentifier":
        """
        Parse a ``schema.table`` token.

        The token is split on its first dot, so table names may contain dots
        but schema names may not.

        Raises:
            ConfigurationError: If the token has no dot or an empty segment
        """
        schema_name, sep, table_name = token.strip().partition(".")
        if not sep:
            raise ConfigurationError(
                f"Invalid table '{token}': expected the form schema.table"
            )
        if not schema_name or not table_name:
            raise ConfigurationError(
                f"Invalid table '{token}': schema and table must not be empty"
            )
        return cls(schema_name, table_name)

    def __str__(self) -> str:
        return f"{self.schema_name}.{self.table_name}"


@dataclass(frozen=True)
class ColumnInfo:
    """A single column as reported by the database."""

    name: str
    type_name: str
    nullable: bool = True
    primary_key: bool = False
    default: Optional[str] = None
    comment: Optional[str] = None


@dataclass(frozen=True)
class TableSchema:
    """Everything a renderer needs to know about one table."""

    identifier: TableIdentifier
    columns: Tuple[ColumnInfo, ...] = field(default_factory=tuple)
    comment: Optional[str] = None

    @property
    def primary_key(self) -> Tuple[str, ...]:
        """Names of the primary key columns, in column order."""
        return tuple(column.name for column in self.columns if column.primary_key)

    @property
    def column_names(self) -> Tuple[str, ...]:
        return tuple(column.name for column in self.columns)

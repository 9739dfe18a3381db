"""
Metadata providers that report which tables and columns a database has.

The generation core only talks to the MetadataProvider protocol. The
SQLAlchemy provider reflects a live database; the static provider serves
an in-memory catalog.
"""

from __future__ import annotations

from typing import Dict, Mapping, Optional, Protocol, Sequence, Tuple

from sqlalchemy import create_engine, inspect
from sqlalchemy.engine import URL, Engine, make_url
from sqlalchemy.exc import ArgumentError, CompileError, NoSuchTableError, SQLAlchemyError

from ...logging_config import get_logger
from .errors import ConfigurationError, MetadataError
from .schema import ColumnInfo, TableIdentifier, TableSchema

logger = get_logger(__name__)


class MetadataProvider(Protocol):
    """Protocol for services that describe the database schema."""

    def tables_of(self, schema_name: str) -> Sequence[str]:
        """Return the table names of a schema in database order."""

    def table_schema(self, identifier: TableIdentifier) -> TableSchema:
        """Return the columns of a single table."""


class StaticMetadataProvider:
    """Metadata provider backed by an in-memory catalog."""

    def __init__(
        self,
        tables: Mapping[str, Mapping[str, Sequence[ColumnInfo]]] | None = None,
    ) -> None:
        self._tables: Dict[str, Dict[str, Tuple[ColumnInfo, ...]]] = {}
        self.update(tables or {})

    def update(self, tables: Mapping[str, Mapping[str, Sequence[ColumnInfo]]]) -> None:
        """Replace the catalog."""

        self._tables = {
            schema: {name: tuple(columns) for name, columns in schema_tables.items()}
            for schema, schema_tables in tables.items()
        }

    def tables_of(self, schema_name: str) -> Sequence[str]:
        return tuple(self._tables.get(schema_name, {}))

    def table_schema(self, identifier: TableIdentifier) -> TableSchema:
        try:
            columns = self._tables[identifier.schema_name][identifier.table_name]
        except KeyError:
            raise MetadataError(f"Table not found: {identifier}") from None
        return TableSchema(identifier, columns)


class SQLAlchemyMetadataProvider:
    """Reflects schema information from a live database through SQLAlchemy."""

    def __init__(
        self,
        url: str,
        username: Optional[str] = None,
        password: Optional[str] = None,
        driver: Optional[str] = None,
    ) -> None:
        self.url = _build_url(url, username, password, driver)
        self._engine: Engine | None = None
        self._inspector = None

    @property
    def engine(self) -> Engine:
        if self._engine is None:
            logger.debug("Creating engine for %s", self.url.render_as_string(hide_password=True))
            self._engine = create_engine(self.url, pool_pre_ping=True)
        return self._engine

    @property
    def inspector(self):
        if self._inspector is None:
            try:
                self._inspector = inspect(self.engine)
            except SQLAlchemyError as e:
                raise MetadataError(f"Could not connect to database: {e}") from e
        return self._inspector

    def tables_of(self, schema_name: str) -> Sequence[str]:
        try:
            names = self.inspector.get_table_names(schema=schema_name)
        except SQLAlchemyError as e:
            raise MetadataError(f"Failed to list tables of schema '{schema_name}': {e}") from e
        logger.debug("Discovered %d tables in %s", len(names), schema_name)
        return tuple(names)

    def table_schema(self, identifier: TableIdentifier) -> TableSchema:
        schema, table = identifier.schema_name, identifier.table_name
        try:
            reflected = self.inspector.get_columns(table, schema=schema)
            pk_cols = set(
                self.inspector.get_pk_constraint(table, schema=schema).get(
                    "constrained_columns"
                )
                or []
            )
            comment = self._table_comment(table, schema)
        except NoSuchTableError as e:
            raise MetadataError(f"Table not found: {identifier}") from e
        except SQLAlchemyError as e:
            raise MetadataError(f"Failed to reflect table {identifier}: {e}") from e

        columns = tuple(
            ColumnInfo(
                name=col["name"],
                type_name=self._type_name(col["type"]),
                nullable=bool(col.get("nullable", True)),
                primary_key=col["name"] in pk_cols,
                default=None if col.get("default") is None else str(col["default"]),
                comment=col.get("comment"),
            )
            for col in reflected
        )
        return TableSchema(identifier, columns, comment)

    def _table_comment(self, table: str, schema: str) -> Optional[str]:
        try:
            return self.inspector.get_table_comment(table, schema=schema).get("text")
        except NotImplementedError:
            # Not every dialect stores table comments
            return None

    def _type_name(self, sa_type) -> str:
        try:
            return sa_type.compile(dialect=self.engine.dialect)
        except CompileError:
            return type(sa_type).__name__.upper()

    def close(self) -> None:
        """Dispose of the engine and its connection pool."""
        if self._engine is not None:
            self._engine.dispose()
            self._engine = None
            self._inspector = None

    def __enter__(self) -> "SQLAlchemyMetadataProvider":
        return self

    def __exit__(self, *exc_info) -> None:
        self.close()


def _build_url(
    url: str,
    username: Optional[str],
    password: Optional[str],
    driver: Optional[str],
) -> URL:
    if not url:
        raise ConfigurationError("Database URL is required")
    try:
        sa_url = make_url(url)
    except ArgumentError as e:
        raise ConfigurationError(f"Invalid database URL: {e}") from e

    updates = {}
    if username:
        updates["username"] = username
    if password:
        updates["password"] = password
    if driver:
        updates["drivername"] = (
            driver if "+" in driver else f"{sa_url.get_backend_name()}+{driver}"
        )
    return sa_url.set(**updates) if updates else sa_url


class MetadataSnapshot:
    """
    Read-only view over a provider for the duration of one run.

    Table listings are fetched once per schema and reused; the snapshot is
    discarded with the run.
    """

    def __init__(self, provider: MetadataProvider, cache: bool = True) -> None:
        self._provider = provider
        self._cache = cache
        self._tables: Dict[str, Tuple[str, ...]] = {}

    def tables_of(self, schema_name: str) -> Tuple[str, ...]:
        """
        Ordered table names of a schema.

        Raises:
            MetadataError: If the provider cannot list the schema
        """
        if self._cache and schema_name in self._tables:
            return self._tables[schema_name]
        try:
            names = tuple(self._provider.tables_of(schema_name))
        except MetadataError:
            raise
        except Exception as e:
            raise MetadataError(
                f"Failed to list tables of schema '{schema_name}': {e}"
            ) from e
        if self._cache:
            self._tables[schema_name] = names
        return names

    def table_schema(self, identifier: TableIdentifier) -> TableSchema:
        """Columns of a single table, fetched on demand."""
        try:
            return self._provider.table_schema(identifier)
        except MetadataError:
            raise
        except Exception as e:
            raise MetadataError(f"Failed to reflect table {identifier}: {e}") from e

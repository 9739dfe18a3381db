"""
Working-set selection: which tables a run generates.

Three mutually exclusive modes, checked in this order:

1. explicit: the configured ``schema.table`` list, as given;
2. regenerate: tables that already have a facade on disk and still exist
   in the database;
3. discover-all: every table of every configured schema.
"""

from pathlib import Path
from typing import Dict, Iterator, List

from ...logging_config import get_logger
from .config import Configuration
from .metadata import MetadataSnapshot
from .paths import FacadePathError, PathResolver
from .schema import TableIdentifier

logger = get_logger(__name__)


class TableSelector:
    """Computes the ordered sequence of tables to generate."""

    def __init__(
        self,
        config: Configuration,
        snapshot: MetadataSnapshot,
        resolver: PathResolver,
    ):
        self.config = config
        self.snapshot = snapshot
        self.resolver = resolver

    def select(self) -> List[TableIdentifier]:
        """
        Return the working set for this run.

        Raises:
            MetadataError: If any configured schema cannot be listed
        """
        if self.config.tables:
            tables = list(self.config.explicit_tables)
            logger.debug("Explicit mode: %d tables", len(tables))
            return tables

        known = self.known_tables()

        if self.config.regenerate:
            tables = self._existing_tables(known)
            logger.debug(
                "Regenerate mode: %d of %d known tables have facades",
                len(tables),
                len(known),
            )
            return tables

        logger.debug("Discover-all mode: %d tables", len(known))
        return list(known)

    def known_tables(self) -> Dict[TableIdentifier, None]:
        """
        All tables the database reports for the configured schemas.

        Schema order first, then database order; duplicates dropped. Returned
        as an insertion-ordered dict so it doubles as an ordered set.
        """
        known: Dict[TableIdentifier, None] = {}
        for schema_name in self.config.schema_names:
            for table_name in self.snapshot.tables_of(schema_name):
                known.setdefault(TableIdentifier(schema_name, table_name), None)
        return known

    def _existing_tables(self, known: Dict[TableIdentifier, None]) -> List[TableIdentifier]:
        selected: Dict[TableIdentifier, None] = {}
        scanned_directories = set()

        for schema_name in self.config.schema_names:
            directory = self.resolver.schema_path(schema_name)
            if directory in scanned_directories:
                continue
            scanned_directories.add(directory)

            for path in self._scan(directory):
                try:
                    identifier = self.resolver.table_from_facade_path(path)
                except FacadePathError as e:
                    logger.debug("Ignoring %s: %s", path, e)
                    continue

                if identifier in known:
                    selected.setdefault(identifier, None)
                else:
                    logger.warning(
                        "Orphaned facade %s: table %s no longer exists in the database",
                        path,
                        identifier,
                    )

        return list(selected)

    def _scan(self, directory: Path) -> Iterator[Path]:
        """Files directly inside a schema directory, sorted by name."""
        if not directory.is_dir():
            return iter(())
        # The package marker is never a facade
        marker = self.resolver.unit_namer.unit_name("__init__")
        return iter(
            sorted(
                (p for p in directory.iterdir() if p.is_file() and p.name != marker),
                key=lambda p: p.name,
            )
        )

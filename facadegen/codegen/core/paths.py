"""
Mapping between table identifiers and generated file locations.

All functions here are pure: they never touch the filesystem.
"""

from pathlib import Path
from typing import Dict, Optional, Union

from .config import Configuration
from .naming import CompilationUnitNamer, PackageNameRule
from .schema import TableIdentifier


class FacadePathError(ValueError):
    """A path that the resolver did not produce and cannot map back."""

    pass


class PathResolver:
    """Resolves package, schema and facade paths for one configuration."""

    def __init__(
        self,
        config: Configuration,
        package_rule: Optional[PackageNameRule] = None,
        unit_namer: Optional[CompilationUnitNamer] = None,
    ):
        self.config = config
        self.package_rule = package_rule or PackageNameRule()
        self.unit_namer = unit_namer or CompilationUnitNamer()

        # Sanitized directory name -> configured schema name, first one wins
        self._schemas_by_directory: Dict[str, str] = {}
        for schema_name in config.schema_names:
            self._schemas_by_directory.setdefault(
                self.package_rule.sanitize(schema_name), schema_name
            )

    def package_path(self) -> Path:
        """Output root with each package segment appended."""
        path = Path(self.config.output)
        for segment in self.config.package_segments:
            path = path / segment
        return path

    def schema_path(self, schema_name: str) -> Path:
        return self.package_path() / self.package_rule.sanitize(schema_name)

    def facade_path(self, identifier: TableIdentifier) -> Path:
        return self.schema_path(identifier.schema_name) / self.unit_namer.unit_name(
            identifier.table_name
        )

    def table_from_facade_path(self, path: Union[str, Path]) -> TableIdentifier:
        """
        Map a generated facade file back to its table.

        Raises:
            FacadePathError: If the path was not produced by this resolver
        """
        path = Path(path)
        if path.parent.parent != self.package_path():
            raise FacadePathError(f"{path} is not inside {self.package_path()}")

        directory = path.parent.name
        schema_name = self._schemas_by_directory.get(directory, directory)

        try:
            table_name = self.unit_namer.table_name(path.name)
        except ValueError as e:
            raise FacadePathError(f"{path} is not a generated facade: {e}") from e

        try:
            return TableIdentifier(schema_name, table_name)
        except ValueError as e:
            raise FacadePathError(f"{path} is not a generated facade: {e}") from e


def package_path(config: Configuration) -> Path:
    return PathResolver(config).package_path()


def schema_path(config: Configuration, schema_name: str) -> Path:
    return PathResolver(config).schema_path(schema_name)


def facade_path(config: Configuration, identifier: TableIdentifier) -> Path:
    return PathResolver(config).facade_path(identifier)


def table_from_facade_path(config: Configuration, path: Union[str, Path]) -> TableIdentifier:
    return PathResolver(config).table_from_facade_path(path)

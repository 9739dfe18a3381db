"""
Top-level generation run.

Validates the configuration, prepares the output tree, selects the tables
and hands them to the orchestrator.
"""

from datetime import datetime
from typing import Optional

from ..logging_config import get_logger
from .core.config import Configuration
from .core.errors import OutputError
from .core.metadata import MetadataProvider, MetadataSnapshot
from .core.naming import CompilationUnitNamer, PackageNameRule
from .core.orchestrator import (
    GenerationOrchestrator,
    LoggingProgressSink,
    ProgressSink,
    RunResult,
    ensure_directory,
)
from .core.paths import PathResolver
from .core.selector import TableSelector
from .registry import RendererRegistry, get_registry

logger = get_logger(__name__)


class Command:
    """Runs one generation pass."""

    def __init__(
        self,
        config: Configuration,
        provider: MetadataProvider,
        registry: Optional[RendererRegistry] = None,
        sink: Optional[ProgressSink] = None,
        package_rule: Optional[PackageNameRule] = None,
    ):
        """
        Args:
            config: Run configuration; validated by execute()
            provider: Source of table and column metadata
            registry: Renderer registry; the global one when omitted
            sink: Progress receiver; a logging sink in verbose mode, else none
            package_rule: Schema name to directory rule
        """
        self.config = config
        self.provider = provider
        self.registry = registry or get_registry()
        self.sink = sink
        self.package_rule = package_rule or PackageNameRule()

        # Kept after a failed run so callers can report partial progress
        self.result: Optional[RunResult] = None

    def execute(self) -> RunResult:
        """
        Run the generation.

        Returns:
            The run result when every table succeeded

        Raises:
            ConfigurationError: Before any side effect, if the configuration is invalid
            MetadataError, RenderError, OutputError: On the first fatal failure
        """
        config = self.config.validated()

        snapshot = MetadataSnapshot(
            self.provider, cache=config.backend_options.metadata_cache
        )
        renderer = self.registry.create_renderer(config.backend, config, snapshot)
        resolver = PathResolver(
            config,
            self.package_rule,
            CompilationUnitNamer(renderer.file_extension),
        )
        self._warn_unconfigured_schemas(config, resolver)

        if config.verbose:
            self._info(config.describe())
            self._info("start %s", datetime.now().isoformat(timespec="seconds"))

        result = self.result = RunResult()
        for schema_name in dict.fromkeys(config.schema_names):
            path = resolver.schema_path(schema_name)
            if path.exists():
                continue
            try:
                result.directories_created += ensure_directory(path)
            except OSError as e:
                raise OutputError(f"Cannot create directory {path}: {e}") from e
            if config.verbose:
                self._info("create directory %s", path)

        tables = TableSelector(config, snapshot, resolver).select()

        sink = self.sink
        if sink is None and config.verbose:
            sink = LoggingProgressSink()

        GenerationOrchestrator(config, resolver, renderer, sink).generate(tables, result)

        if config.verbose:
            self._info("end %s", datetime.now().isoformat(timespec="seconds"))

        logger.debug(
            "Run finished: %d created, %d skipped, %d directories",
            result.created,
            result.skipped,
            result.directories_created,
        )

        if result.error is not None:
            raise result.error
        return result

    @staticmethod
    def _warn_unconfigured_schemas(config: Configuration, resolver: PathResolver) -> None:
        """Explicit tables outside the configured schemas do not round-trip."""
        configured = set(config.schema_names)
        for schema_name in dict.fromkeys(t.schema_name for t in config.explicit_tables):
            if schema_name not in configured:
                logger.warning(
                    "Schema %s is not among the configured schemas; regenerate mode "
                    "will not map its facades in %s back to it",
                    schema_name,
                    resolver.schema_path(schema_name),
                )

    @staticmethod
    def _info(message: str, *args) -> None:
        logger.info(message, *args)

"""
Core generation components.

Provides the configuration, naming, metadata, selection and orchestration
pieces shared by every renderer backend.
"""

from .errors import (
    FacadeGenError,
    ConfigurationError,
    MetadataError,
    RenderError,
    OutputError,
)
from .schema import TableIdentifier, ColumnInfo, TableSchema
from .config import BackendOptions, Configuration, ConfigManager, load_config
from .naming import NameSanitizer, NamingCase, PackageNameRule, CompilationUnitNamer
from .metadata import (
    MetadataProvider,
    MetadataSnapshot,
    SQLAlchemyMetadataProvider,
    StaticMetadataProvider,
)
from .paths import FacadePathError, PathResolver
from .selector import TableSelector
from .generator import SourceRenderer, format_code
from .templates import TemplateEngine, TemplateError, create_template_engine
from .orchestrator import (
    GenerationOrchestrator,
    LoggingProgressSink,
    NullProgressSink,
    ProgressSink,
    RunResult,
)

__all__ = [
    # Errors
    "FacadeGenError",
    "ConfigurationError",
    "MetadataError",
    "RenderError",
    "OutputError",
    # Data model
    "TableIdentifier",
    "ColumnInfo",
    "TableSchema",
    # Configuration system
    "BackendOptions",
    "Configuration",
    "ConfigManager",
    "load_config",
    # Naming rules
    "NameSanitizer",
    "NamingCase",
    "PackageNameRule",
    "CompilationUnitNamer",
    # Metadata
    "MetadataProvider",
    "MetadataSnapshot",
    "SQLAlchemyMetadataProvider",
    "StaticMetadataProvider",
    # Paths and selection
    "FacadePathError",
    "PathResolver",
    "TableSelector",
    # Rendering
    "SourceRenderer",
    "format_code",
    "TemplateEngine",
    "TemplateError",
    "create_template_engine",
    # Orchestration
    "GenerationOrchestrator",
    "LoggingProgressSink",
    "NullProgressSink",
    "ProgressSink",
    "RunResult",
]

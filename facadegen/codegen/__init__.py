"""
Table facade generation module.

Generates one source file per database table from reflected metadata.
"""

from .registry import (
    RendererRegistry,
    RegistryError,
    get_registry,
    list_backends,
    register_renderer,
)
from .command import Command
from .core import (
    Configuration,
    ConfigurationError,
    FacadeGenError,
    MetadataError,
    OutputError,
    RenderError,
    RunResult,
    SQLAlchemyMetadataProvider,
    StaticMetadataProvider,
    TableIdentifier,
    load_config,
)


def generate_facades(config, provider, sink=None):
    """
    Run one generation pass.

    Args:
        config: Configuration for the run
        provider: Metadata provider for the target database
        sink: Optional progress sink

    Returns:
        RunResult of the run
    """
    return Command(config, provider, sink=sink).execute()


__all__ = [
    "Command",
    "Configuration",
    "ConfigurationError",
    "FacadeGenError",
    "MetadataError",
    "OutputError",
    "RenderError",
    "RegistryError",
    "RendererRegistry",
    "RunResult",
    "SQLAlchemyMetadataProvider",
    "StaticMetadataProvider",
    "TableIdentifier",
    "generate_facades",
    "get_registry",
    "list_backends",
    "load_config",
    "register_renderer",
]

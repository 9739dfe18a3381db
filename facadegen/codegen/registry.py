"""
Renderer registry for managing available facade backends.

Maps configuration names to renderer factories and code formatters. Names
are resolved once at startup; an unknown name is a configuration error.
"""

from typing import Any, Callable, Dict, List, Optional

from .core.config import Configuration
from .core.errors import ConfigurationError
from .core.generator import SourceRenderer, format_code
from .core.metadata import MetadataSnapshot

RendererFactory = Callable[..., SourceRenderer]
Formatter = Callable[[str], str]


class RegistryError(ConfigurationError):
    """Exception raised for registry-related errors."""

    pass


class RendererRegistry:
    """Registry for managing available renderers and formatters."""

    def __init__(self):
        """Initialize empty registry."""
        self._factories: Dict[str, RendererFactory] = {}
        self._aliases: Dict[str, str] = {}
        self._descriptions: Dict[str, str] = {}
        self._formatters: Dict[str, Formatter] = {}

    def register(
        self,
        name: str,
        factory: RendererFactory,
        aliases: Optional[List[str]] = None,
        description: str = "",
        replace: bool = False,
    ):
        """
        Register a renderer factory.

        Args:
            name: Primary backend name (e.g., 'dataclass')
            factory: Callable taking (config, metadata, formatter=, formatter_name=)
            aliases: Alternative names for this backend
            description: One-line summary shown by --list-backends
            replace: If True, replace existing registration. If False, skip if exists.

        Raises:
            RegistryError: If the factory is invalid or an alias conflicts
        """
        if not callable(factory):
            raise RegistryError(f"Renderer factory for '{name}' must be callable")

        key = name.lower()

        if key in self._factories and not replace:
            return

        self._factories[key] = factory
        self._descriptions[key] = description

        for alias in aliases or []:
            alias_key = alias.lower()
            if alias_key == key:
                continue
            if not replace:
                if alias_key in self._factories:
                    raise RegistryError(
                        f"Alias '{alias}' conflicts with existing backend"
                    )
                if alias_key in self._aliases and self._aliases[alias_key] != key:
                    raise RegistryError(
                        f"Alias '{alias}' already points to '{self._aliases[alias_key]}'"
                    )
            self._aliases[alias_key] = key

    def unregister(self, name: str):
        """Unregister a backend and its aliases."""
        key = name.lower()
        self._factories.pop(key, None)
        self._descriptions.pop(key, None)
        for alias in [a for a, target in self._aliases.items() if target == key]:
            del self._aliases[alias]

    def resolve_name(self, name: str) -> str:
        """
        Primary name for a backend name or alias.

        Raises:
            RegistryError: If the name is unknown
        """
        key = name.lower()
        if key in self._factories:
            return key
        if key in self._aliases:
            return self._aliases[key]
        raise RegistryError(
            f"No renderer registered for backend: {name}. "
            f"Available: {', '.join(self.list_backends())}"
        )

    def get_factory(self, name: str) -> RendererFactory:
        return self._factories[self.resolve_name(name)]

    def create_renderer(
        self,
        name: str,
        config: Configuration,
        metadata: MetadataSnapshot,
    ) -> SourceRenderer:
        """
        Create a renderer instance for a backend.

        The formatter named by the ``code-formatter`` option is resolved here
        as well.

        Raises:
            RegistryError: If the backend or formatter is unknown
        """
        factory = self.get_factory(name)
        formatter_name = config.backend_options.code_formatter
        formatter = self.get_formatter(formatter_name)

        renderer = factory(
            config, metadata, formatter=formatter, formatter_name=formatter_name
        )
        if not isinstance(renderer, SourceRenderer):
            raise RegistryError(
                f"Factory for '{name}' returned {type(renderer).__name__}, "
                f"not a SourceRenderer"
            )
        return renderer

    def register_formatter(self, name: str, formatter: Formatter):
        """Register a post-processing formatter for rendered code."""
        if not callable(formatter):
            raise RegistryError(f"Formatter '{name}' must be callable")
        self._formatters[name.lower()] = formatter

    def get_formatter(self, name: str) -> Formatter:
        try:
            return self._formatters[name.lower()]
        except KeyError:
            raise RegistryError(
                f"Unknown code formatter: {name}. "
                f"Available: {', '.join(sorted(self._formatters))}"
            ) from None

    def list_backends(self) -> List[str]:
        """Get list of registered primary backend names."""
        return sorted(self._factories.keys())

    def list_formatters(self) -> List[str]:
        return sorted(self._formatters.keys())

    def get_aliases(self, name: str) -> List[str]:
        key = name.lower()
        return sorted(alias for alias, target in self._aliases.items() if target == key)

    def is_supported(self, name: str) -> bool:
        key = name.lower()
        return key in self._factories or key in self._aliases

    def get_backend_info(self, name: str) -> Dict[str, Any]:
        """
        Get information about a registered backend.

        Raises:
            RegistryError: If the backend is unknown
        """
        key = self.resolve_name(name)
        factory = self._factories[key]
        return {
            "name": key,
            "factory": getattr(factory, "__name__", repr(factory)),
            "module": getattr(factory, "__module__", ""),
            "aliases": self.get_aliases(key),
            "description": self._descriptions.get(key, ""),
        }


def _identity(code: str) -> str:
    return code


# Global registry instance - created once
_global_registry: Optional[RendererRegistry] = None


def get_registry() -> RendererRegistry:
    """Get the global renderer registry, initializing if needed."""
    global _global_registry
    if _global_registry is None:
        _global_registry = RendererRegistry()
        _auto_register(_global_registry)
    return _global_registry


def _auto_register(registry: RendererRegistry):
    """
    Register the built-in backends and formatters.

    This is the single source of truth for built-in registration.
    """
    from .languages.python import DataclassFacadeRenderer
    from .languages.sqlalchemy_core import SQLAlchemyTableRenderer

    registry.register(
        "dataclass",
        DataclassFacadeRenderer,
        aliases=["python", "py"],
        description="Dataclass row plus facade class per table",
    )
    registry.register(
        "sqlalchemy",
        SQLAlchemyTableRenderer,
        aliases=["sqlalchemy-core", "sa"],
        description="SQLAlchemy Core Table declaration per table",
    )

    registry.register_formatter("basic", format_code)
    registry.register_formatter("none", _identity)


# Public API functions using the global registry


def register_renderer(
    name: str,
    factory: RendererFactory,
    aliases: Optional[List[str]] = None,
    description: str = "",
):
    """Register a renderer in the global registry."""
    get_registry().register(name, factory, aliases, description)


def list_backends() -> List[str]:
    """List all backends in the global registry."""
    return get_registry().list_backends()

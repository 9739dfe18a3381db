"""
Configuration management for facade generation.

Handles loading and merging run configuration from JSON files and CLI
overrides, validation of the merged result, and the typed view over the
backend-specific options mapping.
"""

import codecs
import json
from dataclasses import dataclass, field, fields, replace
from pathlib import Path
from typing import Any, Dict, Mapping, Optional, Tuple, Union

from .errors import ConfigurationError
from .schema import TableIdentifier

# Recognized backend option keys
TABLE_FACADE_SUPERCLASS = "table-facade-superclass"
ROW_SUPERCLASS = "row-superclass"
CODE_FORMATTER = "code-formatter"
USE_NUMBER_CLASS = "use-number-class"
NOT_USE_NULL_GUARD = "not-use-null-guard"
DB_DRIVER = "db-driver"
METADATA_CACHE = "metadata-cache"

RECOGNIZED_OPTIONS = (
    TABLE_FACADE_SUPERCLASS,
    ROW_SUPERCLASS,
    CODE_FORMATTER,
    USE_NUMBER_CLASS,
    NOT_USE_NULL_GUARD,
    DB_DRIVER,
    METADATA_CACHE,
)

_TRUE_VALUES = {"true", "yes", "1", "on"}
_FALSE_VALUES = {"false", "no", "0", "off"}

DEFAULT_ENCODING = "utf-8"
DEFAULT_BACKEND = "dataclass"


def _presents(value: Optional[str]) -> bool:
    return value is not None and value != ""


def _parse_bool(key: str, value: Optional[str], default: bool) -> bool:
    if not _presents(value):
        return default
    lowered = value.strip().lower()
    if lowered in _TRUE_VALUES:
        return True
    if lowered in _FALSE_VALUES:
        return False
    raise ConfigurationError(f"Option '{key}' expects a boolean, got '{value}'")


def _validate_dotted_path(key: str, value: Optional[str]) -> Optional[str]:
    if not _presents(value):
        return None
    if not all(part.isidentifier() for part in value.split(".")) or "." not in value:
        raise ConfigurationError(
            f"Option '{key}' expects a dotted path like package.module.Class, got '{value}'"
        )
    return value


@dataclass(frozen=True)
class BackendOptions:
    """Typed view of the open-ended options mapping."""

    table_facade_superclass: Optional[str] = None
    row_superclass: Optional[str] = None
    code_formatter: str = "basic"
    use_number_class: bool = False
    use_null_guard: bool = True
    db_driver: Optional[str] = None
    metadata_cache: bool = True

    # Keys the core does not interpret, handed to backends untouched
    extra: Mapping[str, str] = field(default_factory=dict)

    @classmethod
    def from_options(cls, options: Mapping[str, str]) -> "BackendOptions":
        """
        Build typed options from raw ``key=value`` pairs.

        Raises:
            ConfigurationError: If a recognized key has a malformed value
        """
        extra = {k: v for k, v in options.items() if k not in RECOGNIZED_OPTIONS}
        formatter = options.get(CODE_FORMATTER)

        return cls(
            table_facade_superclass=_validate_dotted_path(
                TABLE_FACADE_SUPERCLASS, options.get(TABLE_FACADE_SUPERCLASS)
            ),
            row_superclass=_validate_dotted_path(
                ROW_SUPERCLASS, options.get(ROW_SUPERCLASS)
            ),
            code_formatter=formatter if _presents(formatter) else "basic",
            use_number_class=_parse_bool(
                USE_NUMBER_CLASS, options.get(USE_NUMBER_CLASS), False
            ),
            use_null_guard=not _parse_bool(
                NOT_USE_NULL_GUARD, options.get(NOT_USE_NULL_GUARD), False
            ),
            db_driver=options.get(DB_DRIVER) or None,
            metadata_cache=_parse_bool(METADATA_CACHE, options.get(METADATA_CACHE), True),
            extra=extra,
        )


@dataclass(frozen=True)
class Configuration:
    """Run configuration, owned by the command and shared read-only."""

    output: Path
    package_name: str
    schema_names: Tuple[str, ...]

    # Explicit ``schema.table`` tokens; empty means discover or regenerate
    tables: Tuple[str, ...] = ()
    regenerate: bool = False
    encoding: str = DEFAULT_ENCODING
    verbose: bool = False

    # Connection settings
    url: Optional[str] = None
    username: Optional[str] = None
    password: Optional[str] = None

    # Renderer backend name in the registry
    backend: str = DEFAULT_BACKEND

    # Backend-specific switches
    options: Mapping[str, str] = field(default_factory=dict)

    @property
    def package_segments(self) -> Tuple[str, ...]:
        return tuple(self.package_name.split("."))

    @property
    def backend_options(self) -> BackendOptions:
        return BackendOptions.from_options(self.options)

    @property
    def explicit_tables(self) -> Tuple[TableIdentifier, ...]:
        return tuple(TableIdentifier.parse(token) for token in self.tables)

    def validated(self) -> "Configuration":
        """
        Return a normalized copy of this configuration.

        The output path is made absolute and schema names are stripped.

        Raises:
            ConfigurationError: If any required setting is missing or invalid
        """
        if self.output is None:
            raise ConfigurationError("Output directory is required")

        if not self.package_name:
            raise ConfigurationError("Package name is required")
        for segment in self.package_name.split("."):
            if not segment.isidentifier():
                raise ConfigurationError(
                    f"Invalid package name '{self.package_name}': "
                    f"'{segment}' is not a valid identifier"
                )

        schema_names = tuple(s.strip() for s in self.schema_names if s and s.strip())
        if not schema_names:
            raise ConfigurationError("At least one schema name is required")

        encoding = self.encoding or DEFAULT_ENCODING
        try:
            codecs.lookup(encoding)
        except LookupError as e:
            raise ConfigurationError(f"Unknown source encoding: {encoding}") from e

        tables = tuple(token.strip() for token in self.tables)
        for token in tables:
            TableIdentifier.parse(token)

        # Surface malformed option values now rather than mid-run
        BackendOptions.from_options(self.options)

        return replace(
            self,
            output=Path(self.output).absolute(),
            schema_names=schema_names,
            encoding=encoding,
            tables=tables,
            options=dict(self.options),
        )

    def describe(self) -> str:
        """Render the parameter dump logged in verbose mode, password masked."""
        password = self.password or ""
        options = ", ".join(f"{k}={v}" for k, v in sorted(self.options.items()))
        lines = [
            "parameters",
            f"  regenerate: {self.regenerate}",
            f"  schemaNames: [{', '.join(self.schema_names)}]",
            f"  packageName: {self.package_name}",
            f"  output: {self.output}",
            f"  encoding: {self.encoding}",
            f"  url: {self.url}",
            f"  username: {self.username}",
            f"  password: {'*' * len(password)}",
            f"  backend: {self.backend}",
            f"  options: {{{options}}}",
            f"  tables: [{', '.join(self.tables)}]",
            f"  verbose: {self.verbose}",
        ]
        return "\n".join(lines)

    def __repr__(self) -> str:
        # Keep the plaintext password out of tracebacks and debug logs
        masked = "*" * len(self.password or "")
        return (
            f"Configuration(output={self.output!r}, package_name={self.package_name!r}, "
            f"schema_names={self.schema_names!r}, tables={self.tables!r}, "
            f"regenerate={self.regenerate!r}, encoding={self.encoding!r}, "
            f"verbose={self.verbose!r}, url={self.url!r}, username={self.username!r}, "
            f"password={masked!r}, backend={self.backend!r}, options={dict(self.options)!r})"
        )


class ConfigManager:
    """Manages configuration loading and merging."""

    def __init__(self):
        """Initialize configuration manager with built-in defaults."""
        self._defaults: Dict[str, Any] = {
            "output": Path(""),
            "encoding": DEFAULT_ENCODING,
            "backend": DEFAULT_BACKEND,
            "regenerate": False,
            "verbose": False,
        }

    def get_config(
        self,
        custom_config: Optional[Dict[str, Any]] = None,
        config_file: Optional[Union[str, Path]] = None,
    ) -> Configuration:
        """
        Get a complete configuration.

        Args:
            custom_config: Overrides, typically from the command line
            config_file: Path to JSON configuration file

        Returns:
            Merged configuration (not yet validated)
        """
        base_config = dict(self._defaults)

        if config_file:
            base_config.update(self._load_config_file(config_file))

        if custom_config:
            options = _mapping("options", base_config.get("options"))
            options.update(_mapping("options", custom_config.get("options")))
            base_config.update(
                {k: v for k, v in custom_config.items() if v is not None}
            )
            base_config["options"] = options

        return self._dict_to_config(base_config)

    def _load_config_file(self, config_path: Union[str, Path]) -> Dict[str, Any]:
        """Load configuration from JSON file."""
        path = Path(config_path)

        if not path.exists():
            raise ConfigurationError(f"Configuration file not found: {path}")

        if not path.suffix.lower() == ".json":
            raise ConfigurationError(f"Configuration file must be JSON: {path}")

        try:
            with open(path, "r", encoding="utf-8") as f:
                config = json.load(f)
        except json.JSONDecodeError as e:
            raise ConfigurationError(
                f"Invalid JSON in configuration file {path}: {e}"
            ) from e
        except OSError as e:
            raise ConfigurationError(
                f"Failed to load configuration file {path}: {e}"
            ) from e

        if not isinstance(config, dict):
            raise ConfigurationError(
                f"Configuration file must contain a JSON object: {path}"
            )

        return config

    def _dict_to_config(self, config_dict: Dict[str, Any]) -> Configuration:
        """
        Convert dictionary to Configuration, unknown keys become options.

        Raises:
            ConfigurationError: If a known key holds a value of the wrong type
        """
        known_fields = {f.name for f in fields(Configuration)}

        config_args: Dict[str, Any] = {}
        custom_args: Dict[str, str] = {}

        for key, value in config_dict.items():
            if key in known_fields:
                config_args[key] = value
            else:
                custom_args[key] = _stringify(value)

        options = {
            k: _stringify(v) for k, v in _mapping("options", config_args.get("options")).items()
        }
        options.update(custom_args)
        config_args["options"] = options

        config_args["schema_names"] = _string_list("schema_names", config_args.get("schema_names"))
        config_args["tables"] = _string_list("tables", config_args.get("tables"))

        output = config_args.get("output") or ""
        if not isinstance(output, (str, Path)):
            raise ConfigurationError(f"'output' expects a path, got {output!r}")
        config_args["output"] = Path(output)

        for key in _STRING_FIELDS:
            value = config_args.get(key)
            if value is not None and not isinstance(value, str):
                raise ConfigurationError(f"'{key}' expects a string, got {value!r}")
        config_args.setdefault("package_name", "")

        for key in _BOOL_FIELDS:
            if key in config_args:
                config_args[key] = _bool_value(key, config_args[key])

        try:
            return Configuration(**config_args)
        except TypeError as e:
            raise ConfigurationError(f"Invalid configuration: {e}") from e


_STRING_FIELDS = ("package_name", "encoding", "url", "username", "password", "backend")
_BOOL_FIELDS = ("regenerate", "verbose")


def _string_list(key: str, value: Any) -> Tuple[str, ...]:
    """A comma separated string or a list of strings, as a tuple."""
    if not value:
        return ()
    if isinstance(value, str):
        return tuple(item.strip() for item in value.split(","))
    if isinstance(value, (list, tuple)) and all(isinstance(item, str) for item in value):
        return tuple(value)
    raise ConfigurationError(f"'{key}' expects a list of strings, got {value!r}")


def _mapping(key: str, value: Any) -> Dict[str, Any]:
    if not value:
        return {}
    if not isinstance(value, Mapping):
        raise ConfigurationError(f"'{key}' expects an object, got {value!r}")
    return dict(value)


def _bool_value(key: str, value: Any) -> bool:
    if isinstance(value, bool):
        return value
    if isinstance(value, str):
        return _parse_bool(key, value, False)
    raise ConfigurationError(f"'{key}' expects a boolean, got {value!r}")


def _stringify(value: Any) -> str:
    if isinstance(value, bool):
        return "true" if value else "false"
    return str(value)


# Global configuration manager instance
_config_manager = None


def get_config_manager() -> ConfigManager:
    """Get the global configuration manager instance."""
    global _config_manager
    if _config_manager is None:
        _config_manager = ConfigManager()
    return _config_manager


def load_config(
    config_file: Optional[Union[str, Path]] = None,
    custom_config: Optional[Dict[str, Any]] = None,
) -> Configuration:
    """
    Convenience function to load configuration.

    Args:
        config_file: Path to JSON configuration file
        custom_config: Overrides applied on top of the file

    Returns:
        Merged configuration
    """
    manager = get_config_manager()
    return manager.get_config(custom_config, config_file)


# Example configuration file for reference
EXAMPLE_CONFIG = {
    "package_name": "app.facades",
    "schema_names": ["sales", "inventory"],
    "output": "src",
    "backend": "dataclass",
    "options": {
        "use-number-class": "true",
        "table-facade-superclass": "app.db.BaseFacade",
    },
}

"""
Base renderer interface for all facade backends.

Defines the contract every backend implements and the machinery they share:
template rendering, fingerprint headers used to detect files that are
already current, and preservation of hand-written code between the custom
code markers of an existing file.
"""

import hashlib
import json
from abc import ABC, abstractmethod
from pathlib import Path
from typing import Any, Callable, Dict, Optional

from ...logging_config import get_logger
from .config import Configuration
from .errors import RenderError
from .metadata import MetadataSnapshot
from .schema import TableIdentifier, TableSchema
from .templates import TemplateEngine, create_template_engine

logger = get_logger(__name__)

FINGERPRINT_PREFIX = "# facadegen: fingerprint="
CUSTOM_CODE_START = "# -- custom code start --"
CUSTOM_CODE_END = "# -- custom code end --"

# Only the first lines of a file are searched for the fingerprint
_HEADER_LINES = 5


def format_code(code: str) -> str:
    """
    Basic cleanup of generated code.

    Strips trailing whitespace, collapses runs of more than two blank lines
    and ends the file with exactly one newline.
    """
    lines = code.split("\n")
    formatted_lines = []
    blank_count = 0

    for line in lines:
        stripped = line.rstrip()
        if not stripped:
            blank_count += 1
            if blank_count <= 2:  # Allow max 2 consecutive blank lines
                formatted_lines.append("")
        else:
            blank_count = 0
            formatted_lines.append(stripped)

    return "\n".join(formatted_lines).strip("\n") + "\n"


def read_fingerprint(content: bytes, encoding: str = "utf-8") -> Optional[str]:
    """Return the fingerprint recorded in a generated file's header, if any.

    The bytes are decoded with the output encoding first; undecodable bytes
    are replaced, so a damaged file reads as stale rather than failing.
    """
    text = content.decode(encoding, errors="replace")
    for line in text.splitlines()[:_HEADER_LINES]:
        line = line.strip()
        if line.startswith(FINGERPRINT_PREFIX):
            return line[len(FINGERPRINT_PREFIX) :].strip()
    return None


def extract_custom_code(existing: Optional[str]) -> str:
    """Text between the custom code markers of an existing file, or ''."""
    if not existing:
        return ""
    start = existing.find(CUSTOM_CODE_START)
    if start < 0:
        return ""
    start += len(CUSTOM_CODE_START)
    end = existing.find(CUSTOM_CODE_END, start)
    if end < 0:
        return ""
    return existing[start:end].strip("\n")


class SourceRenderer(ABC):
    """Abstract base class for all facade renderers."""

    # Bump when templates change so existing files stop counting as current
    template_revision = "1"

    def __init__(
        self,
        config: Configuration,
        metadata: MetadataSnapshot,
        formatter: Optional[Callable[[str], str]] = None,
        formatter_name: str = "basic",
    ):
        """
        Initialize renderer.

        Args:
            config: Validated run configuration
            metadata: Snapshot the renderer reads table columns from
            formatter: Post-processing applied to rendered code
            formatter_name: Registry name of the formatter, part of the fingerprint
        """
        self.config = config
        self.options = config.backend_options
        self.metadata = metadata
        self.formatter = formatter or format_code
        self.formatter_name = formatter_name
        self._template_engine = None
        self._setup_templates()

    def _setup_templates(self):
        """Setup template engine for this renderer."""
        self._template_engine = create_template_engine(self.get_template_directory())

    @property
    @abstractmethod
    def name(self) -> str:
        """Return the registry name of the backend (e.g., 'dataclass')."""
        pass

    @property
    def file_extension(self) -> str:
        """Return the file extension for generated files."""
        return ".py"

    @property
    @abstractmethod
    def template_name(self) -> str:
        """Template rendered for each table."""
        pass

    def get_template_directory(self) -> Optional[Path]:
        """
        Return the directory containing templates for this renderer.

        Return None to use in-memory templates only.
        """
        return None

    @property
    def template_engine(self) -> TemplateEngine:
        """Get the template engine for this renderer."""
        if self._template_engine is None:
            self._setup_templates()
        return self._template_engine

    @abstractmethod
    def build_context(self, table: TableSchema) -> Dict[str, Any]:
        """
        Build the template context for one table.

        Args:
            table: Table to render

        Returns:
            Template variables
        """
        pass

    def fingerprint(self, table: TableSchema) -> str:
        """Digest of everything that influences the rendered output."""
        payload = {
            "backend": self.name,
            "revision": self.template_revision,
            "package": self.config.package_name,
            "encoding": self.config.encoding,
            "formatter": self.formatter_name,
            "table": str(table.identifier),
            "comment": table.comment,
            "columns": [
                [c.name, c.type_name, c.nullable, c.primary_key, c.default, c.comment]
                for c in table.columns
            ],
            "options": {
                "table_facade_superclass": self.options.table_facade_superclass,
                "row_superclass": self.options.row_superclass,
                "use_number_class": self.options.use_number_class,
                "use_null_guard": self.options.use_null_guard,
                "extra": dict(sorted(self.options.extra.items())),
            },
        }
        encoded = json.dumps(payload, sort_keys=True).encode("utf-8")
        return hashlib.sha256(encoded).hexdigest()[:16]

    def is_current(self, table: TableIdentifier, existing: bytes) -> bool:
        """
        Whether an existing file already matches what would be rendered.

        Args:
            table: Table the file belongs to
            existing: Raw bytes of the existing file

        Returns:
            True if the file can be skipped
        """
        recorded = read_fingerprint(existing, self.config.encoding)
        if recorded is None:
            return False
        return recorded == self.fingerprint(self.metadata.table_schema(table))

    def render(self, table: TableIdentifier, existing: Optional[str] = None) -> str:
        """
        Render the facade source for one table.

        Args:
            table: Table to render
            existing: Decoded content of a previous facade, if any

        Returns:
            Generated source text

        Raises:
            RenderError: If the backend cannot produce the source
            MetadataError: If the table cannot be reflected
        """
        table_schema = self.metadata.table_schema(table)
        if not table_schema.columns:
            raise RenderError(f"Table {table} has no columns")

        context = self.build_context(table_schema)
        context.update(
            {
                "fingerprint_line": f"{FINGERPRINT_PREFIX}{self.fingerprint(table_schema)}",
                "custom_code_start": CUSTOM_CODE_START,
                "custom_code_end": CUSTOM_CODE_END,
                "custom_code": extract_custom_code(existing),
                "table": table_schema,
                "package_name": self.config.package_name,
            }
        )

        code = self.render_template(self.template_name, context)
        try:
            return self.formatter(code)
        except Exception as e:
            raise RenderError(f"Formatter failed for {table}: {e}") from e

    # Template helper methods

    def render_template(self, template_name: str, context: Dict[str, Any]) -> str:
        """
        Render a template with context.

        Args:
            template_name: Template file name
            context: Template variables

        Returns:
            Rendered content
        """
        return self.template_engine.render_template(template_name, context)

    def template_exists(self, template_name: str) -> bool:
        """Check if a template exists."""
        return self.template_engine.template_exists(template_name)

"""
Dataclass facade renderer.

Renders one module per table: a keyword-only dataclass describing a row
and a facade class carrying the table's identity and column layout.
"""

from pathlib import Path
from typing import Any, Dict, List, Optional, Set, Tuple

from ...core.generator import SourceRenderer
from ...core.naming import NamingCase
from ...core.schema import ColumnInfo, TableSchema
from .config import python_type_for
from .naming import create_class_name_sanitizer, create_python_sanitizer

_TYPING_IMPORT = "from typing import "


def split_dotted_path(dotted: Optional[str]) -> Tuple[Optional[str], Optional[str]]:
    """'app.db.Base' -> ('import app.db', 'app.db.Base')."""
    if not dotted:
        return None, None
    module, _, _ = dotted.rpartition(".")
    return f"import {module}", dotted


class DataclassFacadeRenderer(SourceRenderer):
    """Renderer producing dataclass-based table facades."""

    @property
    def name(self) -> str:
        return "dataclass"

    @property
    def template_name(self) -> str:
        return "facade.py.j2"

    def get_template_directory(self) -> Path:
        """Return the Python templates directory."""
        return Path(__file__).parent / "templates"

    def build_context(self, table: TableSchema) -> Dict[str, Any]:
        class_sanitizer = create_class_name_sanitizer()
        field_sanitizer = create_python_sanitizer()

        facade_class = class_sanitizer.sanitize_name(
            table.identifier.table_name, NamingCase.PASCAL_CASE
        )
        row_class = class_sanitizer.sanitize_name(
            f"{facade_class}Row", NamingCase.PASCAL_CASE
        )

        typing_names: Set[str] = {"ClassVar"}
        stdlib_imports: Set[str] = set()

        fields = []
        for column in table.columns:
            field_data = self._generate_field_data(column, field_sanitizer)
            fields.append(field_data)
            if field_data["optional"]:
                typing_names.add("Optional")
            if field_data["import"]:
                if field_data["import"].startswith(_TYPING_IMPORT):
                    typing_names.add(field_data["import"][len(_TYPING_IMPORT) :])
                else:
                    stdlib_imports.add(field_data["import"])

        stdlib_imports.add(f"{_TYPING_IMPORT}{', '.join(sorted(typing_names))}")

        facade_import, facade_base = split_dotted_path(self.options.table_facade_superclass)
        row_import, row_base = split_dotted_path(self.options.row_superclass)
        base_imports = sorted({i for i in (facade_import, row_import) if i})

        return {
            "facade_class": facade_class,
            "row_class": row_class,
            "facade_base": facade_base,
            "row_base": row_base,
            "stdlib_imports": self._sort_imports(stdlib_imports),
            "base_imports": base_imports,
            "fields": fields,
            "columns": repr(table.column_names),
            "primary_key": repr(table.primary_key),
        }

    def _generate_field_data(
        self, column: ColumnInfo, sanitizer
    ) -> Dict[str, Any]:
        """Generate field data for template."""
        annotation, import_line = python_type_for(
            column.type_name, self.options.use_number_class
        )
        optional = self.options.use_null_guard and column.nullable

        return {
            "name": sanitizer.sanitize_name(column.name, NamingCase.SNAKE_CASE),
            "column": column.name,
            "annotation": f"Optional[{annotation}]" if optional else annotation,
            "optional": optional,
            "import": import_line,
            "comment": self._field_comment(column),
        }

    def _field_comment(self, column: ColumnInfo) -> str:
        parts = [column.type_name]
        if column.primary_key:
            parts.append("primary key")
        if not column.nullable:
            parts.append("not null")
        if column.default is not None:
            parts.append(f"default {column.default}")
        comment = ", ".join(parts)
        if column.comment:
            comment = f"{column.comment} ({comment})"
        # Generated comments must stay on one line
        return " ".join(comment.split())

    @staticmethod
    def _sort_imports(imports: Set[str]) -> List[str]:
        """Sort imports by module name, plain imports before from-imports."""
        return sorted(imports, key=lambda line: (line.split()[1], line.startswith("from")))

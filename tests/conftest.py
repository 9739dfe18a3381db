"""Shared fixtures for facadegen tests."""

from __future__ import annotations

from pathlib import Path
from typing import Any, Callable, Dict, List

import pytest

from facadegen.codegen.core.config import Configuration
from facadegen.codegen.core.metadata import StaticMetadataProvider
from facadegen.codegen.core.schema import ColumnInfo


def orders_columns() -> List[ColumnInfo]:
    return [
        ColumnInfo("order_id", "INTEGER", nullable=False, primary_key=True),
        ColumnInfo("customer_id", "INTEGER", nullable=False),
        ColumnInfo("total", "NUMERIC(10, 2)", default="0"),
        ColumnInfo("placed_at", "TIMESTAMP"),
        ColumnInfo("note", "VARCHAR(200)", comment="Free text"),
    ]


def customers_columns() -> List[ColumnInfo]:
    return [
        ColumnInfo("id", "INTEGER", nullable=False, primary_key=True),
        ColumnInfo("name", "TEXT", nullable=False),
    ]


@pytest.fixture
def catalog() -> Dict[str, Dict[str, List[ColumnInfo]]]:
    return {
        "sales": {
            "orders": orders_columns(),
            "customers": customers_columns(),
        },
        "inventory": {
            "items": [
                ColumnInfo("sku", "VARCHAR(32)", nullable=False, primary_key=True),
                ColumnInfo("class", "TEXT"),
            ],
        },
    }


@pytest.fixture
def provider(catalog) -> StaticMetadataProvider:
    return StaticMetadataProvider(catalog)


@pytest.fixture
def make_config(tmp_path: Path) -> Callable[..., Configuration]:
    """Build a configuration writing under tmp_path/out."""

    def factory(**overrides: Any) -> Configuration:
        values: Dict[str, Any] = {
            "output": tmp_path / "out",
            "package_name": "app.facades",
            "schema_names": ("sales",),
        }
        values.update(overrides)
        return Configuration(**values)

    return factory


@pytest.fixture
def snapshot_tree() -> Callable[[Path], Dict[str, bytes]]:
    """Relative path -> bytes for every file below a root."""

    def snapshot(root: Path) -> Dict[str, bytes]:
        return {
            str(path.relative_to(root)): path.read_bytes()
            for path in sorted(root.rglob("*"))
            if path.is_file()
        }

    return snapshot

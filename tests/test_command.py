"""End-to-end tests for a generation run."""

from __future__ import annotations

import logging
from pathlib import Path

import pytest

from facadegen.codegen import Command, generate_facades
from facadegen.codegen.core.errors import ConfigurationError, MetadataError, RenderError
from facadegen.codegen.core.metadata import StaticMetadataProvider
from facadegen.codegen.core.paths import PathResolver
from facadegen.codegen.core.schema import ColumnInfo, TableIdentifier
from facadegen.codegen.registry import RegistryError


def test_discover_all_writes_every_table(make_config, provider, tmp_path: Path) -> None:
    config = make_config(schema_names=("sales", "inventory"))

    result = Command(config, provider).execute()

    assert result.created == 3
    package = tmp_path / "out" / "app" / "facades"
    assert (package / "sales" / "orders.py").is_file()
    assert (package / "sales" / "customers.py").is_file()
    assert (package / "inventory" / "items.py").is_file()
    # out, app, facades, sales, inventory
    assert result.directories_created == 5


def test_second_run_is_idempotent(make_config, provider, tmp_path: Path, snapshot_tree) -> None:
    config = make_config(schema_names=("sales", "inventory"))
    Command(config, provider).execute()
    before = snapshot_tree(tmp_path / "out")

    result = Command(config, provider).execute()

    assert result.created == 0
    assert result.skipped == 3
    assert result.directories_created == 0
    assert snapshot_tree(tmp_path / "out") == before


def test_second_run_is_idempotent_with_wide_encoding(
    make_config, provider, tmp_path: Path, snapshot_tree
) -> None:
    config = make_config(encoding="utf-16", tables=("sales.orders",))
    Command(config, provider).execute()
    before = snapshot_tree(tmp_path / "out")

    result = Command(config, provider).execute()

    assert result.created == 0
    assert result.skipped == 1
    assert snapshot_tree(tmp_path / "out") == before


def test_regenerate_only_touches_existing_facades(make_config, provider) -> None:
    Command(make_config(tables=("sales.orders",)), provider).execute()

    result = Command(make_config(regenerate=True), provider).execute()

    assert result.processed == 1
    resolver = PathResolver(make_config())
    assert not resolver.facade_path(TableIdentifier("sales", "customers")).exists()


def test_empty_schema_directory_is_created(make_config, tmp_path: Path) -> None:
    provider = StaticMetadataProvider({"empty": {}})

    result = Command(make_config(schema_names=("empty",)), provider).execute()

    assert result.created == 0
    assert (tmp_path / "out" / "app" / "facades" / "empty").is_dir()


def test_invalid_configuration_has_no_side_effects(make_config, provider, tmp_path: Path) -> None:
    config = make_config(package_name="app.2facades")

    with pytest.raises(ConfigurationError):
        Command(config, provider).execute()

    assert not (tmp_path / "out").exists()


def test_unknown_backend_is_a_configuration_error(make_config, provider, tmp_path: Path) -> None:
    with pytest.raises(RegistryError) as excinfo:
        Command(make_config(backend="cobol"), provider).execute()

    assert excinfo.value.exit_code == 2
    assert not (tmp_path / "out").exists()


def test_failure_keeps_partial_result(make_config) -> None:
    provider = StaticMetadataProvider(
        {"a": {"t1": [ColumnInfo("id", "INTEGER")], "t2": []}}
    )
    command = Command(make_config(schema_names=("a",)), provider)

    with pytest.raises(RenderError) as excinfo:
        command.execute()

    assert excinfo.value.exit_code == 1
    assert command.result is not None
    assert command.result.created == 1
    assert command.result.error is excinfo.value


def test_metadata_failure_stops_before_writing(make_config, tmp_path: Path) -> None:
    class BrokenProvider:
        def tables_of(self, schema_name):
            raise MetadataError("schema listing refused")

        def table_schema(self, identifier):
            raise MetadataError("unreachable")

    with pytest.raises(MetadataError, match="refused"):
        Command(make_config(), BrokenProvider()).execute()

    assert not list((tmp_path / "out").rglob("*.py"))


def test_verbose_run_logs_parameters_and_progress(make_config, provider, caplog) -> None:
    caplog.set_level(logging.INFO, logger="facadegen")
    config = make_config(verbose=True, password="secret", tables=("sales.orders",))

    Command(config, provider).execute()

    assert "parameters" in caplog.text
    assert "password: ******" in caplog.text
    assert "secret" not in caplog.text
    assert "start " in caplog.text
    assert "create directory" in caplog.text
    assert "sales.orders" in caplog.text
    assert "-> create file" in caplog.text
    assert "end " in caplog.text


def test_quiet_run_logs_nothing_at_info(make_config, provider, caplog) -> None:
    caplog.set_level(logging.INFO, logger="facadegen")

    Command(make_config(), provider).execute()

    assert "-> create file" not in caplog.text
    assert "parameters" not in caplog.text


def test_generate_facades_helper(make_config, provider) -> None:
    result = generate_facades(make_config(tables=("sales.customers",)), provider)

    assert result.success
    assert result.written[0].name == "customers.py"


def test_sqlalchemy_backend_alias(make_config, provider, tmp_path: Path) -> None:
    Command(make_config(backend="sa", tables=("sales.orders",)), provider).execute()

    source = (tmp_path / "out" / "app" / "facades" / "sales" / "orders.py").read_text(
        encoding="utf-8"
    )
    assert "orders_table = Table(" in source


def test_table_names_cannot_escape_the_output_root(make_config, tmp_path: Path) -> None:
    provider = StaticMetadataProvider(
        {"a": {"../../../../escaped": [ColumnInfo("id", "INTEGER")]}}
    )
    config = make_config(schema_names=("a",), tables=("a.../../../../escaped",))

    result = Command(config, provider).execute()

    assert result.created == 1
    assert not (tmp_path / "escaped.py").exists()
    schema_directory = tmp_path / "out" / "app" / "facades" / "a"
    assert [path.parent for path in result.written] == [schema_directory]


def test_explicit_table_outside_configured_schemas_warns(make_config, provider, caplog) -> None:
    config = make_config(tables=("inventory.items", "sales.orders"))

    with caplog.at_level(logging.WARNING, logger="facadegen"):
        result = Command(config, provider).execute()

    assert result.created == 2
    warnings = [r.getMessage() for r in caplog.records if r.levelno == logging.WARNING]
    assert len(warnings) == 1
    assert "Schema inventory is not among the configured schemas" in warnings[0]


def test_configured_explicit_tables_do_not_warn(make_config, provider, caplog) -> None:
    with caplog.at_level(logging.WARNING, logger="facadegen"):
        Command(make_config(tables=("sales.orders",)), provider).execute()

    assert "not among the configured schemas" not in caplog.text

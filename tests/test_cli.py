"""Tests for the command-line interface."""

from __future__ import annotations

import io
import json
from pathlib import Path

import pytest
from rich.console import Console
from sqlalchemy import create_engine, text

from facadegen.__main__ import main
from facadegen.cli import CLIHandler
from facadegen.codegen.cli_integration import build_config, create_parser
from facadegen.codegen.core.metadata import StaticMetadataProvider
from facadegen.codegen.core.schema import ColumnInfo


def parse(*argv: str):
    return create_parser().parse_args(list(argv))


def make_handler(catalog, seen=None):
    output = io.StringIO()

    def provider_factory(config):
        if seen is not None:
            seen.append(config)
        return StaticMetadataProvider(catalog)

    handler = CLIHandler(
        console=Console(file=output, width=120), provider_factory=provider_factory
    )
    return handler, output


def test_parser_collects_flags_and_options() -> None:
    args = parse(
        "-v", "-r", "-s", "sales,inventory", "-p", "app.facades",
        "-D", "use-number-class=true", "-D", "row-superclass = app.db.BaseRow",
        "sales.orders",
    )

    assert args.verbose and args.regenerate
    assert args.tables == ["sales.orders"]
    assert args.options == [
        ("use-number-class", "true"),
        ("row-superclass", "app.db.BaseRow"),
    ]


def test_malformed_define_is_a_usage_error(capsys) -> None:
    with pytest.raises(SystemExit) as excinfo:
        parse("-D", "novalue")

    assert excinfo.value.code == 2


def test_build_config_from_flags(tmp_path: Path) -> None:
    config = build_config(
        parse(
            "-s", "sales, inventory", "-p", "app.facades", "-o", str(tmp_path),
            "-u", "sqlite://", "-U", "scott", "-P", "tiger", "-e", "latin-1",
            "-b", "sa", "-D", "metadata-cache=false",
        )
    )

    assert config.schema_names == ("sales", "inventory")
    assert config.output == tmp_path
    assert (config.url, config.username, config.password) == ("sqlite://", "scott", "tiger")
    assert config.encoding == "latin-1"
    assert config.backend == "sa"
    assert config.options == {"metadata-cache": "false"}


def test_credential_file_replaces_connection_flags(tmp_path: Path) -> None:
    credential_file = tmp_path / "db.properties"
    credential_file.write_text("url=sqlite:///other.db\nusername=reader\n", encoding="utf-8")

    config = build_config(
        parse("-s", "sales", "-p", "app", "-u", "sqlite://", "-P", "tiger", "-c", str(credential_file))
    )

    assert config.url == "sqlite:///other.db"
    assert config.username == "reader"
    assert config.password is None


def test_config_file_is_overridden_by_flags(tmp_path: Path) -> None:
    config_file = tmp_path / "facadegen.json"
    config_file.write_text(
        json.dumps({"package_name": "app.models", "schema_names": ["sales"], "regenerate": True}),
        encoding="utf-8",
    )

    config = build_config(parse("--config", str(config_file), "-p", "app.facades"))

    assert config.package_name == "app.facades"
    assert config.schema_names == ("sales",)
    assert config.regenerate is True


def test_run_generates_files(catalog, tmp_path: Path) -> None:
    handler, output = make_handler(catalog)

    code = handler.run(parse("-s", "sales", "-p", "app.facades", "-o", str(tmp_path)))

    assert code == 0
    assert (tmp_path / "app" / "facades" / "sales" / "orders.py").is_file()
    assert "2 facade(s) written" in output.getvalue()


def test_verbose_run_prints_summary_table(catalog, tmp_path: Path) -> None:
    handler, output = make_handler(catalog)

    code = handler.run(parse("-v", "-s", "sales", "-p", "app.facades", "-o", str(tmp_path)))

    assert code == 0
    assert "Generation Summary" in output.getvalue()


def test_missing_schema_exits_with_configuration_code(catalog, tmp_path: Path) -> None:
    seen = []
    handler, output = make_handler(catalog, seen)

    code = handler.run(parse("-p", "app.facades", "-o", str(tmp_path)))

    assert code == 2
    assert "Error" in output.getvalue()
    assert seen == []
    assert list(tmp_path.iterdir()) == []


def test_generation_failure_exits_with_one(tmp_path: Path) -> None:
    catalog = {"a": {"t1": [ColumnInfo("id", "INTEGER")], "t2": []}}
    handler, output = make_handler(catalog)

    code = handler.run(parse("-s", "a", "-p", "app", "-o", str(tmp_path)))

    assert code == 1
    assert "no columns" in output.getvalue()
    assert "Stopped after 1 written" in output.getvalue()
    assert (tmp_path / "app" / "a" / "t1.py").is_file()


def test_missing_url_with_default_provider(tmp_path: Path) -> None:
    handler = CLIHandler(console=Console(file=io.StringIO()))

    assert handler.run(parse("-s", "main", "-p", "app", "-o", str(tmp_path))) == 2


def test_list_backends(capsys) -> None:
    assert main(["--list-backends"]) == 0

    printed = capsys.readouterr().out
    assert "dataclass" in printed
    assert "sqlalchemy" in printed


def test_main_against_sqlite(tmp_path: Path) -> None:
    database = tmp_path / "app.db"
    engine = create_engine(f"sqlite:///{database}")
    with engine.begin() as connection:
        connection.execute(text("CREATE TABLE orders (id INTEGER PRIMARY KEY, note TEXT)"))
    engine.dispose()
    out = tmp_path / "src"
    argv = ["-u", f"sqlite:///{database}", "-s", "main", "-p", "app.facades", "-o", str(out)]

    assert main(argv) == 0
    facade = out / "app" / "facades" / "main" / "orders.py"
    first = facade.read_bytes()
    assert b"class OrdersRow" in first

    assert main(argv + ["-r"]) == 0
    assert facade.read_bytes() == first


def test_mistyped_config_file_exits_with_configuration_code(tmp_path: Path, capsys) -> None:
    config_file = tmp_path / "facadegen.json"
    config_file.write_text(
        json.dumps({"package_name": "app", "schema_names": ["a", 1]}), encoding="utf-8"
    )

    code = main(["--config", str(config_file), "-u", "sqlite://", "-o", str(tmp_path / "out")])

    assert code == 2
    assert "schema_names" in capsys.readouterr().out
    assert not (tmp_path / "out").exists()

"""
CLI integration for facade generation.

Builds the argument parser and turns parsed arguments into a
Configuration, merging a JSON config file and a credential file.
"""

import argparse
from pathlib import Path
from typing import Any, Dict, List, Optional

from ..utils import load_credentials
from .core.config import Configuration, RECOGNIZED_OPTIONS, load_config


def parse_define(value: str) -> tuple:
    """argparse type for ``-D key=value``."""
    key, sep, option_value = value.partition("=")
    if not sep or not key.strip():
        raise argparse.ArgumentTypeError(
            f"invalid option '{value}', expected key=value"
        )
    return key.strip(), option_value.strip()


def create_parser(prog: str = "facadegen") -> argparse.ArgumentParser:
    """
    Create the command-line parser.

    Schema and package are validated with the configuration rather than by
    argparse so that ``--list-backends`` works without them.
    """
    parser = argparse.ArgumentParser(
        prog=prog,
        description="Generate table facade modules from a database schema",
        formatter_class=argparse.RawDescriptionHelpFormatter,
        epilog=f"""
Examples:
  {prog} -u sqlite:///app.db -s main -p app.facades -o src
  {prog} -c db.properties -s sales,inventory -p app.facades -r -v
  {prog} -c db.json -s sales -p app.facades sales.orders sales.customers
  {prog} --list-backends

Recognized -D options: {', '.join(RECOGNIZED_OPTIONS)}
        """.strip(),
    )

    parser.add_argument(
        "tables",
        nargs="*",
        metavar="SCHEMA.TABLE",
        help="Generate only these tables",
    )

    parser.add_argument("-v", "--verbose", action="store_true", help="Verbose mode")
    parser.add_argument(
        "-r",
        "--regenerate",
        action="store_true",
        help="Regenerate existing facades only",
    )
    parser.add_argument(
        "-s", "--schemas", metavar="NAMES", help="Schema names (comma separated)"
    )
    parser.add_argument(
        "-p", "--package", metavar="NAME", help="Output package name"
    )
    parser.add_argument(
        "-o",
        "--output",
        metavar="DIR",
        help="Output directory (default: current directory)",
    )
    parser.add_argument(
        "-e", "--encoding", metavar="NAME", help="Source file encoding (default: utf-8)"
    )

    connection_group = parser.add_argument_group("connection")
    connection_group.add_argument(
        "-c",
        "--credential",
        metavar="FILE",
        help="Credential file (.json or key=value properties)",
    )
    connection_group.add_argument("-u", "--url", help="Database URL (SQLAlchemy form)")
    connection_group.add_argument("-U", "--user", help="Database user name")
    connection_group.add_argument("-P", "--pass", dest="password", help="Database password")

    backend_group = parser.add_argument_group("backend")
    backend_group.add_argument(
        "-b", "--backend", metavar="NAME", help="Renderer backend (default: dataclass)"
    )
    backend_group.add_argument(
        "-D",
        dest="options",
        action="append",
        type=parse_define,
        default=[],
        metavar="KEY=VALUE",
        help="Backend option, may be repeated",
    )
    backend_group.add_argument(
        "--config", metavar="FILE", help="JSON configuration file"
    )

    info_group = parser.add_argument_group("information")
    info_group.add_argument(
        "--list-backends",
        action="store_true",
        help="List renderer backends and exit",
    )

    return parser


def _split_schemas(value: Optional[str]) -> Optional[List[str]]:
    if value is None:
        return None
    return [name.strip() for name in value.split(",")]


def build_config(args: argparse.Namespace) -> Configuration:
    """
    Build the run configuration from parsed arguments.

    Precedence, lowest first: defaults, ``--config`` file, command-line
    flags, credential file (which replaces -u/-U/-P entirely).

    Raises:
        ConfigurationError: If a file cannot be loaded
    """
    overrides: Dict[str, Any] = {
        "schema_names": _split_schemas(getattr(args, "schemas", None)),
        "package_name": getattr(args, "package", None),
        "output": Path(args.output) if getattr(args, "output", None) else None,
        "encoding": getattr(args, "encoding", None),
        "backend": getattr(args, "backend", None),
        "tables": list(args.tables) if getattr(args, "tables", None) else None,
        "options": dict(getattr(args, "options", None) or []),
    }

    # Flags only override when set
    if getattr(args, "regenerate", False):
        overrides["regenerate"] = True
    if getattr(args, "verbose", False):
        overrides["verbose"] = True

    if getattr(args, "credential", None):
        credentials = load_credentials(args.credential)
        overrides["url"] = credentials.get("url")
        overrides["username"] = credentials.get("username")
        overrides["password"] = credentials.get("password")
    else:
        overrides["url"] = getattr(args, "url", None)
        overrides["username"] = getattr(args, "user", None)
        overrides["password"] = getattr(args, "password", None)

    return load_config(
        config_file=getattr(args, "config", None), custom_config=overrides
    )

"""Command-line entry point for facadegen."""

import sys

from .cli import CLIHandler
from .codegen.cli_integration import create_parser


def main(argv=None) -> int:
    """Parse arguments and run the generator.

    Args:
        argv: Argument list; ``sys.argv[1:]`` when omitted.

    Returns:
        Process exit code.
    """
    parser = create_parser()
    args = parser.parse_args(argv)
    return CLIHandler().run(args)


if __name__ == "__main__":
    sys.exit(main())

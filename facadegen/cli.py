from __future__ import annotations

from typing import Any, Callable

from rich import box
from rich.console import Console
from rich.markup import escape
from rich.panel import Panel
from rich.table import Table

from .codegen import Command
from .codegen.cli_integration import build_config
from .codegen.core.config import Configuration
from .codegen.core.errors import FacadeGenError
from .codegen.core.metadata import MetadataProvider, SQLAlchemyMetadataProvider
from .codegen.core.orchestrator import RunResult
from .codegen.registry import RendererRegistry, get_registry
from .logging_config import get_logger, setup_logging

logger = get_logger(__name__)

ProviderFactory = Callable[[Configuration], MetadataProvider]


def connect(config: Configuration) -> SQLAlchemyMetadataProvider:
    """Open a metadata provider for the configured database."""
    return SQLAlchemyMetadataProvider(
        config.url,
        config.username,
        config.password,
        driver=config.backend_options.db_driver,
    )


class CLIHandler:
    """Handle command-line operations for facade generation."""

    def __init__(
        self,
        console: Console | None = None,
        registry: RendererRegistry | None = None,
        provider_factory: ProviderFactory | None = None,
    ) -> None:
        """Initialize the handler.

        Args:
            console: Console for user-facing output.
            registry: Renderer registry; the global one when omitted.
            provider_factory: Builds the metadata provider from the
                configuration; connects through SQLAlchemy when omitted.
        """
        self.console = console or Console()
        self.registry = registry or get_registry()
        self.provider_factory = provider_factory or connect

    def run(self, args: Any) -> int:
        """Run the command described by parsed arguments.

        Args:
            args: Parsed CLI arguments from ``create_parser``.

        Returns:
            Exit code: 0 on success, the error's exit code otherwise.
        """
        if getattr(args, "list_backends", False):
            return self._list_backends()

        command: Command | None = None
        try:
            config = build_config(args).validated()
            setup_logging(config.verbose)

            provider = self.provider_factory(config)
            try:
                command = Command(config, provider, registry=self.registry)
                result = command.execute()
            finally:
                close = getattr(provider, "close", None)
                if close is not None:
                    close()

        except FacadeGenError as e:
            logger.debug("Run failed", exc_info=True)
            self.console.print(f"[red]✗ Error:[/red] {escape(str(e))}")
            if command is not None and command.result is not None:
                self._print_summary(command.result, config.verbose)
            return e.exit_code

        self._print_summary(result, config.verbose)
        return 0

    def _print_summary(self, result: RunResult, verbose: bool) -> None:
        """Print the outcome of a run."""
        if result.success:
            self.console.print(
                f"[green]✓[/green] {result.created} facade(s) written, "
                f"{result.skipped} up to date"
            )
        else:
            self.console.print(
                f"[yellow]⚠️  Stopped after {result.created} written, "
                f"{result.skipped} up to date[/yellow]"
            )

        if not verbose:
            return

        summary_table = Table(
            title="📊 Generation Summary",
            box=box.SIMPLE,
            show_header=True,
            header_style="bold cyan",
        )
        summary_table.add_column("Property", style="bold")
        summary_table.add_column("Value", style="green")

        summary_table.add_row("Created", str(result.created))
        summary_table.add_row("Skipped", str(result.skipped))
        summary_table.add_row("Directories Created", str(result.directories_created))
        summary_table.add_row("Elapsed", f"{result.elapsed:.2f}s")

        self.console.print()
        self.console.print(summary_table)

        if result.written:
            self.console.print("\n[cyan]Written files:[/cyan]")
            for path in result.written:
                self.console.print(f"  [cyan]•[/cyan] {escape(str(path))}")

    def _list_backends(self) -> int:
        """List renderer backends with details."""
        names = self.registry.list_backends()
        if not names:
            self.console.print("[yellow]⚠️ No renderer backends available[/yellow]")
            return 0

        table = Table(
            title="📋 Renderer Backends", box=box.ROUNDED, title_style="bold cyan"
        )
        table.add_column("Backend", style="bold green", no_wrap=True)
        table.add_column("Renderer Class", style="dim")
        table.add_column("Aliases", style="blue")
        table.add_column("Description")

        for name in names:
            info = self.registry.get_backend_info(name)
            aliases = ", ".join(info["aliases"]) if info["aliases"] else "[dim]none[/dim]"
            table.add_row(f"🔧 {name}", info["factory"], aliases, info["description"])

        self.console.print()
        self.console.print(table)
        self.console.print()
        self.console.print(
            Panel(
                "[bold]Usage:[/bold] facadegen -s [cyan]SCHEMA[/cyan] -p [cyan]PACKAGE[/cyan] "
                "-b [cyan]BACKEND[/cyan]\n"
                f"[bold]Formatters:[/bold] {', '.join(self.registry.list_formatters())}",
                title="💡 Quick Start",
                border_style="blue",
            )
        )
        return 0

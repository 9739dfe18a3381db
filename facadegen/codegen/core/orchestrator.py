"""
Per-table generation driver.

Walks the selected tables strictly in order, one at a time. For each table
it checks the existing facade, asks the renderer for new source when the
file is missing or stale, and replaces the file atomically. The first
failure stops the run; files written before it stay on disk.
"""

from __future__ import annotations

import os
import tempfile
import time
from dataclasses import dataclass, field
from pathlib import Path
from typing import Iterable, List, Optional, Protocol

from ...logging_config import get_logger
from .config import Configuration
from .errors import FacadeGenError, OutputError
from .generator import SourceRenderer
from .paths import PathResolver
from .schema import TableIdentifier

logger = get_logger(__name__)


class ProgressSink(Protocol):
    """Receives progress events during a run."""

    def on_start(self, table: TableIdentifier) -> None: ...

    def on_skip(self) -> None: ...

    def on_write(self, path: Path, byte_count: int) -> None: ...


class NullProgressSink:
    """Discards all events."""

    def on_start(self, table: TableIdentifier) -> None:
        pass

    def on_skip(self) -> None:
        pass

    def on_write(self, path: Path, byte_count: int) -> None:
        pass


class LoggingProgressSink:
    """Reports progress through the package logger at INFO level."""

    def __init__(self, logger_name: str = __name__):
        self._logger = get_logger(logger_name)

    def on_start(self, table: TableIdentifier) -> None:
        self._logger.info("%s", table)

    def on_skip(self) -> None:
        self._logger.info("  -> skip")

    def on_write(self, path: Path, byte_count: int) -> None:
        self._logger.info("  -> create file %s (%d bytes)", path, byte_count)


@dataclass
class GenerationTarget:
    table: TableIdentifier
    path: Path


@dataclass
class RunResult:
    """Aggregate outcome of a run, built incrementally."""

    created: int = 0
    skipped: int = 0
    directories_created: int = 0
    written: List[Path] = field(default_factory=list)
    error: Optional[FacadeGenError] = None
    elapsed: float = 0.0

    @property
    def success(self) -> bool:
        return self.error is None

    @property
    def processed(self) -> int:
        return self.created + self.skipped


class GenerationOrchestrator:
    """Drives the renderer over a sequence of tables."""

    def __init__(
        self,
        config: Configuration,
        resolver: PathResolver,
        renderer: SourceRenderer,
        sink: Optional[ProgressSink] = None,
    ):
        self.config = config
        self.resolver = resolver
        self.renderer = renderer
        self.sink = sink or NullProgressSink()

    def generate(
        self,
        tables: Iterable[TableIdentifier],
        result: Optional[RunResult] = None,
    ) -> RunResult:
        """
        Generate a facade for each table, in order.

        Errors are not raised: the first one is stored in ``result.error``
        and the loop stops.

        Args:
            tables: Working set from the selector
            result: Result to accumulate into; a new one when omitted

        Returns:
            The run result
        """
        result = result if result is not None else RunResult()
        started = time.monotonic()

        for table in tables:
            target = GenerationTarget(table, self.resolver.facade_path(table))
            try:
                self._generate_one(target, result)
            except FacadeGenError as e:
                logger.error("Generation of %s failed: %s", table, e)
                result.error = e
                break
            except OSError as e:
                error = OutputError(f"I/O failure for {target.path}: {e}")
                error.__cause__ = e
                logger.error("Generation of %s failed: %s", table, error)
                result.error = error
                break

        result.elapsed += time.monotonic() - started
        return result

    def _generate_one(self, target: GenerationTarget, result: RunResult) -> None:
        self.sink.on_start(target.table)

        existing: Optional[str] = None
        if target.path.exists():
            raw = target.path.read_bytes()
            if self.renderer.is_current(target.table, raw):
                self.sink.on_skip()
                result.skipped += 1
                return
            existing = self._decode(raw, target.path)

        source = self.renderer.render(target.table, existing)

        result.directories_created += ensure_directory(target.path.parent)

        contents = self._encode(source, target.path)
        write_atomically(target.path, contents)

        result.created += 1
        result.written.append(target.path)
        self.sink.on_write(target.path, len(contents))

    def _decode(self, raw: bytes, path: Path) -> str:
        try:
            return raw.decode(self.config.encoding)
        except UnicodeDecodeError as e:
            raise OutputError(
                f"Cannot decode {path} as {self.config.encoding}: {e}"
            ) from e

    def _encode(self, source: str, path: Path) -> bytes:
        try:
            return source.encode(self.config.encoding)
        except UnicodeEncodeError as e:
            raise OutputError(
                f"Cannot encode source for {path} as {self.config.encoding}: {e}"
            ) from e


def ensure_directory(directory: Path) -> int:
    """
    Create a directory and its missing parents.

    Returns:
        Number of directories actually created
    """
    missing = 0
    current = directory
    while not current.exists():
        missing += 1
        if current.parent == current:
            break
        current = current.parent

    if missing:
        directory.mkdir(parents=True, exist_ok=True)
        logger.debug("Created directory %s", directory)
    return missing


def write_atomically(path: Path, contents: bytes) -> None:
    """Write to a temporary file next to ``path`` and move it into place."""
    fd, temp_name = tempfile.mkstemp(
        dir=path.parent, prefix=f".{path.name}.", suffix=".tmp"
    )
    try:
        with os.fdopen(fd, "wb") as f:
            f.write(contents)
            f.flush()
            os.fsync(f.fileno())
        os.replace(temp_name, path)
    except BaseException:
        try:
            os.unlink(temp_name)
        except FileNotFoundError:
            pass
        raise

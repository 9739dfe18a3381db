"""
Exception hierarchy shared by the generation pipeline.

Every failure the pipeline can surface derives from FacadeGenError so the
CLI can report it with a single handler. None of these are retried.
"""


class FacadeGenError(Exception):
    """Base exception for all facade generation errors."""

    exit_code = 1


class ConfigurationError(FacadeGenError):
    """Invalid or missing configuration. Raised before any side effect."""

    exit_code = 2


class MetadataError(FacadeGenError):
    """Database or schema introspection failed."""

    pass


class RenderError(FacadeGenError):
    """A renderer backend failed to produce source text."""

    pass


class OutputError(FacadeGenError):
    """Directory creation or file read/write failed."""

    pass

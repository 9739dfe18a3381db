"""facadegen: generate table facade modules from a database schema."""

__version__ = "0.1.0"

"""
SQLAlchemy Core renderer module.

Generates one ``Table`` declaration per database table.
"""

from .generator import SQLAlchemyTableRenderer

__all__ = ["SQLAlchemyTableRenderer"]

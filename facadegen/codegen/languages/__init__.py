"""
Renderer backends.

Each subpackage contributes one SourceRenderer; the registry wires them
up under their configuration names.
"""

from .python import DataclassFacadeRenderer
from .sqlalchemy_core import SQLAlchemyTableRenderer

__all__ = ["DataclassFacadeRenderer", "SQLAlchemyTableRenderer"]

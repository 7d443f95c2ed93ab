"""Persistence layer for Swing Scout.

Re-exports the main public API: Database for connection management,
Repository for typed query operations.
"""

from Swing_Scout.data.database import Database
from Swing_Scout.data.repository import Repository

__all__ = ["Database", "Repository"]

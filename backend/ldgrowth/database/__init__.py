"""
Database access for LD Growth scheduling.

``async_db`` is the process-wide pool; each ``*_operations`` class takes it
in its constructor and owns the SQL for one area of the schema.
"""

from .core import AsyncDatabase

async_db = AsyncDatabase()

__all__ = ["AsyncDatabase", "async_db"]

"""yipcvars storage backends.

This module provides the storage abstraction over the cvars table:
SQLite for real databases, an in-memory dict for tests.
"""

from .base import CommitHook, CvarHandle, CvarStore, LastmodBumpHook
from .memory import MemoryCvarHandle, MemoryCvarStore
from .schema import CVARS_SCHEMA, create_database
from .sqlite import SQLiteCvarHandle, SQLiteCvarStore

__all__ = [
    # Contract
    "CommitHook",
    "CvarHandle",
    "CvarStore",
    "LastmodBumpHook",
    # Backends
    "MemoryCvarHandle",
    "MemoryCvarStore",
    "SQLiteCvarHandle",
    "SQLiteCvarStore",
    # Provisioning
    "CVARS_SCHEMA",
    "create_database",
]

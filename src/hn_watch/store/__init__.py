"""Store implementations."""

from .base import SeenRecord, StorageError, Store
from .memory_store import MemoryStore
from .sqlite_store import SQLiteStore

__all__ = ["MemoryStore", "SeenRecord", "SQLiteStore", "StorageError", "Store"]

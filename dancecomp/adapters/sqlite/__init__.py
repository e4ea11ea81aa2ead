"""SQLite adapters: schema migrator and engine store."""

from .migrator import SQLiteMigrator
from .repos import SQLiteEngineStore

__all__ = ["SQLiteEngineStore", "SQLiteMigrator"]

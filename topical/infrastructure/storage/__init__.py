from .base import Storage
from .memory_storage import MemoryStorage
from .sqlite_storage import SqliteStorage

__all__ = ["Storage", "MemoryStorage", "SqliteStorage"]

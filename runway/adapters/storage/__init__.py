"""
Storage Adapters
共有レコード永続化の実装

使用例:
    from runway.adapters.storage.memory import InMemoryShareStorage
    from runway.adapters.storage.file import FileShareStorageAdapter
"""

from .file import FileShareStorageAdapter
from .memory import InMemoryShareStorage

__all__ = [
    "FileShareStorageAdapter",
    "InMemoryShareStorage",
]

"""Key-value backends for leaf persistence."""

from __future__ import annotations

import os
from typing import Optional

from .base import KeyValueStore
from .memory import MemoryKeyValueStore
from .rocksdb import RocksKeyValueStore, open_rocksdb


def open_store(path: Optional[os.PathLike[str] | str] = None) -> KeyValueStore:
    """Open RocksDB at ``path``, or an in-memory store when no path is given."""

    if path is None:
        return MemoryKeyValueStore()
    return open_rocksdb(path)


__all__ = [
    "KeyValueStore",
    "MemoryKeyValueStore",
    "RocksKeyValueStore",
    "open_rocksdb",
    "open_store",
]

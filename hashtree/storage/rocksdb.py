"""RocksDB-backed key-value store for persisted leaves."""

from __future__ import annotations

import logging
import os
from pathlib import Path
from typing import Iterable, Iterator, Optional, Tuple

from rocksdict import Options, Rdict, WriteBatch

from ..errors import HashTreeIOError
from .base import Key, Pair, Value

logger = logging.getLogger(__name__)


class RocksKeyValueStore:
    """Thin wrapper around a raw-mode ``Rdict``.

    Raw mode keeps keys and values as plain bytes on disk, so the keyspace is
    readable by any other RocksDB/LevelDB client. Engine errors are re-raised
    as :class:`HashTreeIOError` with the original exception chained.
    """

    def __init__(self, db: Rdict, path: Optional[Path] = None) -> None:
        self._db = db
        self._path = path

    @property
    def db(self) -> Rdict:
        return self._db

    @property
    def path(self) -> Optional[Path]:
        return self._path

    def put(self, key: Key, value: Value) -> None:
        try:
            self._db.put(bytes(key), bytes(value))
        except Exception as exc:
            raise HashTreeIOError(f"rocksdb put failed for {key!r}", exc) from exc

    def get(self, key: Key) -> Optional[Value]:
        try:
            return self._db.get(bytes(key))
        except Exception as exc:
            raise HashTreeIOError(f"rocksdb get failed for {key!r}", exc) from exc

    def delete(self, key: Key) -> None:
        """Delete ``key``. RocksDB treats deleting an absent key as a no-op."""

        try:
            self._db.delete(bytes(key))
        except Exception as exc:
            raise HashTreeIOError(f"rocksdb delete failed for {key!r}", exc) from exc

    def batch_put(self, pairs: Iterable[Pair]) -> None:
        """Apply every pair through a single ``WriteBatch`` so readers never see part of it."""

        wb = WriteBatch(raw_mode=True)
        for key, value in pairs:
            wb.put(bytes(key), bytes(value))
        try:
            self._db.write(wb)
        except Exception as exc:
            raise HashTreeIOError("rocksdb batch write failed", exc) from exc

    def exists(self, key: Key) -> bool:
        try:
            return bytes(key) in self._db
        except Exception as exc:
            raise HashTreeIOError(f"rocksdb lookup failed for {key!r}", exc) from exc

    def items(self) -> Iterator[Tuple[Key, Value]]:
        """Yield ``(key, value)`` pairs in key order."""

        yield from self._db.items()

    def close(self) -> None:
        try:
            self._db.close()
        except Exception as exc:
            raise HashTreeIOError("rocksdb close failed", exc) from exc


def open_rocksdb(
    path: os.PathLike[str] | str,
    *,
    create_if_missing: bool = True,
) -> RocksKeyValueStore:
    """Open (or create) a RocksDB database at ``path`` in raw mode.

    With ``create_if_missing=False`` an absent directory is reported before
    RocksDB is touched, so nothing is left behind on disk.
    """

    db_path = Path(path)
    if not create_if_missing and not db_path.is_dir():
        missing = FileNotFoundError(f"no rocksdb database at {db_path}")
        raise HashTreeIOError(f"failed to open rocksdb at {db_path}", missing)
    try:
        db_path.parent.mkdir(parents=True, exist_ok=True)
        options = Options(raw_mode=True)
        options.create_if_missing(create_if_missing)
        db = Rdict(str(db_path), options)
    except Exception as exc:
        raise HashTreeIOError(f"failed to open rocksdb at {db_path}", exc) from exc
    logger.debug("opened rocksdb", extra={"path": str(db_path)})
    return RocksKeyValueStore(db, db_path)


__all__ = ["RocksKeyValueStore", "open_rocksdb"]

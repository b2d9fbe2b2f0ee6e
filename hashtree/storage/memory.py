"""In-process key-value backend used for tests and ephemeral commitments."""

from __future__ import annotations

from threading import RLock
from typing import Dict, Iterable, Iterator, Optional, Tuple

from ..errors import NotFoundError
from .base import Key, Pair, Value


class MemoryKeyValueStore:
    """Dictionary-backed store guarded by a re-entrant lock."""

    def __init__(self) -> None:
        self._data: Dict[Key, Value] = {}
        self._lock = RLock()

    def put(self, key: Key, value: Value) -> None:
        with self._lock:
            self._data[bytes(key)] = bytes(value)

    def get(self, key: Key) -> Optional[Value]:
        with self._lock:
            return self._data.get(bytes(key))

    def delete(self, key: Key) -> None:
        """Remove ``key``; raises :class:`NotFoundError` if it was never stored."""

        with self._lock:
            try:
                del self._data[bytes(key)]
            except KeyError:
                raise NotFoundError(key) from None

    def batch_put(self, pairs: Iterable[Pair]) -> None:
        # Materialise first so a failing iterator leaves the store untouched.
        staged = [(bytes(key), bytes(value)) for key, value in pairs]
        with self._lock:
            self._data.update(staged)

    def exists(self, key: Key) -> bool:
        with self._lock:
            return bytes(key) in self._data

    def items(self) -> Iterator[Tuple[Key, Value]]:
        """Yield a sorted snapshot of ``(key, value)`` pairs."""

        with self._lock:
            snapshot = sorted(self._data.items())
        yield from snapshot

    def __len__(self) -> int:
        with self._lock:
            return len(self._data)

    def close(self) -> None:
        pass


__all__ = ["MemoryKeyValueStore"]

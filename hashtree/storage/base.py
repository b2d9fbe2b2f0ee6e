"""Capabilities every key-value backend must offer to the leaf store."""

from __future__ import annotations

from typing import Iterable, Optional, Protocol, Tuple, runtime_checkable

Key = bytes
Value = bytes
Pair = Tuple[Key, Value]


@runtime_checkable
class KeyValueStore(Protocol):
    """Ordered byte-keyed store.

    ``get`` returns ``None`` for an absent key so that "not found" is never
    confused with an empty value. ``batch_put`` must be atomic for readers:
    they observe either none or all of the pairs.
    """

    def put(self, key: Key, value: Value) -> None: ...

    def get(self, key: Key) -> Optional[Value]: ...

    def delete(self, key: Key) -> None: ...

    def batch_put(self, pairs: Iterable[Pair]) -> None: ...

    def exists(self, key: Key) -> bool: ...

    def close(self) -> None: ...


__all__ = ["Key", "KeyValueStore", "Pair", "Value"]

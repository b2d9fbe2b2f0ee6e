"""Leaf persistence on top of a key-value backend.

Two keyspaces are used:

``leaf-<index>``
    Positional keys holding raw leaf bytes in input order. They are rewritten
    on every ``store_leaves`` call and removed by ``prune_leaves``.
``signature-<hex digest>``
    Content-derived keys holding raw signature bytes. The key is a function of
    the content, so writing the same signature twice stores identical bytes.
"""

from __future__ import annotations

import logging
from typing import Iterable, List, Optional

from . import metrics
from .digest import hexdigest
from .errors import NotFoundError
from .logging_utils import log_operation
from .storage.base import KeyValueStore, Pair

logger = logging.getLogger(__name__)

LEAF_PREFIX = "leaf-"
SIGNATURE_PREFIX = "signature-"


def leaf_key(index: int) -> str:
    """Positional key for the leaf at ``index``."""

    if index < 0:
        raise ValueError("leaf index must be non-negative")
    return f"{LEAF_PREFIX}{index}"


def signature_key(signature: bytes) -> str:
    """Content-derived key for ``signature``."""

    return f"{SIGNATURE_PREFIX}{hexdigest(signature)}"


def _encode(key: str) -> bytes:
    return key.encode("utf-8")


class LeafStore:
    """Store, fetch, deduplicate and prune leaves."""

    def __init__(self, backend: KeyValueStore, *, batch_writes: bool = True) -> None:
        self._backend = backend
        self._batch_writes = batch_writes

    @property
    def backend(self) -> KeyValueStore:
        return self._backend

    def store_leaves(self, leaves: Iterable[bytes], *, batch: Optional[bool] = None) -> int:
        """Persist ``leaves`` under ``leaf-0 .. leaf-(n-1)`` and return ``n``.

        ``batch`` overrides the store default. The batch path becomes visible
        to readers in one step; the single-put path writes key by key. Both
        leave the same keys and values behind.
        """

        use_batch = self._batch_writes if batch is None else batch
        pairs: List[Pair] = [
            (_encode(leaf_key(index)), bytes(leaf)) for index, leaf in enumerate(leaves)
        ]
        with log_operation(logger, "store_leaves", count=len(pairs), batched=use_batch):
            if use_batch:
                self._backend.batch_put(pairs)
            else:
                for key, value in pairs:
                    self._backend.put(key, value)
        metrics.record_leaves_written(len(pairs), batched=use_batch)
        return len(pairs)

    def fetch_leaf(self, key: str) -> bytes:
        """Return the bytes stored at ``key`` or raise :class:`NotFoundError`."""

        value = self._backend.get(_encode(key))
        metrics.record_leaf_fetch(value is not None)
        if value is None:
            raise NotFoundError(key)
        return bytes(value)

    def load_leaves(self, count: int) -> List[bytes]:
        """Fetch ``leaf-0 .. leaf-(count-1)`` in order, e.g. to rebuild a tree."""

        if count < 0:
            raise ValueError("count must be non-negative")
        with log_operation(logger, "load_leaves", count=count):
            return [self.fetch_leaf(leaf_key(index)) for index in range(count)]

    def check_signature_exists(self, signature: bytes) -> bool:
        key = signature_key(signature)
        with log_operation(logger, "check_signature", key=key) as context:
            found = self._backend.exists(_encode(key))
            context["found"] = found
        metrics.record_signature_check(found)
        return found

    def save_signature(self, signature: bytes) -> str:
        """Store ``signature`` under its content key and return that key.

        Write-once is not enforced here; callers check with
        :meth:`check_signature_exists` first.
        """

        key = signature_key(signature)
        with log_operation(logger, "save_signature", key=key):
            self._backend.put(_encode(key), bytes(signature))
        metrics.record_signature_saved()
        return key

    def commit_signature(self, signature: bytes) -> bool:
        """Save ``signature`` unless already present; return True when newly saved."""

        if self.check_signature_exists(signature):
            return False
        self.save_signature(signature)
        return True

    def prune_leaves(self, count: int) -> None:
        """Delete ``leaf-0 .. leaf-(count-1)``; keys already gone are skipped."""

        if count < 0:
            raise ValueError("count must be non-negative")
        with log_operation(logger, "prune_leaves", count=count) as context:
            missing = 0
            for index in range(count):
                try:
                    self._backend.delete(_encode(leaf_key(index)))
                except NotFoundError:
                    missing += 1
            context["already_absent"] = missing
        metrics.record_pruned(count)


__all__ = ["LEAF_PREFIX", "SIGNATURE_PREFIX", "LeafStore", "leaf_key", "signature_key"]

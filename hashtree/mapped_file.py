"""Read-only memory mapping of source files with a size ceiling.

A :class:`MappedFileGuard` owns the ceiling and a lock that serialises every
open and close. The lock covers the open or close call itself, not the
lifetime of the returned region.

Regions never hand out the underlying buffer; reads return ``bytes`` copies
of the requested range. That keeps ``mmap.close()`` from being blocked by an
outstanding view and means a closed region can only ever fail with
:class:`RegionClosedError`, never read freed pages.

Usage::

    guard = MappedFileGuard(limit_gib=2)
    with guard.mapped("blocks.bin") as region:
        root = build_tree(region.iter_leaves(4096))
"""

from __future__ import annotations

import logging
import mmap
import os
from contextlib import contextmanager
from threading import Lock
from typing import Generator, Iterator, Optional

from . import metrics
from .config import DEFAULT_MMAP_LIMIT_GIB, GIB, HashTreeSettings
from .errors import HashTreeIOError, InvalidConfiguration, RegionClosedError, SizeLimitExceeded
from .logging_utils import log_operation

logger = logging.getLogger(__name__)


def _validate_limit(gib: object) -> int:
    if isinstance(gib, bool) or not isinstance(gib, int) or gib <= 0:
        raise InvalidConfiguration(f"mapping limit must be a positive number of GiB, got {gib!r}")
    return gib


class MappedRegion:
    """Read-only view over a mapped file, released exactly once."""

    def __init__(self, guard: "MappedFileGuard", path: str, mapping: Optional[mmap.mmap], size: int) -> None:
        self._guard = guard
        self._path = path
        self._mmap = mapping
        self._size = size
        self._closed = False

    @property
    def path(self) -> str:
        return self._path

    @property
    def closed(self) -> bool:
        return self._closed

    @property
    def size(self) -> int:
        return self._size

    def _require_open(self) -> None:
        if self._closed:
            raise RegionClosedError(f"mapped region for {self._path} has been released")

    def __len__(self) -> int:
        self._require_open()
        return self._size

    def __getitem__(self, index):
        self._require_open()
        mapping = self._mmap
        if mapping is None:
            # _closed is set before _mmap is cleared; recheck after a racing close()
            self._require_open()
            return b""[index]
        try:
            return mapping[index]
        except ValueError as exc:
            # closed underneath us by a concurrent close()
            raise RegionClosedError(f"mapped region for {self._path} has been released") from exc

    def read(self, offset: int = 0, size: Optional[int] = None) -> bytes:
        """Copy ``size`` bytes starting at ``offset`` (to the end when ``size`` is None)."""

        if offset < 0:
            raise ValueError("offset must be non-negative")
        end = self._size if size is None else min(self._size, offset + size)
        return self[offset:end]

    def iter_leaves(self, leaf_size: int) -> Iterator[bytes]:
        """Yield consecutive ``leaf_size`` blocks; the final block may be shorter."""

        if leaf_size <= 0:
            raise ValueError("leaf_size must be positive")
        self._require_open()
        for offset in range(0, self._size, leaf_size):
            yield self.read(offset, leaf_size)

    def close(self) -> None:
        """Release the mapping. A second call raises :class:`RegionClosedError`."""

        self._guard.close(self)

    def __enter__(self) -> "MappedRegion":
        self._require_open()
        return self

    def __exit__(self, exc_type, exc, tb) -> None:
        if not self._closed:
            self.close()

    def __repr__(self) -> str:
        state = "closed" if self._closed else "mapped"
        return f"<MappedRegion path={self._path!r} size={self._size} {state}>"


class MappedFileGuard:
    """Maps files read-only, enforcing a ceiling and serialising open/close."""

    def __init__(self, limit_gib: int = DEFAULT_MMAP_LIMIT_GIB) -> None:
        self._limit_gib = _validate_limit(limit_gib)
        self._lock = Lock()

    @classmethod
    def from_settings(cls, settings: HashTreeSettings) -> "MappedFileGuard":
        return cls(limit_gib=settings.mmap_limit_gib)

    @property
    def limit_gib(self) -> int:
        with self._lock:
            return self._limit_gib

    @property
    def limit_bytes(self) -> int:
        return self.limit_gib * GIB

    def set_limit(self, gib: int) -> None:
        """Change the ceiling; non-positive values raise and keep the current limit."""

        value = _validate_limit(gib)
        with self._lock:
            previous, self._limit_gib = self._limit_gib, value
        logger.info("mapping limit changed", extra={"previous_gib": previous, "limit_gib": value})

    def open(self, path: os.PathLike[str] | str) -> MappedRegion:
        """Map ``path`` read-only and return the region.

        Prefer :meth:`mapped`, which releases the region on every exit path.
        """

        target = os.fspath(path)
        with self._lock, log_operation(logger, "map_file", path=target) as context:
            limit = self._limit_gib * GIB
            try:
                with open(target, "rb") as handle:
                    size = os.fstat(handle.fileno()).st_size
                    if size > limit:
                        metrics.record_map_rejected("size_limit")
                        raise SizeLimitExceeded(target, size, limit)
                    # mmap cannot map zero bytes; an empty file is an empty region.
                    mapping = None
                    if size:
                        mapping = mmap.mmap(handle.fileno(), 0, access=mmap.ACCESS_READ)
            except (OSError, ValueError) as exc:
                metrics.record_map_rejected("io")
                raise HashTreeIOError(f"failed to map {target}", exc) from exc
            context["size"] = size
        metrics.record_mapped(size)
        return MappedRegion(self, target, mapping, size)

    def close(self, region: MappedRegion) -> None:
        """Unmap ``region``; releasing it twice raises :class:`RegionClosedError`."""

        with self._lock:
            if region._closed:
                raise RegionClosedError(f"mapped region for {region.path} was already released")
            if region._mmap is not None:
                try:
                    region._mmap.close()
                except (OSError, BufferError) as exc:
                    raise HashTreeIOError(f"failed to unmap {region.path}", exc) from exc
            region._closed = True
            region._mmap = None
        metrics.record_unmapped(region.size)
        logger.debug("unmapped file", extra={"path": region.path, "size": region.size})

    @contextmanager
    def mapped(self, path: os.PathLike[str] | str) -> Generator[MappedRegion, None, None]:
        """Scoped mapping: the region is released when the block exits."""

        region = self.open(path)
        try:
            yield region
        finally:
            if not region.closed:
                region.close()


__all__ = ["MappedFileGuard", "MappedRegion"]

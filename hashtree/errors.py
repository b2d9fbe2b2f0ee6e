"""Exception taxonomy shared by the tree builder, leaf store and file guard."""

from __future__ import annotations

from typing import Optional


class HashTreeError(Exception):
    """Base class for every error raised by :mod:`hashtree`."""


class EmptyInputError(HashTreeError, ValueError):
    """A tree was requested over zero leaves."""

    def __init__(self, message: str = "cannot build a hash tree from zero leaves") -> None:
        super().__init__(message)


class NotFoundError(HashTreeError, LookupError):
    """The requested key is absent from the store."""

    def __init__(self, key: str | bytes) -> None:
        self.key = key.decode("utf-8", errors="replace") if isinstance(key, bytes) else key
        super().__init__(f"key not found: {self.key}")


class SizeLimitExceeded(HashTreeError):
    """A file is larger than the configured mapping ceiling."""

    def __init__(self, path: str, size: int, limit: int) -> None:
        self.path = path
        self.size = size
        self.limit = limit
        super().__init__(f"{path} is {size} bytes which exceeds the mapping limit of {limit} bytes")


class HashTreeIOError(HashTreeError):
    """Open, stat, map, unmap or backend I/O failed.

    The original exception is kept on ``cause`` and chained as ``__cause__``.
    """

    def __init__(self, message: str, cause: Optional[BaseException] = None) -> None:
        self.cause = cause
        if cause is not None:
            message = f"{message}: {cause}"
        super().__init__(message)


class InvalidConfiguration(HashTreeError, ValueError):
    """A configuration value was rejected; the previous value is retained."""


class RegionClosedError(HashTreeError):
    """A mapped region was used or released after it had already been released."""


class CorruptArtifactError(HashTreeError):
    """A persisted root artifact does not have the expected shape."""


__all__ = [
    "CorruptArtifactError",
    "EmptyInputError",
    "HashTreeError",
    "HashTreeIOError",
    "InvalidConfiguration",
    "NotFoundError",
    "RegionClosedError",
    "SizeLimitExceeded",
]

"""SHA-256 digest helpers used for both leaf and internal-node hashing."""

from __future__ import annotations

import hashlib

DIGEST_SIZE = 32

_BYTES_LIKE = (bytes, bytearray, memoryview)


def compute_hash(data: bytes) -> bytes:
    """Return the 32-byte SHA-256 digest of ``data``."""

    if not isinstance(data, _BYTES_LIKE):
        raise TypeError(f"expected a bytes-like object, got {type(data).__name__}")
    return hashlib.sha256(data).digest()


def hash_pair(left: bytes, right: bytes) -> bytes:
    """Digest of two child digests concatenated left then right."""

    return compute_hash(bytes(left) + bytes(right))


def hexdigest(data: bytes) -> str:
    return compute_hash(data).hex()


__all__ = ["DIGEST_SIZE", "compute_hash", "hash_pair", "hexdigest"]

"""Persist and reload the root digest as a raw 32-byte file."""

from __future__ import annotations

import logging
import os
from pathlib import Path

from .digest import DIGEST_SIZE
from .errors import CorruptArtifactError, HashTreeIOError
from .tree import TreeNode

logger = logging.getLogger(__name__)


def save_root(root: TreeNode | bytes, path: os.PathLike[str] | str) -> Path:
    """Truncate ``path`` and write the root digest to it, no header or length prefix."""

    digest = root.digest if isinstance(root, TreeNode) else bytes(root)
    target = Path(path)
    try:
        target.parent.mkdir(parents=True, exist_ok=True)
        target.write_bytes(digest)
    except OSError as exc:
        raise HashTreeIOError(f"failed to write root artifact {target}", exc) from exc
    logger.info("root artifact written", extra={"path": str(target), "root": digest.hex()})
    return target


def load_root(path: os.PathLike[str] | str) -> bytes:
    """Read the whole artifact back; the length is not checked here."""

    try:
        return Path(path).read_bytes()
    except OSError as exc:
        raise HashTreeIOError(f"failed to read root artifact {path}", exc) from exc


def load_root_checked(path: os.PathLike[str] | str) -> bytes:
    """Like :func:`load_root` but rejects anything that is not exactly one digest."""

    raw = load_root(path)
    if len(raw) != DIGEST_SIZE:
        raise CorruptArtifactError(
            f"root artifact {path} holds {len(raw)} bytes, expected {DIGEST_SIZE}"
        )
    return raw


__all__ = ["load_root", "load_root_checked", "save_root"]

"""File-to-commitment pipeline tying the guard, builder and store together."""

from __future__ import annotations

import logging
import os
from dataclasses import dataclass
from typing import Optional

from .artifact import save_root
from .config import DEFAULT_LEAF_SIZE
from .leaf_store import LeafStore
from .logging_utils import log_operation
from .mapped_file import MappedFileGuard
from .tree import TreeNode, build_tree, verify_root

logger = logging.getLogger(__name__)


@dataclass(frozen=True)
class CommitResult:
    """Outcome of committing one file."""

    root: TreeNode
    leaf_count: int
    size: int

    @property
    def root_hex(self) -> str:
        return self.root.hex

    def as_dict(self) -> dict:
        return {"root": self.root_hex, "leaf_count": self.leaf_count, "size": self.size}


def commit_file(
    path: os.PathLike[str] | str,
    *,
    guard: MappedFileGuard,
    leaf_size: int = DEFAULT_LEAF_SIZE,
    store: Optional[LeafStore] = None,
    root_path: Optional[os.PathLike[str] | str] = None,
) -> CommitResult:
    """Split ``path`` into ``leaf_size`` blocks and commit them.

    The file is mapped for the duration of the call only. When ``store`` is
    given the leaves are persisted under positional keys; when ``root_path``
    is given the root digest is written there.
    """

    with log_operation(logger, "commit_file", path=os.fspath(path), leaf_size=leaf_size) as context:
        with guard.mapped(path) as region:
            size = region.size
            if store is None:
                # only digests are kept, blocks are copied one at a time
                root = build_tree(region.iter_leaves(leaf_size))
            else:
                leaves = list(region.iter_leaves(leaf_size))
                root = build_tree(leaves)
                store.store_leaves(leaves)
        leaf_count = -(-size // leaf_size)
        if root_path is not None:
            save_root(root, root_path)
        context.update({"root": root.hex, "leaf_count": leaf_count})
    return CommitResult(root=root, leaf_count=leaf_count, size=size)


def verify_store(store: LeafStore, count: int, expected_root: bytes) -> bool:
    """Reload ``count`` persisted leaves and check them against ``expected_root``."""

    leaves = store.load_leaves(count)
    matches = verify_root(leaves, expected_root)
    logger.info("store verification finished", extra={"count": count, "match": matches})
    return matches


__all__ = ["CommitResult", "commit_file", "verify_store"]

"""Binary hash tree over an ordered sequence of leaf blocks.

Leaves are hashed in input order, so the order is part of the commitment.
Each level is reduced pairwise from the left; when a level has an odd number
of nodes the last one is carried up to the next level unchanged (it is not
re-hashed, hashed with itself, or padded). The same leaves therefore always
produce the same root, and any reordering produces a different one.

Everything in this module is pure: no I/O, no logging, no shared state.
"""

from __future__ import annotations

import hmac
from dataclasses import dataclass
from typing import Dict, Iterable, List, Optional, Sequence

from .digest import DIGEST_SIZE, compute_hash, hash_pair
from .errors import EmptyInputError


@dataclass(frozen=True)
class TreeNode:
    """One node of the tree; leaves have no children, internal nodes have two."""

    digest: bytes
    left: Optional["TreeNode"] = None
    right: Optional["TreeNode"] = None

    def __post_init__(self) -> None:
        if len(self.digest) != DIGEST_SIZE:
            raise ValueError(f"digest must be {DIGEST_SIZE} bytes, got {len(self.digest)}")
        if (self.left is None) != (self.right is None):
            raise ValueError("a tree node needs both children or neither")

    @property
    def is_leaf(self) -> bool:
        return self.left is None

    @property
    def hex(self) -> str:
        return self.digest.hex()

    def leaf_count(self) -> int:
        """Number of leaf nodes reachable from this node."""

        count = 0
        stack: List[TreeNode] = [self]
        while stack:
            node = stack.pop()
            if node.is_leaf:
                count += 1
            else:
                stack.append(node.left)  # type: ignore[arg-type]
                stack.append(node.right)  # type: ignore[arg-type]
        return count

    def height(self) -> int:
        """Edges on the longest path down to a leaf (a lone leaf has height 0)."""

        best = 0
        stack = [(self, 0)]
        while stack:
            node, depth = stack.pop()
            if node.is_leaf:
                best = max(best, depth)
            else:
                stack.append((node.left, depth + 1))
                stack.append((node.right, depth + 1))
        return best

    def as_dict(self) -> Dict[str, object]:
        """Return a JSON-serialisable mapping; absent children are omitted."""

        payload: Dict[str, object] = {"hash": self.hex}
        if not self.is_leaf:
            payload["left"] = self.left.as_dict()  # type: ignore[union-attr]
            payload["right"] = self.right.as_dict()  # type: ignore[union-attr]
        return payload


def _leaf_nodes(leaves: Iterable[bytes]) -> List[TreeNode]:
    nodes = [TreeNode(compute_hash(leaf)) for leaf in leaves]
    if not nodes:
        raise EmptyInputError()
    return nodes


def _reduce_level(nodes: Sequence[TreeNode]) -> List[TreeNode]:
    next_level: List[TreeNode] = []
    for index in range(0, len(nodes), 2):
        if index + 1 < len(nodes):
            left, right = nodes[index], nodes[index + 1]
            next_level.append(TreeNode(hash_pair(left.digest, right.digest), left, right))
        else:
            # odd node out: promoted as-is
            next_level.append(nodes[index])
    return next_level


def build_tree(leaves: Iterable[bytes]) -> TreeNode:
    """Build the tree over ``leaves`` and return its root node.

    Raises :class:`EmptyInputError` when ``leaves`` yields nothing.
    """

    nodes = _leaf_nodes(leaves)
    while len(nodes) > 1:
        nodes = _reduce_level(nodes)
    return nodes[0]


def build_levels(leaves: Iterable[bytes]) -> List[List[bytes]]:
    """Return the digests of every level, from the leaf level up to ``[root]``."""

    nodes = _leaf_nodes(leaves)
    levels = [[node.digest for node in nodes]]
    while len(nodes) > 1:
        nodes = _reduce_level(nodes)
        levels.append([node.digest for node in nodes])
    return levels


def compute_root(leaves: Iterable[bytes]) -> bytes:
    """Convenience wrapper returning only the root digest."""

    return build_tree(leaves).digest


def verify_root(leaves: Iterable[bytes], expected: bytes) -> bool:
    """Rebuild the tree over ``leaves`` and compare its root with ``expected``."""

    return hmac.compare_digest(compute_root(leaves), bytes(expected))


__all__ = ["TreeNode", "build_levels", "build_tree", "compute_root", "verify_root"]

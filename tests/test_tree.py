import hashlib
import json

import pytest

from hashtree.errors import EmptyInputError
from hashtree.tree import TreeNode, build_levels, build_tree, compute_root, verify_root


def H(data: bytes) -> bytes:
    return hashlib.sha256(data).digest()


A, B, C, D, E = b"alpha", b"bravo", b"charlie", b"delta", b"echo"


def test_single_leaf_root_is_leaf_hash():
    root = build_tree([A])
    assert root.digest == H(A)
    assert root.is_leaf
    assert root.left is None and root.right is None


def test_two_leaves():
    root = build_tree([A, B])
    assert root.digest == H(H(A) + H(B))
    assert root.left.digest == H(A)
    assert root.right.digest == H(B)


def test_odd_node_is_carried_up_unchanged():
    root = build_tree([A, B, C])
    assert root.digest == H(H(H(A) + H(B)) + H(C))
    # C's leaf node is the root's right child, not re-hashed
    assert root.right.is_leaf
    assert root.right.digest == H(C)


def test_carry_up_differs_from_duplicate_and_zero_padding():
    root = compute_root([A, B, C])
    duplicated = H(H(H(A) + H(B)) + H(H(C) + H(C)))
    padded = H(H(H(A) + H(B)) + H(H(C) + bytes(32)))
    assert root not in (duplicated, padded)


def test_five_leaves_carry_across_two_levels():
    ab, cd = H(H(A) + H(B)), H(H(C) + H(D))
    expected = H(H(ab + cd) + H(E))
    assert compute_root([A, B, C, D, E]) == expected


def test_levels_shape_for_three_leaves():
    levels = build_levels([A, B, C])
    assert levels[0] == [H(A), H(B), H(C)]
    assert levels[1] == [H(H(A) + H(B)), H(C)]
    assert levels[2] == [compute_root([A, B, C])]


def test_build_is_deterministic():
    leaves = [bytes([i]) * (i + 1) for i in range(11)]
    assert compute_root(leaves) == compute_root(list(leaves))


def test_swapping_leaves_changes_root():
    leaves = [A, B, C, D]
    swapped = [B, A, C, D]
    assert compute_root(leaves) != compute_root(swapped)


def test_empty_input_raises():
    with pytest.raises(EmptyInputError):
        build_tree([])
    with pytest.raises(EmptyInputError):
        build_levels(iter(()))


def test_accepts_generators():
    assert compute_root(leaf for leaf in (A, B, C)) == compute_root([A, B, C])


def test_leaf_count_and_height():
    root = build_tree([A, B, C, D, E])
    assert root.leaf_count() == 5
    assert root.height() == 3
    assert build_tree([A]).height() == 0


def test_as_dict_omits_missing_children():
    root = build_tree([A, B, C])
    payload = root.as_dict()
    assert payload["hash"] == root.hex
    assert payload["right"] == {"hash": H(C).hex()}
    json.dumps(payload)


def test_node_requires_both_children_or_neither():
    leaf = TreeNode(H(A))
    with pytest.raises(ValueError):
        TreeNode(H(B), left=leaf)
    with pytest.raises(ValueError):
        TreeNode(b"short")


def test_verify_root():
    leaves = [A, B, C]
    assert verify_root(leaves, compute_root(leaves))
    assert not verify_root([A, C, B], compute_root(leaves))

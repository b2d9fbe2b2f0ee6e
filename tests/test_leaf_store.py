import threading

import pytest

from hashtree.digest import hexdigest
from hashtree.errors import HashTreeIOError, NotFoundError
from hashtree.leaf_store import LeafStore, leaf_key, signature_key
from hashtree.storage import MemoryKeyValueStore

LEAVES = [b"first", b"second", b"", b"fourth"]


def test_keys():
    assert leaf_key(0) == "leaf-0"
    assert leaf_key(12) == "leaf-12"
    assert signature_key(b"sig") == f"signature-{hexdigest(b'sig')}"
    with pytest.raises(ValueError):
        leaf_key(-1)


@pytest.mark.parametrize("batch", [True, False])
def test_store_and_fetch(leaf_store, batch):
    assert leaf_store.store_leaves(LEAVES, batch=batch) == len(LEAVES)
    for index, leaf in enumerate(LEAVES):
        assert leaf_store.fetch_leaf(f"leaf-{index}") == leaf


def test_batch_and_single_put_paths_are_equivalent():
    batched, single = MemoryKeyValueStore(), MemoryKeyValueStore()
    LeafStore(batched, batch_writes=True).store_leaves(LEAVES)
    LeafStore(single, batch_writes=False).store_leaves(LEAVES)
    assert list(batched.items()) == list(single.items())


def test_empty_value_is_not_missing(leaf_store):
    leaf_store.store_leaves([b""])
    assert leaf_store.fetch_leaf("leaf-0") == b""


def test_fetch_missing_raises_not_found(leaf_store):
    with pytest.raises(NotFoundError) as info:
        leaf_store.fetch_leaf("leaf-7")
    assert info.value.key == "leaf-7"


def test_load_leaves_in_order(leaf_store):
    leaf_store.store_leaves(LEAVES)
    assert leaf_store.load_leaves(len(LEAVES)) == LEAVES
    assert leaf_store.load_leaves(0) == []


def test_signature_dedup(leaf_store):
    assert not leaf_store.check_signature_exists(b"S")
    key = leaf_store.save_signature(b"S")
    assert key == signature_key(b"S")
    assert leaf_store.check_signature_exists(b"S")
    assert not leaf_store.check_signature_exists(b"S2")
    assert leaf_store.fetch_leaf(key) == b"S"


def test_save_signature_twice_is_idempotent(leaf_store, memory_backend):
    leaf_store.save_signature(b"S")
    leaf_store.save_signature(b"S")
    assert len(memory_backend) == 1


def test_commit_signature(leaf_store):
    assert leaf_store.commit_signature(b"S") is True
    assert leaf_store.commit_signature(b"S") is False


def test_signature_and_positional_keys_are_independent(leaf_store):
    leaf_store.store_leaves([b"S"])
    assert not leaf_store.check_signature_exists(b"S")


def test_prune_is_idempotent(leaf_store):
    leaf_store.store_leaves(LEAVES)
    leaf_store.prune_leaves(2)
    leaf_store.prune_leaves(2)
    with pytest.raises(NotFoundError):
        leaf_store.fetch_leaf("leaf-0")
    with pytest.raises(NotFoundError):
        leaf_store.fetch_leaf("leaf-1")
    assert leaf_store.fetch_leaf("leaf-2") == b""


def test_prune_rejects_negative_count(leaf_store):
    with pytest.raises(ValueError):
        leaf_store.prune_leaves(-1)


class _FailingBackend(MemoryKeyValueStore):
    def delete(self, key: bytes) -> None:
        raise HashTreeIOError("disk on fire")


def test_prune_propagates_other_backend_errors():
    store = LeafStore(_FailingBackend())
    with pytest.raises(HashTreeIOError):
        store.prune_leaves(1)


def _pausing_pairs(pairs, yielded, proceed):
    """Yield the first pair, then block until ``proceed`` is set."""
    it = iter(pairs)
    yield next(it)
    yielded.set()
    assert proceed.wait(timeout=5)
    yield from it


def test_memory_batch_is_all_or_nothing_for_readers(memory_backend):
    pairs = [(f"leaf-{i}".encode(), leaf) for i, leaf in enumerate(LEAVES)]
    yielded, proceed = threading.Event(), threading.Event()
    writer = threading.Thread(
        target=memory_backend.batch_put, args=(_pausing_pairs(pairs, yielded, proceed),)
    )
    writer.start()
    assert yielded.wait(timeout=5)

    # the first pair has been handed over but nothing is visible yet
    assert not memory_backend.exists(b"leaf-0")
    assert len(memory_backend) == 0

    proceed.set()
    writer.join(timeout=5)
    assert not writer.is_alive()
    assert LeafStore(memory_backend).load_leaves(len(LEAVES)) == LEAVES


def test_memory_batch_failure_writes_nothing(memory_backend):
    def broken():
        yield b"leaf-0", b"a"
        raise RuntimeError("source failed")

    with pytest.raises(RuntimeError):
        memory_backend.batch_put(broken())
    assert not memory_backend.exists(b"leaf-0")

import sys
from pathlib import Path

import pytest

PROJECT_ROOT = Path(__file__).resolve().parents[1]
if str(PROJECT_ROOT) not in sys.path:
    sys.path.insert(0, str(PROJECT_ROOT))

from hashtree.leaf_store import LeafStore  # noqa: E402  (import after sys.path tweak)
from hashtree.mapped_file import MappedFileGuard  # noqa: E402
from hashtree.storage import MemoryKeyValueStore, open_rocksdb  # noqa: E402


@pytest.fixture
def memory_backend():
    return MemoryKeyValueStore()


@pytest.fixture
def leaf_store(memory_backend):
    return LeafStore(memory_backend)


@pytest.fixture
def rocks_backend(tmp_path):
    """Fresh RocksDB directory per test; closed afterwards."""
    backend = open_rocksdb(tmp_path / "leaves")
    yield backend
    backend.close()


@pytest.fixture
def guard():
    return MappedFileGuard(limit_gib=1)


@pytest.fixture
def sample_file(tmp_path):
    path = tmp_path / "blocks.bin"
    path.write_bytes(bytes(range(256)) * 40 + b"tail")
    return path

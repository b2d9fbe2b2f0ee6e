from pathlib import Path

import pytest

from hashtree.config import DEFAULT_LEAF_SIZE, GIB, load_settings
from hashtree.errors import InvalidConfiguration
from hashtree.mapped_file import MappedFileGuard


def test_defaults_from_empty_environment():
    settings = load_settings({})
    assert settings.mmap_limit_gib == 1
    assert settings.mmap_limit_bytes == GIB
    assert settings.leaf_size == DEFAULT_LEAF_SIZE
    assert settings.batch_writes is True


def test_environment_values_are_parsed():
    settings = load_settings(
        {
            "HASHTREE_DATA_PATH": "/srv/tree",
            "HASHTREE_MMAP_LIMIT_GIB": "4",
            "HASHTREE_LEAF_SIZE": "4096",
            "HASHTREE_BATCH_WRITES": "off",
        }
    )
    assert settings.db_path == Path("/srv/tree/leaves")
    assert settings.root_path == Path("/srv/tree/root.hash")
    assert settings.mmap_limit_gib == 4
    assert settings.leaf_size == 4096
    assert settings.batch_writes is False
    assert MappedFileGuard.from_settings(settings).limit_gib == 4


def test_overrides_win_and_none_is_ignored():
    settings = load_settings({"HASHTREE_LEAF_SIZE": "10"}, leaf_size=None, mmap_limit_gib=3)
    assert settings.leaf_size == 10
    assert settings.mmap_limit_gib == 3


@pytest.mark.parametrize(
    "env",
    [
        {"HASHTREE_MMAP_LIMIT_GIB": "0"},
        {"HASHTREE_MMAP_LIMIT_GIB": "-1"},
        {"HASHTREE_LEAF_SIZE": "0"},
        {"HASHTREE_BATCH_WRITES": "maybe"},
    ],
)
def test_invalid_values_raise(env):
    with pytest.raises(InvalidConfiguration):
        load_settings(env)

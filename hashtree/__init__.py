"""Hash-tree commitments over ordered leaf blocks with content-addressed storage."""

from __future__ import annotations

from importlib import import_module
from typing import TYPE_CHECKING, Any

from .errors import (
    CorruptArtifactError,
    EmptyInputError,
    HashTreeError,
    HashTreeIOError,
    InvalidConfiguration,
    NotFoundError,
    RegionClosedError,
    SizeLimitExceeded,
)

__version__ = "0.3.0"

_SUBMODULES = {
    "artifact",
    "config",
    "digest",
    "ingest",
    "leaf_store",
    "mapped_file",
    "metrics",
    "storage",
    "tree",
}

__all__ = [
    "CorruptArtifactError",
    "EmptyInputError",
    "HashTreeError",
    "HashTreeIOError",
    "InvalidConfiguration",
    "NotFoundError",
    "RegionClosedError",
    "SizeLimitExceeded",
    *sorted(_SUBMODULES),
]

if TYPE_CHECKING:  # pragma: no cover - for static analyzers only
    from . import artifact, config, digest, ingest, leaf_store, mapped_file, metrics, storage, tree


def __getattr__(name: str) -> Any:
    """Dynamically import submodules on first access."""

    if name in _SUBMODULES:
        module = import_module(f".{name}", __name__)
        globals()[name] = module
        return module
    raise AttributeError(f"module {__name__!r} has no attribute {name!r}")

"""Environment-driven settings for stores, ingestion and file mapping."""

from __future__ import annotations

import os
from pathlib import Path
from typing import Mapping, Optional

from pydantic import BaseModel, ConfigDict, Field, ValidationError, field_validator

from .errors import InvalidConfiguration

GIB = 1024 ** 3
DEFAULT_MMAP_LIMIT_GIB = 1
DEFAULT_LEAF_SIZE = 1024 * 1024

DATA_ROOT = Path(os.getenv("HASHTREE_DATA_PATH", "./data"))
LEAF_DB = Path(os.getenv("HASHTREE_DB_PATH", str(DATA_ROOT / "leaves")))
ROOT_ARTIFACT = Path(os.getenv("HASHTREE_ROOT_PATH", str(DATA_ROOT / "root.hash")))

_TRUTHY = {"1", "true", "yes", "on"}
_FALSY = {"0", "false", "no", "off"}


class HashTreeSettings(BaseModel):
    """Validated runtime configuration."""

    model_config = ConfigDict(extra="forbid", frozen=True)

    data_path: Path = DATA_ROOT
    db_path: Path = LEAF_DB
    root_path: Path = ROOT_ARTIFACT
    mmap_limit_gib: int = Field(default=DEFAULT_MMAP_LIMIT_GIB, gt=0)
    leaf_size: int = Field(default=DEFAULT_LEAF_SIZE, gt=0)
    batch_writes: bool = True

    @field_validator("batch_writes", mode="before")
    @classmethod
    def _parse_flag(cls, value: object) -> object:
        if isinstance(value, str):
            lowered = value.strip().lower()
            if lowered in _TRUTHY:
                return True
            if lowered in _FALSY:
                return False
            raise ValueError(f"not a boolean flag: {value!r}")
        return value

    @property
    def mmap_limit_bytes(self) -> int:
        return self.mmap_limit_gib * GIB


def load_settings(environ: Optional[Mapping[str, str]] = None, **overrides: object) -> HashTreeSettings:
    """Build settings from ``HASHTREE_*`` variables, then apply ``overrides``.

    Raises :class:`InvalidConfiguration` if any value fails validation.
    """

    env = os.environ if environ is None else environ
    data_path = Path(env.get("HASHTREE_DATA_PATH", str(DATA_ROOT)))
    payload: dict[str, object] = {
        "data_path": data_path,
        "db_path": env.get("HASHTREE_DB_PATH", str(data_path / "leaves")),
        "root_path": env.get("HASHTREE_ROOT_PATH", str(data_path / "root.hash")),
        "mmap_limit_gib": env.get("HASHTREE_MMAP_LIMIT_GIB", DEFAULT_MMAP_LIMIT_GIB),
        "leaf_size": env.get("HASHTREE_LEAF_SIZE", DEFAULT_LEAF_SIZE),
        "batch_writes": env.get("HASHTREE_BATCH_WRITES", True),
    }
    payload.update({key: value for key, value in overrides.items() if value is not None})
    try:
        return HashTreeSettings(**payload)
    except ValidationError as exc:
        raise InvalidConfiguration(str(exc)) from exc


__all__ = [
    "DATA_ROOT",
    "DEFAULT_LEAF_SIZE",
    "DEFAULT_MMAP_LIMIT_GIB",
    "GIB",
    "HashTreeSettings",
    "LEAF_DB",
    "ROOT_ARTIFACT",
    "load_settings",
]

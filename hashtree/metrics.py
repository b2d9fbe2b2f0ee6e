"""Prometheus metrics for leaf persistence and file mapping."""
from __future__ import annotations

from prometheus_client import Counter, Gauge

LEAVES_WRITTEN = Counter(
    "hashtree_leaves_written_total",
    "Leaves persisted under positional keys",
    ("mode",),
)

LEAVES_PRUNED = Counter(
    "hashtree_leaves_pruned_total",
    "Positional leaf keys deleted by pruning (absent keys included)",
)

SIGNATURE_CHECKS = Counter(
    "hashtree_signature_checks_total",
    "Signature existence checks by outcome",
    ("outcome",),
)

LEAF_FETCHES = Counter(
    "hashtree_leaf_fetches_total",
    "Single-key leaf lookups by outcome",
    ("outcome",),
)

SIGNATURES_SAVED = Counter(
    "hashtree_signatures_saved_total",
    "Signatures written under content-derived keys",
)

MAPPED_BYTES = Gauge(
    "hashtree_mapped_bytes",
    "Bytes currently mapped into the process by the file guard.",
)

MAP_REJECTIONS = Counter(
    "hashtree_map_rejections_total",
    "File mappings refused before mapping",
    ("reason",),
)


def record_leaves_written(count: int, *, batched: bool) -> None:
    """Record ``count`` leaves persisted through the batch or single-put path."""
    LEAVES_WRITTEN.labels(mode="batch" if batched else "put").inc(count)


def record_signature_check(found: bool) -> None:
    SIGNATURE_CHECKS.labels(outcome="hit" if found else "miss").inc()


def record_leaf_fetch(found: bool) -> None:
    LEAF_FETCHES.labels(outcome="hit" if found else "miss").inc()


def record_signature_saved() -> None:
    SIGNATURES_SAVED.inc()


def record_pruned(count: int) -> None:
    LEAVES_PRUNED.inc(count)


def record_mapped(size: int) -> None:
    MAPPED_BYTES.inc(size)


def record_unmapped(size: int) -> None:
    MAPPED_BYTES.dec(size)


def record_map_rejected(reason: str) -> None:
    """Count a refused mapping (``size_limit`` or ``io``)."""
    MAP_REJECTIONS.labels(reason=reason).inc()


__all__ = [
    "record_leaf_fetch",
    "record_leaves_written",
    "record_map_rejected",
    "record_mapped",
    "record_pruned",
    "record_signature_check",
    "record_signature_saved",
    "record_unmapped",
]

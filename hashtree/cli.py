"""Command line entry point: commit files, inspect roots, verify and prune stores."""

from __future__ import annotations

import argparse
import logging
import secrets
import sys
from pathlib import Path
from typing import Callable, Dict, List

from .artifact import load_root_checked, save_root
from .config import HashTreeSettings, load_settings
from .errors import HashTreeError
from .ingest import commit_file, verify_store
from .leaf_store import LeafStore
from .mapped_file import MappedFileGuard
from .storage import open_rocksdb
from .tree import build_tree


def random_leaves(count: int, size: int) -> List[bytes]:
    """Generate ``count`` random leaves of ``size`` bytes each."""

    if count <= 0 or size <= 0:
        raise ValueError("count and size must be positive")
    return [secrets.token_bytes(size) for _ in range(count)]


def _open_leaf_store(path: Path, settings: HashTreeSettings, *, create: bool = True) -> LeafStore:
    backend = open_rocksdb(path, create_if_missing=create)
    return LeafStore(backend, batch_writes=settings.batch_writes)


def _cmd_commit(args: argparse.Namespace, settings: HashTreeSettings) -> int:
    guard = MappedFileGuard.from_settings(settings)
    store = _open_leaf_store(args.db, settings) if args.db else None
    try:
        result = commit_file(
            args.file,
            guard=guard,
            leaf_size=settings.leaf_size,
            store=store,
            root_path=args.root_out,
        )
    finally:
        if store is not None:
            store.backend.close()
    print(f"Root Hash: {result.root_hex}")
    print(f"Leaves: {result.leaf_count} ({result.size} bytes)")
    return 0


def _cmd_random(args: argparse.Namespace, settings: HashTreeSettings) -> int:
    leaves = random_leaves(args.count, args.size)
    root = build_tree(leaves)
    if args.db:
        store = _open_leaf_store(args.db, settings)
        try:
            store.store_leaves(leaves)
        finally:
            store.backend.close()
    if args.root_out:
        save_root(root, args.root_out)
    print(f"Root Hash: {root.hex}")
    return 0


def _cmd_show_root(args: argparse.Namespace, settings: HashTreeSettings) -> int:
    print(f"Root Hash: {load_root_checked(args.path).hex()}")
    return 0


def _cmd_verify(args: argparse.Namespace, settings: HashTreeSettings) -> int:
    expected = load_root_checked(args.root)
    store = _open_leaf_store(args.db, settings, create=False)
    try:
        ok = verify_store(store, args.count, expected)
    finally:
        store.backend.close()
    if not ok:
        print(f"[FAIL] stored leaves do not match root {expected.hex()}", file=sys.stderr)
        return 1
    print(f"[OK] {args.count} leaves match root {expected.hex()}")
    return 0


def _cmd_fetch(args: argparse.Namespace, settings: HashTreeSettings) -> int:
    store = _open_leaf_store(args.db, settings, create=False)
    try:
        value = store.fetch_leaf(args.key)
    finally:
        store.backend.close()
    print(value.hex())
    return 0


def _cmd_prune(args: argparse.Namespace, settings: HashTreeSettings) -> int:
    store = _open_leaf_store(args.db, settings, create=False)
    try:
        store.prune_leaves(args.count)
    finally:
        store.backend.close()
    print(f"[OK] pruned leaf-0 .. leaf-{args.count - 1}")
    return 0


_COMMANDS: Dict[str, Callable[[argparse.Namespace, HashTreeSettings], int]] = {
    "commit": _cmd_commit,
    "random": _cmd_random,
    "show-root": _cmd_show_root,
    "verify": _cmd_verify,
    "fetch": _cmd_fetch,
    "prune": _cmd_prune,
}


def _parse_args(argv: list[str] | None = None) -> argparse.Namespace:
    parser = argparse.ArgumentParser(
        prog="hashtree",
        description="Commit ordered data blocks to a hash-tree root and manage stored leaves.",
    )
    parser.add_argument("-v", "--verbose", action="store_true", help="Enable debug logging")
    sub = parser.add_subparsers(dest="command", required=True)

    commit = sub.add_parser("commit", help="Map a file, split it into leaves and print the root")
    commit.add_argument("file", type=Path, help="File to commit")
    commit.add_argument("--leaf-size", type=int, default=None, help="Leaf size in bytes")
    commit.add_argument("--limit-gib", type=int, default=None, help="Mapping ceiling in GiB")
    commit.add_argument("--db", type=Path, default=None, help="RocksDB directory to persist leaves in")
    commit.add_argument("--root-out", type=Path, default=None, help="Write the raw root digest here")

    rand = sub.add_parser("random", help="Commit randomly generated leaves")
    rand.add_argument("--count", type=int, required=True, help="Number of leaves")
    rand.add_argument("--size", type=int, required=True, help="Bytes per leaf")
    rand.add_argument("--db", type=Path, default=None, help="RocksDB directory to persist leaves in")
    rand.add_argument("--root-out", type=Path, default=None, help="Write the raw root digest here")

    show = sub.add_parser("show-root", help="Print a stored root digest as hex")
    show.add_argument("path", type=Path, help="Root artifact file")

    verify = sub.add_parser("verify", help="Rebuild the tree from stored leaves and compare roots")
    verify.add_argument("--db", type=Path, required=True, help="RocksDB directory")
    verify.add_argument("--count", type=int, required=True, help="Number of stored leaves")
    verify.add_argument("--root", type=Path, required=True, help="Root artifact file")

    fetch = sub.add_parser("fetch", help="Print a stored value as hex")
    fetch.add_argument("--db", type=Path, required=True, help="RocksDB directory")
    fetch.add_argument("key", help="Key such as leaf-0")

    prune = sub.add_parser("prune", help="Delete positional leaf keys")
    prune.add_argument("--db", type=Path, required=True, help="RocksDB directory")
    prune.add_argument("--count", type=int, required=True, help="Number of leading leaves to delete")

    return parser.parse_args(argv)


def main(argv: list[str] | None = None) -> int:
    args = _parse_args(argv)
    logging.basicConfig(
        level=logging.DEBUG if args.verbose else logging.WARNING,
        format="%(asctime)s %(levelname)s %(name)s: %(message)s",
    )
    try:
        settings = load_settings(
            leaf_size=getattr(args, "leaf_size", None),
            mmap_limit_gib=getattr(args, "limit_gib", None),
        )
        return _COMMANDS[args.command](args, settings)
    except (HashTreeError, ValueError) as exc:
        print(f"[ERROR] {exc}", file=sys.stderr)
        return 1


if __name__ == "__main__":  # pragma: no cover - CLI entrypoint
    raise SystemExit(main())

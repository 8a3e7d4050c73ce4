"""Entry point: python -m nomadish <command>

- list:    Show cached memories (no network)
- refresh: Pull the server's collection into the cache
- add:     Create a memory (kept locally if the server is down)
- remove:  Delete a memory by id
- retry:   Push memories that never reached the server
- reset:   Delete the local cache
"""

from __future__ import annotations

import argparse
import asyncio
import logging
import sys
from pathlib import Path

from nomadish.config import NomadishConfig, load_config
from nomadish.core import SyncCoordinator
from nomadish.errors import NomadishError
from nomadish.memory.models import Coordinate, FoodMemory
from nomadish.memory.store import MemoryCache
from nomadish.remote.http import HTTPRemoteClient


def _setup_logging(level: str) -> None:
    logging.basicConfig(
        level=getattr(logging, level.upper(), logging.INFO),
        format="%(asctime)s [%(levelname)s] %(name)s: %(message)s",
        datefmt="%H:%M:%S",
    )


def build_coordinator(config: NomadishConfig) -> SyncCoordinator:
    store = MemoryCache(config.cache.path)
    remote = HTTPRemoteClient(config.remote.base_url, timeout=config.remote.timeout)
    return SyncCoordinator(store, remote, notifier=_notify)


def _notify(operation: str, error: Exception) -> None:
    print(f"! {operation} failed: {error}", file=sys.stderr)


def _print_records(coordinator: SyncCoordinator) -> None:
    if not coordinator.records:
        print("(no memories yet)")
        return
    for m in coordinator.records:
        flag = " [not synced]" if m.is_pending else ""
        print(
            f"{m.id}  {m.date_added:%Y-%m-%d}  {'★' * m.rating:<5}  {m.name}"
            f"  ({m.coordinate.latitude:.4f}, {m.coordinate.longitude:.4f}){flag}"
        )


def _build_parser() -> argparse.ArgumentParser:
    parser = argparse.ArgumentParser(prog="nomadish", description="Food memory sync client")
    sub = parser.add_subparsers(dest="command")

    sub.add_parser("list", help="Show cached memories")
    sub.add_parser("refresh", help="Fetch all memories from the server")
    sub.add_parser("retry", help="Push memories that failed to upload")
    sub.add_parser("reset", help="Delete the local cache")

    add = sub.add_parser("add", help="Add a memory")
    add.add_argument("name")
    add.add_argument("--lat", type=float, required=True)
    add.add_argument("--lon", type=float, required=True)
    add.add_argument("--rating", type=int, default=3)
    add.add_argument("--notes", default="")
    add.add_argument("--photo", type=Path)

    remove = sub.add_parser("remove", help="Delete a memory by id")
    remove.add_argument("id")
    return parser


async def _run(args: argparse.Namespace, coordinator: SyncCoordinator) -> int:
    if args.command == "reset":
        coordinator.store.clear()
        print("Local cache removed")
        return 0

    coordinator.initialize()
    try:
        if args.command == "list":
            _print_records(coordinator)
            return 0

        if args.command == "refresh":
            ok = await coordinator.refresh()
            _print_records(coordinator)
            return 0 if ok else 1

        if args.command == "retry":
            pushed = await coordinator.retry_pending()
            print(f"Pushed {pushed} memories")
            return 0

        if args.command == "add":
            memory = FoodMemory(
                name=args.name,
                coordinate=Coordinate(latitude=args.lat, longitude=args.lon),
                notes=args.notes,
                rating=args.rating,
            )
            photo = args.photo.read_bytes() if args.photo else None
            saved = await coordinator.add(memory, photo)
            print(f"Added {saved.id}" + (" (saved locally, not synced)" if saved.is_pending else ""))
            return 0

        if args.command == "remove":
            match = next((m for m in coordinator.records if m.id == args.id), None)
            if match is None:
                print(f"No memory with id {args.id}", file=sys.stderr)
                return 1
            return 0 if await coordinator.remove(match) else 1
    finally:
        await coordinator.close()
    return 1


def main(argv: list[str] | None = None) -> None:
    parser = _build_parser()
    args = parser.parse_args(argv)
    if not args.command:
        parser.print_help()
        sys.exit(1)

    config = load_config()
    _setup_logging(config.log_level)

    try:
        code = asyncio.run(_run(args, build_coordinator(config)))
    except (ValueError, OSError, NomadishError) as e:
        print(f"Error: {e}", file=sys.stderr)
        code = 1
    sys.exit(code)


if __name__ == "__main__":
    main()

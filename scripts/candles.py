#!/usr/bin/env python3
"""Command-line access to a shared candle list.

Configuration comes from the environment (see ``SyncConfig.from_env``):
- CANDLESYNC_DOCUMENT_ID (required)
- CANDLESYNC_TOKEN (needed for add/rename/move/remove)

Examples::

    python scripts/candles.py list
    python scripts/candles.py add 120 80 --name "Ada"
    python scripts/candles.py rename 3 "Grace"
    python scripts/candles.py watch --interval 2
"""

from __future__ import annotations

import argparse
import asyncio
import json
import logging
import sys
from pathlib import Path

_repo = Path(__file__).resolve().parent.parent
_src = _repo / "src"
if _src.is_dir():
    sys.path.insert(0, str(_src))

from candlesync import (  # noqa: E402
    CandleSyncError,
    Item,
    MutationResult,
    RemoteStoreClient,
    SyncConfig,
    SyncEngine,
)


def _print_items(items: tuple[Item, ...]) -> None:
    if not items:
        print("(no candles)")
        return
    for item in items:
        label = item.name or "<unnamed>"
        print(f"{item.id:>4}  ({item.x:g}, {item.y:g})  {label}")


def _print_result(result: MutationResult, *, as_json: bool) -> int:
    if as_json:
        print(json.dumps(result.model_dump(mode="json"), indent=2))
    elif result.success:
        detail = f" id={result.item.id}" if result.item is not None else ""
        print(f"{result.kind} ok{detail}")
    else:
        state = "stale local state" if result.stale else "rolled back"
        print(f"{result.kind} failed ({state}): {result.error}", file=sys.stderr)
    return 0 if result.success else 1


def _build_parser() -> argparse.ArgumentParser:
    parser = argparse.ArgumentParser(description="Inspect and edit a shared candle list.")
    parser.add_argument("-v", "--verbose", action="store_true", help="Enable debug logging")
    parser.add_argument("--json", action="store_true", help="Print machine-readable output")
    sub = parser.add_subparsers(dest="command", required=True)

    sub.add_parser("list", help="Print the current candles")

    add = sub.add_parser("add", help="Light a new candle")
    add.add_argument("x", type=float)
    add.add_argument("y", type=float)
    add.add_argument("--name", default="")

    rename = sub.add_parser("rename", help="Change a candle's name")
    rename.add_argument("id", type=int)
    rename.add_argument("name")

    move = sub.add_parser("move", help="Move a candle")
    move.add_argument("id", type=int)
    move.add_argument("x", type=float)
    move.add_argument("y", type=float)

    remove = sub.add_parser("remove", help="Remove a candle")
    remove.add_argument("id", type=int)

    watch = sub.add_parser("watch", help="Print the list whenever it changes remotely")
    watch.add_argument("--interval", type=float, default=None, help="Seconds between polls")
    return parser


async def _watch(engine: SyncEngine, interval: float | None) -> None:
    stop = asyncio.Event()

    def on_change(items: tuple[Item, ...], revision: str | None) -> None:
        print(f"--- revision {revision}")
        _print_items(items)

    handle = engine.start_polling(on_change, interval)
    try:
        await stop.wait()
    finally:
        engine.stop_polling(handle)


async def _run(args: argparse.Namespace) -> int:
    config = SyncConfig.from_env()

    def on_warning(message: str) -> None:
        print(f"warning: {message}", file=sys.stderr)

    async with RemoteStoreClient(config) as remote, SyncEngine(remote, on_warning=on_warning) as engine:
        if args.command == "list":
            items = engine.get_snapshot()
            if args.json:
                print(json.dumps([item.to_wire() for item in items], indent=2))
            else:
                _print_items(items)
            return 0
        if args.command == "watch":
            _print_items(engine.get_snapshot())
            await _watch(engine, args.interval)
            return 0

        if not engine.is_configured:
            print("CANDLESYNC_TOKEN is not set; the list is read-only", file=sys.stderr)
            return 2

        if args.command == "add":
            result = await engine.add(args.x, args.y, name=args.name)
        elif args.command == "rename":
            result = await engine.rename(args.id, args.name)
        elif args.command == "move":
            result = await engine.move(args.id, args.x, args.y)
        else:
            result = await engine.remove(args.id)
        return _print_result(result, as_json=args.json)


def main(argv: list[str] | None = None) -> int:
    args = _build_parser().parse_args(argv)
    logging.basicConfig(
        level=logging.DEBUG if args.verbose else logging.WARNING,
        format="%(asctime)s %(levelname)s %(name)s: %(message)s",
    )
    try:
        return asyncio.run(_run(args))
    except CandleSyncError as exc:
        print(f"error: {exc}", file=sys.stderr)
        return 1
    except KeyboardInterrupt:
        return 130


if __name__ == "__main__":
    raise SystemExit(main())

"""CLI for listing, relocating and removing items of a collection."""

from __future__ import annotations

import argparse

from panelmap.cli.common import add_db_path_argument, run_command
from panelmap.service import InventoryService


def _build_parser() -> argparse.ArgumentParser:
    parser = argparse.ArgumentParser(description="Inspect and correct items of a collection")
    add_db_path_argument(parser)
    commands = parser.add_subparsers(dest="command", required=True)

    listing = commands.add_parser("list", help="List items in import order")
    listing.add_argument("--collection-id", type=int, required=True)
    listing.add_argument("--placed", action="store_true", help="Only placed items")
    listing.add_argument("--unplaced", action="store_true", help="Only unplaced items")

    relocate = commands.add_parser("relocate", help="Correct the location of a placed item")
    relocate.add_argument("--collection-id", type=int, required=True)
    relocate.add_argument("--serial", required=True)
    relocate.add_argument("--section", required=True)
    relocate.add_argument("--row", type=int, required=True)
    relocate.add_argument("--column", type=int, default=None)

    remove = commands.add_parser("remove", help="Delete an item")
    remove.add_argument("--collection-id", type=int, required=True)
    remove.add_argument("--serial", required=True)
    return parser


def _run(service: InventoryService, args: argparse.Namespace) -> dict[str, object]:
    if args.command == "list":
        items = service.list_items(args.collection_id)
        if args.placed:
            items = [item for item in items if item.is_placed]
        if args.unplaced:
            items = [item for item in items if not item.is_placed]
        return {"ok": True, "count": len(items), "items": [item.to_dict() for item in items]}
    if args.command == "relocate":
        item = service.relocate(args.collection_id, args.serial, args.section, args.row, args.column)
        return {"ok": True, "item": item.to_dict()}
    if args.command == "remove":
        service.remove_item(args.collection_id, args.serial)
        return {"ok": True, "removed": args.serial.strip()}
    raise ValueError(f"Unsupported command: {args.command}")


def main(argv: list[str] | None = None) -> int:
    args = _build_parser().parse_args(argv)
    return run_command(args.db_path, lambda service: _run(service, args))


if __name__ == "__main__":
    raise SystemExit(main())

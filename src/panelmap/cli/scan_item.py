"""CLI entrypoint for recording one scan at a grid location."""

from __future__ import annotations

import argparse
import json

from panelmap.cli.common import add_db_path_argument, read_json_file, run_command
from panelmap.errors import ValidationError
from panelmap.mapping.message import parse_tag_message
from panelmap.service import InventoryService


def _run(service: InventoryService, args: argparse.Namespace) -> dict[str, object]:
    if args.tag is not None:
        try:
            message = parse_tag_message(read_json_file(args.tag))
        except (OSError, UnicodeDecodeError, json.JSONDecodeError) as exc:
            raise ValidationError("tag", f"Cannot read tag file {args.tag}: {exc}") from exc
        item = service.scan_tag(args.collection_id, message, args.section, args.row, args.column)
    else:
        item = service.scan(args.collection_id, args.serial, args.section, args.row, args.column)

    next_column = item.column + 1 if item.column is not None else None
    return {"ok": True, "item": item.to_dict(), "next_column": next_column}


def main(argv: list[str] | None = None) -> int:
    parser = argparse.ArgumentParser(description="Place an item by serial or by tag message")
    add_db_path_argument(parser)
    parser.add_argument("--collection-id", type=int, required=True)
    source = parser.add_mutually_exclusive_group(required=True)
    source.add_argument("--serial", help="Serial identifier typed or read by a barcode scanner")
    source.add_argument("--tag", help="JSON file holding the tag message records")
    parser.add_argument("--section", required=True)
    parser.add_argument("--row", type=int, required=True)
    parser.add_argument("--column", type=int, default=None, help="Omit for a row-only placement")
    args = parser.parse_args(argv)
    return run_command(args.db_path, lambda service: _run(service, args))


if __name__ == "__main__":
    raise SystemExit(main())

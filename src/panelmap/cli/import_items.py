"""CLI entrypoint for merging a bulk item batch into a collection."""

from __future__ import annotations

import argparse
import json

from panelmap.cli.common import add_db_path_argument, read_json_file, run_command
from panelmap.errors import ValidationError
from panelmap.imports.reconciler import coerce_records
from panelmap.service import InventoryService


def _load_rows(path: str) -> list[dict]:
    try:
        data = read_json_file(path)
    except (OSError, UnicodeDecodeError, json.JSONDecodeError) as exc:
        raise ValidationError("records", f"Cannot read records file {path}: {exc}") from exc

    if isinstance(data, dict):
        data = data.get("records")
    if not isinstance(data, list) or not all(isinstance(row, dict) for row in data):
        raise ValidationError("records", "Records file must hold a list of objects")
    return data


def _run(service: InventoryService, args: argparse.Namespace) -> dict[str, object]:
    records = coerce_records(_load_rows(args.records))
    stats = service.import_batch(args.collection_id, records)
    return {"ok": True, "collection_id": args.collection_id, **stats.to_dict()}


def main(argv: list[str] | None = None) -> int:
    parser = argparse.ArgumentParser(description="Import package/serial records, skipping known serials")
    add_db_path_argument(parser)
    parser.add_argument("--collection-id", type=int, required=True)
    parser.add_argument(
        "--records",
        required=True,
        help="JSON file with a list of {package_id, serial} objects (pallet_no/serial_code also accepted)",
    )
    args = parser.parse_args(argv)
    return run_command(args.db_path, lambda service: _run(service, args))


if __name__ == "__main__":
    raise SystemExit(main())

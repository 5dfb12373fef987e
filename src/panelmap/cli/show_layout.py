"""CLI entrypoint printing the section grids of a collection."""

from __future__ import annotations

import argparse

from panelmap.cli.common import add_db_path_argument, run_command
from panelmap.service import InventoryService


def _run(service: InventoryService, args: argparse.Namespace) -> dict[str, object]:
    layout = service.project_layout(args.collection_id)
    summary = service.summarize(args.collection_id)
    sections = [grid.to_dict() for grid in layout.values()]
    if args.section is not None:
        sections = [grid for grid in sections if grid["section"] == args.section]
    return {
        "ok": True,
        "collection_id": args.collection_id,
        "summary": summary.to_dict(),
        "sections": sections,
    }


def main(argv: list[str] | None = None) -> int:
    parser = argparse.ArgumentParser(description="Project placed items onto per-section grids")
    add_db_path_argument(parser)
    parser.add_argument("--collection-id", type=int, required=True)
    parser.add_argument("--section", default=None, help="Only print this section")
    args = parser.parse_args(argv)
    return run_command(args.db_path, lambda service: _run(service, args))


if __name__ == "__main__":
    raise SystemExit(main())

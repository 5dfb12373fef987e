"""CLI for creating, listing, updating and deleting collections."""

from __future__ import annotations

import argparse

from panelmap.cli.common import add_db_path_argument, run_command
from panelmap.service import InventoryService


def _build_parser() -> argparse.ArgumentParser:
    parser = argparse.ArgumentParser(description="Manage inventory collections")
    add_db_path_argument(parser)
    commands = parser.add_subparsers(dest="command", required=True)

    create = commands.add_parser("create", help="Create a collection")
    create.add_argument("--name", required=True)
    create.add_argument("--description", default=None)
    create.add_argument("--image-ref", default=None, help="Opaque reference to an externally stored image")

    commands.add_parser("list", help="List collections, newest first")

    show = commands.add_parser("show", help="Show one collection with placement progress")
    show.add_argument("--collection-id", type=int, required=True)

    update = commands.add_parser("update", help="Replace a collection's name, description and image")
    update.add_argument("--collection-id", type=int, required=True)
    update.add_argument("--name", required=True)
    update.add_argument("--description", default=None)
    update.add_argument("--image-ref", default=None)

    delete = commands.add_parser("delete", help="Delete a collection with all its items and rules")
    delete.add_argument("--collection-id", type=int, required=True)
    return parser


def _run(service: InventoryService, args: argparse.Namespace) -> dict[str, object]:
    if args.command == "create":
        collection = service.create_collection(args.name, args.description, args.image_ref)
        return {"ok": True, "collection": collection.to_dict()}
    if args.command == "list":
        return {"ok": True, "collections": [c.to_dict() for c in service.list_collections()]}
    if args.command == "show":
        collection = service.get_collection(args.collection_id)
        summary = service.summarize(args.collection_id)
        return {"ok": True, "collection": collection.to_dict(), "summary": summary.to_dict()}
    if args.command == "update":
        collection = service.update_collection(
            args.collection_id,
            args.name,
            args.description,
            args.image_ref,
        )
        return {"ok": True, "collection": collection.to_dict()}
    if args.command == "delete":
        service.delete_collection(args.collection_id)
        return {"ok": True, "deleted": args.collection_id}
    raise ValueError(f"Unsupported command: {args.command}")


def main(argv: list[str] | None = None) -> int:
    args = _build_parser().parse_args(argv)
    return run_command(args.db_path, lambda service: _run(service, args))


if __name__ == "__main__":
    raise SystemExit(main())

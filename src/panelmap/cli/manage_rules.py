"""CLI for managing a collection's tag mapping rules."""

from __future__ import annotations

import argparse

from panelmap.cli.common import add_db_path_argument, run_command
from panelmap.service import InventoryService


def _build_parser() -> argparse.ArgumentParser:
    parser = argparse.ArgumentParser(description="Manage tag mapping rules (resolution follows creation order)")
    add_db_path_argument(parser)
    commands = parser.add_subparsers(dest="command", required=True)

    add = commands.add_parser("add", help="Append a rule to a collection")
    add.add_argument("--collection-id", type=int, required=True)
    add.add_argument("--record-type", required=True, help="Tag record type, e.g. text, url, mime")
    add.add_argument("--field-path", required=True, help="Key (or dotted path) inside a JSON payload")
    add.add_argument("--description", default=None)

    listing = commands.add_parser("list", help="List rules in resolution order")
    listing.add_argument("--collection-id", type=int, required=True)

    update = commands.add_parser("update", help="Edit a rule")
    update.add_argument("--rule-id", type=int, required=True)
    update.add_argument("--record-type", default=None)
    update.add_argument("--field-path", default=None)
    update.add_argument("--description", default=None, help="Omit to keep the current description")

    delete = commands.add_parser("delete", help="Delete a rule")
    delete.add_argument("--rule-id", type=int, required=True)
    return parser


def _run(service: InventoryService, args: argparse.Namespace) -> dict[str, object]:
    if args.command == "add":
        rule = service.add_rule(args.collection_id, args.record_type, args.field_path, args.description)
        return {"ok": True, "rule": rule.to_dict()}
    if args.command == "list":
        return {"ok": True, "rules": [rule.to_dict() for rule in service.list_rules(args.collection_id)]}
    if args.command == "update":
        rule = service.update_rule(args.rule_id, args.record_type, args.field_path, args.description)
        return {"ok": True, "rule": rule.to_dict()}
    if args.command == "delete":
        service.delete_rule(args.rule_id)
        return {"ok": True, "deleted": args.rule_id}
    raise ValueError(f"Unsupported command: {args.command}")


def main(argv: list[str] | None = None) -> int:
    args = _build_parser().parse_args(argv)
    return run_command(args.db_path, lambda service: _run(service, args))


if __name__ == "__main__":
    raise SystemExit(main())

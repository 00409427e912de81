from __future__ import annotations

import argparse
from pathlib import Path

from streamporter.cli.common import EXIT_INPUT, dispatch_subparser_help, print_table
from streamporter.env import load_settings
from streamporter.errors import CorruptLedger, LedgerUnavailable
from streamporter.pipeline.ledger import Ledger


def build_ledger_parser(subparsers: argparse._SubParsersAction) -> None:
    ledger = subparsers.add_parser("ledger", help="Inspect migration results")
    sub = ledger.add_subparsers(dest="ledger_cmd", required=True)

    help_p = sub.add_parser("help", help="Show help for ledger")
    help_p.add_argument("path", nargs="*", help="Subcommand path")
    help_p.set_defaults(action="help", _help_parser=ledger)

    stats_p = sub.add_parser("stats", help="Count migrated and failed videos")
    stats_p.add_argument("--results", help="Ledger file (default: migration-results.json)")
    stats_p.set_defaults(action="stats")

    list_p = sub.add_parser("list", help="List ledger entries")
    list_p.add_argument("--results", help="Ledger file (default: migration-results.json)")
    which = list_p.add_mutually_exclusive_group()
    which.add_argument("--failed", action="store_true", help="Only failed videos")
    which.add_argument("--succeeded", action="store_true", help="Only migrated videos")
    list_p.set_defaults(action="list")


def _load(results: str | None) -> Ledger:
    path = Path(results) if results else load_settings().results_file
    ledger = Ledger(path)
    ledger.load()
    return ledger


def handle_ledger(args: argparse.Namespace) -> int:
    if args.action == "help":
        return dispatch_subparser_help(
            args._help_parser, list(getattr(args, "path", []) or [])
        )

    try:
        ledger = _load(getattr(args, "results", None))
    except CorruptLedger as e:
        print(f"[corrupt ledger] {e}")
        return EXIT_INPUT
    except LedgerUnavailable as e:
        print(f"[ledger unavailable] {e}")
        return EXIT_INPUT

    if args.action == "stats":
        succeeded = len(ledger.successful_entries())
        failed = len(ledger.failed_entries())
        print(f"Ledger:    {ledger.path}")
        print(f"Migrated:  {succeeded}")
        print(f"Failed:    {failed}")
        print(f"Total:     {len(ledger)}")
        return 0

    if args.action == "list":
        if args.failed:
            entries = ledger.failed_entries()
        elif args.succeeded:
            entries = ledger.successful_entries()
        else:
            entries = ledger.entries()

        rows = [
            [
                e.external_id,
                e.name,
                e.outcome.value,
                e.remote_id if e.succeeded else e.error_message,
                e.completed_at,
            ]
            for e in entries
        ]
        print_table(["id", "name", "outcome", "uid / error", "completed"], rows)
        return 0

    raise RuntimeError(f"Unknown ledger action: {args.action}")

from __future__ import annotations

import argparse
from pathlib import Path

from streamporter.cli.common import (
    EXIT_INPUT,
    EXIT_OK,
    dispatch_subparser_help,
    find_run_log,
    list_run_logs,
    print_table,
    tail_lines,
)
from streamporter.env import logs_dir


def build_logs_parser(subparsers: argparse._SubParsersAction) -> None:
    logs = subparsers.add_parser("logs", help="Inspect run logs of migrate / captions")
    actions = logs.add_subparsers(dest="logs_cmd", required=True)

    help_p = actions.add_parser("help", help="Show help for logs")
    help_p.add_argument("path", nargs="*", help="Subcommand path (list, show)")
    help_p.set_defaults(action="help", _help_parser=logs)

    # --cmd, not --command: the top-level parser already owns dest="command".
    list_p = actions.add_parser("list", help="List runs, newest first")
    list_p.add_argument(
        "--cmd",
        dest="run_command",
        choices=["migrate", "captions"],
        help="Only runs of this command",
    )
    list_p.add_argument("--dir", help="Log root (default: ./logs)")
    list_p.set_defaults(action="list")

    show_p = actions.add_parser("show", help="Print the end of one run log")
    show_p.add_argument("name", help="Run name as shown by `logs list`")
    show_p.add_argument(
        "--cmd",
        dest="run_command",
        choices=["migrate", "captions"],
        help="Command the run belongs to",
    )
    show_p.add_argument("--dir", help="Log root (default: ./logs)")
    show_p.add_argument(
        "--tail", type=int, default=120, help="Lines from the end (0 = all)"
    )
    show_p.set_defaults(action="show")


def handle_logs(args: argparse.Namespace) -> int:
    if args.action == "help":
        return dispatch_subparser_help(args._help_parser, list(args.path or []))

    root = Path(args.dir).expanduser() if args.dir else logs_dir()

    if args.action == "list":
        rows = [
            [
                f.name,
                f.command,
                f.status,
                f.modified.strftime("%Y-%m-%d %H:%M:%S"),
                f"{f.size} bytes",
            ]
            for f in list_run_logs(root, args.run_command)
        ]
        print_table(["run", "command", "status", "modified", "size"], rows)
        return EXIT_OK

    if args.action == "show":
        log_file = find_run_log(root, args.name, args.run_command)
        if log_file is None:
            print(f"No run log named {args.name} under {root}")
            return EXIT_INPUT

        print(f"Run:    {log_file.name}")
        print(f"Path:   {log_file.path}")
        print(f"Status: {log_file.status}")
        print()
        for line in tail_lines(log_file.path, args.tail):
            print(line)
        return EXIT_OK

    raise RuntimeError(f"Unknown logs action: {args.action}")

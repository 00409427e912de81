from __future__ import annotations

import argparse

from rich.console import Console
from rich.table import Table

from streamporter.cli.common import EXIT_OK, dispatch_subparser_help
from streamporter.env import load_settings


def build_env_parser(subparsers: argparse._SubParsersAction) -> None:
    env = subparsers.add_parser("env", help="Show the configuration a run would use")
    actions = env.add_subparsers(dest="env_cmd", required=True)

    help_p = actions.add_parser("help", help="Show help for env")
    help_p.add_argument("path", nargs="*", help="Subcommand path")
    help_p.set_defaults(action="help", _help_parser=env)

    dump_p = actions.add_parser(
        "dump", help="Resolved settings from .env and the environment (token masked)"
    )
    dump_p.set_defaults(action="dump")


def render_settings(console: Console) -> None:
    table = Table(title="Runtime Settings", show_edge=False, header_style="bold")
    table.add_column("section", style="cyan")
    table.add_column("key")
    table.add_column("value", overflow="fold")

    for section, values in load_settings().as_dict().items():
        for key, value in values.items():
            table.add_row(section, key, str(value))
        table.add_section()

    console.print(table)


def handle_env(args: argparse.Namespace) -> int:
    if args.action == "help":
        return dispatch_subparser_help(args._help_parser, list(args.path or []))

    if args.action == "dump":
        render_settings(Console())
        return EXIT_OK

    raise RuntimeError(f"Unknown env action: {args.action}")

#!/usr/bin/env python3
from __future__ import annotations

import argparse
import sys
from typing import Optional, Sequence

from streamporter.bootstrap import bootstrap_base_env, bootstrap_run_context


def _dispatch_help(argv: list[str]) -> int:
    # Support:
    #   streamporter help
    #   streamporter help migrate
    #   streamporter migrate help
    argv = [a for a in argv if a != "help"]
    if not argv:
        build_parser().print_help()
        return 0

    try:
        build_parser().parse_args(argv + ["--help"])
    except SystemExit:
        pass
    return 0


def build_parser() -> argparse.ArgumentParser:
    p = argparse.ArgumentParser(
        prog="streamporter",
        description="Migrate Spotlightr videos and captions to Cloudflare Stream",
    )

    sub = p.add_subparsers(dest="command", required=True)

    help_cmd = sub.add_parser("help", help="Show help")
    help_cmd.add_argument("path", nargs="*", help="Command path to show help for")
    help_cmd.set_defaults(_help=True)

    # Keep imports inside builder to avoid early side effects.
    from streamporter.cli.cli_captions import build_captions_parser
    from streamporter.cli.cli_env import build_env_parser
    from streamporter.cli.cli_ledger import build_ledger_parser
    from streamporter.cli.cli_logs import build_logs_parser
    from streamporter.cli.cli_migrate import build_migrate_parser

    build_migrate_parser(sub)
    build_captions_parser(sub)
    build_ledger_parser(sub)
    build_env_parser(sub)
    build_logs_parser(sub)

    return p


def main(argv: Optional[Sequence[str]] = None) -> int:
    argv = list(sys.argv[1:] if argv is None else argv)

    # Load .env and stamp the run id before anything reads the environment
    bootstrap_base_env(".env")

    parser = build_parser()
    args, unknown = parser.parse_known_args(argv)

    # Unified help routing
    if getattr(args, "_help", False) or (unknown and unknown[-1] == "help"):
        return _dispatch_help(argv)
    if unknown:
        parser.error(f"unrecognized arguments: {' '.join(unknown)}")

    bootstrap_run_context(
        command=args.command,
        verbose=bool(getattr(args, "verbose", False)),
        quiet=bool(getattr(args, "quiet", False)),
    )

    # Only pipeline commands write run logs; inspection commands print.
    if args.command == "migrate":
        from streamporter.logger import init_logging
        from streamporter.cli.cli_migrate import handle_migrate

        init_logging(args.command)
        return handle_migrate(args)

    if args.command == "captions":
        from streamporter.logger import init_logging
        from streamporter.cli.cli_captions import handle_captions

        init_logging(args.command)
        return handle_captions(args)

    if args.command == "ledger":
        from streamporter.cli.cli_ledger import handle_ledger

        return handle_ledger(args)

    if args.command == "env":
        from streamporter.cli.cli_env import handle_env

        return handle_env(args)

    if args.command == "logs":
        from streamporter.cli.cli_logs import handle_logs

        return handle_logs(args)

    raise RuntimeError(f"Unknown command: {args.command}")


if __name__ == "__main__":
    raise SystemExit(main())

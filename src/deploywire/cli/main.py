from __future__ import annotations

import argparse
from typing import Sequence

from rich.markup import escape

from deploywire.cli.commands import derive_command, kinds_command, resolve_command, show_command
from deploywire.cli.ux import error
from deploywire.config.settings import get_settings
from deploywire.core.errors import DeploywireError, format_error_message, main_with_error_handling
from deploywire.logging import configure_logging


def build_parser() -> argparse.ArgumentParser:
    parser = argparse.ArgumentParser(prog="deploywire", description="Inspect deployment wiring")
    subparsers = parser.add_subparsers(dest="command")

    subparsers.add_parser("kinds", help="List the resource catalog")

    derive_parser = subparsers.add_parser("derive", help="Print the derived location of a resource")
    derive_parser.add_argument("kind", help="Resource kind name, e.g. FungibleToken")
    derive_parser.add_argument("--namespace", "-n", default=None, help="Instance namespace")

    show_parser = subparsers.add_parser("show", help="Show wired resources of an environment")
    show_parser.add_argument("--env", dest="environment", default=None, help="Environment name")
    show_parser.add_argument("--file", dest="path", default=None, help="Deployments file")

    resolve_parser = subparsers.add_parser("resolve", help="Print the recorded location of a resource")
    resolve_parser.add_argument("kind", help="Resource kind name")
    resolve_parser.add_argument("--namespace", "-n", default=None, help="Instance namespace")
    resolve_parser.add_argument("--env", dest="environment", default=None, help="Environment name")
    resolve_parser.add_argument("--file", dest="path", default=None, help="Deployments file")

    return parser


@main_with_error_handling()
def main(argv: Sequence[str] | None = None) -> int:
    parser = build_parser()
    args = parser.parse_args(argv)
    settings = get_settings()
    configure_logging(settings.log_level)

    try:
        if args.command == "kinds":
            return kinds_command()
        if args.command == "derive":
            return derive_command(args.kind, args.namespace, settings)
        if args.command == "show":
            return show_command(settings, args.environment, args.path)
        if args.command == "resolve":
            return resolve_command(args.kind, args.namespace, settings, args.environment, args.path)
    except DeploywireError as e:
        error(escape(format_error_message(e)))
        raise

    parser.print_help()
    return 1


if __name__ == "__main__":  # pragma: no cover - exercised via module entrypoint
    raise SystemExit(main())

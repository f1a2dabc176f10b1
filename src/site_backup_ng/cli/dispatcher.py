"""CLI dispatcher.

Builds the top-level parser and routes each subcommand to its handler.
"""

import argparse
import sys
from typing import Callable

from ..core.options import ChangesPolicy, Element
from .common import add_filter_args, add_verbosity_args


def create_subcommand_parser() -> argparse.ArgumentParser:
    """Create the main argument parser with subcommands."""
    parser = argparse.ArgumentParser(
        prog="site-backup-ng",
        description="Back up all hosted sites you can access",
        formatter_class=argparse.RawDescriptionHelpFormatter,
    )

    add_verbosity_args(parser)

    parser.add_argument(
        "-V",
        "--version",
        action="store_true",
        help="Show version and exit",
    )

    parser.add_argument(
        "-c",
        "--config",
        metavar="FILE",
        help="Path to configuration file",
    )

    subparsers = parser.add_subparsers(
        dest="command",
        title="commands",
        description="Available commands (use 'command --help' for details)",
    )

    # backup-all command
    backup_parser = subparsers.add_parser(
        "backup-all",
        aliases=["ba"],
        help="Back up all sites you can access",
        description=(
            "Back up every environment of every site you can access, "
            "optionally narrowed by the filters below"
        ),
    )
    # Values are validated by the command itself so the error text matches
    # across config defaults and arguments
    backup_parser.add_argument(
        "--env",
        metavar="ENV",
        help="Environment to back up (dev, test, live, multidev name or 'all')",
    )
    backup_parser.add_argument(
        "--element",
        metavar="ELEMENT",
        help=f"What to back up ({', '.join(Element.values())}); default all",
    )
    backup_parser.add_argument(
        "--changes",
        metavar="POLICY",
        help=(
            "How to handle pending filesystem changes in sftp connection mode "
            f"({', '.join(ChangesPolicy.values())}); default commit"
        ),
    )
    add_filter_args(backup_parser)
    backup_parser.add_argument(
        "--cached",
        action="store_true",
        help="Use the cached sites list instead of retrieving it anew",
    )
    backup_parser.add_argument(
        "--session",
        metavar="FILE",
        help="Path to the login session file (overrides config)",
    )
    backup_parser.add_argument(
        "--dry-run",
        action="store_true",
        help="Show what would be done without committing or backing up",
    )
    backup_parser.add_argument(
        "--continue-on-error",
        action="store_true",
        help="Keep backing up remaining sites after a failure",
    )

    # config command with subcommands
    config_parser = subparsers.add_parser(
        "config",
        help="Configuration management",
        description="Validate or initialize configuration",
    )
    config_subs = config_parser.add_subparsers(dest="config_action")

    config_subs.add_parser(
        "validate",
        help="Validate configuration file",
    )

    init_parser = config_subs.add_parser(
        "init",
        help="Generate example configuration",
    )
    init_parser.add_argument(
        "-o",
        "--output",
        metavar="FILE",
        help="Output file (default: stdout)",
    )

    return parser


def run_subcommand(args: argparse.Namespace) -> int:
    """Run the specified subcommand.

    Args:
        args: Parsed arguments

    Returns:
        Exit code
    """
    from .. import __version__

    if args.version:
        print(f"site-backup-ng {__version__}")
        return 0

    if not args.command:
        print("No command specified. Use --help for usage information.")
        return 1

    # Route to appropriate command handler
    handlers: dict[str, Callable] = {
        "backup-all": cmd_backup_all,
        "ba": cmd_backup_all,
        "config": cmd_config,
    }

    handler = handlers.get(args.command)
    if handler:
        return handler(args)
    else:
        print(f"Unknown command: {args.command}")
        return 1


def cmd_backup_all(args: argparse.Namespace) -> int:
    """Execute backup-all command."""
    from .backup_all import execute_backup_all

    return execute_backup_all(args)


def cmd_config(args: argparse.Namespace) -> int:
    """Execute config command."""
    from .config_cmd import execute_config

    return execute_config(args)


def main(argv: list[str] | None = None) -> int:
    """Main entry point for site-backup-ng CLI.

    Args:
        argv: Command line arguments (defaults to sys.argv[1:])

    Returns:
        Exit code
    """
    if argv is None:
        argv = sys.argv[1:]

    parser = create_subcommand_parser()
    args = parser.parse_args(argv)

    return run_subcommand(args)

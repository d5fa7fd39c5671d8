"""
nodepin CLI argument parser.

This module implements the command-line interface for nodepin using argparse.
"""

import argparse
import importlib
import logging
import sys
from pathlib import Path
from typing import List, Optional

from nodepin import __version__

logger = logging.getLogger(__name__)


class CLI:
    """nodepin command-line interface."""

    def __init__(self):
        """Initialize CLI with argument parser."""
        self.parser = self._create_parser()

    def _create_parser(self) -> argparse.ArgumentParser:
        """
        Create argument parser with all subcommands.

        Returns:
            Configured ArgumentParser instance
        """
        parser = argparse.ArgumentParser(
            prog="nodepin",
            description="nodepin - resolve and check project Node.js versions",
            epilog='Use "nodepin COMMAND --help" for command-specific help',
            formatter_class=argparse.RawDescriptionHelpFormatter,
        )

        # Global options
        parser.add_argument(
            "--version", action="version", version=f"nodepin {__version__}"
        )
        parser.add_argument(
            "--verbose", "-v", action="store_true", help="Enable verbose output"
        )
        parser.add_argument(
            "--quiet",
            "-q",
            action="store_true",
            help="Enable minimal output (errors only)",
        )
        parser.add_argument(
            "--config",
            type=Path,
            metavar="PATH",
            help="Path to settings file (default: ./nodepin.yaml)",
        )
        parser.add_argument(
            "--project-root",
            type=Path,
            metavar="PATH",
            default=Path.cwd(),
            help="Project root directory (default: current directory)",
        )

        subparsers = parser.add_subparsers(
            dest="command", help="Available commands", metavar="COMMAND"
        )

        self._add_managers_command(subparsers)
        self._add_resolve_command(subparsers)
        self._add_match_command(subparsers)
        self._add_status_command(subparsers)

        return parser

    def _add_managers_command(self, subparsers):
        """Add 'managers' subcommand."""
        subparsers.add_parser(
            "managers",
            help="List detected Node version managers",
            description="Detect nvm and n and report which one would be used",
        )

    def _add_resolve_command(self, subparsers):
        """Add 'resolve' subcommand."""
        subparsers.add_parser(
            "resolve",
            help="Show the Node version the project requires",
            description=(
                "Resolve the required Node version from .nvmrc, .node-version, "
                ".tool-versions and package.json"
            ),
        )

    def _add_match_command(self, subparsers):
        """Add 'match' subcommand."""
        parser = subparsers.add_parser(
            "match",
            help="Check a version against a requirement",
            description=(
                "Check whether CURRENT satisfies REQUIRED. "
                "Exits 0 on match and 1 otherwise."
            ),
        )
        parser.add_argument("current", metavar="CURRENT", help="Version, e.g. 18.17.0")
        parser.add_argument(
            "required", metavar="REQUIRED", help="Requirement, e.g. ^18.0.0 or 18"
        )

    def _add_status_command(self, subparsers):
        """Add 'status' subcommand."""
        subparsers.add_parser(
            "status",
            help="Check the active Node version against the project",
            description=(
                "Resolve the project requirement, detect the active Node version "
                "and report whether a switch is needed. Exits 1 when it is."
            ),
        )

    def parse_args(self, args: Optional[List[str]] = None):
        """
        Parse command-line arguments.

        Args:
            args: Arguments to parse (uses sys.argv if None)

        Returns:
            Parsed arguments namespace
        """
        return self.parser.parse_args(args)

    def run(self, args: Optional[List[str]] = None) -> int:
        """
        Run CLI with given arguments.

        Args:
            args: Arguments to parse (uses sys.argv if None)

        Returns:
            Exit code (0 for success, non-zero for error)
        """
        parsed_args = self.parse_args(args)

        self._configure_logging(parsed_args)

        if not parsed_args.command:
            self.parser.print_help()
            return 1

        try:
            return self._dispatch_command(parsed_args)
        except KeyboardInterrupt:
            logger.info("Operation cancelled by user")
            return 130  # Standard exit code for SIGINT
        except Exception as e:
            logger.error(f"Error: {e}")
            if parsed_args.verbose:
                import traceback

                traceback.print_exc()
            return 1

    def _configure_logging(self, args):
        """
        Configure logging based on verbose/quiet flags.

        Args:
            args: Parsed arguments with verbose/quiet flags
        """
        if args.verbose:
            level = logging.DEBUG
            format_str = "%(levelname)s [%(name)s] %(message)s"
        elif args.quiet:
            level = logging.ERROR
            format_str = "%(levelname)s: %(message)s"
        else:
            level = logging.INFO
            format_str = "%(message)s"

        logging.basicConfig(
            level=level,
            format=format_str,
            force=True,  # Reconfigure if already configured
        )

    def _dispatch_command(self, args) -> int:
        """
        Dispatch to appropriate command handler.

        Args:
            args: Parsed arguments with command field

        Returns:
            Exit code from command handler
        """
        command_map = {
            "managers": "nodepin.cli.commands.managers",
            "resolve": "nodepin.cli.commands.resolve",
            "match": "nodepin.cli.commands.match",
            "status": "nodepin.cli.commands.status",
        }

        module_name = command_map.get(args.command)
        if not module_name:
            logger.error(f"Unknown command: {args.command}")
            return 1

        try:
            module = importlib.import_module(module_name)
        except ImportError as e:
            logger.error(f"Failed to load command module: {e}")
            return 1

        if not hasattr(module, "run"):
            logger.error(f"Command module {module_name} has no run() function")
            return 1

        return module.run(args)


def main():
    """Main entry point for CLI."""
    cli = CLI()
    sys.exit(cli.run())


if __name__ == "__main__":
    main()

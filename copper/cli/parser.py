"""
copper CLI argument parser.

This module implements the command-line interface for copper using argparse.
"""

import argparse
import importlib
import logging
import sys
from pathlib import Path
from typing import List, Optional

from copper import EXE_NAME, __version__
from copper.config import load_settings
from copper.core.exceptions import ConfigurationError, CopperError, StateError
from copper.core.shell import supported_shells
from copper.runtimes import runtime_names

logger = logging.getLogger(__name__)

EXIT_OK = 0
EXIT_FAILURE = 1
EXIT_CONFIGURATION = 2
EXIT_INTERRUPTED = 130

STORE_COMMANDS = ["dir", "cache-dir", "clear-cache", "remove-cache", "delete-cache"]

# Every name argparse may report in args.command, aliases included
COMMAND_MAP = {
    "add": "copper.cli.commands.add",
    "install": "copper.cli.commands.add",
    "list-remote": "copper.cli.commands.list_remote",
    "remote": "copper.cli.commands.list_remote",
    "list-installed": "copper.cli.commands.list_installed",
    "installed": "copper.cli.commands.list_installed",
    "use": "copper.cli.commands.use",
    "remove": "copper.cli.commands.remove",
    "uninstall": "copper.cli.commands.remove",
    "delete": "copper.cli.commands.remove",
    "store": "copper.cli.commands.store",
    "shell": "copper.cli.commands.shell",
    "upgrade": "copper.cli.commands.upgrade",
    "list": "copper.cli.commands.list",
}


class CLI:
    """copper command-line interface."""

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
            prog=EXE_NAME,
            description="copper - version manager for node, zig and go",
            epilog=f'Use "{EXE_NAME} COMMAND --help" for command-specific help',
            formatter_class=argparse.RawDescriptionHelpFormatter,
        )

        # Global options
        parser.add_argument(
            "--version", action="version", version=f"{EXE_NAME} {__version__}"
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
            help="Path to settings file (default: ~/.copper/config.yaml)",
        )

        subparsers = parser.add_subparsers(
            dest="command", help="Available commands", metavar="COMMAND"
        )

        self._add_add_command(subparsers)
        self._add_list_remote_command(subparsers)
        self._add_list_installed_command(subparsers)
        self._add_use_command(subparsers)
        self._add_remove_command(subparsers)
        self._add_store_command(subparsers)
        self._add_shell_command(subparsers)
        self._add_upgrade_command(subparsers)
        self._add_list_command(subparsers)

        return parser

    @staticmethod
    def _add_runtime_argument(parser):
        parser.add_argument(
            "runtime",
            metavar="RUNTIME",
            help=f"Runtime name ({', '.join(runtime_names())})",
        )

    def _add_add_command(self, subparsers):
        """Add 'add' subcommand."""
        parser = subparsers.add_parser(
            "add",
            aliases=["install"],
            help="Install a runtime version",
            description="Install the highest available version matching VERSION",
        )
        self._add_runtime_argument(parser)
        parser.add_argument(
            "version", metavar="VERSION", help="Version: MAJOR[.MINOR[.PATCH]]"
        )

    def _add_list_remote_command(self, subparsers):
        """Add 'list-remote' subcommand."""
        parser = subparsers.add_parser(
            "list-remote",
            aliases=["remote"],
            help="List available versions",
            description="List versions available for download, newest first",
        )
        self._add_runtime_argument(parser)
        parser.add_argument(
            "version", nargs="?", metavar="VERSION", help="Only versions matching this"
        )

    def _add_list_installed_command(self, subparsers):
        """Add 'list-installed' subcommand."""
        parser = subparsers.add_parser(
            "list-installed",
            aliases=["installed"],
            help="List installed versions",
            description="List installed versions, newest first, marking the default",
        )
        self._add_runtime_argument(parser)
        parser.add_argument(
            "version", nargs="?", metavar="VERSION", help="Only versions matching this"
        )

    def _add_use_command(self, subparsers):
        """Add 'use' subcommand."""
        parser = subparsers.add_parser(
            "use",
            help="Set the default version",
            description="Make the highest installed version matching VERSION the default",
        )
        self._add_runtime_argument(parser)
        parser.add_argument(
            "version", metavar="VERSION", help="Version: MAJOR[.MINOR[.PATCH]]"
        )

    def _add_remove_command(self, subparsers):
        """Add 'remove' subcommand."""
        parser = subparsers.add_parser(
            "remove",
            aliases=["uninstall", "delete"],
            help="Remove an installed version",
            description="Remove an installed version; the default moves to the newest remaining one",
        )
        self._add_runtime_argument(parser)
        parser.add_argument(
            "version", metavar="VERSION", help="Exact installed version (e.g. 22.1.0)"
        )

    def _add_store_command(self, subparsers):
        """Add 'store' subcommand."""
        parser = subparsers.add_parser(
            "store",
            help="Inspect or clean the store",
            description="Print store locations or clear the download cache",
        )
        parser.add_argument(
            "store_command",
            choices=STORE_COMMANDS,
            metavar="SUBCOMMAND",
            help=f"One of: {', '.join(STORE_COMMANDS)}",
        )

    def _add_shell_command(self, subparsers):
        """Add 'shell' subcommand."""
        parser = subparsers.add_parser(
            "shell",
            help="Print PATH setup for a shell",
            description=(
                "Print a line that adds default runtime versions to PATH.\n"
                f'Example (zsh): eval "$({EXE_NAME} shell zsh)"'
            ),
            formatter_class=argparse.RawDescriptionHelpFormatter,
        )
        parser.add_argument(
            "shell",
            choices=supported_shells(),
            metavar="SHELL",
            help=f"One of: {', '.join(supported_shells())}",
        )

    def _add_upgrade_command(self, subparsers):
        """Add 'upgrade' subcommand."""
        parser = subparsers.add_parser(
            "upgrade",
            help=f"Upgrade {EXE_NAME} itself",
            description=f"Replace this {EXE_NAME} executable with the latest release",
        )
        parser.add_argument(
            "--check",
            action="store_true",
            help="Only report whether an update is available",
        )

    def _add_list_command(self, subparsers):
        """Add 'list' subcommand."""
        subparsers.add_parser(
            "list",
            help="Use list-remote or list-installed",
            description="Not specific enough: use list-remote or list-installed",
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
            Exit code: 0 on success, 2 for invalid input or configuration,
            130 when interrupted, 1 for any other failure
        """
        parsed_args = self.parse_args(args)

        # Configure logging
        self._configure_logging(parsed_args)

        # Check if command specified
        if not parsed_args.command:
            self.parser.print_help()
            return EXIT_FAILURE

        try:
            parsed_args.settings = load_settings(parsed_args.config)
            return self._dispatch_command(parsed_args)
        except KeyboardInterrupt:
            logger.info("Operation cancelled by user")
            return EXIT_INTERRUPTED
        except ConfigurationError as e:
            logger.error(f"Error: {e}")
            return EXIT_CONFIGURATION
        except StateError as e:
            logger.error(str(e))
            return EXIT_FAILURE
        except CopperError as e:
            logger.error(f"Error: {e}")
            self._print_traceback(parsed_args)
            return EXIT_FAILURE
        except Exception as e:
            logger.error(f"Unexpected error: {e}")
            self._print_traceback(parsed_args)
            return EXIT_FAILURE

    @staticmethod
    def _print_traceback(args):
        if args.verbose:
            import traceback

            traceback.print_exc()

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

        # urllib3 logs every connection at debug level
        if not args.verbose:
            logging.getLogger("urllib3").setLevel(logging.WARNING)

    def _dispatch_command(self, args) -> int:
        """
        Dispatch to appropriate command handler.

        Args:
            args: Parsed arguments with command field

        Returns:
            Exit code from command handler
        """
        module_name = COMMAND_MAP.get(args.command)
        if not module_name:
            logger.error(f"Unknown command: {args.command}")
            return EXIT_FAILURE

        module = importlib.import_module(module_name)
        return module.run(args)


def main():
    """Main entry point for CLI."""
    cli = CLI()
    sys.exit(cli.run())


if __name__ == "__main__":
    main()

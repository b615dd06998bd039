#!/usr/bin/env python3
"""
ups-diff CLI Interface

Generates a commit message for the uncommitted changes in the current git
repository, optionally saves the diff and the message, and after confirmation
commits and pushes the current branch.

Usage:
    ups-diff [options]

Options:
    --diff                Save the git diff to a file in the output directory
    --msg                 Save the commit message to a file in the output directory
    -o, --output-dir DIR  Directory for saved files (default: ~/Desktop)
    -m, --model MODEL     Model used to generate the message
    --remote NAME         Remote to push to (default: origin)
    --no-color            Disable colored output
    -v, --verbose         Enable verbose output
    --version             Show version information
"""

import argparse
import sys
from pathlib import Path
from typing import List, Optional

from rich.console import Console

from ups import __version__, main as pipeline, utils
from ups.config import DEFAULT_MODEL, Config, default_output_dir
from ups.errors import PushError, UpsError
from ups.generator import MessageGenerator, get_api_key
from ups.main import run_pipeline
from ups.utils import PipelineOptions, setup_logging


def create_parser() -> argparse.ArgumentParser:
    """Create and configure the argument parser."""
    parser = argparse.ArgumentParser(
        prog="ups-diff",
        description="Generate a commit message from the current git diff, then commit and push",
        formatter_class=argparse.RawDescriptionHelpFormatter,
    )

    parser.add_argument(
        "--diff",
        action="store_true",
        help="Save the git diff to a file in the output directory"
    )

    parser.add_argument(
        "--msg",
        action="store_true",
        help="Save the commit message to a file in the output directory"
    )

    parser.add_argument(
        "-o", "--output-dir",
        type=Path,
        default=default_output_dir(),
        help="Directory for saved files (default: ~/Desktop)"
    )

    parser.add_argument(
        "-m", "--model",
        type=str,
        default=DEFAULT_MODEL,
        help=f"Model used to generate the message (default: {DEFAULT_MODEL})"
    )

    parser.add_argument(
        "--remote",
        type=str,
        default="origin",
        help="Remote to push the current branch to (default: origin)"
    )

    parser.add_argument(
        "--no-color",
        action="store_true",
        help="Disable colored output"
    )

    parser.add_argument(
        "-v", "--verbose",
        action="store_true",
        help="Enable verbose output"
    )

    parser.add_argument(
        "--version",
        action="version",
        version=f"%(prog)s {__version__}",
        help="Show version information"
    )

    return parser


def create_config_from_args(args: argparse.Namespace) -> Config:
    return Config(model=args.model, output_dir=args.output_dir, remote=args.remote)


def configure_console(args: argparse.Namespace) -> None:
    if args.no_color:
        pipeline.console = utils.console = Console(force_terminal=False, color_system=None)
    setup_logging(args.verbose)


def report_error(error: Exception) -> None:
    utils.console.print(f"[red]✘ {error}[/red]")
    if isinstance(error, PushError):
        utils.console.print(
            "[yellow]The commit was created locally and has not been undone. "
            "Run 'git push' once the problem is fixed.[/yellow]"
        )


def main_cli(argv: Optional[List[str]] = None) -> int:
    """Main CLI entry point."""
    parser = create_parser()
    args = parser.parse_args(argv)
    configure_console(args)

    try:
        config = create_config_from_args(args)
        generator = MessageGenerator(config, get_api_key(config))
        options = PipelineOptions(save_diff=args.diff, save_message=args.msg)
        run_pipeline(options, config, generator)
        return 0
    except KeyboardInterrupt:
        print("\nOperation cancelled by user")
        return 130
    except UpsError as e:
        report_error(e)
        return 1
    except Exception as e:
        if args.verbose:
            raise
        report_error(e)
        return 1


if __name__ == "__main__":
    sys.exit(main_cli())

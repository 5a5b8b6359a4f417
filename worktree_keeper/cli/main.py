"""Command-line interface for worktree-keeper"""

import argparse
import os
import sys
from typing import List, Optional

from rich.console import Console

from worktree_keeper.cli.args import parse_args
from worktree_keeper.config import Config
from worktree_keeper.core import WorktreeKeeper
from worktree_keeper.exceptions import WorktreeKeeperError
from worktree_keeper.logging_config import log_file_path, setup_logging
from worktree_keeper.utils.threading import get_threading_info

console = Console()


def build_config(parsed_args: argparse.Namespace) -> Config:
    """Build a Config from parsed arguments of either command."""
    return Config(
        main_branch=parsed_args.main_branch,
        include_branches=getattr(parsed_args, "branches", False),
        output_format=getattr(parsed_args, "format", "table"),
        check_integration=getattr(parsed_args, "integration", False),
        force=getattr(parsed_args, "force", False),
        force_delete=getattr(parsed_args, "force_delete", False),
        delete_branch=not getattr(parsed_args, "no_delete_branch", False),
        background=not getattr(parsed_args, "no_background", False),
        verbose=parsed_args.verbose,
        debug=parsed_args.debug,
        sequential=parsed_args.sequential,
        workers=parsed_args.workers,
    )


def _print_debug_info(config: Config) -> None:
    console.print("[yellow]Debug mode enabled[/yellow]")
    console.print(f"  Log file: {log_file_path()}")

    threading_info = get_threading_info()
    console.print("[yellow]Threading Information:[/yellow]")
    console.print(f"  Python version: {threading_info['python_version']}")
    console.print(f"  Threading mode: {threading_info['mode']}")
    console.print(f"  CPU count: {threading_info['cpu_count']}")
    console.print(f"  Optimal workers: {threading_info['optimal_workers']}")
    console.print(f"  Free-threading enabled: {threading_info['free_threading']}")

    console.print("[yellow]Configuration:[/yellow]")
    for key, value in config.to_dict().items():
        console.print(f"  {key}: {value}")


def main(argv: Optional[List[str]] = None) -> int:
    """Main entry point for the application."""
    parsed_args = None
    try:
        parsed_args = parse_args(argv)

        setup_logging(verbose=parsed_args.verbose, debug=parsed_args.debug)

        config = build_config(parsed_args)

        if parsed_args.debug and config.output_format == "table":
            _print_debug_info(config)

        cwd = os.getcwd()
        keeper = WorktreeKeeper(cwd, config, cwd=cwd)

        if parsed_args.command == "remove":
            return keeper.run_remove(parsed_args.targets)
        return keeper.show()
    except KeyboardInterrupt:
        console.print("\n[yellow]Operation cancelled by user[/yellow]")
        return 1
    except (WorktreeKeeperError, ValueError) as e:
        console.print(f"[red]Error: {e}[/red]")
        return 1
    except Exception as e:
        console.print(f"[red]Error: {e}[/red]")
        if parsed_args is not None and parsed_args.debug:
            console.print_exception()
        return 1


if __name__ == "__main__":
    sys.exit(main())

"""Logging for worktree-keeper.

Console output goes to stderr so it never mixes with table or JSON output on
stdout. ``-v`` shows INFO (one line per removal target); ``--debug`` shows
DEBUG, including every git command with the directory it ran in, and also
writes everything to ``~/.worktree-keeper/worktree-keeper.log``.
"""
import copy
import logging
import sys
from pathlib import Path

LOG_DIR_NAME = '.worktree-keeper'
LOG_FILE_NAME = 'worktree-keeper.log'


class ColoredFormatter(logging.Formatter):
    """Formatter that colors the level name when stderr is a terminal."""

    # ANSI color codes
    COLORS = {
        'DEBUG': '\033[36m',     # Cyan
        'INFO': '\033[32m',      # Green
        'WARNING': '\033[33m',   # Yellow
        'ERROR': '\033[31m',     # Red
        'CRITICAL': '\033[35m',  # Magenta
        'RESET': '\033[0m'       # Reset
    }

    def format(self, record):
        if sys.stderr.isatty() and record.levelname in self.COLORS:
            # The log file handler sees the same record
            record = copy.copy(record)
            record.levelname = f"{self.COLORS[record.levelname]}{record.levelname}{self.COLORS['RESET']}"
        return super().format(record)


def log_file_path() -> Path:
    """Where --debug writes its log (overwritten on each run)."""
    return Path.home() / LOG_DIR_NAME / LOG_FILE_NAME


def setup_logging(verbose: bool = False, debug: bool = False) -> None:
    """
    Configure logging for one run of the tool.

    Args:
        verbose: If True, show INFO messages such as per-target removal outcomes
        debug: If True, show DEBUG messages (git commands, worker threads) and
            also write them to the log file
    """
    if debug:
        level = logging.DEBUG
    elif verbose:
        level = logging.INFO
    else:
        level = logging.WARNING

    root_logger = logging.getLogger()
    root_logger.setLevel(level)

    for handler in root_logger.handlers[:]:
        root_logger.removeHandler(handler)
        handler.close()

    # GitPython logs each command it runs; GitRepository.run already does
    logging.getLogger('git').setLevel(logging.WARNING)

    if debug:
        log_file = log_file_path()
        log_file.parent.mkdir(parents=True, exist_ok=True)
        file_handler = logging.FileHandler(log_file, mode='w')
        file_handler.setLevel(logging.DEBUG)
        # Enrichment and removal checks run on worker threads
        file_handler.setFormatter(logging.Formatter(
            fmt='%(asctime)s - %(name)s - %(threadName)s - %(levelname)s - %(message)s',
            datefmt='%Y-%m-%d %H:%M:%S'
        ))
        root_logger.addHandler(file_handler)

    console_handler = logging.StreamHandler(sys.stderr)
    console_handler.setLevel(level)

    if debug:
        formatter = ColoredFormatter(
            fmt='%(asctime)s - %(name)s - %(levelname)s - %(message)s',
            datefmt='%Y-%m-%d %H:%M:%S'
        )
    else:
        formatter = ColoredFormatter(fmt='[%(name)s] %(message)s')

    console_handler.setFormatter(formatter)
    root_logger.addHandler(console_handler)


def get_logger(name: str) -> logging.Logger:
    """
    Get a logger for a worktree_keeper module.

    ``worktree_keeper.services.removal_service`` logs as ``removal_service``.
    The git layer keeps its ``services.git`` prefix so it does not land under
    GitPython's own ``git`` logger.

    Args:
        name: Name of the module (typically __name__)

    Returns:
        Logger instance
    """
    if name.startswith('worktree_keeper.'):
        name = name[len('worktree_keeper.'):]
    if name.startswith('services.') and not name.startswith('services.git.'):
        name = name[len('services.'):]

    return logging.getLogger(name)

"""
Main entry point for the synchpath command line tool.

This module handles:
- Command line argument parsing
- Settings loading
- Logging configuration (console and log file)
- Top-level path checks
- Running the synchronization and printing the final report
- Exit codes and the optional pause before exit
"""

from __future__ import annotations

import argparse
import logging
import sys
import time
from dataclasses import dataclass, replace
from datetime import datetime
from pathlib import Path
from typing import List, Optional

from synchpath import __version__
from synchpath.core.errors import ConfigurationError, PathAccessError, SyncError
from synchpath.core.folder.reconcile import reconcile
from synchpath.core.formatting import format_duration
from synchpath.core.models import RunStatistics, SyncOptions
from synchpath.services.fs_access import FileSystemService
from synchpath.services.settings import SettingsManager


# =============================================================================
# Constants
# =============================================================================

APP_NAME = "synchpath"
APP_VERSION = __version__

LOG_RULE = "=" * 68


# =============================================================================
# Data Classes
# =============================================================================

@dataclass
class CommandLineArgs:
    """Parsed command line arguments."""
    source_path: str = ""
    target_path: str = ""
    allow_delete: bool = False
    verbose: bool = False
    skip_symlinks: bool = False
    time_window: Optional[int] = None
    log_file: Optional[str] = None
    append_log: bool = False
    pause: bool = False
    config_file: Optional[str] = None
    debug: bool = False


# =============================================================================
# Logging Setup
# =============================================================================

class LogFormatter(logging.Formatter):
    """Custom log formatter with colors for console."""

    COLORS = {
        logging.WARNING: '\033[33m',   # Yellow
        logging.ERROR: '\033[31m',     # Red
        logging.CRITICAL: '\033[35m',  # Magenta
    }
    RESET = '\033[0m'

    def __init__(self, use_colors: bool = True):
        super().__init__(
            fmt='%(asctime)s | %(levelname)-8s | %(message)s',
            datefmt='%Y-%m-%d %H:%M:%S'
        )
        self.use_colors = use_colors and sys.stdout.isatty()

    def format(self, record: logging.LogRecord) -> str:
        formatted = super().format(record)

        if self.use_colors:
            color = self.COLORS.get(record.levelno, '')
            if color:
                return f"{color}{formatted}{self.RESET}"

        return formatted


def setup_logging(
    level: str = "INFO",
    log_file: Optional[Path] = None,
    append: bool = False,
    use_colors: bool = True
) -> logging.Logger:
    """
    Configure application logging.

    Args:
        level: Log level string
        log_file: Optional file that receives a copy of every message
        append: Append to ``log_file`` instead of truncating it
        use_colors: Color console output by level

    Returns:
        Root logger instance

    Raises:
        ConfigurationError: If the log file cannot be opened.
    """
    numeric_level = getattr(logging, level.upper(), logging.INFO)

    root_logger = logging.getLogger()
    root_logger.setLevel(numeric_level)

    shutdown_logging()

    # Console handler
    console_handler = logging.StreamHandler(sys.stdout)
    console_handler.setLevel(numeric_level)
    console_handler.setFormatter(LogFormatter(use_colors=use_colors))
    root_logger.addHandler(console_handler)

    # File handler
    if log_file:
        try:
            with open(log_file, 'a' if append else 'w', encoding='utf-8') as f:
                f.write(f"\n{LOG_RULE}\n")
                f.write(f" Logfile for: {APP_NAME} {APP_VERSION}\n")
            file_handler = logging.FileHandler(log_file, mode='a', encoding='utf-8')
        except OSError as e:
            raise ConfigurationError(f"Couldn't open file {log_file} for logging: {e}") from e

        file_handler.setLevel(numeric_level)
        file_handler.setFormatter(LogFormatter(use_colors=False))
        root_logger.addHandler(file_handler)

    return root_logger


def shutdown_logging() -> None:
    """Close and detach every handler of the root logger."""
    root_logger = logging.getLogger()
    for handler in list(root_logger.handlers):
        root_logger.removeHandler(handler)
        handler.close()


# =============================================================================
# Command Line Parsing
# =============================================================================

class GracefulArgumentParser(argparse.ArgumentParser):
    """ArgumentParser that raises ConfigurationError instead of exiting."""

    def error(self, message: str):
        raise ConfigurationError(message)


def _positive_int(value: str) -> int:
    """argparse type for positive integer values."""
    try:
        parsed = int(value)
    except ValueError as exc:
        raise argparse.ArgumentTypeError(f"invalid integer value: {value!r}") from exc
    if parsed <= 0:
        raise argparse.ArgumentTypeError("value must be >= 1")
    return parsed


def parse_arguments(args: Optional[List[str]] = None) -> CommandLineArgs:
    """
    Parse command line arguments.

    Args:
        args: Arguments to parse (defaults to sys.argv)

    Returns:
        Parsed arguments

    Raises:
        ConfigurationError: On missing or invalid arguments.
    """
    parser = GracefulArgumentParser(
        prog=APP_NAME,
        description="Make TARGET_PATH match SOURCE_PATH: copy new and updated files, "
                    "optionally delete files absent from the source.",
        formatter_class=argparse.RawDescriptionHelpFormatter,
        epilog="""
Examples:
  %(prog)s /data/photos /mnt/backup/photos          Copy new and newer files
  %(prog)s -d -w 5 /data/photos /mnt/backup/photos  Mirror, 5 second window
  %(prog)s -L sync.log -s src dst                   Append to a log, skip links
        """
    )

    # Positional arguments
    parser.add_argument(
        'source',
        metavar='SOURCE_PATH',
        help='Existing path to copy files from'
    )
    parser.add_argument(
        'target',
        metavar='TARGET_PATH',
        help='Existing path to copy files to'
    )

    # Synchronization options
    parser.add_argument(
        '-d', '--delete',
        action='store_true',
        help='Allow deletion of files in target not found in the source'
    )
    parser.add_argument(
        '-s', '--skip-symlinks',
        action='store_true',
        help='Skip symbolic links'
    )
    parser.add_argument(
        '-w', '--time-window',
        type=_positive_int,
        metavar='SECONDS',
        help='Time window in seconds for updating a file (e.g. 5)'
    )

    # Output
    parser.add_argument(
        '-v', '--verbose',
        action='store_true',
        help='Verbose output'
    )
    log_group = parser.add_mutually_exclusive_group()
    log_group.add_argument(
        '-l',
        dest='log_file',
        metavar='LOGFILE',
        help='Write log information to a given file'
    )
    log_group.add_argument(
        '-L',
        dest='append_log_file',
        metavar='LOGFILE',
        help='Append log information to a given file'
    )
    parser.add_argument(
        '-p', '--pause',
        action='store_true',
        help='Pause at the end until Enter is pressed'
    )

    # Configuration
    parser.add_argument(
        '-c', '--config',
        help='Settings file path'
    )
    parser.add_argument(
        '--debug',
        action='store_true',
        help='Enable debug logging'
    )

    # Version
    parser.add_argument(
        '--version',
        action='version',
        version=f'{APP_NAME} {APP_VERSION}'
    )

    parsed = parser.parse_args(args)

    return CommandLineArgs(
        source_path=parsed.source,
        target_path=parsed.target,
        allow_delete=parsed.delete,
        verbose=parsed.verbose,
        skip_symlinks=parsed.skip_symlinks,
        time_window=parsed.time_window,
        log_file=parsed.log_file or parsed.append_log_file,
        append_log=parsed.append_log_file is not None,
        pause=parsed.pause,
        config_file=parsed.config,
        debug=parsed.debug,
    )


def build_options(args: CommandLineArgs, manager: SettingsManager) -> SyncOptions:
    """Combine settings file defaults with command line flags."""
    options = manager.settings.to_sync_options()

    return replace(
        options,
        allow_delete=args.allow_delete or options.allow_delete,
        verbose=args.verbose or options.verbose,
        time_window=args.time_window if args.time_window is not None else options.time_window,
        skip_symlinks=args.skip_symlinks or options.skip_symlinks,
    )


# =============================================================================
# Run
# =============================================================================

def check_paths(source: Path, target: Path, fs: FileSystemService) -> None:
    """
    Make sure both top-level paths can be used.

    Raises:
        PathAccessError: If either path is missing or unreadable.
    """
    if not fs.path_exists(source):
        raise PathAccessError("source", source)
    if not fs.path_exists(target):
        raise PathAccessError("target", target)


def run_sync(args: CommandLineArgs) -> int:
    """
    Run one synchronization described by ``args``.

    Returns:
        Exit code (0 for success)
    """
    try:
        manager = SettingsManager(Path(args.config_file) if args.config_file else None)
        options = build_options(args, manager)
        log_settings = manager.settings.logging

        setup_logging(
            'DEBUG' if args.debug else log_settings.level,
            Path(args.log_file) if args.log_file else None,
            append=args.append_log,
            use_colors=log_settings.use_colors,
        )
    except ConfigurationError as e:
        print(f"[ERROR] {e}", file=sys.stderr)
        return 1

    try:
        return _synchronize(args, options)
    finally:
        shutdown_logging()
        if args.log_file:
            _write_closing_rule(Path(args.log_file))


def _synchronize(args: CommandLineArgs, options: SyncOptions) -> int:
    source_path = Path(args.source_path)
    target_path = Path(args.target_path)
    fs = FileSystemService()
    start_time = time.time()

    logging.info(f"SOURCE PATH: {source_path}")
    logging.info(f"TARGET PATH: {target_path}")
    logging.info(f"Deletion allowed: {'Yes' if options.allow_delete else 'No'}")
    logging.info(f"Follow symbolic links: {'No' if options.skip_symlinks else 'Yes'}")
    logging.info(f"Time window for update: {options.time_window}")
    logging.info(f"Starting synchronization at {datetime.fromtimestamp(start_time).ctime()}")

    try:
        check_paths(source_path, target_path, fs)

        stats = RunStatistics()
        reconcile(source_path, target_path, options, stats, fs)
    except PathAccessError as e:
        logging.error(f"CRITICAL ERROR: {e}")
        return 1
    except SyncError as e:
        logging.error(f"Synchronization aborted: {e}")
        return 1

    end_time = time.time()

    logging.info(f"Synchronization finished at {datetime.fromtimestamp(end_time).ctime()}")
    logging.info(f"Elapsed time  : {format_duration(end_time - start_time)}")
    for line in stats.report_lines():
        logging.info(line)
    logging.info("END!")

    return 0


def _write_closing_rule(log_file: Path) -> None:
    try:
        with open(log_file, 'a', encoding='utf-8') as f:
            f.write(f"{LOG_RULE}\n")
    except OSError as e:
        print(f"[WARNING] Cannot finish log file {log_file}: {e}", file=sys.stderr)


def wait_for_key() -> None:
    """Block until Enter is pressed (or stdin is closed)."""
    try:
        input("Press Enter to exit...")
    except EOFError:
        pass


# =============================================================================
# Entry Point
# =============================================================================

def main(argv: Optional[List[str]] = None) -> int:
    """
    Application main entry point.

    Returns:
        Exit code (0 for success)
    """
    try:
        args = parse_arguments(argv)
    except ConfigurationError as e:
        print(f"{APP_NAME}: error: {e}", file=sys.stderr)
        print(f"Run {APP_NAME} --help to see usage.", file=sys.stderr)
        return 1

    try:
        return run_sync(args)
    finally:
        if args.pause:
            wait_for_key()


if __name__ == '__main__':
    sys.exit(main())

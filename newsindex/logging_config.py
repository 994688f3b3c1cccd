"""Logging configuration: brief console output plus an optional rotating log file"""
import logging
import sys
from logging.handlers import RotatingFileHandler
from pathlib import Path


def setup_logging(console_level: int = logging.INFO, log_file: str | None = None, file_level: int = logging.DEBUG) -> None:
    """
    Configure the root logger.

    - Console: `LEVEL: message` at console_level (stderr, so result output on
      stdout stays clean)
    - File (only when log_file is given): detailed lines at file_level,
      rotated at 10MB with 5 backups

    Calling it again replaces the handlers instead of stacking them.
    """
    root_logger = logging.getLogger()
    root_logger.setLevel(min(console_level, file_level) if log_file else console_level)
    root_logger.handlers.clear()

    console_handler = logging.StreamHandler(sys.stderr)
    console_handler.setLevel(console_level)
    console_handler.setFormatter(logging.Formatter("%(levelname)s: %(message)s"))
    root_logger.addHandler(console_handler)

    if log_file:
        log_path = Path(log_file)
        log_path.parent.mkdir(parents=True, exist_ok=True)
        file_handler = RotatingFileHandler(
            log_path,
            mode="a",
            maxBytes=10 * 1024 * 1024,
            backupCount=5,
            encoding="utf-8",
        )
        file_handler.setLevel(file_level)
        file_handler.setFormatter(
            logging.Formatter(
                "%(asctime)s | %(levelname)-8s | %(name)s:%(lineno)d | %(message)s",
                datefmt="%Y-%m-%d %H:%M:%S",
            )
        )
        root_logger.addHandler(file_handler)
        logging.info("Logging to %s (%s)", log_path, logging.getLevelName(file_level))


def add_logging_arguments(parser) -> None:
    """Add the --verbose / --log-file options every command shares."""
    parser.add_argument("-v", "--verbose", action="store_true", help="Log debug detail to the console.")
    parser.add_argument("--log-file", type=Path, default=None, help="Also write a detailed log to this file.")


def setup_logging_from_args(args) -> None:
    setup_logging(
        console_level=logging.DEBUG if args.verbose else logging.INFO,
        log_file=str(args.log_file) if args.log_file else None,
    )

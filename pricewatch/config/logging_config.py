# pricewatch/config/logging_config.py

"""Logging for one pricewatch launch.

A launch (dashboard or CLI command) logs into its own file,
``logs/run_<YYYYMMDD_HHMMSS>.log``, at DEBUG level. Warnings and
errors are echoed to stderr through Rich so they stay readable next
to the CLI's Rich tables. Only the newest ``Settings.LOG_KEEP_RUNS``
run files are kept.
"""

import logging
from datetime import datetime
from pathlib import Path

from rich.console import Console
from rich.logging import RichHandler

from pricewatch.config.settings import Settings

_FILE_FORMAT = (
    "%(asctime)s | %(levelname)-8s | %(name)s | "
    "%(threadName)s | %(module)s:%(lineno)d | %(message)s"
)
_FILE_DATEFMT = "%Y-%m-%d %H:%M:%S"


def _prune_old_runs(logs_dir: Path, keep: int) -> None:
    """Delete all but the newest ``keep - 1`` run logs."""
    runs = sorted(logs_dir.glob("run_*.log"))
    for stale in runs[: max(len(runs) - (keep - 1), 0)]:
        stale.unlink(missing_ok=True)


def _file_handler(log_file: Path) -> logging.Handler:
    handler = logging.FileHandler(log_file, encoding="utf-8")
    handler.setLevel(logging.DEBUG)
    handler.setFormatter(logging.Formatter(_FILE_FORMAT, datefmt=_FILE_DATEFMT))
    return handler


def _console_handler(level: int) -> logging.Handler:
    handler = RichHandler(
        console=Console(stderr=True),
        level=level,
        show_path=False,
        rich_tracebacks=True,
    )
    handler.setFormatter(logging.Formatter("%(message)s"))
    return handler


def setup_logging(console_level: int = logging.WARNING) -> Path:
    """Attach the run-file and stderr handlers to the ``pricewatch`` logger.

    Calling it again in the same process keeps the existing handlers.

    Args:
        console_level: Minimum level echoed to stderr. The dashboard
            keeps the default so log lines do not draw over the screen.

    Returns:
        Path of this run's log file.
    """
    logs_dir: Path = Settings.LOGS_DIR
    logs_dir.mkdir(parents=True, exist_ok=True)
    log_file = logs_dir / f"run_{datetime.now():%Y%m%d_%H%M%S}.log"

    project_logger = logging.getLogger("pricewatch")
    project_logger.setLevel(logging.DEBUG)
    if project_logger.handlers:
        return log_file

    if not log_file.exists():
        _prune_old_runs(logs_dir, max(Settings.LOG_KEEP_RUNS, 1))
    project_logger.addHandler(_file_handler(log_file))
    project_logger.addHandler(_console_handler(console_level))
    project_logger.debug("Run log opened at %s", log_file)
    return log_file

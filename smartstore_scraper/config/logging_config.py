# smartstore_scraper/config/logging_config.py

"""Logging for scrape runs.

Every run writes a full DEBUG trace to ``logs/scrape_<timestamp>.log``
and only the newest ``Settings.LOG_RETENTION`` run logs are kept. The
stderr console shows ``Settings.LOG_LEVEL`` (env ``SMARTSTORE_LOG_LEVEL``)
by default; ``-v`` raises it to INFO so per-product progress is visible
and ``-vv`` to DEBUG, which also shows which extraction strategy won
for each field. stdout is never touched, it carries the JSON output.
"""

import logging
import sys
from datetime import datetime
from pathlib import Path

from smartstore_scraper.config.settings import Settings

_FILE_FORMAT = (
    "%(asctime)s | %(levelname)-8s | %(name)s | "
    "%(funcName)s:%(lineno)d | %(message)s"
)
_CONSOLE_FORMAT = "%(levelname)-8s %(name)s: %(message)s"
_DATE_FORMAT = "%Y-%m-%d %H:%M:%S"
_RUN_LOG_GLOB = "scrape_*.log"


def console_level(verbosity: int = 0) -> int:
    """Map a ``-v`` count to a console log level."""
    if verbosity >= 2:
        return logging.DEBUG
    if verbosity == 1:
        return logging.INFO
    level = logging.getLevelName(Settings.LOG_LEVEL)
    return level if isinstance(level, int) else logging.WARNING


def _is_console(handler: logging.Handler) -> bool:
    return isinstance(handler, logging.StreamHandler) and not isinstance(
        handler, logging.FileHandler
    )


def _prune_run_logs(logs_dir: Path, keep: int) -> None:
    """Delete all but the newest *keep* run logs (names sort by time)."""
    if keep <= 0:
        return
    for stale in sorted(logs_dir.glob(_RUN_LOG_GLOB))[:-keep]:
        stale.unlink(missing_ok=True)


def setup_logging(verbosity: int = 0) -> Path:
    """Configure the ``smartstore`` logger tree and return the run log path.

    Calling it again keeps the existing handlers and only applies the
    new console level.
    """
    root_logger = logging.getLogger("smartstore")
    root_logger.setLevel(logging.DEBUG)
    level = console_level(verbosity)

    run_file = next(
        (
            h for h in root_logger.handlers
            if isinstance(h, logging.FileHandler)
        ),
        None,
    )
    if run_file is not None:
        for handler in root_logger.handlers:
            if _is_console(handler):
                handler.setLevel(level)
        return Path(run_file.baseFilename)

    logs_dir: Path = Settings.LOGS_DIR
    logs_dir.mkdir(parents=True, exist_ok=True)
    timestamp = datetime.now().strftime("%Y%m%d_%H%M%S")
    log_file = logs_dir / f"scrape_{timestamp}.log"

    file_handler = logging.FileHandler(log_file, encoding="utf-8")
    file_handler.setLevel(logging.DEBUG)
    file_handler.setFormatter(
        logging.Formatter(_FILE_FORMAT, datefmt=_DATE_FORMAT)
    )

    console_handler = logging.StreamHandler(sys.stderr)
    console_handler.setLevel(level)
    console_handler.setFormatter(logging.Formatter(_CONSOLE_FORMAT))

    root_logger.addHandler(file_handler)
    root_logger.addHandler(console_handler)
    _prune_run_logs(logs_dir, Settings.LOG_RETENTION)

    root_logger.debug(
        "Run log %s, console level %s",
        log_file,
        logging.getLevelName(level),
    )
    return log_file

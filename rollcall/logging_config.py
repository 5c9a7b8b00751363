"""
Logging setup shared by the web app and the scheduler tick.

- Logs go to LOG_DIR/<subdir>/<subdir>_YYYY-MM-DD.log with daily rotation
- A console handler mirrors the same format
- Under pytest, logs are written to a temp directory instead

Usage:
    from rollcall.logging_config import get_logger

    logger = get_logger(__name__, "scheduler")
    logger.info("Processing week 2025-W03")
"""

import logging
import os
import shutil
import sys
import tempfile
from datetime import datetime, timedelta
from logging.handlers import TimedRotatingFileHandler
from pathlib import Path
from typing import Optional

from rollcall.config import get_settings


IS_TEST_ENV = "pytest" in sys.modules

TEST_LOG_DIR = Path(tempfile.gettempdir()) / "rollcall_test_logs"
LOG_RETENTION_DAYS = int(os.getenv("LOG_RETENTION_DAYS", "30"))

LOG_FORMAT = "%(asctime)s - %(name)s - %(levelname)s - %(message)s"
DATE_FORMAT = "%Y-%m-%d %H:%M:%S"


def _log_base_dir() -> Path:
    if IS_TEST_ENV:
        return TEST_LOG_DIR
    return Path(get_settings().LOG_DIR)


def ensure_log_directory(log_subdir: str) -> Path:
    log_dir = _log_base_dir() / log_subdir
    log_dir.mkdir(parents=True, exist_ok=True)
    return log_dir


def cleanup_old_logs(log_dir: Path, retention_days: int = LOG_RETENTION_DAYS) -> None:
    """Remove *.log files older than the retention period."""
    if not log_dir.exists():
        return

    cutoff = datetime.now() - timedelta(days=retention_days)

    for log_file in log_dir.glob("*.log"):
        if log_file.stat().st_mtime < cutoff.timestamp():
            try:
                log_file.unlink()
            except OSError:
                pass  # another process may have rotated it already


def get_logger(
    name: str,
    log_subdir: str = "app",
    level: Optional[str] = None,
    console_output: bool = True,
) -> logging.Logger:
    """
    Get a configured logger instance.

    Args:
        name: Logger name, usually the module's __name__
        log_subdir: Subdirectory under LOG_DIR (e.g. 'scheduler', 'api')
        level: DEBUG/INFO/WARNING/ERROR/CRITICAL. Defaults to LOG_LEVEL
        console_output: Also log to stderr

    Returns:
        Configured logger instance
    """
    logger = logging.getLogger(name)

    # Avoid adding duplicate handlers
    if logger.handlers:
        return logger

    logger.setLevel(logging.DEBUG)
    log_level = getattr(logging, (level or get_settings().LOG_LEVEL).upper(), logging.INFO)

    log_dir = ensure_log_directory(log_subdir)
    cleanup_old_logs(log_dir)

    formatter = logging.Formatter(LOG_FORMAT, datefmt=DATE_FORMAT)

    file_handler = TimedRotatingFileHandler(
        filename=log_dir / f"{log_subdir}_{datetime.now().strftime('%Y-%m-%d')}.log",
        when="midnight",
        interval=1,
        backupCount=LOG_RETENTION_DAYS,
        encoding="utf-8",
        delay=True,
    )
    file_handler.setLevel(log_level)
    file_handler.setFormatter(formatter)
    logger.addHandler(file_handler)

    if console_output:
        console_handler = logging.StreamHandler()
        console_handler.setLevel(log_level)
        console_handler.setFormatter(formatter)
        logger.addHandler(console_handler)

    # Handlers live on this logger; don't double-print through root
    logger.propagate = IS_TEST_ENV

    return logger


def cleanup_test_logs() -> None:
    """Remove the temp log directory created while running under pytest."""
    if not IS_TEST_ENV:
        return

    if TEST_LOG_DIR.exists():
        shutil.rmtree(TEST_LOG_DIR, ignore_errors=True)

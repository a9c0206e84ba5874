"""
Date-partitioned log sink.

Lines are appended to logs/<YYYY>/<MM>/<DD>/<filename> with a local
timestamp prefix. default_logger() is the callable the RequestExecutor
uses when the caller does not pass one.
"""

import logging
from datetime import datetime, timedelta, timezone
from pathlib import Path
from typing import Optional, Union

from bridge_config import config

logger = logging.getLogger(__name__)

ERROR_LOG_FILENAME = 'error.log'


def _local_tz() -> timezone:
    return timezone(timedelta(minutes=config.logging.utc_offset_minutes))


def dated_log_path(filename: str, base_dir: Optional[Union[str, Path]] = None,
                   now: Optional[datetime] = None) -> Path:
    """Return logs/<YYYY>/<MM>/<DD>/<filename> for the given moment."""
    now = now or datetime.now(_local_tz())
    base = Path(base_dir or config.logging.logs_dir)
    return base / now.strftime('%Y') / now.strftime('%m') / now.strftime('%d') / filename


def log_data(filename: str, message: str, base_dir: Optional[Union[str, Path]] = None,
             now: Optional[datetime] = None) -> Path:
    """Append a timestamped line to the dated log file, creating directories."""
    now = now or datetime.now(_local_tz())
    path = dated_log_path(filename, base_dir=base_dir, now=now)
    path.parent.mkdir(parents=True, exist_ok=True)
    with open(path, 'a', encoding='utf-8') as f:
        f.write(f"{now.strftime('%Y-%m-%d %H:%M:%S')} - {message}\n")
    return path


def default_logger(message: str) -> None:
    """Write to the dated error log, or to the process error stream if that fails."""
    try:
        log_data(ERROR_LOG_FILENAME, message)
    except OSError as e:
        logger.error(f"{message} (log sink unavailable: {e})")

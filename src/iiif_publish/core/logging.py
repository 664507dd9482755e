"""Loguru logging configuration for publishing runs.

Log level and an optional log directory come from ``Settings``; when a
directory is configured, a rotating file sink is added next to stderr.
"""

import sys
from pathlib import Path

from loguru import logger

from iiif_publish.core.config import Settings, get_settings

_LOG_FORMAT = "{time:YYYY-MM-DD HH:mm:ss.SSS} | {level:<8} | {name}:{function}:{line} | {message}"
LOG_FILENAME = "iiif-publish.log"


def setup_logging(settings: Settings | None = None) -> Path | None:
    """Replace the default Loguru sink with the configured ones.

    Args:
        settings: Publishing settings; loaded from the environment when omitted.

    Returns:
        Path of the log file, or None when only stderr is used.
    """
    if settings is None:
        settings = get_settings()
    level = settings.log_level.upper()

    logger.remove()
    logger.add(sys.stderr, level=level, format=_LOG_FORMAT)

    if not settings.log_dir:
        return None

    log_path = Path(settings.log_dir)
    log_path.mkdir(parents=True, exist_ok=True)
    log_file = log_path / LOG_FILENAME
    logger.add(log_file, level=level, format=_LOG_FORMAT, rotation="24h", retention="7 days")
    logger.debug("Logging to {}", log_file)
    return log_file

"""
Logging setup shared by the API server and the sync job.
"""
import logging
import os
from datetime import datetime
from typing import Optional

from hoopmetrix.core.config import LOG_LEVEL

LOG_FORMAT = "%(asctime)s - %(levelname)s - %(name)s:%(lineno)d - %(message)s"

_configured = False


def setup_logging(log_file_prefix: Optional[str] = None) -> logging.Logger:
    """
    Configure logging to the console and, optionally, to a timestamped file.

    Safe to call more than once; only the first call installs handlers.

    Args:
        log_file_prefix: When given, also write to logs/<prefix>_<timestamp>.log

    Returns:
        logging.Logger: The 'hoopmetrix' logger
    """
    global _configured

    log = logging.getLogger("hoopmetrix")
    if _configured:
        return log

    handlers: list[logging.Handler] = [logging.StreamHandler()]
    log_file = None

    if log_file_prefix:
        log_dir = "logs"
        os.makedirs(log_dir, exist_ok=True)
        timestamp = datetime.now().strftime("%Y%m%d_%H%M%S")
        log_file = os.path.join(log_dir, f"{log_file_prefix}_{timestamp}.log")
        handlers.append(logging.FileHandler(log_file, encoding="utf-8"))

    logging.basicConfig(
        level=getattr(logging, LOG_LEVEL.upper(), logging.INFO),
        format=LOG_FORMAT,
        handlers=handlers,
    )
    _configured = True

    if log_file:
        log.info(f"[LOGGING] Writing log file: {log_file}")
    return log

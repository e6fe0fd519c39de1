import logging
import sys
from logging.handlers import RotatingFileHandler
from pathlib import Path

from lms.core.config import settings

LOG_FORMAT = '%(asctime)s - %(name)s - %(levelname)s - %(message)s'
MAX_LOG_BYTES = 10 * 1024 * 1024
LOG_BACKUPS = 5


def _file_handler(log_file: str) -> RotatingFileHandler:
    log_path = Path(settings.LOG_DIR)
    log_path.mkdir(parents=True, exist_ok=True)
    return RotatingFileHandler(log_path / log_file, maxBytes=MAX_LOG_BYTES, backupCount=LOG_BACKUPS)


def setup_logger(name: str, log_file: str = None) -> logging.Logger:
    """Logger for background jobs, optionally mirrored into its own rotating file under LOG_DIR.

    Calling it twice for the same name returns the already configured logger.
    """
    logger = logging.getLogger(name)
    if logger.handlers:
        return logger
    logger.setLevel(settings.LOG_LEVEL)

    handlers = [logging.StreamHandler(sys.stdout)]
    if log_file:
        handlers.append(_file_handler(log_file))

    formatter = logging.Formatter(LOG_FORMAT)
    for handler in handlers:
        handler.setFormatter(formatter)
        logger.addHandler(handler)
    return logger

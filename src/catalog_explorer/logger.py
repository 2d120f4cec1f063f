import logging
import sys

from pythonjsonlogger.json import JsonFormatter

from .config import settings


def get_logger(name: str) -> logging.Logger:
    """
    Configures and returns a logger that outputs structured JSON.
    """
    logger = logging.getLogger(name)

    # Prevent duplicate handlers if the logger is already configured
    if logger.handlers:
        return logger

    logger.setLevel(settings.log_level.upper())

    handler = logging.StreamHandler(sys.stdout)
    formatter = JsonFormatter("%(asctime)s %(name)s %(levelname)s %(message)s")
    handler.setFormatter(formatter)
    logger.addHandler(handler)

    return logger

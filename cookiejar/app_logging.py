"""Structured logging for applications that use cookie sessions."""

import logging
from pythonjsonlogger import jsonlogger


def setup_logger(level: int = logging.DEBUG) -> None:
    """Send JSON-formatted records from the root logger to stderr."""
    logger = logging.getLogger()
    for handler in logger.handlers:
        if isinstance(handler.formatter, jsonlogger.JsonFormatter):
            break
    else:
        logHandler = logging.StreamHandler()
        formatter = jsonlogger.JsonFormatter(
            '%(asctime)s %(levelname)s %(name)s %(message)s',
            rename_fields={'levelname': 'level', 'asctime': 'timestamp'}
        )
        logHandler.setFormatter(formatter)
        logger.addHandler(logHandler)
    logger.setLevel(level)

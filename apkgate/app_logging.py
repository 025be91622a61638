"""Structured JSON logging for the device gate."""

import logging
from typing import Union

from pythonjsonlogger import jsonlogger

PACKAGE_LOGGER = 'apkgate'


def setup_logger(level: Union[str, int] = 'INFO') -> logging.Logger:
    """
    Send the package's log records to stderr as JSON.

    Extra fields passed to a logging call (``operation``, ``device_id``,
    ``origin``) are included in the JSON object. Calling this more than once
    only updates the level.
    """
    logger = logging.getLogger(PACKAGE_LOGGER)
    if not logger.handlers:
        log_handler = logging.StreamHandler()
        formatter = jsonlogger.JsonFormatter(
            '%(asctime)s %(levelname)s %(name)s %(message)s',
            rename_fields={'levelname': 'level', 'asctime': 'timestamp'}
        )
        log_handler.setFormatter(formatter)
        logger.addHandler(log_handler)
    if isinstance(level, str):
        level = int(level) if level.isdigit() else level.upper()
    logger.setLevel(level)
    return logger

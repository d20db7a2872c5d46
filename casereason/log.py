"""
Console logging for the calling layer.

Usage:
    from casereason.log import configure_logging

    configure_logging("DEBUG")

Engine modules only ever call logging.getLogger(__name__); handlers are
installed here, by the CLI or API, never by the engine itself.
"""

import logging
import sys
from typing import Union


LOG_FORMAT = '%(asctime)s - %(name)s - %(levelname)s - %(message)s'
DATE_FORMAT = '%Y-%m-%d %H:%M:%S'

ROOT_LOGGER = "casereason"


def configure_logging(level: Union[str, int] = logging.WARNING) -> logging.Logger:
    """
    Install a console handler on the package logger.

    Calling it again only updates the level; handlers are not duplicated.
    """
    if isinstance(level, str):
        level = logging.getLevelName(level.upper())
        if not isinstance(level, int):
            level = logging.WARNING

    logger = logging.getLogger(ROOT_LOGGER)
    logger.setLevel(level)

    if not logger.handlers:
        handler = logging.StreamHandler(sys.stderr)
        handler.setFormatter(logging.Formatter(LOG_FORMAT, DATE_FORMAT))
        logger.addHandler(handler)

    for handler in logger.handlers:
        handler.setLevel(level)

    return logger

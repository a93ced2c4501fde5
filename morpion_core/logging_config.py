"""Stderr logging for the CLI and the web app; stdout stays free for the text grid."""
import logging
import sys
from typing import Union

LOG_FORMAT = '%(asctime)s %(levelname)s %(name)s: %(message)s'


def setup_logging(level: Union[int, str] = logging.WARNING) -> logging.Logger:
    """Routes the 'morpion_core' loggers to stderr at the given level. Calling it again replaces the handler."""
    logger = logging.getLogger("morpion_core")
    logger.setLevel(level)
    logger.handlers.clear()
    handler = logging.StreamHandler(sys.stderr)
    handler.setFormatter(logging.Formatter(LOG_FORMAT, datefmt='%H:%M:%S'))
    logger.addHandler(handler)
    return logger

import logging
import sys

from authdesk.config import LOG_LEVEL

LOGGER_NAME = "AuthDesk"
LOG_FORMAT = '%(asctime)s | %(levelname)s | %(name)s | %(message)s'

# uvicorn's own access log repeats what the request middleware writes
QUIET_LOGGERS = ("uvicorn.access",)


def setup_logger(level=LOG_LEVEL, stream=None, name=LOGGER_NAME):
    """
    Console logger shared by the whole app.
    `level` takes a name ("DEBUG") or a number; unknown names fall back to INFO.
    Calling it again only updates the level, the handler is attached once.
    """
    logger = logging.getLogger(name)
    if isinstance(level, str):
        level = getattr(logging, level.upper(), logging.INFO)
    logger.setLevel(level)

    if not logger.handlers:
        handler = logging.StreamHandler(stream or sys.stdout)
        handler.setFormatter(logging.Formatter(LOG_FORMAT, datefmt='%H:%M:%S'))
        logger.addHandler(handler)

    for noisy in QUIET_LOGGERS:
        logging.getLogger(noisy).setLevel(logging.WARNING)

    return logger


log = setup_logger()

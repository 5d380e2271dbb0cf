import logging
import os

LOG_LEVEL = os.environ.get("CATALOG_RANKER_LOG_LEVEL", "INFO").upper()
ROOT_LOGGER_NAME = "catalog_ranker"

logger = logging.getLogger(ROOT_LOGGER_NAME)
if not logger.handlers:
    logger.setLevel(LOG_LEVEL)
    ch = logging.StreamHandler()
    fmt = logging.Formatter("[%(asctime)s] [%(levelname)s] [%(name)s] %(message)s")
    ch.setFormatter(fmt)
    logger.addHandler(ch)


def get_logger(name: str) -> logging.Logger:
    """Child of the package logger, so records share its handler and level."""
    if name == ROOT_LOGGER_NAME or name.startswith(ROOT_LOGGER_NAME + "."):
        return logging.getLogger(name)
    return logger.getChild(name)

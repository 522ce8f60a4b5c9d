"""Logging configuration shared by the CLI and scripts."""

import logging
import sys

LOG_FORMAT = "%(asctime)s | %(levelname)-8s | %(name)s | %(message)s"
LOG_DATE_FORMAT = "%Y-%m-%d %H:%M:%S"

# Loggers that are too chatty at INFO
NOISY_LOGGERS = ["sqlalchemy.engine", "sqlalchemy.pool"]


def setup_logging(verbose: bool = False) -> logging.Logger:
    """Configure the equitrack logger.

    Args:
        verbose: Log DEBUG records instead of WARNING and above

    Returns:
        The configured "equitrack" logger
    """
    logger = logging.getLogger("equitrack")
    logger.setLevel(logging.DEBUG if verbose else logging.WARNING)

    if not logger.handlers:
        handler = logging.StreamHandler(sys.stderr)
        handler.setFormatter(logging.Formatter(LOG_FORMAT, datefmt=LOG_DATE_FORMAT))
        logger.addHandler(handler)

    for name in NOISY_LOGGERS:
        logging.getLogger(name).setLevel(logging.WARNING)

    return logger

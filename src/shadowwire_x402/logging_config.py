"""
Logging configuration for shadowwire-x402
"""

import logging
import sys

PACKAGE_LOGGER = "shadowwire_x402"

LOG_FORMAT = "%(asctime)s - %(levelname)-8s %(name)s %(filename)s:%(lineno)d %(message)s"


def setup_logging(level: int = logging.INFO, logger_name: str = PACKAGE_LOGGER) -> logging.Logger:
    """
    Send shadowwire-x402 logs to stdout with timestamp, file and line number.

    Only the package logger is configured, so host applications keep control
    of the root logger. Pass ``logger_name=""`` to configure the root logger.

    Args:
        level: Logging level (default: INFO)
        logger_name: Logger to configure

    Returns:
        The configured logger
    """
    target = logging.getLogger(logger_name)
    target.setLevel(level)

    # Calling setup_logging twice must not duplicate output
    for handler in target.handlers[:]:
        target.removeHandler(handler)

    handler = logging.StreamHandler(sys.stdout)
    handler.setLevel(level)
    handler.setFormatter(logging.Formatter(fmt=LOG_FORMAT, datefmt="%Y-%m-%d %H:%M:%S"))
    target.addHandler(handler)
    if logger_name:
        target.propagate = False
    return target


def get_logger(name: str) -> logging.Logger:
    """Get a logger under the package namespace (typically called with __name__)"""
    return logging.getLogger(name)

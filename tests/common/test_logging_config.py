import logging

import pytest

from shadowwire_x402.logging_config import PACKAGE_LOGGER, get_logger, setup_logging


@pytest.fixture
def package_logger():
    logger = logging.getLogger(PACKAGE_LOGGER)
    yield logger
    for handler in logger.handlers[:]:
        logger.removeHandler(handler)
    logger.propagate = True
    logger.setLevel(logging.NOTSET)


def test_setup_logging_is_idempotent(package_logger):
    setup_logging(logging.DEBUG)
    logger = setup_logging(logging.DEBUG)

    assert logger is package_logger
    assert logger.level == logging.DEBUG
    assert len(logger.handlers) == 1
    assert logger.propagate is False


def test_module_loggers_inherit_package_level(package_logger):
    setup_logging(logging.WARNING)
    assert get_logger("shadowwire_x402.server.x402_server").getEffectiveLevel() == logging.WARNING

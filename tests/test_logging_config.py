import logging

import pytest

from voxel_tracer import config, setup_logging


@pytest.fixture
def package_logger():
    logger = logging.getLogger("voxel_tracer")
    handlers, level = list(logger.handlers), logger.level
    yield logger
    logger.handlers = handlers
    logger.setLevel(level)


def test_setup_logging_level_and_format(package_logger):
    logger = setup_logging("debug")
    assert logger is package_logger
    assert logger.level == logging.DEBUG
    assert logger.handlers[-1].formatter._fmt == config.LOG_FORMAT


def test_setup_logging_is_idempotent(package_logger):
    before = len(package_logger.handlers)
    setup_logging("INFO")
    setup_logging("WARNING")
    assert len(package_logger.handlers) == before + 1
    assert package_logger.level == logging.WARNING


def test_setup_logging_defaults_to_config_level(package_logger):
    logger = setup_logging()
    assert logger.level == getattr(logging, config.LOG_LEVEL.upper(), logging.INFO)

"""Tests for logging setup."""

import logging
import logging.handlers

import pytest

from leaveflow.common.logger import get_logger, setup_logger


@pytest.fixture
def logger_name(request):
    name = f"leaveflow.test.{request.node.name}"
    yield name
    logger = logging.getLogger(name)
    for handler in list(logger.handlers):
        handler.close()
        logger.removeHandler(handler)


def test_get_logger_namespaced():
    assert get_logger("approval_engine").name == "leaveflow.approval_engine"
    assert get_logger("leaveflow.api").name == "leaveflow.api"
    assert get_logger("leaveflow").name == "leaveflow"


def test_setup_sets_level(logger_name):
    logger = setup_logger(logger_name, level="debug")

    assert logger.level == logging.DEBUG
    assert len(logger.handlers) == 1


def test_invalid_level(logger_name):
    with pytest.raises(ValueError, match="Invalid log level"):
        setup_logger(logger_name, level="verbose")


def test_no_duplicate_handlers(logger_name):
    setup_logger(logger_name)
    logger = setup_logger(logger_name, level="WARNING")

    assert len(logger.handlers) == 1
    assert logger.level == logging.WARNING


def test_file_logging(tmp_path, logger_name):
    logger = setup_logger(
        logger_name,
        log_dir=str(tmp_path / "logs"),
        file_logging=True,
        console_logging=False,
    )
    logger.info("hello")

    handlers = logger.handlers
    assert len(handlers) == 1
    assert isinstance(handlers[0], logging.handlers.RotatingFileHandler)
    handlers[0].flush()
    assert "hello" in (tmp_path / "logs" / f"{logger_name}.log").read_text()

"""
Tests for logging setup.
"""
import logging
import logging.handlers

import pytest

from rosa_network.utils.logging_utils import setup_logging, setup_logging_from_config


@pytest.fixture(autouse=True)
def restore_root_logger():
    root = logging.getLogger()
    handlers, level = root.handlers[:], root.level
    yield
    for handler in root.handlers:
        if handler not in handlers:
            handler.close()
    root.handlers[:] = handlers
    root.setLevel(level)


def test_setup_logging_console_only():
    logger = setup_logging(level=logging.WARNING)

    assert logger.level == logging.WARNING
    assert len(logger.handlers) == 1
    assert isinstance(logger.handlers[0], logging.StreamHandler)
    assert logging.getLogger("botocore").level == logging.WARNING


def test_setup_logging_to_file(tmp_path):
    logger = setup_logging(log_dir=str(tmp_path / "logs"), log_to_console=False, log_to_file=True)

    file_handlers = [h for h in logger.handlers if isinstance(h, logging.handlers.RotatingFileHandler)]
    assert len(file_handlers) == 1

    logging.getLogger("rosa_network.test").info("written to file")
    file_handlers[0].flush()
    assert "written to file" in (tmp_path / "logs" / "rosa_network.log").read_text()


def test_setup_logging_from_config():
    logger = setup_logging_from_config({"level": "error"})
    assert logger.level == logging.ERROR

    logger = setup_logging_from_config({"level": "error"}, debug=True)
    assert logger.level == logging.DEBUG
    assert logging.getLogger("botocore").level == logging.WARNING

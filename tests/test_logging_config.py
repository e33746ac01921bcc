"""Log setup tests."""

import logging

from painting_service.logging_config import get_logger, setup_logging


def test_http_client_request_lines_are_quieted():
    setup_logging()

    assert logging.getLogger("httpx").level == logging.WARNING
    assert logging.getLogger("httpcore").level == logging.WARNING


def test_get_logger_uses_module_name():
    assert get_logger("painting_service.workflow") is logging.getLogger("painting_service.workflow")

import json
import logging
import logging.handlers

import pytest

from swapclient.core import logger as log_module
from swapclient.core.logger import ColorFormatter, JSONFormatter, setup_logging
from swapclient.core.settings import ClientConfig


@pytest.fixture
def restore_root_logger():
    root = logging.getLogger()
    handlers, level = root.handlers[:], root.level
    yield root
    log_module._stop_listener()
    root.handlers = handlers
    root.setLevel(level)


def make_record(level=logging.INFO, msg="Order filled"):
    return logging.LogRecord("OrderWatcher", level, __file__, 1, msg, None, None)


def test_json_formatter():
    payload = json.loads(JSONFormatter().format(make_record()))

    assert payload["level"] == "INFO"
    assert payload["logger"] == "OrderWatcher"
    assert payload["message"] == "Order filled"


def test_color_formatter_wraps_level_colour():
    line = ColorFormatter().format(make_record(logging.ERROR))

    assert line.startswith(ColorFormatter.LEVEL_COLOURS[logging.ERROR])
    assert line.endswith(ColorFormatter.RESET)
    assert "Order filled" in line


def test_color_formatter_plain_for_custom_level():
    line = ColorFormatter().format(make_record(level=25))

    assert "\x1b[" not in line
    assert "Order filled" in line


def test_setup_logging_installs_queue_handler(restore_root_logger):
    setup_logging(ClientConfig(ENV="prod", LOG_LEVEL="DEBUG"))

    root = restore_root_logger
    assert root.level == logging.DEBUG
    assert len(root.handlers) == 1
    assert isinstance(root.handlers[0], logging.handlers.QueueHandler)
    assert isinstance(log_module._log_listener.handlers[0].formatter, JSONFormatter)
    assert logging.getLogger("httpx").level == logging.WARNING


def test_setup_logging_twice_replaces_listener(restore_root_logger):
    setup_logging(ClientConfig())
    first = log_module._log_listener

    setup_logging(ClientConfig())

    assert log_module._log_listener is not first
    assert len(restore_root_logger.handlers) == 1

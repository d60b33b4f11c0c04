import atexit
import json
import logging
import logging.handlers
import sys
from datetime import datetime, timezone
from queue import Queue
from typing import Optional

from swapclient.core.settings import ClientConfig

# Kept alive between calls so a second setup can stop the first listener
_log_listener: Optional[logging.handlers.QueueListener] = None


class JSONFormatter(logging.Formatter):
    def format(self, record):
        log_obj = {
            "timestamp": datetime.now(timezone.utc).isoformat(),
            "level": record.levelname,
            "logger": record.name,
            "message": record.getMessage(),
        }
        if record.exc_info:
            log_obj["exception"] = self.formatException(record.exc_info)
        return json.dumps(log_obj)


class ColorFormatter(logging.Formatter):
    """Console lines coloured by level; levels without a colour print plain."""

    RESET = "\x1b[0m"
    LEVEL_COLOURS = {
        logging.DEBUG: "\x1b[38;20m",  # grey
        logging.INFO: "\x1b[32;20m",  # green
        logging.WARNING: "\x1b[33;20m",  # yellow
        logging.ERROR: "\x1b[31;20m",  # red
        logging.CRITICAL: "\x1b[31;1m",  # bold red
    }
    LINE = "%(asctime)s - %(name)s - %(levelname)s - %(message)s"

    def __init__(self):
        super().__init__(self.LINE, datefmt="%H:%M:%S")
        self._by_level = {
            level: logging.Formatter(colour + self.LINE + self.RESET, datefmt="%H:%M:%S")
            for level, colour in self.LEVEL_COLOURS.items()
        }

    def format(self, record):
        formatter = self._by_level.get(record.levelno)
        if formatter is None:
            return super().format(record)
        return formatter.format(record)


def _stop_listener():
    global _log_listener

    if _log_listener is not None:
        _log_listener.stop()
        _log_listener = None


def setup_logging(config: Optional[ClientConfig] = None):
    """
    Configures Non-Blocking Logging via QueueHandler.

    The client never calls this on its own; applications and scripts
    opt in once at startup.
    """
    global _log_listener

    config = config or ClientConfig()

    root_logger = logging.getLogger()
    root_logger.setLevel(config.LOG_LEVEL)

    if root_logger.handlers:
        root_logger.handlers = []

    _stop_listener()

    # 1. The Actual Destination (Blocking)
    console_handler = logging.StreamHandler(sys.stdout)
    if config.ENV == "prod":
        console_handler.setFormatter(JSONFormatter())
    else:
        console_handler.setFormatter(ColorFormatter())

    # 2. The Queue (Buffer)
    log_queue = Queue(-1)  # Unlimited size

    # 3. The QueueHandler (Non-Blocking Interface)
    root_logger.addHandler(logging.handlers.QueueHandler(log_queue))

    # 4. The Listener (Background Thread)
    _log_listener = logging.handlers.QueueListener(log_queue, console_handler)
    _log_listener.start()

    # Ensure clean shutdown of logging thread
    atexit.register(_stop_listener)

    # Silence noisy libs
    logging.getLogger("httpx").setLevel(logging.WARNING)
    logging.getLogger("httpcore").setLevel(logging.WARNING)

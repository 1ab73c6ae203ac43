# -*- coding: utf-8 -*-
import logging
import sys
from collections import deque
from typing import List, Optional

PACKAGE_LOGGER_NAME = "aideas_mcp"
LOG_FORMAT = "%(asctime)s %(levelname)5s: %(message)s"


class LogBuffer(logging.Handler):
    """
    Keeps the most recent formatted log lines in memory.

    Error payloads returned to MCP clients embed these lines, so one buffer
    is created per process and cleared at the start of every tool call.
    """

    def __init__(self, capacity: int = 1000, level: int = logging.INFO):
        super().__init__(level=level)
        self._lines: deque = deque(maxlen=capacity)
        self.setFormatter(logging.Formatter(LOG_FORMAT))

    def emit(self, record: logging.LogRecord) -> None:
        try:
            self._lines.append(self.format(record))
        except Exception:
            self.handleError(record)

    def get_logs(self) -> List[str]:
        return list(self._lines)

    def clear(self) -> None:
        self._lines.clear()


def setup_logging(
    level: str = "INFO",
    buffer: Optional[LogBuffer] = None,
) -> logging.Logger:
    """
    Configure the package logger.

    Output goes to stderr: stdout carries the stdio MCP transport.
    """
    logger = logging.getLogger(PACKAGE_LOGGER_NAME)
    logger.setLevel(level)
    logger.propagate = False

    if not any(
        isinstance(h, logging.StreamHandler)
        and getattr(h, "stream", None) is sys.stderr
        for h in logger.handlers
    ):
        handler = logging.StreamHandler(sys.stderr)
        handler.setFormatter(logging.Formatter(LOG_FORMAT))
        logger.addHandler(handler)

    if buffer is not None and buffer not in logger.handlers:
        logger.addHandler(buffer)
    return logger

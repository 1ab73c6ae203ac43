# -*- coding: utf-8 -*-
import logging

from aideas_mcp.utils import LogBuffer, setup_logging


def test_buffer_keeps_most_recent_lines():
    buffer = LogBuffer(capacity=2)
    logger = logging.getLogger("aideas_mcp.test.capacity")
    logger.addHandler(buffer)
    logger.setLevel(logging.INFO)
    try:
        for i in range(3):
            logger.info(f"line {i}")
    finally:
        logger.removeHandler(buffer)

    logs = buffer.get_logs()
    assert len(logs) == 2
    assert logs[0].endswith("INFO: line 1")
    assert logs[1].endswith("INFO: line 2")


def test_clear():
    buffer = LogBuffer()
    buffer.handle(
        logging.LogRecord("x", logging.ERROR, __file__, 1, "oops", None, None),
    )
    assert len(buffer.get_logs()) == 1
    buffer.clear()
    assert buffer.get_logs() == []


def test_setup_logging_attaches_buffer_once():
    buffer = LogBuffer()
    logger = setup_logging("DEBUG", buffer)
    setup_logging("DEBUG", buffer)
    try:
        assert logger.name == "aideas_mcp"
        assert logger.propagate is False
        assert logger.handlers.count(buffer) == 1

        logging.getLogger("aideas_mcp.manager").info("from a child logger")
        assert buffer.get_logs()[-1].endswith("from a child logger")
    finally:
        logger.removeHandler(buffer)

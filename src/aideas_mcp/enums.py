# -*- coding: utf-8 -*-
from enum import Enum


class TaskStatus(str, Enum):
    """Task status as reported by the backing service"""

    PENDING = "PENDING"
    SKIPPED = "SKIPPED"
    LOADING = "LOADING"
    RUNNING = "RUNNING"
    SUCCESS = "SUCCESS"
    FAILURE = "FAILURE"
    STOPPED = "STOPPED"

    @classmethod
    def parse(cls, value, default=None):
        if isinstance(value, cls):
            return value
        try:
            return cls(str(value).strip().upper())
        except ValueError:
            return default


class RuntimeStatusReason(str, Enum):
    NOT_INSTALLED = "NOT_INSTALLED"
    NOT_RUNNING = "NOT_RUNNING"
    OK = "OK"
    UNEXPECTED = "UNEXPECTED"


class ErrorCode(str, Enum):
    RUNTIME_UNAVAILABLE = "RUNTIME_UNAVAILABLE"
    PORT_EXHAUSTED = "PORT_EXHAUSTED"
    START_FAILED = "START_FAILED"
    SERVICE_UNREACHABLE = "SERVICE_UNREACHABLE"
    REMOTE_ERROR = "REMOTE_ERROR"
    STALE_REFERENCE = "STALE_REFERENCE"
    INVALID_ARGUMENT = "INVALID_ARGUMENT"

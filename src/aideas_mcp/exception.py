# -*- coding: utf-8 -*-
"""
Error taxonomy of the orchestration layer.

The probe and the orchestrator report failures through return values; the
HTTP client and the service facade raise the exceptions below, and the MCP
tools turn them into error payloads.
"""

from typing import Any, Dict, Optional

from .enums import ErrorCode


class AideasException(Exception):
    """
    Base class of all errors raised by this package

    Attributes:
        code: Error code from the taxonomy
        message: Human-readable error message
        details: Additional error details
    """

    def __init__(
        self,
        code: ErrorCode,
        message: str,
        details: Optional[Dict[str, Any]] = None,
    ):
        super().__init__(message)
        self.code = code
        self.message = message
        self.details = details or {}

    def __str__(self) -> str:
        return f"{self.code.value}: {self.message}"

    def __repr__(self) -> str:
        return (
            f"{self.__class__.__name__}(code='{self.code.value}', "
            f"message='{self.message}')"
        )

    def to_dict(self) -> Dict[str, Any]:
        return {
            "code": self.code.value,
            "message": self.message,
            "details": self.details,
        }


class RuntimeUnavailableError(AideasException):
    """Container runtime is missing or its daemon is down"""

    def __init__(
        self,
        message: str,
        details: Optional[Dict[str, Any]] = None,
    ):
        super().__init__(ErrorCode.RUNTIME_UNAVAILABLE, message, details)


class PortExhaustedError(AideasException):
    """No free host port was found"""

    def __init__(
        self,
        message: str,
        details: Optional[Dict[str, Any]] = None,
    ):
        super().__init__(ErrorCode.PORT_EXHAUSTED, message, details)


class StartFailedError(AideasException):
    """The container did not verify as running after launch"""

    def __init__(
        self,
        message: str,
        details: Optional[Dict[str, Any]] = None,
    ):
        super().__init__(ErrorCode.START_FAILED, message, details)


class ServiceUnreachableError(AideasException):
    """The backing service did not answer within the readiness budget"""

    def __init__(
        self,
        message: str,
        details: Optional[Dict[str, Any]] = None,
    ):
        super().__init__(ErrorCode.SERVICE_UNREACHABLE, message, details)


class RemoteError(AideasException):
    """The backing service answered with an error"""

    def __init__(
        self,
        message: str,
        status_code: Optional[int] = None,
        details: Optional[Dict[str, Any]] = None,
    ):
        details = dict(details or {})
        if status_code is not None:
            details.setdefault("status_code", status_code)
        super().__init__(ErrorCode.REMOTE_ERROR, message, details)
        self.status_code = status_code


class StaleReferenceError(AideasException):
    """Task id unknown to, or expired from, the local task store"""

    def __init__(
        self,
        message: str,
        details: Optional[Dict[str, Any]] = None,
    ):
        super().__init__(ErrorCode.STALE_REFERENCE, message, details)


class InvalidArgumentError(AideasException, ValueError):
    def __init__(
        self,
        message: str,
        details: Optional[Dict[str, Any]] = None,
    ):
        super().__init__(ErrorCode.INVALID_ARGUMENT, message, details)

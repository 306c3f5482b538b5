"""Error taxonomy for stylist workflows.

Every failure is raised with its kind attached, so callers never need to
inspect message text to decide how to present it.
"""

from enum import Enum
from typing import Optional


class ErrorKind(str, Enum):
    CONFIGURATION = "configuration"
    VALIDATION = "validation"
    SAFETY_BLOCK = "safety_block"
    MALFORMED_RESPONSE = "malformed_response"
    TRANSPORT = "transport"
    DECODE = "decode"


class StylistError(Exception):
    """Base class for all failures raised by stylist workflows."""

    kind: ErrorKind = ErrorKind.TRANSPORT

    def __init__(self, message: str) -> None:
        super().__init__(message)
        self.message = message


class ConfigurationError(StylistError):
    kind = ErrorKind.CONFIGURATION


class ValidationError(StylistError):
    kind = ErrorKind.VALIDATION


class WorkflowBusyError(ValidationError):
    """Raised when a workflow is triggered while another one is in flight."""


class SafetyBlockError(StylistError):
    kind = ErrorKind.SAFETY_BLOCK

    def __init__(self, message: str, block_reason: str) -> None:
        super().__init__(message)
        self.block_reason = block_reason


class MalformedResponseError(StylistError):
    kind = ErrorKind.MALFORMED_RESPONSE

    def __init__(self, message: str, feedback: Optional[str] = None) -> None:
        super().__init__(message)
        self.feedback = feedback


class TransportError(StylistError):
    kind = ErrorKind.TRANSPORT

    def __init__(
        self,
        message: str,
        *,
        status_code: Optional[int] = None,
        rate_limited: bool = False,
    ) -> None:
        super().__init__(message)
        self.status_code = status_code
        self.rate_limited = rate_limited


class DecodeError(StylistError):
    kind = ErrorKind.DECODE


__all__ = [
    "ErrorKind",
    "StylistError",
    "ConfigurationError",
    "ValidationError",
    "WorkflowBusyError",
    "SafetyBlockError",
    "MalformedResponseError",
    "TransportError",
    "DecodeError",
]

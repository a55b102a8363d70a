# functions-python/runrun_logic/errors.py
from enum import Enum
from typing import Any, Dict, Optional

from firebase_functions.https_fn import FunctionsErrorCode, HttpsError


class ErrorCode(str, Enum):
    ERR_INTERNAL = "ERR_INTERNAL"
    ERR_UNAUTHENTICATED = "ERR_UNAUTHENTICATED"
    ERR_PROFILE_NOT_FOUND = "ERR_PROFILE_NOT_FOUND"
    ERR_NO_PUSH_TOKEN = "ERR_NO_PUSH_TOKEN"
    ERR_NOTIFICATION_FAILED = "ERR_NOTIFICATION_FAILED"
    ERR_CASCADE_FAILED = "ERR_CASCADE_FAILED"
    ERR_ACCOUNT_DELETE_FAILED = "ERR_ACCOUNT_DELETE_FAILED"


# Callable error class reported to the client for each backend code.
FUNCTIONS_ERROR_CODES: Dict[ErrorCode, FunctionsErrorCode] = {
    ErrorCode.ERR_INTERNAL: FunctionsErrorCode.INTERNAL,
    ErrorCode.ERR_UNAUTHENTICATED: FunctionsErrorCode.UNAUTHENTICATED,
    ErrorCode.ERR_PROFILE_NOT_FOUND: FunctionsErrorCode.NOT_FOUND,
    ErrorCode.ERR_NO_PUSH_TOKEN: FunctionsErrorCode.FAILED_PRECONDITION,
    ErrorCode.ERR_NOTIFICATION_FAILED: FunctionsErrorCode.INTERNAL,
    ErrorCode.ERR_CASCADE_FAILED: FunctionsErrorCode.INTERNAL,
    ErrorCode.ERR_ACCOUNT_DELETE_FAILED: FunctionsErrorCode.INTERNAL,
}


class BackendError(Exception):
    """Base exception for RunRun backend operations.

    Attributes:
        code: ErrorCode enum
        message: optional human message (not shown to client; for logs)
        details: optional structured data (e.g. {'userId': 'abc'})
    """

    def __init__(
        self,
        code: ErrorCode,
        message: Optional[str] = None,
        details: Optional[Dict[str, Any]] = None
    ):
        self.code = code
        self.details = details or {}
        super().__init__(message or code.value)

    def to_dict(self) -> Dict[str, Any]:
        return {"code": self.code.value, "details": self.details}


class CascadeError(BackendError):
    """The atomic phase of an account deletion did not commit."""

    def __init__(self, message: Optional[str] = None, details: Optional[Dict[str, Any]] = None):
        super().__init__(ErrorCode.ERR_CASCADE_FAILED, message, details)


def to_https_error(err: BackendError) -> HttpsError:
    """Shape a BackendError the way every callable reports failures."""
    details: Dict[str, Any] = {"error": err.code.value}
    if err.details:
        details["meta"] = err.details
    return HttpsError(
        FUNCTIONS_ERROR_CODES.get(err.code, FunctionsErrorCode.INTERNAL),
        err.code.value,
        details=details,
    )

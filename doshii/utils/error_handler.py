"""
Custom error handling for the Doshii client.

This module defines the application exceptions raised by the HTTP transport
and helpers to render them consistently. The order client itself never
catches or wraps errors: whatever the transport raises reaches the caller.
"""

import logging
import traceback
from datetime import datetime, timezone
from enum import Enum
from typing import Any, Dict, Optional, Union

logger = logging.getLogger(__name__)


class ErrorCode(Enum):
    """
    Standardised error codes for the client.
    """

    # General errors
    UNKNOWN_ERROR = "UNKNOWN_ERROR"
    CONFIGURATION_ERROR = "CONFIGURATION_ERROR"

    # Connection errors
    DOSHII_CONNECTION_FAILED = "DOSHII_CONNECTION_FAILED"
    DOSHII_API_ERROR = "DOSHII_API_ERROR"
    CLIENT_NOT_INITIALIZED = "CLIENT_NOT_INITIALIZED"

    # API errors
    RATE_LIMIT_EXCEEDED = "RATE_LIMIT_EXCEEDED"
    UNAUTHORIZED = "UNAUTHORIZED"
    RESOURCE_NOT_FOUND = "RESOURCE_NOT_FOUND"


class ErrorSeverity(Enum):
    """
    Severity levels for errors.
    """

    LOW = "low"
    MEDIUM = "medium"
    HIGH = "high"
    CRITICAL = "critical"


class AppException(Exception):
    """
    Base exception for every custom exception in the package.
    """

    def __init__(
        self,
        message: str,
        error_code: ErrorCode = ErrorCode.UNKNOWN_ERROR,
        details: Optional[Dict[str, Any]] = None,
        status_code: int = 500,
        severity: ErrorSeverity = ErrorSeverity.MEDIUM,
        is_retryable: bool = False,
    ):
        """
        Initialise the exception.

        Args:
            message: Error message
            error_code: Standardised error code
            details: Extra information about the error
            status_code: Associated HTTP status code
            severity: Error severity
            is_retryable: Whether the operation may be retried by the caller
        """
        super().__init__(message)
        self.message = message
        self.error_code = error_code
        self.details = details or {}
        self.status_code = status_code
        self.severity = severity
        self.is_retryable = is_retryable
        self.timestamp = datetime.now(timezone.utc)

    def to_dict(self) -> Dict[str, Any]:
        """
        Convert the exception to a dictionary.

        Returns:
            Dict: Representation of the exception
        """
        return {
            "error_type": self.__class__.__name__,
            "message": self.message,
            "error_code": self.error_code.value,
            "details": self.details,
            "status_code": self.status_code,
            "severity": self.severity.value,
            "is_retryable": self.is_retryable,
            "timestamp": self.timestamp.isoformat(),
        }

    def __str__(self) -> str:
        return f"{self.error_code.value}: {self.message}"


class ConfigurationException(AppException):
    """
    Raised when required settings are missing or inconsistent.
    """

    def __init__(self, message: str, setting: Optional[str] = None, **kwargs):
        super().__init__(
            message=message,
            error_code=ErrorCode.CONFIGURATION_ERROR,
            status_code=500,
            severity=ErrorSeverity.CRITICAL,
            is_retryable=False,
            **kwargs,
        )
        self.setting = setting
        self.details.update({"setting": setting})


class DoshiiAPIException(AppException):
    """
    Exception for errors returned by, or while talking to, the Doshii API.
    """

    def __init__(
        self,
        message: str,
        api_response_code: Optional[int] = None,
        method: Optional[str] = None,
        endpoint: Optional[str] = None,
        response_body: Any = None,
        rate_limited: bool = False,
        retry_after: Optional[int] = None,
        error_code: Optional[ErrorCode] = None,
        **kwargs,
    ):
        """
        Initialise the Doshii API exception.

        Args:
            message: Error message
            api_response_code: HTTP status returned by Doshii (None for network errors)
            method: HTTP method of the failed request
            endpoint: Path of the failed request
            response_body: Decoded error body sent by Doshii
            rate_limited: Whether the request was rejected by rate limiting
            retry_after: Seconds to wait before retrying
            error_code: Explicit error code, derived from the status when omitted
            **kwargs: Extra arguments for AppException
        """
        severity = ErrorSeverity.MEDIUM
        is_retryable = False

        if error_code is None:
            if rate_limited:
                error_code = ErrorCode.RATE_LIMIT_EXCEEDED
            elif api_response_code in (401, 403):
                error_code = ErrorCode.UNAUTHORIZED
            elif api_response_code == 404:
                error_code = ErrorCode.RESOURCE_NOT_FOUND
            elif api_response_code is None:
                error_code = ErrorCode.DOSHII_CONNECTION_FAILED
            else:
                error_code = ErrorCode.DOSHII_API_ERROR

        if rate_limited:
            severity = ErrorSeverity.LOW
            is_retryable = True
        elif api_response_code is None or api_response_code >= 500:
            severity = ErrorSeverity.HIGH
            is_retryable = True

        super().__init__(
            message=message,
            error_code=error_code,
            status_code=api_response_code or 503,
            severity=severity,
            is_retryable=is_retryable,
            **kwargs,
        )

        self.api_response_code = api_response_code
        self.method = method
        self.endpoint = endpoint
        self.response_body = response_body
        self.rate_limited = rate_limited
        self.retry_after = retry_after

        self.details.update(
            {
                "api_response_code": api_response_code,
                "method": method,
                "endpoint": endpoint,
                "response_body": response_body,
                "rate_limited": rate_limited,
                "retry_after": retry_after,
            }
        )


# === UTILITY FUNCTIONS ===


def create_error_response(exception: Union[AppException, Exception], include_traceback: bool = False) -> Dict[str, Any]:
    """
    Build a standardised error payload.

    Args:
        exception: Exception to convert
        include_traceback: Whether to include the formatted traceback

    Returns:
        Dict: Error payload
    """
    if isinstance(exception, AppException):
        error_dict = exception.to_dict()
    else:
        error_dict = AppException(
            message=f"{type(exception).__name__}: {exception}",
            details={"original_exception": type(exception).__name__},
        ).to_dict()

    if include_traceback:
        error_dict["traceback"] = "".join(
            traceback.format_exception(type(exception), exception, exception.__traceback__)
        )

    return {"error": True, **error_dict}


def log_error(
    exception: Exception,
    context: Optional[Dict[str, Any]] = None,
    level: int = logging.ERROR,
) -> None:
    """
    Log an error consistently.

    Args:
        exception: Exception to log
        context: Additional context
        level: Logging level
    """
    context = context or {}

    log_data = {
        "exception_type": type(exception).__name__,
        "exception_message": str(exception),
        **context,
    }

    if isinstance(exception, AppException):
        message = f"{exception.error_code.value}: {exception.message}"
        log_data.update(
            {
                "error_code": exception.error_code.value,
                "severity": exception.severity.value,
                "is_retryable": exception.is_retryable,
            }
        )
    else:
        message = f"Unhandled exception: {type(exception).__name__}: {str(exception)}"

    logger.log(level, message, extra=log_data)

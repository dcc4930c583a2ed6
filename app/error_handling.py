"""
Error classification, user-facing messages and retry with exponential backoff.

Any raised error (or an error-shaped value such as an API error payload) can
be turned into an AppError that says what kind of failure it was, how bad it
is, whether retrying makes sense, and what to tell the user.
"""

import asyncio
import logging
import time
from dataclasses import dataclass, field
from datetime import datetime
from typing import Any, Awaitable, Callable, Dict, List, Mapping, Optional, TypeVar

from sqlalchemy.exc import IntegrityError, OperationalError

from app.config import settings
from app.exceptions import (
    ConflictError,
    NotFoundError,
    ServiceValidationError,
    UnauthorizedError,
)
from domain.dates import utcnow
from domain.enums import ErrorSeverity, ErrorType

logger = logging.getLogger("mealtracker.errors")

T = TypeVar("T")


# ============================================================================
# User-facing messages
# ============================================================================

ERROR_MESSAGES: Dict[ErrorType, str] = {
    # Network & API
    ErrorType.NETWORK_ERROR: "Unable to connect. Please check your internet connection and try again.",
    ErrorType.API_ERROR: "Server error occurred. Please try again in a few moments.",
    ErrorType.TIMEOUT_ERROR: "Request timed out. Please try again.",
    # Authentication
    ErrorType.AUTH_ERROR: "Authentication failed. Please sign in again.",
    ErrorType.UNAUTHORIZED: "You don't have permission to perform this action.",
    ErrorType.SESSION_EXPIRED: "Your session has expired. Please sign in again.",
    # Database
    ErrorType.DATABASE_ERROR: "Database error occurred. Please try again.",
    ErrorType.CONSTRAINT_ERROR: "This action conflicts with existing data. Please check and try again.",
    ErrorType.NOT_FOUND: "The requested item could not be found.",
    # Validation
    ErrorType.VALIDATION_ERROR: "Please check your input and try again.",
    ErrorType.INVALID_INPUT: "Some information is invalid. Please correct and try again.",
    ErrorType.MISSING_REQUIRED: "Please fill in all required fields.",
    # Application
    ErrorType.UNKNOWN_ERROR: "An unexpected error occurred. Please try again.",
    ErrorType.CLIENT_ERROR: "Something went wrong on your device. Please refresh and try again.",
    ErrorType.SERVER_ERROR: "Server is temporarily unavailable. Please try again later.",
}

ERROR_TITLES: Dict[ErrorType, str] = {
    ErrorType.NETWORK_ERROR: "Connection Problem",
    ErrorType.API_ERROR: "Server Error",
    ErrorType.TIMEOUT_ERROR: "Request Timeout",
    ErrorType.AUTH_ERROR: "Authentication Error",
    ErrorType.UNAUTHORIZED: "Access Denied",
    ErrorType.SESSION_EXPIRED: "Session Expired",
    ErrorType.DATABASE_ERROR: "Database Error",
    ErrorType.CONSTRAINT_ERROR: "Data Conflict",
    ErrorType.NOT_FOUND: "Not Found",
    ErrorType.VALIDATION_ERROR: "Invalid Input",
    ErrorType.INVALID_INPUT: "Invalid Data",
    ErrorType.MISSING_REQUIRED: "Missing Information",
    ErrorType.UNKNOWN_ERROR: "Unexpected Error",
    ErrorType.CLIENT_ERROR: "Client Error",
    ErrorType.SERVER_ERROR: "Server Unavailable",
}

ERROR_ACTIONS: Dict[ErrorType, List[str]] = {
    ErrorType.NETWORK_ERROR: ["Check your internet connection", "Try again"],
    ErrorType.API_ERROR: ["Wait a moment", "Try again"],
    ErrorType.TIMEOUT_ERROR: ["Try again"],
    ErrorType.AUTH_ERROR: ["Sign in again"],
    ErrorType.UNAUTHORIZED: ["Contact support if this seems wrong"],
    ErrorType.SESSION_EXPIRED: ["Sign in again"],
    ErrorType.DATABASE_ERROR: ["Try again", "Contact support if this continues"],
    ErrorType.CONSTRAINT_ERROR: ["Review your changes", "Try again"],
    ErrorType.NOT_FOUND: ["Go back", "Check if the item still exists"],
    ErrorType.VALIDATION_ERROR: ["Review your input", "Try again"],
    ErrorType.INVALID_INPUT: ["Fix the highlighted fields", "Try again"],
    ErrorType.MISSING_REQUIRED: ["Fill in required fields", "Try again"],
    ErrorType.UNKNOWN_ERROR: ["Refresh the page", "Try again"],
    ErrorType.CLIENT_ERROR: ["Refresh the page", "Clear your browser cache"],
    ErrorType.SERVER_ERROR: ["Try again later", "Contact support if urgent"],
}


def get_user_message(error_type: ErrorType) -> str:
    return ERROR_MESSAGES.get(error_type, ERROR_MESSAGES[ErrorType.UNKNOWN_ERROR])


def get_error_title(error_type: ErrorType) -> str:
    return ERROR_TITLES.get(error_type, ERROR_TITLES[ErrorType.UNKNOWN_ERROR])


def get_error_actions(error_type: ErrorType) -> List[str]:
    return list(ERROR_ACTIONS.get(error_type, ERROR_ACTIONS[ErrorType.UNKNOWN_ERROR]))


# ============================================================================
# Error records and retry configuration
# ============================================================================


@dataclass(frozen=True)
class RetryConfig:
    max_retries: int = 3
    initial_delay: float = 1.0  # seconds
    max_delay: float = 10.0  # seconds
    backoff_multiplier: float = 2

    @classmethod
    def from_settings(cls) -> "RetryConfig":
        return cls(
            max_retries=settings.retry_max_retries,
            initial_delay=settings.retry_initial_delay_sec,
            max_delay=settings.retry_max_delay_sec,
            backoff_multiplier=settings.retry_backoff_multiplier,
        )

    def delay_for(self, attempt: int) -> float:
        """Backoff before retrying after the given (0-based) attempt."""
        return min(self.initial_delay * self.backoff_multiplier**attempt, self.max_delay)


DEFAULT_RETRY_CONFIG = RetryConfig()


@dataclass
class AppError:
    """A classified error"""

    type: ErrorType
    message: str
    user_message: str
    severity: ErrorSeverity = ErrorSeverity.MEDIUM
    code: Optional[str] = None
    details: Optional[Dict[str, Any]] = None
    timestamp: datetime = field(default_factory=utcnow)
    retryable: bool = False
    max_retries: int = 0

    def to_dict(self) -> dict:
        return {
            "type": self.type.value,
            "severity": self.severity.value,
            "message": self.message,
            "userMessage": self.user_message,
            "code": self.code,
            "details": self.details,
            "timestamp": self.timestamp.isoformat(),
            "retryable": self.retryable,
            "maxRetries": self.max_retries,
        }


def create_app_error(
    error_type: ErrorType,
    message: str,
    retryable: bool = False,
    severity: ErrorSeverity = ErrorSeverity.MEDIUM,
    code: Optional[str] = None,
    details: Optional[Mapping[str, Any]] = None,
) -> AppError:
    return AppError(
        type=error_type,
        message=message,
        user_message=get_user_message(error_type),
        severity=severity,
        code=code,
        details=dict(details) if details else None,
        retryable=retryable,
        max_retries=DEFAULT_RETRY_CONFIG.max_retries if retryable else 0,
    )


# ============================================================================
# Classification
# ============================================================================

# Backend (PostgREST) error codes
_BACKEND_CODES: Dict[str, ErrorType] = {
    "PGRST116": ErrorType.NOT_FOUND,  # no rows returned
    "PGRST202": ErrorType.CONSTRAINT_ERROR,
    "PGRST301": ErrorType.SESSION_EXPIRED,  # JWT expired
    "PGRST302": ErrorType.AUTH_ERROR,  # JWT invalid
}


def classify_error(error: Any) -> AppError:
    """Classify an exception, message string or error payload."""
    if isinstance(error, BaseException):
        return _classify_exception(error)

    if isinstance(error, str):
        return create_app_error(ErrorType.UNKNOWN_ERROR, error)

    if isinstance(error, Mapping):
        return _classify_mapping(error)

    return create_app_error(ErrorType.UNKNOWN_ERROR, "An unexpected error occurred")


def _classify_exception(error: BaseException) -> AppError:
    message = str(error) or type(error).__name__
    code = getattr(error, "code", None)
    code = code if isinstance(code, str) else None

    # Application and library exceptions with a known meaning
    if isinstance(error, NotFoundError):
        return create_app_error(ErrorType.NOT_FOUND, message, code=code)
    if isinstance(error, ConflictError):
        return create_app_error(ErrorType.CONSTRAINT_ERROR, message, code=code)
    if isinstance(error, UnauthorizedError):
        return create_app_error(ErrorType.UNAUTHORIZED, message, code=code)
    if isinstance(error, ServiceValidationError):
        return create_app_error(ErrorType.VALIDATION_ERROR, message, code=code)
    if isinstance(error, ConnectionError):
        return create_app_error(ErrorType.NETWORK_ERROR, message, retryable=True)
    if isinstance(error, TimeoutError):
        return create_app_error(ErrorType.TIMEOUT_ERROR, message, retryable=True)
    if isinstance(error, IntegrityError):
        return create_app_error(ErrorType.CONSTRAINT_ERROR, message)
    if isinstance(error, OperationalError):
        return create_app_error(ErrorType.DATABASE_ERROR, message, retryable=True)

    lowered = message.lower()
    if "network" in lowered or "fetch" in lowered:
        return create_app_error(ErrorType.NETWORK_ERROR, message, retryable=True)
    if "timeout" in lowered or "aborted" in lowered:
        return create_app_error(ErrorType.TIMEOUT_ERROR, message, retryable=True)
    if "unauthorized" in lowered or "auth" in lowered:
        return create_app_error(ErrorType.AUTH_ERROR, message)

    return create_app_error(ErrorType.UNKNOWN_ERROR, message, retryable=True)


def _classify_mapping(error: Mapping[str, Any]) -> AppError:
    message = error.get("message")
    status = error.get("status") or error.get("statusCode")
    code = error.get("code")

    if isinstance(status, (int, float)) and not isinstance(status, bool):
        return _classify_http_status(int(status), message or "HTTP error")

    if code and isinstance(code, str):
        error_type = _BACKEND_CODES.get(code, ErrorType.DATABASE_ERROR)
        return create_app_error(
            error_type,
            message or "Database error",
            retryable=error_type is ErrorType.DATABASE_ERROR,
            code=code,
            details=error.get("details") if isinstance(error.get("details"), Mapping) else None,
        )

    return create_app_error(ErrorType.UNKNOWN_ERROR, message or "Unknown error occurred")


def _classify_http_status(status: int, message: str) -> AppError:
    if 400 <= status < 500:
        if status == 401:
            return create_app_error(ErrorType.UNAUTHORIZED, message)
        if status == 404:
            return create_app_error(ErrorType.NOT_FOUND, message)
        return create_app_error(ErrorType.CLIENT_ERROR, message)

    if status >= 500:
        return create_app_error(ErrorType.SERVER_ERROR, message, retryable=True)

    return create_app_error(ErrorType.API_ERROR, message, retryable=True)


# ============================================================================
# Retry
# ============================================================================


def retry_operation(
    operation: Callable[[], T],
    config: Optional[RetryConfig] = None,
    sleep: Callable[[float], None] = time.sleep,
) -> T:
    """
    Run ``operation`` with exponential backoff.

    Makes at most ``max_retries + 1`` attempts. Errors classified as not
    retryable are re-raised immediately; otherwise the last error is
    re-raised once attempts run out.
    """
    config = config or RetryConfig.from_settings()
    last_error: Optional[BaseException] = None

    for attempt in range(config.max_retries + 1):
        try:
            return operation()
        except Exception as exc:
            last_error = exc
            if attempt == config.max_retries:
                break
            if not classify_error(exc).retryable:
                raise

            delay = config.delay_for(attempt)
            logger.info(
                "Attempt %d/%d failed (%s); retrying in %.2fs",
                attempt + 1,
                config.max_retries + 1,
                exc,
                delay,
            )
            sleep(delay)

    assert last_error is not None
    raise last_error


async def retry_operation_async(
    operation: Callable[[], Awaitable[T]],
    config: Optional[RetryConfig] = None,
    sleep: Callable[[float], Awaitable[None]] = asyncio.sleep,
) -> T:
    """Async variant of :func:`retry_operation`."""
    config = config or RetryConfig.from_settings()
    last_error: Optional[BaseException] = None

    for attempt in range(config.max_retries + 1):
        try:
            return await operation()
        except Exception as exc:
            last_error = exc
            if attempt == config.max_retries:
                break
            if not classify_error(exc).retryable:
                raise
            await sleep(config.delay_for(attempt))

    assert last_error is not None
    raise last_error


# ============================================================================
# Logging and predicates
# ============================================================================

_LOG_LEVELS = {
    ErrorSeverity.CRITICAL: logging.ERROR,
    ErrorSeverity.HIGH: logging.ERROR,
    ErrorSeverity.MEDIUM: logging.WARNING,
    ErrorSeverity.LOW: logging.INFO,
}


def log_error(error: AppError, context: Optional[str] = None) -> None:
    level = _LOG_LEVELS.get(error.severity, logging.ERROR)
    context_info = f" [{context}]" if context else ""
    logger.log(
        level,
        "Error%s: %s (%s, %s)",
        context_info,
        error.message,
        error.type.value,
        error.severity.value,
        extra={"error_details": error.details, "error_timestamp": error.timestamp},
    )


def should_notify_user(error: AppError) -> bool:
    return error.severity != ErrorSeverity.LOW


def should_retry(error: AppError, current_retries: int) -> bool:
    return error.retryable and current_retries < (error.max_retries or 0)


def is_same_error_type(error1: AppError, error2: AppError) -> bool:
    return error1.type == error2.type


def is_auth_error(error: AppError) -> bool:
    return error.type in (
        ErrorType.AUTH_ERROR,
        ErrorType.UNAUTHORIZED,
        ErrorType.SESSION_EXPIRED,
    )


def is_network_error(error: AppError) -> bool:
    return error.type in (
        ErrorType.NETWORK_ERROR,
        ErrorType.TIMEOUT_ERROR,
        ErrorType.API_ERROR,
    )

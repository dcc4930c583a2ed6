"""
Tests for error classification and retry with exponential backoff.
"""

import asyncio
import logging

import pytest
from sqlalchemy.exc import IntegrityError, OperationalError

from app.error_handling import (
    AppError,
    RetryConfig,
    classify_error,
    create_app_error,
    get_error_actions,
    get_error_title,
    get_user_message,
    is_auth_error,
    is_network_error,
    is_same_error_type,
    log_error,
    retry_operation,
    retry_operation_async,
    should_notify_user,
    should_retry,
)
from app.exceptions import ConflictError, NotFoundError, UnauthorizedError
from domain.enums import ErrorSeverity, ErrorType
from domain.validation import ValidationError


# =============================================================================
# CLASSIFICATION
# =============================================================================


@pytest.mark.parametrize(
    "error, expected_type, retryable",
    [
        (ConnectionError("refused"), ErrorType.NETWORK_ERROR, True),
        (TimeoutError("slow"), ErrorType.TIMEOUT_ERROR, True),
        (Exception("Network request failed"), ErrorType.NETWORK_ERROR, True),
        (Exception("Failed to fetch"), ErrorType.NETWORK_ERROR, True),
        (Exception("The operation was aborted"), ErrorType.TIMEOUT_ERROR, True),
        (Exception("Unauthorized access"), ErrorType.AUTH_ERROR, False),
        (Exception("something odd"), ErrorType.UNKNOWN_ERROR, True),
        (NotFoundError("Dish 1 not found"), ErrorType.NOT_FOUND, False),
        (ConflictError("duplicate"), ErrorType.CONSTRAINT_ERROR, False),
        (UnauthorizedError(), ErrorType.UNAUTHORIZED, False),
        (ValidationError("bad", "name"), ErrorType.VALIDATION_ERROR, False),
    ],
)
def test_classify_exceptions(error, expected_type, retryable):
    app_error = classify_error(error)
    assert app_error.type == expected_type
    assert app_error.retryable is retryable
    assert app_error.user_message == get_user_message(expected_type)


def test_classify_sqlalchemy_errors():
    integrity = IntegrityError("INSERT", {}, Exception("unique violation"))
    operational = OperationalError("SELECT 1", {}, Exception("database is locked"))

    assert classify_error(integrity).type == ErrorType.CONSTRAINT_ERROR
    assert classify_error(integrity).retryable is False
    assert classify_error(operational).type == ErrorType.DATABASE_ERROR
    assert classify_error(operational).retryable is True


@pytest.mark.parametrize(
    "payload, expected_type, retryable",
    [
        ({"status": 401, "message": "no"}, ErrorType.UNAUTHORIZED, False),
        ({"status": 404}, ErrorType.NOT_FOUND, False),
        ({"statusCode": 422}, ErrorType.CLIENT_ERROR, False),
        ({"status": 503}, ErrorType.SERVER_ERROR, True),
        ({"status": 302}, ErrorType.API_ERROR, True),
        ({"code": "PGRST116", "message": "no rows"}, ErrorType.NOT_FOUND, False),
        ({"code": "PGRST301"}, ErrorType.SESSION_EXPIRED, False),
        ({"code": "PGRST302"}, ErrorType.AUTH_ERROR, False),
        ({"code": "PGRST202"}, ErrorType.CONSTRAINT_ERROR, False),
        ({"code": "23505"}, ErrorType.DATABASE_ERROR, True),
        ({"message": "???"}, ErrorType.UNKNOWN_ERROR, False),
    ],
)
def test_classify_error_payloads(payload, expected_type, retryable):
    app_error = classify_error(payload)
    assert app_error.type == expected_type
    assert app_error.retryable is retryable


def test_classify_error_payload_keeps_code_and_message():
    app_error = classify_error({"code": "PGRST116", "message": "no rows"})
    assert app_error.code == "PGRST116"
    assert app_error.message == "no rows"


def test_classify_strings_and_other_values():
    from_string = classify_error("plain failure")
    assert from_string.type == ErrorType.UNKNOWN_ERROR
    assert from_string.message == "plain failure"
    assert from_string.retryable is False

    from_none = classify_error(None)
    assert from_none.type == ErrorType.UNKNOWN_ERROR
    assert from_none.message == "An unexpected error occurred"

    assert classify_error({}).message == "Unknown error occurred"


def test_retryable_errors_carry_max_retries():
    assert classify_error(ConnectionError()).max_retries == 3
    assert classify_error(NotFoundError()).max_retries == 0


def test_messages_titles_and_actions():
    assert get_error_title(ErrorType.NETWORK_ERROR) == "Connection Problem"
    assert get_error_actions(ErrorType.NOT_FOUND) == [
        "Go back",
        "Check if the item still exists",
    ]
    assert get_user_message(ErrorType.TIMEOUT_ERROR) == "Request timed out. Please try again."


def test_predicates():
    network = create_app_error(ErrorType.NETWORK_ERROR, "down", retryable=True)
    session = create_app_error(ErrorType.SESSION_EXPIRED, "expired")
    low = create_app_error(ErrorType.UNKNOWN_ERROR, "meh", severity=ErrorSeverity.LOW)

    assert is_network_error(network)
    assert is_auth_error(session)
    assert not is_auth_error(network)
    assert is_same_error_type(network, classify_error(ConnectionError()))
    assert should_notify_user(network)
    assert not should_notify_user(low)
    assert should_retry(network, 2)
    assert not should_retry(network, 3)
    assert not should_retry(session, 0)


def test_app_error_to_dict_uses_camel_case():
    payload = create_app_error(ErrorType.NOT_FOUND, "gone").to_dict()
    assert payload["type"] == "NOT_FOUND"
    assert payload["userMessage"] == "The requested item could not be found."
    assert payload["maxRetries"] == 0


def test_log_error_level_follows_severity(caplog):
    with caplog.at_level(logging.INFO, logger="mealtracker.errors"):
        log_error(create_app_error(ErrorType.UNKNOWN_ERROR, "minor", severity=ErrorSeverity.LOW))
        log_error(create_app_error(ErrorType.SERVER_ERROR, "major", severity=ErrorSeverity.HIGH), "import")

    levels = [record.levelno for record in caplog.records]
    assert levels == [logging.INFO, logging.ERROR]
    assert "[import]" in caplog.records[1].getMessage()


# =============================================================================
# RETRY
# =============================================================================


class Flaky:
    """Fails ``failures`` times with ``error`` then returns ``result``"""

    def __init__(self, failures, error, result="ok"):
        self.failures = failures
        self.error = error
        self.result = result
        self.calls = 0

    def __call__(self):
        self.calls += 1
        if self.calls <= self.failures:
            raise self.error
        return self.result


def test_retry_delay_is_exponential_and_capped():
    config = RetryConfig(max_retries=5, initial_delay=1, max_delay=5, backoff_multiplier=2)
    assert [config.delay_for(n) for n in range(5)] == [1, 2, 4, 5, 5]


def test_retry_operation_recovers_from_transient_errors():
    delays = []
    operation = Flaky(2, ConnectionError("reset"))

    result = retry_operation(operation, RetryConfig(), sleep=delays.append)

    assert result == "ok"
    assert operation.calls == 3
    assert delays == [1.0, 2.0]


def test_retry_operation_gives_up_after_max_retries():
    delays = []
    operation = Flaky(10, TimeoutError("slow"))

    with pytest.raises(TimeoutError):
        retry_operation(operation, RetryConfig(max_retries=2), sleep=delays.append)

    assert operation.calls == 3
    assert delays == [1.0, 2.0]


def test_retry_operation_does_not_retry_permanent_errors():
    delays = []
    operation = Flaky(1, NotFoundError("Dish not found"))

    with pytest.raises(NotFoundError):
        retry_operation(operation, RetryConfig(), sleep=delays.append)

    assert operation.calls == 1
    assert delays == []


def test_retry_operation_with_zero_retries_runs_once():
    operation = Flaky(1, ConnectionError())
    with pytest.raises(ConnectionError):
        retry_operation(operation, RetryConfig(max_retries=0), sleep=lambda _: None)
    assert operation.calls == 1


def test_retry_operation_async():
    delays = []
    attempts = {"count": 0}

    async def operation():
        attempts["count"] += 1
        if attempts["count"] == 1:
            raise ConnectionError("reset")
        return 42

    async def fake_sleep(delay):
        delays.append(delay)

    result = asyncio.run(retry_operation_async(operation, RetryConfig(), sleep=fake_sleep))

    assert result == 42
    assert attempts["count"] == 2
    assert delays == [1.0]


def test_app_error_defaults():
    error = AppError(type=ErrorType.UNKNOWN_ERROR, message="x", user_message="y")
    assert error.severity == ErrorSeverity.MEDIUM
    assert error.retryable is False
    assert error.timestamp.tzinfo is not None

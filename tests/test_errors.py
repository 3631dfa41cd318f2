import pytest

from linear_tui.errors import ErrorKind, LinearError, OperationCancelled, is_retryable, validation_error


@pytest.mark.parametrize(
    "kind,code,expected",
    [
        (ErrorKind.NETWORK, 0, True),
        (ErrorKind.RATE_LIMIT, 429, True),
        (ErrorKind.RATE_LIMIT, 0, True),
        (ErrorKind.API, 500, True),
        (ErrorKind.API, 503, True),
        (ErrorKind.API, 599, True),
        (ErrorKind.API, 600, False),
        (ErrorKind.API, 404, False),
        (ErrorKind.API, 200, False),
        (ErrorKind.AUTH, 401, False),
        (ErrorKind.VALIDATION, 0, False),
    ],
)
def test_is_retryable_classification(kind, code, expected):
    assert is_retryable(kind, code) is expected
    assert LinearError(kind, "x", code).retryable is expected


def test_error_string_format():
    err = LinearError(ErrorKind.AUTH, "authentication failed - invalid API key", 401)
    assert str(err) == "Linear API error [auth]: authentication failed - invalid API key (code: 401)"


def test_with_context_keeps_kind_and_code():
    err = LinearError(ErrorKind.API, "boom", 503)
    wrapped = err.with_context("failed to load issues")
    assert wrapped is not err
    assert wrapped.kind is ErrorKind.API
    assert wrapped.code == 503
    assert wrapped.message == "failed to load issues: boom"
    assert wrapped.retryable


def test_validation_error_helper():
    err = validation_error("title is required")
    assert err.kind is ErrorKind.VALIDATION
    assert err.code == 0
    assert not err.retryable


def test_operation_cancelled_is_not_a_linear_error():
    exc = OperationCancelled("deadline exceeded")
    assert exc.reason == "deadline exceeded"
    assert not isinstance(exc, LinearError)

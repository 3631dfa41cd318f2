from __future__ import annotations

import enum


class ErrorKind(str, enum.Enum):
    NETWORK = "network"
    AUTH = "auth"
    RATE_LIMIT = "ratelimit"
    API = "api"
    VALIDATION = "validation"


def is_retryable(kind: ErrorKind, code: int) -> bool:
    """Network and rate-limit failures retry; API errors only on 5xx."""
    if kind in (ErrorKind.NETWORK, ErrorKind.RATE_LIMIT):
        return True
    if kind is ErrorKind.API:
        return 500 <= code < 600
    return False


class LinearError(Exception):
    def __init__(self, kind: ErrorKind, message: str, code: int = 0):
        super().__init__(message)
        self.kind = kind
        self.message = message
        self.code = code

    def __str__(self) -> str:
        return f"Linear API error [{self.kind.value}]: {self.message} (code: {self.code})"

    def __repr__(self) -> str:
        return f"LinearError({self.kind.value!r}, {self.message!r}, {self.code})"

    @property
    def retryable(self) -> bool:
        return is_retryable(self.kind, self.code)

    def with_context(self, prefix: str) -> "LinearError":
        return LinearError(self.kind, f"{prefix}: {self.message}", self.code)


def validation_error(message: str) -> LinearError:
    return LinearError(ErrorKind.VALIDATION, message, 0)


class OperationCancelled(Exception):
    """The call context was cancelled or ran past its deadline."""

    def __init__(self, reason: str = "cancelled"):
        super().__init__(reason)
        self.reason = reason

"""Map cloudbot exceptions onto HTTP status codes and error codes."""

from cloudbot.api.models.errors import ErrorCode
from cloudbot.errors import (
    AuthMissingError,
    CloudbotError,
    EngineError,
    InvalidTransitionError,
    NoQuotesAvailableError,
    ScenarioBusyError,
    ScenarioNotFoundError,
    UnsupportedError,
)

# Checked in order; the first matching class wins.
_ERROR_MAP: tuple[tuple[type[CloudbotError], int, ErrorCode], ...] = (
    (ScenarioNotFoundError, 404, ErrorCode.SCENARIO_NOT_FOUND),
    (InvalidTransitionError, 409, ErrorCode.INVALID_TRANSITION),
    (ScenarioBusyError, 409, ErrorCode.SCENARIO_BUSY),
    (AuthMissingError, 400, ErrorCode.AUTH_MISSING),
    (UnsupportedError, 400, ErrorCode.UNSUPPORTED),
    (NoQuotesAvailableError, 404, ErrorCode.NO_QUOTES),
    (EngineError, 502, ErrorCode.ENGINE_ERROR),
)


def error_status(exc: CloudbotError) -> tuple[int, ErrorCode]:
    """HTTP status and error code for a cloudbot exception."""
    for error_type, status_code, error_code in _ERROR_MAP:
        if isinstance(exc, error_type):
            return status_code, error_code
    return 500, ErrorCode.INTERNAL_ERROR


def error_message(exc: CloudbotError) -> str:
    if isinstance(exc, EngineError):
        return exc.message
    return str(exc)

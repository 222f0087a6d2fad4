"""Error response models for consistent API error handling."""

from enum import Enum

from pydantic import BaseModel


class ErrorCode(str, Enum):
    """Machine-readable error codes for API responses."""

    INVALID_REQUEST = "INVALID_REQUEST"
    """Request validation failed (malformed JSON, missing fields, etc.)."""

    SCENARIO_NOT_FOUND = "SCENARIO_NOT_FOUND"
    """The specified scenario_id does not exist."""

    INVALID_TRANSITION = "INVALID_TRANSITION"
    """The scenario's status does not allow the requested operation."""

    SCENARIO_BUSY = "SCENARIO_BUSY"
    """Another deploy or destroy is running for the scenario."""

    AUTH_MISSING = "AUTH_MISSING"
    """Credentials for the provider are not configured."""

    UNSUPPORTED = "UNSUPPORTED"
    """The provider or template is not supported."""

    NO_QUOTES = "NO_QUOTES"
    """No price could be obtained for any candidate."""

    TEMPLATE_NOT_FOUND = "TEMPLATE_NOT_FOUND"
    """The template directory does not exist."""

    ENGINE_ERROR = "ENGINE_ERROR"
    """The provisioning engine failed."""

    INTERNAL_ERROR = "INTERNAL_ERROR"
    """An unexpected internal error occurred."""


class ErrorDetail(BaseModel):
    """Field-level error information for validation failures."""

    field: str | None = None
    message: str


class ErrorBody(BaseModel):
    """Error body content for API error responses."""

    code: ErrorCode
    message: str
    details: list[ErrorDetail] | None = None


class ErrorResponse(BaseModel):
    """Standard error response format for all API errors.

    Example:
        {
            "error": {
                "code": "SCENARIO_NOT_FOUND",
                "message": "Scenario 6f1c... not found"
            }
        }
    """

    error: ErrorBody

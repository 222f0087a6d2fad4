"""API request, response and error models."""

from cloudbot.api.models.errors import ErrorBody, ErrorCode, ErrorDetail, ErrorResponse
from cloudbot.api.models.requests import (
    DeployRequest,
    PriceRequest,
    ScenarioCreate,
    ScenarioResponse,
)

__all__ = [
    "DeployRequest",
    "ErrorBody",
    "ErrorCode",
    "ErrorDetail",
    "ErrorResponse",
    "PriceRequest",
    "ScenarioCreate",
    "ScenarioResponse",
]

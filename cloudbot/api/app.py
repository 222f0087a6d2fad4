"""FastAPI application factory.

Creates the FastAPI application, registers exception handlers and routes.
"""

from collections.abc import AsyncIterator
from contextlib import asynccontextmanager

from fastapi import FastAPI, Request
from fastapi.exceptions import RequestValidationError
from fastapi.middleware.cors import CORSMiddleware
from fastapi.responses import JSONResponse

from cloudbot import __version__
from cloudbot.api.dependencies import shutdown_dependencies
from cloudbot.api.exceptions import error_message, error_status
from cloudbot.api.models.errors import ErrorBody, ErrorCode, ErrorDetail, ErrorResponse
from cloudbot.api.routes import register_routes
from cloudbot.config import get_settings
from cloudbot.errors import CloudbotError
from cloudbot.observability.logging import get_logger, setup_logging

logger = get_logger(__name__)


@asynccontextmanager
async def _lifespan(app: FastAPI) -> AsyncIterator[None]:  # noqa: ARG001
    yield
    await shutdown_dependencies()


def create_app() -> FastAPI:
    """Create and configure the FastAPI application."""
    settings = get_settings()
    log_config = settings.observability.logging
    setup_logging(
        level=log_config.level,
        format=log_config.format,
        redact_secrets=log_config.redact_secrets,
    )

    app = FastAPI(
        title="cloudbot API",
        description="Multi-cloud scenario deployment with price-aware region failover",
        version=__version__,
        lifespan=_lifespan,
    )

    app.add_middleware(
        CORSMiddleware,
        allow_origins=settings.api.cors_origins,
        allow_methods=["*"],
        allow_headers=["*"],
    )

    _register_exception_handlers(app)
    register_routes(app)

    logger.info("app_created", debug=settings.debug)
    return app


def _error_response(status_code: int, body: ErrorBody) -> JSONResponse:
    return JSONResponse(
        status_code=status_code,
        content=ErrorResponse(error=body).model_dump(mode="json"),
    )


def _register_exception_handlers(app: FastAPI) -> None:
    @app.exception_handler(CloudbotError)
    async def cloudbot_error_handler(request: Request, exc: CloudbotError) -> JSONResponse:
        status_code, error_code = error_status(exc)
        message = error_message(exc)
        logger.warning(
            "api_error",
            error_code=error_code.value,
            message=message,
            path=request.url.path,
        )
        return _error_response(status_code, ErrorBody(code=error_code, message=message))

    @app.exception_handler(FileNotFoundError)
    async def template_not_found_handler(
        request: Request, exc: FileNotFoundError
    ) -> JSONResponse:
        logger.warning("template_not_found", error=str(exc), path=request.url.path)
        return _error_response(
            404,
            ErrorBody(code=ErrorCode.TEMPLATE_NOT_FOUND, message=str(exc)),
        )

    @app.exception_handler(RequestValidationError)
    async def validation_error_handler(
        request: Request, exc: RequestValidationError
    ) -> JSONResponse:
        logger.warning("validation_error", errors=exc.errors(), path=request.url.path)
        details = [
            ErrorDetail(
                field=".".join(str(loc) for loc in error["loc"]),
                message=error["msg"],
            )
            for error in exc.errors()
        ]
        return _error_response(
            400,
            ErrorBody(
                code=ErrorCode.INVALID_REQUEST,
                message="Request validation failed",
                details=details,
            ),
        )

    @app.exception_handler(ValueError)
    async def value_error_handler(request: Request, exc: ValueError) -> JSONResponse:
        logger.warning("invalid_request", error=str(exc), path=request.url.path)
        return _error_response(
            400,
            ErrorBody(code=ErrorCode.INVALID_REQUEST, message=str(exc)),
        )

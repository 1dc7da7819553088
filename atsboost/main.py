from __future__ import annotations

import logging

from fastapi import FastAPI, Request
from fastapi.exceptions import RequestValidationError
from fastapi.middleware.cors import CORSMiddleware
from fastapi.responses import JSONResponse

from atsboost.api import routers
from atsboost.config.settings import settings
from atsboost.libs.exceptions import AppException
from atsboost.middleware import RateLimitMiddleware
from atsboost.utils.util import format_exception_message

logger = logging.getLogger(__name__)


def configure_logging() -> None:
    logging.basicConfig(level=settings.log_level.upper(), format=settings.log_format)


def register_exception_handlers(app: FastAPI) -> None:
    @app.exception_handler(AppException)
    async def app_exception_handler(request: Request, exc: AppException) -> JSONResponse:
        if exc.status_code >= 500:
            logger.error("%s %s failed: %s", request.method, request.url.path, exc.message)
        return JSONResponse(status_code=exc.status_code, content=exc.to_dict())

    @app.exception_handler(RequestValidationError)
    async def validation_exception_handler(request: Request, exc: RequestValidationError) -> JSONResponse:
        details = [
            {"field": ".".join(str(part) for part in error.get("loc", ())), "message": error.get("msg", "")}
            for error in exc.errors()
        ]
        return JSONResponse(
            status_code=400,
            content={"error": "Validation failed", "message": "Invalid request", "details": details},
        )

    @app.exception_handler(Exception)
    async def unhandled_exception_handler(request: Request, exc: Exception) -> JSONResponse:
        logger.exception(
            "Unhandled error on %s %s: %s", request.method, request.url.path, format_exception_message(exc)
        )
        return JSONResponse(
            status_code=500,
            content={"error": "Internal server error", "message": "An unexpected error occurred"},
        )


def create_app() -> FastAPI:
    configure_logging()
    logger.info("Starting %s (version: %s) in %s", settings.app_name, settings.app_version, settings.app_env)

    app = FastAPI(
        title=settings.app_name,
        version=settings.app_version,
        debug=settings.debug,
    )

    app.add_middleware(
        CORSMiddleware,
        allow_origins=settings.cors_origins,
        allow_credentials=settings.cors_allow_credentials,
        allow_methods=settings.cors_allow_methods,
        allow_headers=settings.cors_allow_headers,
    )
    app.add_middleware(RateLimitMiddleware, path_prefixes=settings.rate_limit_paths)

    register_exception_handlers(app)
    for router in routers:
        app.include_router(router, prefix="/api")
    return app

app = create_app()

"""FastAPI application factory and setup."""

import time
import uuid
from contextlib import asynccontextmanager
from pathlib import Path
from typing import Any

from fastapi import FastAPI, Request
from fastapi.exceptions import RequestValidationError
from fastapi.middleware.cors import CORSMiddleware
from loguru import logger
from pydantic import ValidationError
from starlette.exceptions import HTTPException as StarletteHTTPException
from starlette.middleware.base import BaseHTTPMiddleware
from starlette.responses import JSONResponse

from src.user_api.api.http.app_data import ApplicationDependencies
from src.user_api.api.http.responses import main_response
from src.user_api.api.http.routers.health import router as health_router
from src.user_api.api.http.routers.user import router as user_router
from src.user_api.api.utils.app_startup import configure_logging
from src.user_api.core.errors import UserApiError
from src.user_api.runtime.config.config_data import ConfigData
from src.user_api.runtime.context import get_config

LOCATION_PREFIXES = ("body", "query", "path")
SECURITY_HEADERS = {
    "X-Content-Type-Options": "nosniff",
    "X-Frame-Options": "SAMEORIGIN",
    "X-XSS-Protection": "1; mode=block",
    "Content-Security-Policy": "default-src 'self'",
    "Referrer-Policy": "strict-origin-when-cross-origin",
}
HSTS_VALUE = "max-age=63072000; includeSubDomains; preload"
NO_CACHE_HEADERS = {
    "Cache-Control": "no-cache, no-store, no-transform, must-revalidate, private, max-age=0",
    "Pragma": "no-cache",
    "Expires": "0",
}


class SecurityHeadersMiddleware(BaseHTTPMiddleware):
    """Add browser hardening headers unless a handler already set them."""

    def __init__(self, app, hsts: bool = False):
        super().__init__(app)
        self._headers = dict(SECURITY_HEADERS)
        if hsts:
            self._headers["Strict-Transport-Security"] = HSTS_VALUE

    async def dispatch(self, request: Request, call_next):
        response = await call_next(request)
        for name, value in self._headers.items():
            response.headers.setdefault(name, value)
        return response


class NoCacheMiddleware(BaseHTTPMiddleware):
    async def dispatch(self, request: Request, call_next):
        response = await call_next(request)
        response.headers.update(NO_CACHE_HEADERS)
        return response


class MaintenanceModeMiddleware(BaseHTTPMiddleware):
    """Answer every request with 503 while the flag file exists."""

    def __init__(self, app, flag_file: str):
        super().__init__(app)
        self._flag_file = Path(flag_file)

    async def dispatch(self, request: Request, call_next):
        if self._flag_file.exists():
            return main_response(503)
        return await call_next(request)


def client_address(request: Request) -> str:
    forwarded = request.headers.get("x-forwarded-for", "")
    if forwarded:
        return forwarded.split(",", 1)[0].strip()
    return request.client.host if request.client else "unknown"


def elapsed_ms(started: float) -> float:
    return round((time.perf_counter() - started) * 1000, 1)


async def log_requests(request: Request, call_next):
    """Access log with a per-request id bound to every record in between."""
    request_id = request.headers.get("X-Request-ID") or uuid.uuid4().hex
    started = time.perf_counter()

    with logger.contextualize(
        request_id=request_id,
        method=request.method,
        path=request.url.path,
        client_ip=client_address(request),
        user_agent=request.headers.get("user-agent", "unknown"),
    ):
        logger.info("request.start")
        try:
            response = await call_next(request)
        except Exception as exc:
            logger.bind(
                status_code=500,
                duration_ms=elapsed_ms(started),
                error_type=type(exc).__name__,
            ).exception("request.error")
            return main_response(500, headers={"X-Request-ID": request_id})

        logger.bind(
            status_code=response.status_code, duration_ms=elapsed_ms(started)
        ).info("request.end")
        response.headers.setdefault("X-Request-ID", request_id)
        return response


def field_errors(errors: list[dict[str, Any]]) -> dict[str, str]:
    """Collapse pydantic errors to one message per request field."""
    result: dict[str, str] = {}
    for error in errors:
        loc = [part for part in error.get("loc", ()) if part not in LOCATION_PREFIXES]
        field = str(loc[0]) if loc else "body"
        message = error.get("msg", "invalid value").removeprefix("Value error, ")
        result.setdefault(field, message)
    return result


async def request_validation_handler(
    request: Request, exc: RequestValidationError
) -> JSONResponse:
    data = field_errors(list(exc.errors()))
    logger.bind(errors=data).warning("request.validation_error")
    return main_response(400, data)


async def validation_handler(request: Request, exc: ValidationError) -> JSONResponse:
    data = field_errors(exc.errors())
    logger.bind(errors=data).warning("request.validation_error")
    return main_response(400, data)


async def user_api_error_handler(request: Request, exc: UserApiError) -> JSONResponse:
    # Every core failure is a 500 on the wire; the kind stays in the log
    logger.bind(error_kind=exc.kind, error_code=exc.code, error=str(exc)).error(
        "request.failed"
    )
    return main_response(500)


async def http_exception_handler(
    request: Request, exc: StarletteHTTPException
) -> JSONResponse:
    return main_response(exc.status_code, headers=getattr(exc, "headers", None))


def create_app(
    config: ConfigData | None = None,
    dependencies: ApplicationDependencies | None = None,
) -> FastAPI:
    """Build the application.

    Args:
        config: Configuration to use; defaults to the current context's.
        dependencies: Pre-built services. When omitted they are created from
            ``config`` at startup and closed at shutdown.
    """
    main_config = config or get_config()
    app_config = main_config.app
    cors = app_config.cors

    if app_config.is_production and cors.allow_credentials and "*" in cors.origins:
        raise RuntimeError("Wildcard CORS origin with credentials is not allowed in production")

    @asynccontextmanager
    async def lifespan(app: FastAPI):
        built = None
        if dependencies is None:
            built = ApplicationDependencies.from_config(main_config)
            app.state.app_dependencies = built
        logger.info(f"{app_config.name} starting ({app_config.environment})")
        try:
            yield
        finally:
            logger.info(f"{app_config.name} stopping")
            if built is not None:
                await built.close()

    app = FastAPI(
        title=app_config.name,
        version=app_config.version,
        lifespan=lifespan,
        docs_url=None if app_config.is_production else "/docs",
        redoc_url=None if app_config.is_production else "/redoc",
    )
    app.state.config = main_config
    if dependencies is not None:
        app.state.app_dependencies = dependencies

    # Added last runs first: logging wraps everything, maintenance short-circuits
    app.add_middleware(NoCacheMiddleware)
    app.add_middleware(SecurityHeadersMiddleware, hsts=app_config.is_production)
    app.add_middleware(MaintenanceModeMiddleware, flag_file=app_config.maintenance_flag_file)
    app.add_middleware(
        CORSMiddleware,
        allow_origins=cors.origins,
        allow_credentials=cors.allow_credentials,
        allow_methods=cors.allow_methods,
        allow_headers=cors.allow_headers,
    )
    app.middleware("http")(log_requests)

    for error_type, handler in (
        (RequestValidationError, request_validation_handler),
        (ValidationError, validation_handler),
        (UserApiError, user_api_error_handler),
        (StarletteHTTPException, http_exception_handler),
    ):
        app.add_exception_handler(error_type, handler)

    app.include_router(health_router)
    app.include_router(user_router, prefix="/api/v1")
    return app


def build_app() -> FastAPI:
    """Entry point for uvicorn's ``--factory`` mode."""
    configure_logging()
    return create_app()

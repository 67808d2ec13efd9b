"""FastAPI application factory and main entry point."""

from contextlib import asynccontextmanager
from pathlib import Path

from fastapi import FastAPI, Request
from fastapi.exceptions import RequestValidationError
from fastapi.middleware.cors import CORSMiddleware
from fastapi.responses import JSONResponse
from sqlalchemy.exc import SQLAlchemyError
from starlette.exceptions import HTTPException as StarletteHTTPException
from tenacity import AsyncRetrying, RetryError, stop_after_attempt, wait_fixed

from list_pages_shared.config import Settings, get_settings
from list_pages_shared.db.connection import get_db
from list_pages_shared.logging import configure_logging, get_logger

from .exceptions import ConfigurationError, InvalidFilterError
from .middleware import CORRELATION_ID_HEADER, CorrelationIdMiddleware, get_request_correlation_id
from .models.base import ErrorDetail, ErrorResponse
from .routes import health, list_pages
from .services.facets import FacetDefinition, load_facet_definitions

logger = get_logger(__name__)

DB_INIT_ATTEMPTS = 30
DB_INIT_DELAY_SECONDS = 2


@asynccontextmanager
async def lifespan(app: FastAPI):
    """Application lifespan handler for startup/shutdown events."""
    settings = get_settings()

    logger.info(
        "Starting application",
        service=settings.service_name,
        version=settings.service_version,
        environment=settings.environment,
        facet_count=len(app.state.facet_definitions),
    )

    app.state.db_initialized = False
    try:
        async for attempt in AsyncRetrying(
            stop=stop_after_attempt(DB_INIT_ATTEMPTS),
            wait=wait_fixed(DB_INIT_DELAY_SECONDS),
        ):
            with attempt:
                db = get_db()
                await db.connect()
                await db.create_tables()
        app.state.db_initialized = True
        logger.info("Database connection established and tables created")
    except (RetryError, SQLAlchemyError, OSError, ValueError) as e:
        # Requests fail individually with clearer errors
        logger.error("Failed to initialize database", attempts=DB_INIT_ATTEMPTS, error=str(e))

    yield

    logger.info("Shutting down application")
    await get_db().close()


def load_facets(settings: Settings) -> list[FacetDefinition]:
    """Load the configured facet definitions.

    A missing path means no list has facets. A configured path that does not
    exist is a configuration error.
    """
    path = settings.list_pages.facets_config_path
    if not path:
        logger.warning("No facet definitions configured, lists have no filters")
        return []
    if not Path(path).is_file():
        raise ConfigurationError(f"Facet definitions file not found: {path}")
    return load_facet_definitions(path)


def create_app(settings: Settings | None = None) -> FastAPI:
    """Create and configure the FastAPI application.

    Returns:
        Configured FastAPI application instance.
    """
    settings = settings or get_settings()

    configure_logging(
        level=settings.logging.level,
        json_format=settings.logging.json_format,
        service_name=settings.service_name,
    )

    app = FastAPI(
        title="List Pages API",
        description="Filterable content lists with editor-pinned preset filters",
        version=settings.service_version,
        docs_url="/docs" if settings.api.debug else None,
        redoc_url="/redoc" if settings.api.debug else None,
        openapi_url="/openapi.json" if settings.api.debug else None,
        lifespan=lifespan,
    )
    app.state.facet_definitions = load_facets(settings)

    # First added = last executed
    app.add_middleware(
        CORSMiddleware,
        allow_origins=settings.api.cors_origins,
        allow_credentials=True,
        allow_methods=["*"],
        allow_headers=["*"],
        expose_headers=[CORRELATION_ID_HEADER],
    )
    app.add_middleware(CorrelationIdMiddleware)

    register_exception_handlers(app)

    app.include_router(health.router, tags=["Health"])
    app.include_router(list_pages.router)

    return app


def register_exception_handlers(app: FastAPI) -> None:
    """Install the JSON error envelope handlers."""
    app.add_exception_handler(StarletteHTTPException, http_exception_handler)
    app.add_exception_handler(RequestValidationError, validation_exception_handler)
    app.add_exception_handler(InvalidFilterError, invalid_filter_exception_handler)
    app.add_exception_handler(ConfigurationError, configuration_exception_handler)
    app.add_exception_handler(Exception, general_exception_handler)


def _error_response(
    request: Request,
    status_code: int,
    message: str,
    details: list[ErrorDetail] | None = None,
) -> JSONResponse:
    correlation_id = get_request_correlation_id(request)
    body = ErrorResponse.create(
        code=status_code,
        message=message,
        correlation_id=correlation_id,
        details=details,
    )
    return JSONResponse(
        status_code=status_code,
        content=body.model_dump(),
        headers={CORRELATION_ID_HEADER: correlation_id} if correlation_id else {},
    )


async def http_exception_handler(
    request: Request,
    exc: StarletteHTTPException,
) -> JSONResponse:
    """Handle HTTP exceptions."""
    return _error_response(request, exc.status_code, str(exc.detail))


async def validation_exception_handler(
    request: Request,
    exc: RequestValidationError,
) -> JSONResponse:
    """Handle request validation errors."""
    details = [
        ErrorDetail(
            field=".".join(str(loc) for loc in error["loc"]),
            message=error["msg"],
            type=error["type"],
        )
        for error in exc.errors()
    ]
    return _error_response(request, 422, "Validation Error", details)


async def invalid_filter_exception_handler(
    request: Request,
    exc: InvalidFilterError,
) -> JSONResponse:
    """Handle filters that cannot be applied to a list."""
    logger.info("Rejected filter", path=request.url.path, error=str(exc))
    return _error_response(request, 422, str(exc))


async def configuration_exception_handler(
    request: Request,
    exc: ConfigurationError,
) -> JSONResponse:
    """Handle broken facet, widget or processor wiring."""
    logger.error(
        "Facet configuration error",
        path=request.url.path,
        method=request.method,
        error=str(exc),
        error_type=type(exc).__name__,
    )
    return _error_response(request, 500, f"Configuration Error: {exc}")


async def general_exception_handler(
    request: Request,
    exc: Exception,
) -> JSONResponse:
    """Handle unexpected exceptions."""
    logger.exception(
        "Unhandled exception",
        path=request.url.path,
        method=request.method,
    )
    return _error_response(request, 500, "Internal Server Error")

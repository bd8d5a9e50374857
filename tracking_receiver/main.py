"""Order Tracking Receiver: FastAPI application entry point."""

import signal
import uuid
from contextlib import asynccontextmanager

# configure_structlog MUST be called before all other app imports
# (structlog caches the processor chain on first use).
from tracking_receiver.core.config import get_settings as _get_settings_early
from tracking_receiver.core.logging import configure_structlog

_early_settings = _get_settings_early()
configure_structlog(
    log_level="DEBUG" if _early_settings.debug else "INFO",
    json_logs=not _early_settings.debug,
)

import structlog

from fastapi import FastAPI, Request
from fastapi.encoders import jsonable_encoder
from fastapi.exceptions import RequestValidationError
from fastapi.middleware.cors import CORSMiddleware
from fastapi.responses import JSONResponse
from starlette.exceptions import HTTPException

from tracking_receiver.api.routes import api_router
from tracking_receiver.core.config import Settings, get_settings
from tracking_receiver.core.exceptions import TrackingReceiverError
from tracking_receiver.db import create_engine, create_session_factory, create_tables
from tracking_receiver.middleware.correlation import get_correlation_id, setup_correlation_middleware
from tracking_receiver.services.container import build_container

logger = structlog.get_logger(__name__)


def _make_lifespan(settings: Settings):
    @asynccontextmanager
    async def lifespan(app: FastAPI):
        """Build the service graph on startup, dispose the engine on shutdown."""
        app.state.shutting_down = False

        def handle_sigterm(signum, frame):
            app.state.shutting_down = True
            logger.info("sigterm_received", action="health_check_503_draining_connections")

        try:
            signal.signal(signal.SIGTERM, handle_sigterm)
        except ValueError:
            # Not on the main thread (e.g. TestClient portal)
            pass

        logger.info("startup_begin", app_name=settings.app_name, debug=settings.debug)

        engine = create_engine(settings.database_url, echo=settings.debug)
        if settings.create_tables_on_startup:
            await create_tables(engine)
        app.state.services = build_container(engine, create_session_factory(engine), settings)
        logger.info("db_initialized")

        yield

        logger.info("shutdown_begin")
        await engine.dispose()
        logger.info("shutdown_complete")

    return lifespan


async def tracking_error_handler(request: Request, exc: TrackingReceiverError) -> JSONResponse:
    """Render domain errors as {code, message, debug_id}.

    Server faults are logged at error level with the cause; client errors at
    warning level. The cause of a server fault is never returned.
    """
    debug_id = str(uuid.uuid4())
    log = logger.error if exc.status_code >= 500 else logger.warning
    log(
        "tracking_error",
        status_code=exc.status_code,
        code=exc.code,
        debug_id=debug_id,
        correlation_id=get_correlation_id(),
        path=request.url.path,
        method=request.method,
        detail=exc.message,
        cause=repr(exc.__cause__) if exc.__cause__ else None,
    )
    return JSONResponse(
        status_code=exc.status_code,
        content={**exc.to_dict(), "debug_id": debug_id},
    )


async def http_exception_handler(request: Request, exc: HTTPException) -> JSONResponse:
    """Global exception handler for HTTPException (including unmatched routes) with debug_id tracking."""
    debug_id = str(uuid.uuid4())

    log = logger.error if exc.status_code >= 500 else logger.warning
    log(
        "http_exception",
        status_code=exc.status_code,
        debug_id=debug_id,
        correlation_id=get_correlation_id(),
        path=request.url.path,
        method=request.method,
        detail=exc.detail,
    )

    return JSONResponse(
        status_code=exc.status_code,
        content={"code": "http_error", "message": exc.detail, "debug_id": debug_id},
    )


async def validation_exception_handler(request: Request, exc: RequestValidationError) -> JSONResponse:
    """Render query/path validation failures in the common error shape."""
    debug_id = str(uuid.uuid4())
    errors = jsonable_encoder(exc.errors())

    logger.warning(
        "request_validation_failed",
        debug_id=debug_id,
        correlation_id=get_correlation_id(),
        path=request.url.path,
        method=request.method,
        errors=errors,
    )

    return JSONResponse(
        status_code=422,
        content={
            "code": "invalid_request",
            "message": "Request validation failed",
            "debug_id": debug_id,
            "errors": errors,
        },
    )


async def generic_exception_handler(request: Request, exc: Exception) -> JSONResponse:
    """Global exception handler for unhandled errors.

    Logs full exception with traceback, returns generic 500 to client.
    """
    debug_id = str(uuid.uuid4())

    logger.error(
        "unhandled_exception",
        debug_id=debug_id,
        correlation_id=get_correlation_id(),
        path=request.url.path,
        method=request.method,
        error=str(exc),
        error_type=type(exc).__name__,
        exc_info=True,
    )

    return JSONResponse(
        status_code=500,
        content={"code": "internal_error", "message": "Internal server error", "debug_id": debug_id},
    )


def create_app(settings: Settings | None = None) -> FastAPI:
    """Create and configure the FastAPI application."""
    settings = settings or get_settings()

    app = FastAPI(
        title=settings.app_name,
        description="Receives order tracking webhooks and serves tracking lookups",
        version="1.0.0",
        docs_url="/docs" if settings.debug else None,
        redoc_url="/redoc" if settings.debug else None,
        lifespan=_make_lifespan(settings),
    )

    app.add_middleware(
        CORSMiddleware,
        allow_origins=settings.cors_origins,
        allow_credentials=True,
        allow_methods=["*"],
        allow_headers=["*"],
    )

    # Correlation ID middleware (runs first on incoming requests)
    setup_correlation_middleware(app)

    app.exception_handler(TrackingReceiverError)(tracking_error_handler)
    app.exception_handler(HTTPException)(http_exception_handler)
    app.exception_handler(RequestValidationError)(validation_exception_handler)
    app.exception_handler(Exception)(generic_exception_handler)

    app.include_router(api_router, prefix=settings.api_prefix)

    return app


app = create_app()


if __name__ == "__main__":
    import uvicorn

    uvicorn.run(
        "tracking_receiver.main:app",
        host="0.0.0.0",
        port=8000,
        reload=True,
    )

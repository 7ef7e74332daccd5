import logging
from contextlib import asynccontextmanager

import structlog
from fastapi import FastAPI, Request
from fastapi.middleware.cors import CORSMiddleware
from fastapi.responses import JSONResponse

from . import __version__
from .api.v1 import api_router
from .config import get_settings
from .core.database import create_tables
from .core.exceptions import (
    AuthorizationError,
    PersistenceError,
    QuizClosedError,
    QuizNotFoundError,
    SchoolhubError,
    SessionBusyError,
    SessionStateError,
    ValidationError,
)
from .core.firebase import initialize_firebase


def configure_logging(settings) -> None:
    logging.basicConfig(
        level=getattr(logging, settings.log_level.upper(), logging.INFO),
        format="%(message)s",
    )
    logging.getLogger("uvicorn.access").setLevel(logging.WARNING)

    structlog.configure(
        processors=[
            structlog.stdlib.filter_by_level,
            structlog.stdlib.add_logger_name,
            structlog.stdlib.add_log_level,
            structlog.stdlib.PositionalArgumentsFormatter(),
            structlog.processors.TimeStamper(fmt="iso"),
            structlog.processors.StackInfoRenderer(),
            structlog.processors.format_exc_info,
            structlog.processors.UnicodeDecoder(),
            structlog.processors.JSONRenderer() if settings.log_format == "json" else structlog.dev.ConsoleRenderer(),
        ],
        context_class=dict,
        logger_factory=structlog.stdlib.LoggerFactory(),
        wrapper_class=structlog.stdlib.BoundLogger,
        cache_logger_on_first_use=True,
    )


settings = get_settings()
configure_logging(settings)

logger = structlog.get_logger(__name__)

ERROR_STATUS_CODES = (
    (ValidationError, 422),
    (AuthorizationError, 403),
    (QuizNotFoundError, 404),
    (SessionStateError, 409),
    (SessionBusyError, 409),
    (QuizClosedError, 409),
    (PersistenceError, 502),
)


def status_for(exc: SchoolhubError) -> int:
    for error_class, status_code in ERROR_STATUS_CODES:
        if isinstance(exc, error_class):
            return status_code
    return 400


@asynccontextmanager
async def lifespan(app: FastAPI):
    logger.info("Starting Schoolhub Quiz API", version=__version__)
    try:
        create_tables()
        logger.info("Database tables created/verified")
    except Exception as e:
        logger.error("Failed to initialize database", error=str(e))
        raise

    if settings.authentication_enabled:
        initialize_firebase()

    yield

    logger.info("Shutting down Schoolhub Quiz API")


def create_application() -> FastAPI:
    app = FastAPI(
        title="Schoolhub Quiz API",
        description="Quiz authoring and submission for school subjects",
        version=__version__,
        docs_url="/docs",
        redoc_url="/redoc",
        openapi_url="/api/v1/openapi.json",
        lifespan=lifespan,
    )

    app.add_middleware(
        CORSMiddleware,
        allow_origins=settings.allowed_origins,
        allow_credentials=True,
        allow_methods=["*"],
        allow_headers=["*"],
    )

    @app.exception_handler(SchoolhubError)
    async def schoolhub_exception_handler(request: Request, exc: SchoolhubError):
        logger.warning(
            "Request failed",
            path=request.url.path,
            method=request.method,
            error_code=exc.error_code,
            error=exc.message,
        )
        return JSONResponse(status_code=status_for(exc), content=exc.to_dict())

    @app.exception_handler(Exception)
    async def global_exception_handler(request: Request, exc: Exception):
        logger.error(
            "Unhandled exception occurred",
            path=request.url.path,
            method=request.method,
            error=str(exc),
            exc_info=exc,
        )
        return JSONResponse(
            status_code=500,
            content={
                "error": "Internal server error",
                "message": "An unexpected error occurred. Please try again later.",
            },
        )

    from .api.v1.endpoints import health
    app.include_router(health.router, tags=["health"])

    app.include_router(api_router, prefix="/api/v1")

    return app


app = create_application()


if __name__ == "__main__":
    import uvicorn

    uvicorn.run(
        "schoolhub.main:app",
        host=settings.api_host,
        port=settings.api_port,
        reload=settings.debug,
        log_level="info",
        access_log=False,
    )

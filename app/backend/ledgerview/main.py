"""FastAPI application entrypoint."""

import logging

from fastapi import FastAPI, Request, status
from fastapi.middleware.cors import CORSMiddleware
from fastapi.responses import JSONResponse

from ledgerview.api.router import api_router
from ledgerview.core.config import get_settings
from ledgerview.core.errors import InvalidInputError, LedgerviewError, NotFoundError, OwnershipError
from ledgerview.core.logging_config import configure_logging

logger = logging.getLogger(__name__)

ERROR_STATUS_CODES: tuple[tuple[type[LedgerviewError], int], ...] = (
    (NotFoundError, status.HTTP_404_NOT_FOUND),
    (OwnershipError, status.HTTP_403_FORBIDDEN),
    (InvalidInputError, status.HTTP_422_UNPROCESSABLE_ENTITY),
)


def status_code_for(error: LedgerviewError) -> int:
    for error_type, status_code in ERROR_STATUS_CODES:
        if isinstance(error, error_type):
            return status_code
    return status.HTTP_500_INTERNAL_SERVER_ERROR


async def ledgerview_error_handler(request: Request, exc: LedgerviewError) -> JSONResponse:
    status_code = status_code_for(exc)
    logger.warning(
        "request failed method=%s path=%s status=%s code=%s message=%s",
        request.method,
        request.url.path,
        status_code,
        exc.code,
        exc.message,
    )
    return JSONResponse(
        status_code=status_code,
        content={"error": {"code": exc.code, "message": exc.message}},
    )


def create_app() -> FastAPI:
    """Create and configure FastAPI application."""

    settings = get_settings()
    configure_logging(settings.log_level)

    app = FastAPI(
        title=settings.app_name,
        version="0.1.0",
        openapi_url=f"{settings.api_prefix}/openapi.json",
        docs_url=f"{settings.api_prefix}/docs",
        redoc_url=f"{settings.api_prefix}/redoc",
    )

    app.add_middleware(
        CORSMiddleware,
        allow_origins=settings.allowed_origins,
        allow_credentials=True,
        allow_methods=["GET"],
        allow_headers=["*"],
    )
    app.add_exception_handler(LedgerviewError, ledgerview_error_handler)

    app.include_router(api_router, prefix=settings.api_prefix)

    @app.get("/", tags=["system"])
    def root() -> dict[str, str]:
        return {"service": settings.app_name, "environment": settings.app_env, "status": "running"}

    logger.info("application configured env=%s api_prefix=%s", settings.app_env, settings.api_prefix)
    return app


app = create_app()

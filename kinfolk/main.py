"""FastAPI application instance and error handling."""
from __future__ import annotations

from fastapi import FastAPI, Request
from fastapi.responses import JSONResponse

from kinfolk.core import KinfolkError, get_logger
from kinfolk.routers import (
    collaboration_router,
    me_router,
    people_router,
    records_router,
)

LOGGER = get_logger(__name__)


async def handle_kinfolk_error(request: Request, exc: KinfolkError) -> JSONResponse:
    """Render engine errors as ``{"error": kind, "detail": message}``."""

    LOGGER.info(
        "Request failed",
        extra={
            "path": request.url.path,
            "error": exc.kind,
            "status_code": exc.status_code,
            **exc.context,
        },
    )
    return JSONResponse(
        status_code=exc.status_code,
        content={"error": exc.kind, "detail": exc.message},
    )


def create_app() -> FastAPI:
    """Create and configure the FastAPI application."""

    app = FastAPI(title="Kinfolk", version="0.1.0")
    app.add_exception_handler(KinfolkError, handle_kinfolk_error)
    app.include_router(me_router)
    app.include_router(people_router)
    app.include_router(records_router)
    app.include_router(collaboration_router)

    @app.get("/health", include_in_schema=False)
    async def health() -> dict[str, str]:
        return {"status": "ok"}

    LOGGER.info("FastAPI application initialised")
    return app


app = create_app()

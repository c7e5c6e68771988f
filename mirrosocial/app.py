"""
FastAPI application entry point for the MirroSocial backend.
"""

from __future__ import annotations

import logging

from fastapi import FastAPI, Request
from fastapi.responses import JSONResponse
from sqlalchemy.exc import SQLAlchemyError

from mirrosocial.auth import router as auth_router
from mirrosocial.config import get_settings
from mirrosocial.event_routes import router as event_router
from mirrosocial.routes import router

logger = logging.getLogger(__name__)


async def database_error_handler(request: Request, exc: SQLAlchemyError) -> JSONResponse:
    logger.exception("Database error on %s %s", request.method, request.url.path, exc_info=exc)
    return JSONResponse(status_code=500, content={"detail": "Internal server error"})


def create_app() -> FastAPI:
    settings = get_settings()
    app = FastAPI(title="MirroSocial Backend", version="0.1.0")
    app.add_exception_handler(SQLAlchemyError, database_error_handler)
    app.include_router(auth_router, prefix=settings.api_prefix)
    app.include_router(router, prefix=settings.api_prefix)
    app.include_router(event_router, prefix=settings.api_prefix)
    return app


app = create_app()
